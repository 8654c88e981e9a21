"""
URL configuration for the caterdesk project.

The JSON API lives under /api/; proposal PDFs and HTML previews are served from
the same prefix so the admin can link to them.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from client_proposals import views

api_patterns = [
    path("clients/", views.clients, name="clients"),
    path("clients/<str:pk>/", views.client_detail, name="client_detail"),
    path("categories/", views.categories, name="categories"),
    path("services/", views.services, name="services"),
    path("services/<str:pk>/", views.service_detail, name="service_detail"),
    path("moments/", views.moments, name="moments"),
    path("moments/<str:pk>/", views.moment_detail, name="moment_detail"),
    path("moment-items/replace/", views.moment_items_replace, name="moment_items_replace"),
    path("company-profile/", views.company_profile, name="company_profile"),
    path("terms-templates/", views.terms_templates, name="terms_templates"),
    path("terms-templates/<str:pk>/", views.terms_template_detail, name="terms_template_detail"),
    path("proposals/", views.proposals, name="proposals"),
    path("proposals/compose/", views.proposal_compose, name="proposal_compose"),
    path("proposals/<str:pk>/", views.proposal_detail, name="proposal_detail"),
    path("proposals/<str:pk>/accept/", views.proposal_accept, name="proposal_accept"),
    path("proposals/<str:pk>/pdf/", views.proposal_pdf, name="proposal_pdf"),
    path("proposals/<str:pk>/preview/", views.proposal_preview, name="proposal_preview"),
    path("calendar-events/", views.calendar_events, name="calendar_events"),
    path("calendar-events/cancel/", views.calendar_event_cancel, name="calendar_event_cancel"),
    path("calendar-events/<str:pk>/", views.calendar_event_detail, name="calendar_event_detail"),
    path("staff-roles/", views.staff_roles, name="staff_roles"),
    path("staff-roles/<str:pk>/", views.staff_role_detail, name="staff_role_detail"),
    path("staff-members/", views.staff_members, name="staff_members"),
    path("staff-members/<str:pk>/", views.staff_member_detail, name="staff_member_detail"),
    path("service-staff/", views.service_staff, name="service_staff"),
    path("service-staff/<str:pk>/", views.service_staff_detail, name="service_staff_detail"),
    path("service-staff/<str:pk>/clock/", views.service_staff_clock, name="service_staff_clock"),
    path("staff-assignments/", views.staff_assignments, name="staff_assignments"),
    path("staff-summary/", views.staff_summary, name="staff_summary"),
    path("staff-upcoming/", views.staff_upcoming, name="staff_upcoming"),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(api_patterns)),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
