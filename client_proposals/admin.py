from django.contrib import admin, messages
from django.urls import reverse
from django.utils.html import format_html

from . import scheduling
from .forms import ClientForm, ProposalForm, ServiceForm, StaffMemberForm
from .models import (
    CalendarEvent,
    Client,
    CompanyProfile,
    MomentItem,
    Proposal,
    ProposalMoment,
    ProposalService,
    ProposalServiceOption,
    Service,
    ServiceCategory,
    ServiceIncludedItem,
    ServicePricedOption,
    StaffAssignment,
    StaffMember,
    StaffMemberRole,
    StaffRole,
    TermsTemplate,
)


# ==========================
# COMPANY & CATALOG
# ==========================
@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_email", "contact_phone", "proposal_number_counter", "updated_at")
    readonly_fields = ("created_at", "updated_at")
    fieldsets = (
        ("Identity", {"fields": ("name", "tagline_pt", "tagline_en", "logo_url")}),
        (
            "Contact",
            {
                "fields": (
                    "contact_phone",
                    "contact_email",
                    "contact_website",
                    "contact_instagram",
                    "contact_facebook",
                )
            },
        ),
        (
            "Address",
            {"fields": ("address_street", "address_city", "address_postal_code", "address_country")},
        ),
        ("Proposals", {"fields": ("proposal_number_counter", "created_at", "updated_at")}),
    )


@admin.register(ServiceCategory)
class ServiceCategoryAdmin(admin.ModelAdmin):
    list_display = ("name_pt", "name_en", "sort_order", "is_active")
    list_editable = ("sort_order", "is_active")
    ordering = ["sort_order"]


class ServiceIncludedItemInline(admin.TabularInline):
    model = ServiceIncludedItem
    extra = 1
    fields = ("sort_order", "text_pt", "text_en", "section_key")


class ServicePricedOptionInline(admin.TabularInline):
    model = ServicePricedOption
    extra = 0
    fields = ("sort_order", "name_pt", "name_en", "pricing_type", "price", "min_quantity")


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    form = ServiceForm
    list_display = ("name_pt", "category", "pricing_type", "base_price", "sort_order", "is_active")
    list_filter = ("category", "pricing_type", "is_active")
    list_editable = ("sort_order", "is_active")
    search_fields = ("name_pt", "name_en")
    inlines = [ServiceIncludedItemInline, ServicePricedOptionInline]


class MomentItemInline(admin.TabularInline):
    model = MomentItem
    extra = 0
    autocomplete_fields = ["service"]
    fields = ("sort_order", "service", "is_default")


@admin.register(ProposalMoment)
class ProposalMomentAdmin(admin.ModelAdmin):
    list_display = ("title_pt", "title_en", "key", "sort_order", "suggestion_count", "is_active")
    list_editable = ("sort_order", "is_active")
    search_fields = ("key", "title_pt", "title_en")
    prepopulated_fields = {"key": ("title_pt",)}
    readonly_fields = ("created_at", "updated_at")
    inlines = [MomentItemInline]

    def suggestion_count(self, obj):
        return obj.moment_items.count()

    suggestion_count.short_description = "Suggestions"


# ==========================
# CLIENTS & TERMS
# ==========================
@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    form = ClientForm
    list_display = ("name", "company", "email", "phone", "nif")
    search_fields = ("name", "company", "email", "phone", "nif")
    readonly_fields = ("created_at", "updated_at")


@admin.register(TermsTemplate)
class TermsTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "is_default", "updated_at")
    list_filter = ("is_default",)


# ==========================
# PROPOSALS
# ==========================
class ProposalServiceInline(admin.TabularInline):
    model = ProposalService
    extra = 0
    fields = (
        "sort_order",
        "service_name_pt",
        "pricing_type",
        "quantity",
        "unit_price",
        "custom_price",
        "total_price",
        "included_in_total",
    )
    readonly_fields = ("total_price",)
    ordering = ["sort_order"]


@admin.register(Proposal)
class ProposalAdmin(admin.ModelAdmin):
    form = ProposalForm
    list_display = (
        "reference_number",
        "client_name",
        "event_type",
        "event_date",
        "guest_count",
        "status",
        "total",
        "print_proposal_button",
        "preview_button",
    )
    list_filter = ("status", "event_type", "language")
    search_fields = ("reference_number", "client_name", "client_company", "event_title")
    readonly_fields = ("status", "sent_at", "created_at", "updated_at")
    inlines = [ProposalServiceInline]
    actions = ["mark_accepted_action", "cancel_action"]

    fieldsets = (
        (
            "Client",
            {
                "fields": (
                    "reference_number",
                    "status",
                    "client_name",
                    "client_email",
                    "client_phone",
                    "client_company",
                    "client_nif",
                )
            },
        ),
        (
            "Event",
            {
                "fields": (
                    "event_type",
                    "event_type_custom_pt",
                    "event_type_custom_en",
                    "event_title",
                    "event_date",
                    "event_location",
                    "guest_count",
                    "event_notes",
                )
            },
        ),
        (
            "Totals",
            {"fields": ("language", "show_vat", "vat_rate", "subtotal", "vat_amount", "total", "valid_until")},
        ),
        ("Texts", {"fields": ("custom_intro_pt", "custom_intro_en", "terms_pt", "terms_en")}),
        ("History", {"fields": ("sent_at", "created_at", "updated_at")}),
    )

    def print_proposal_button(self, obj):
        url = reverse("proposal_pdf", args=[obj.pk])
        return format_html(
            '<a class="button" target="_blank" href="{}?lang={}">PDF</a>', url, obj.language
        )

    print_proposal_button.short_description = "Download"

    def preview_button(self, obj):
        url = reverse("proposal_preview", args=[obj.pk])
        return format_html(
            '<a class="button" target="_blank" href="{}?lang={}">Preview</a>', url, obj.language
        )

    preview_button.short_description = "Preview"

    def mark_accepted_action(self, request, queryset):
        count = 0
        for proposal in queryset.exclude(status="accepted"):
            proposal.mark_accepted()
            count += 1
        self.message_user(request, f"{count} proposal(s) marked as accepted.")

    mark_accepted_action.short_description = "Mark as accepted"

    def cancel_action(self, request, queryset):
        removed = 0
        for proposal in queryset.exclude(status="cancelled"):
            removed += scheduling.cancel_service("proposal", proposal.pk)
        self.message_user(
            request,
            f"Proposals cancelled; {removed} staff assignment(s) released.",
            level=messages.WARNING,
        )

    cancel_action.short_description = "Cancel and release staff"


@admin.register(ProposalServiceOption)
class ProposalServiceOptionAdmin(admin.ModelAdmin):
    list_display = ("option_name_pt", "proposal_service", "quantity", "unit_price", "custom_price", "total_price")
    search_fields = ("option_name_pt", "proposal_service__proposal__reference_number")


# ==========================
# CALENDAR & STAFF
# ==========================
@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("title", "event_date", "event_time", "client_name", "event_type", "status")
    list_filter = ("status", "event_type")
    search_fields = ("title", "client_name", "event_location")
    date_hierarchy = "event_date"


@admin.register(StaffRole)
class StaffRoleAdmin(admin.ModelAdmin):
    list_display = ("name", "default_hourly_rate", "sort_order")
    list_editable = ("default_hourly_rate", "sort_order")


class StaffMemberRoleInline(admin.TabularInline):
    model = StaffMemberRole
    extra = 1


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    form = StaffMemberForm
    list_display = ("full_name", "phone", "is_active")
    list_filter = ("is_active",)
    search_fields = ("first_name", "last_name", "phone")
    inlines = [StaffMemberRoleInline]


@admin.register(StaffAssignment)
class StaffAssignmentAdmin(admin.ModelAdmin):
    list_display = (
        "staff_member",
        "role",
        "calendar_event",
        "proposal",
        "start_time",
        "end_time",
        "hours_worked",
        "total_pay",
    )
    list_filter = ("role",)
    readonly_fields = ("hours_worked", "total_pay", "created_at", "updated_at")
