from django import forms

from .models import (
    CalendarEvent,
    Client,
    CompanyProfile,
    Proposal,
    ProposalMoment,
    ProposalService,
    ProposalServiceOption,
    Service,
    ServiceCategory,
    StaffAssignment,
    StaffMember,
    StaffRole,
    TermsTemplate,
)
from .validators import sanitize_phone


class PhoneCleanMixin:
    def clean_phone(self):
        return sanitize_phone(self.cleaned_data.get("phone"))


class ClientForm(PhoneCleanMixin, forms.ModelForm):
    class Meta:
        model = Client
        fields = [
            "name",
            "email",
            "phone",
            "company",
            "nif",
            "address_street",
            "address_city",
            "address_postal_code",
            "address_country",
            "notes",
        ]
        widgets = {
            "notes": forms.Textarea(attrs={"rows": 3}),
        }


class ServiceCategoryForm(forms.ModelForm):
    class Meta:
        model = ServiceCategory
        fields = [
            "name_pt",
            "name_en",
            "description_pt",
            "description_en",
            "icon",
            "sort_order",
            "is_active",
        ]


class ServiceForm(forms.ModelForm):
    class Meta:
        model = Service
        fields = [
            "category",
            "name_pt",
            "name_en",
            "description_pt",
            "description_en",
            "pricing_type",
            "base_price",
            "unit_pt",
            "unit_en",
            "min_quantity",
            "max_quantity",
            "tags",
            "included_items_pt",
            "included_items_en",
            "sort_order",
            "is_active",
        ]
        widgets = {
            "description_pt": forms.Textarea(attrs={"rows": 4}),
            "description_en": forms.Textarea(attrs={"rows": 4}),
        }

    # Empty JSON lists come back from the form field as None.
    def clean_tags(self):
        return self.cleaned_data.get("tags") or []

    def clean_included_items_pt(self):
        return self.cleaned_data.get("included_items_pt") or []

    def clean_included_items_en(self):
        return self.cleaned_data.get("included_items_en") or []


class ProposalMomentForm(forms.ModelForm):
    class Meta:
        model = ProposalMoment
        fields = ["key", "title_pt", "title_en", "sort_order", "is_active"]


class CompanyProfileForm(forms.ModelForm):
    class Meta:
        model = CompanyProfile
        exclude = ["proposal_number_counter"]


class TermsTemplateForm(forms.ModelForm):
    class Meta:
        model = TermsTemplate
        fields = ["name", "content_pt", "content_en", "is_default"]


class ProposalForm(forms.ModelForm):
    class Meta:
        model = Proposal
        fields = [
            "reference_number",
            "client_name",
            "client_email",
            "client_phone",
            "client_company",
            "client_nif",
            "event_type",
            "event_type_custom_pt",
            "event_type_custom_en",
            "event_title",
            "event_date",
            "event_location",
            "guest_count",
            "event_notes",
            "language",
            "show_vat",
            "vat_rate",
            "subtotal",
            "vat_amount",
            "total",
            "valid_until",
            "custom_intro_pt",
            "custom_intro_en",
            "terms_pt",
            "terms_en",
        ]
        widgets = {
            "event_date": forms.DateInput(attrs={"type": "date"}),
            "valid_until": forms.DateInput(attrs={"type": "date"}),
        }


class ProposalServiceRowForm(forms.ModelForm):
    class Meta:
        model = ProposalService
        fields = [
            "service",
            "service_name_pt",
            "service_name_en",
            "pricing_type",
            "quantity",
            "unit_price",
            "custom_price",
            "total_price",
            "included_in_total",
            "included_items",
            "notes",
            "sort_order",
        ]


class ProposalServiceOptionRowForm(forms.ModelForm):
    service_index = forms.IntegerField(min_value=0)

    class Meta:
        model = ProposalServiceOption
        fields = [
            "priced_option",
            "option_name_pt",
            "option_name_en",
            "pricing_type",
            "quantity",
            "unit_price",
            "custom_price",
            "total_price",
            "notes",
            "sort_order",
        ]


class CalendarEventForm(forms.ModelForm):
    class Meta:
        model = CalendarEvent
        fields = [
            "title",
            "event_date",
            "event_time",
            "event_end_date",
            "client_name",
            "client_email",
            "client_phone",
            "client_company",
            "client_nif",
            "event_location",
            "guest_count",
            "event_type",
            "notes",
        ]


class StaffRoleForm(forms.ModelForm):
    class Meta:
        model = StaffRole
        fields = ["name", "default_hourly_rate", "sort_order"]


class StaffMemberForm(PhoneCleanMixin, forms.ModelForm):
    class Meta:
        model = StaffMember
        fields = ["first_name", "last_name", "phone", "nif", "notes", "is_active"]


class StaffAssignmentForm(forms.ModelForm):
    class Meta:
        model = StaffAssignment
        fields = [
            "calendar_event",
            "proposal",
            "staff_member",
            "role",
            "start_time",
            "end_time",
            "custom_hourly_rate",
            "notes",
        ]

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get("calendar_event") and not cleaned.get("proposal"):
            raise forms.ValidationError("Assign the staff member to a calendar event or a proposal.")
        if cleaned.get("calendar_event") and cleaned.get("proposal"):
            raise forms.ValidationError("An assignment belongs to one service only.")
        return cleaned
