import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .validators import validate_nif

PRICING_TYPE_CHOICES = [
    ("per_person", "Por pessoa"),
    ("fixed", "Fixo"),
    ("on_request", "Sob consulta"),
]

EVENT_TYPE_CHOICES = [
    ("wedding", "Casamento"),
    ("corporate", "Evento Corporativo"),
    ("private", "Evento Privado"),
    ("other", "Evento"),
]

LANGUAGE_CHOICES = [
    ("pt", "Português"),
    ("en", "English"),
]


def default_vat_rate():
    return getattr(settings, "PROPOSAL_DEFAULT_VAT_RATE", Decimal("23"))


class CompanyProfile(models.Model):
    """
    Identity printed on every proposal. The most recently updated row is the active one.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    tagline_pt = models.CharField(max_length=200, blank=True)
    tagline_en = models.CharField(max_length=200, blank=True)
    logo_url = models.URLField(blank=True)

    contact_phone = models.CharField(max_length=50, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_website = models.CharField(max_length=200, blank=True)
    contact_instagram = models.CharField(max_length=200, blank=True)
    contact_facebook = models.CharField(max_length=200, blank=True)

    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_postal_code = models.CharField(max_length=20, blank=True)
    address_country = models.CharField(max_length=100, blank=True)

    proposal_number_counter = models.PositiveIntegerField(
        default=1000,
        help_text="Next proposal reference number to issue.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        verbose_name = "Company profile"
        verbose_name_plural = "Company profiles"

    def __str__(self):
        return self.name

    @classmethod
    def active(cls):
        return cls.objects.order_by("-updated_at").first()

    def formatted_address(self):
        parts = [
            self.address_street,
            " ".join(p for p in [self.address_postal_code, self.address_city] if p),
            self.address_country,
        ]
        return ", ".join(p for p in parts if p)


class ServiceCategory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name_pt = models.CharField(max_length=200)
    name_en = models.CharField(max_length=200, blank=True)
    description_pt = models.TextField(blank=True)
    description_en = models.TextField(blank=True)
    icon = models.CharField(max_length=50, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["sort_order", "name_pt"]
        verbose_name_plural = "Service categories"

    def __str__(self):
        return self.name_pt


class Service(models.Model):
    """
    Catalog entry that can be quoted on a proposal.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category = models.ForeignKey(
        ServiceCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="services",
    )
    name_pt = models.CharField(max_length=200)
    name_en = models.CharField(max_length=200, blank=True)
    description_pt = models.TextField(
        blank=True,
        help_text="Free text. Used line by line as the included items when none are listed.",
    )
    description_en = models.TextField(blank=True)

    pricing_type = models.CharField(
        max_length=20, choices=PRICING_TYPE_CHOICES, default="per_person"
    )
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Leave blank only for services priced on request.",
    )
    unit_pt = models.CharField(max_length=50, blank=True, default="pessoa")
    unit_en = models.CharField(max_length=50, blank=True, default="person")
    min_quantity = models.PositiveIntegerField(null=True, blank=True)
    max_quantity = models.PositiveIntegerField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)

    included_items_pt = models.JSONField(
        default=list,
        blank=True,
        help_text="One included item per entry. Fallback when no included item rows exist.",
    )
    included_items_en = models.JSONField(default=list, blank=True)

    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name_pt"]

    def __str__(self):
        return self.name_pt

    def clean(self):
        super().clean()
        if self.base_price is None and self.pricing_type != "on_request":
            raise ValidationError(
                {"base_price": "A base price is required unless the service is priced on request."}
            )


class ServiceIncludedItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    service = models.ForeignKey(
        Service, on_delete=models.CASCADE, related_name="included_items"
    )
    section_key = models.CharField(max_length=50, blank=True, default="default")
    text_pt = models.CharField(max_length=500)
    text_en = models.CharField(max_length=500, blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]

    def __str__(self):
        return self.text_pt


class ServicePricedOption(models.Model):
    """
    Optional add-on quoted under a service (e.g. open bar upgrade).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    service = models.ForeignKey(
        Service, on_delete=models.CASCADE, related_name="priced_options"
    )
    name_pt = models.CharField(max_length=200)
    name_en = models.CharField(max_length=200, blank=True)
    description_pt = models.TextField(blank=True)
    description_en = models.TextField(blank=True)
    pricing_type = models.CharField(
        max_length=20, choices=PRICING_TYPE_CHOICES, default="fixed"
    )
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    min_quantity = models.PositiveIntegerField(null=True, blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]

    def __str__(self):
        return f"{self.name_pt} ({self.service.name_pt})"


class ProposalMoment(models.Model):
    """
    A stage of the event, such as welcome drinks or dinner, with the catalog
    services suggested for it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.SlugField(max_length=50, unique=True, help_text="e.g. casa_noivos")
    title_pt = models.CharField(max_length=200)
    title_en = models.CharField(max_length=200)
    sort_order = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    is_active = models.BooleanField(default=True)
    services = models.ManyToManyField(
        Service, through="MomentItem", related_name="moments", blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "title_pt"]

    def __str__(self):
        return self.title_pt

    # ---- Helpers ----

    def default_services(self):
        return [item.service for item in self.moment_items.select_related("service") if item.is_default]


class MomentItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    moment = models.ForeignKey(
        ProposalMoment, on_delete=models.CASCADE, related_name="moment_items"
    )
    service = models.ForeignKey(
        Service, on_delete=models.CASCADE, related_name="moment_items"
    )
    is_default = models.BooleanField(
        default=False,
        help_text="Pre-selected when the moment is added to a proposal.",
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]
        constraints = [
            models.UniqueConstraint(fields=["moment", "service"], name="unique_moment_service"),
        ]

    def __str__(self):
        return f"{self.service} in {self.moment}"


class Client(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    company = models.CharField(max_length=200, blank=True)
    nif = models.CharField(
        "NIF", max_length=20, blank=True, validators=[validate_nif]
    )
    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_postal_code = models.CharField(max_length=20, blank=True)
    address_country = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class TermsTemplate(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    content_pt = models.TextField(blank=True)
    content_en = models.TextField(blank=True)
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Proposal(models.Model):
    """
    One priced quote for a client event.

    Client and event fields are copies taken at creation time so later edits to
    the client or the catalog never change a proposal that was already sent.
    """
    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("sent", "Sent"),
        ("accepted", "Accepted"),
        ("rejected", "Rejected"),
        ("cancelled", "Cancelled"),
    ]
    # Statuses a caller may set directly; cancelling goes through cancel().
    EDITABLE_STATUSES = {"draft", "sent", "accepted", "rejected"}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="draft")
    reference_number = models.CharField(max_length=50, blank=True)

    # Client snapshot
    client_name = models.CharField(max_length=200)
    client_email = models.EmailField(blank=True)
    client_phone = models.CharField(max_length=50, blank=True)
    client_company = models.CharField(max_length=200, blank=True)
    client_nif = models.CharField("Client NIF", max_length=20, blank=True)

    # Event snapshot
    event_type = models.CharField(max_length=20, choices=EVENT_TYPE_CHOICES, default="other")
    event_type_custom_pt = models.CharField(max_length=100, blank=True)
    event_type_custom_en = models.CharField(max_length=100, blank=True)
    event_title = models.CharField(max_length=200, blank=True)
    event_date = models.DateField(null=True, blank=True)
    event_location = models.CharField(max_length=255, blank=True)
    guest_count = models.PositiveIntegerField(default=0)
    event_notes = models.TextField(blank=True)

    language = models.CharField(max_length=2, choices=LANGUAGE_CHOICES, default="pt")
    show_vat = models.BooleanField(default=False)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=default_vat_rate)
    valid_until = models.DateField(null=True, blank=True)

    # Stored totals, written once when the proposal is saved.
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    custom_intro_pt = models.TextField(blank=True)
    custom_intro_en = models.TextField(blank=True)
    terms_pt = models.TextField(blank=True)
    terms_en = models.TextField(blank=True)

    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.reference_number or self.pk} – {self.client_name}"

    @classmethod
    def initial_status(cls, requested):
        return requested if requested in cls.EDITABLE_STATUSES else "draft"

    # ---- Status transitions ----

    def mark_generated(self, language):
        """
        Record that a customer-facing document was produced in `language`.
        """
        self.language = "en" if language == "en" else "pt"
        fields = ["language", "updated_at"]
        if self.status in ("draft", "sent"):
            self.status = "sent"
            self.sent_at = timezone.now()
            fields += ["status", "sent_at"]
        self.save(update_fields=fields)

    def mark_accepted(self):
        if self.status == "accepted":
            return
        self.status = "accepted"
        self.save(update_fields=["status", "updated_at"])

    def cancel(self):
        self.status = "cancelled"
        self.save(update_fields=["status", "updated_at"])


class ProposalService(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    proposal = models.ForeignKey(
        Proposal, on_delete=models.CASCADE, related_name="service_lines"
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="proposal_lines",
    )
    service_name_pt = models.CharField(max_length=200)
    service_name_en = models.CharField(max_length=200, blank=True)
    pricing_type = models.CharField(max_length=20, choices=PRICING_TYPE_CHOICES)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    custom_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="If set, replaced the catalog price when the proposal was composed.",
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    included_in_total = models.BooleanField(
        default=True,
        help_text="Unchecked lines are presented to the client but left out of the total.",
    )
    included_items = models.TextField(
        blank=True,
        help_text="One included item per line, as printed on the proposal.",
    )
    notes = models.TextField(blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]

    def __str__(self):
        return f"{self.service_name_pt} for {self.proposal}"


class ProposalServiceOption(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    proposal_service = models.ForeignKey(
        ProposalService, on_delete=models.CASCADE, related_name="option_lines"
    )
    priced_option = models.ForeignKey(
        ServicePricedOption,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="proposal_lines",
    )
    option_name_pt = models.CharField(max_length=200, blank=True)
    option_name_en = models.CharField(max_length=200, blank=True)
    pricing_type = models.CharField(max_length=20, choices=PRICING_TYPE_CHOICES, default="fixed")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    custom_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Manual price that replaced the option's catalog price, including 0.",
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    notes = models.TextField(blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]

    def __str__(self):
        return f"{self.option_name_pt or self.pk} for {self.proposal_service}"


class CalendarEvent(models.Model):
    """
    Booking entered straight into the calendar, without a proposal behind it.
    """
    STATUS_CHOICES = [
        ("confirmed", "Confirmed"),
        ("cancelled", "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    event_date = models.DateField()
    event_time = models.TimeField(null=True, blank=True)
    event_end_date = models.DateField(null=True, blank=True)
    client_name = models.CharField(max_length=200, blank=True)
    client_email = models.EmailField(blank=True)
    client_phone = models.CharField(max_length=50, blank=True)
    client_company = models.CharField(max_length=200, blank=True)
    client_nif = models.CharField(max_length=20, blank=True)
    event_location = models.CharField(max_length=255, blank=True)
    guest_count = models.PositiveIntegerField(null=True, blank=True)
    event_type = models.CharField(max_length=20, choices=EVENT_TYPE_CHOICES, default="other")
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="confirmed")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["event_date", "event_time"]

    def __str__(self):
        return f"{self.title} ({self.event_date})"


class StaffRole(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    default_hourly_rate = models.DecimalField(
        max_digits=8, decimal_places=2, default=Decimal("0.00")
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name


class StaffMember(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    nif = models.CharField("NIF", max_length=20, blank=True, validators=[validate_nif])
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    roles = models.ManyToManyField(
        StaffRole, through="StaffMemberRole", related_name="members", blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["first_name", "last_name"]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class StaffMemberRole(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    staff_member = models.ForeignKey(
        StaffMember, on_delete=models.CASCADE, related_name="member_roles"
    )
    role = models.ForeignKey(StaffRole, on_delete=models.CASCADE, related_name="member_roles")
    custom_hourly_rate = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Overrides the role's default rate for this person.",
    )

    class Meta:
        unique_together = ("staff_member", "role")

    def __str__(self):
        return f"{self.staff_member} – {self.role}"


class StaffAssignment(models.Model):
    """
    A staff member working one service (manual calendar event or accepted proposal).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    calendar_event = models.ForeignKey(
        CalendarEvent,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="staff_assignments",
    )
    proposal = models.ForeignKey(
        Proposal,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="staff_assignments",
    )
    staff_member = models.ForeignKey(
        StaffMember, on_delete=models.CASCADE, related_name="assignments"
    )
    role = models.ForeignKey(
        StaffRole,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assignments",
    )
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    custom_hourly_rate = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    hours_worked = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    total_pay = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.staff_member} on {self.calendar_event or self.proposal}"

    # ---- Helpers ----

    def _member_rate(self):
        if not self.role_id:
            return None
        link = StaffMemberRole.objects.filter(
            staff_member_id=self.staff_member_id, role_id=self.role_id
        ).first()
        return link.custom_hourly_rate if link else None

    def effective_hourly_rate(self):
        from .staff import resolve_hourly_rate

        return resolve_hourly_rate(
            self.custom_hourly_rate,
            self._member_rate(),
            self.role.default_hourly_rate if self.role else None,
        )

    def recalc_pay(self):
        from .staff import compute_pay, hours_between

        if self.start_time and self.end_time:
            self.hours_worked = hours_between(self.start_time, self.end_time)
            self.total_pay = compute_pay(self.hours_worked, self.effective_hourly_rate())
        else:
            self.hours_worked = None
            self.total_pay = None

    def save(self, *args, **kwargs):
        self.recalc_pay()
        super().save(*args, **kwargs)
