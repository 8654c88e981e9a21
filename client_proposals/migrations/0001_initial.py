import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models

import client_proposals.models
import client_proposals.validators

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


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CompanyProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("tagline_pt", models.CharField(blank=True, max_length=200)),
                ("tagline_en", models.CharField(blank=True, max_length=200)),
                ("logo_url", models.URLField(blank=True)),
                ("contact_phone", models.CharField(blank=True, max_length=50)),
                ("contact_email", models.EmailField(blank=True, max_length=254)),
                ("contact_website", models.CharField(blank=True, max_length=200)),
                ("contact_instagram", models.CharField(blank=True, max_length=200)),
                ("contact_facebook", models.CharField(blank=True, max_length=200)),
                ("address_street", models.CharField(blank=True, max_length=255)),
                ("address_city", models.CharField(blank=True, max_length=100)),
                ("address_postal_code", models.CharField(blank=True, max_length=20)),
                ("address_country", models.CharField(blank=True, max_length=100)),
                (
                    "proposal_number_counter",
                    models.PositiveIntegerField(default=1000, help_text="Next proposal reference number to issue."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Company profile",
                "verbose_name_plural": "Company profiles",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="ServiceCategory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name_pt", models.CharField(max_length=200)),
                ("name_en", models.CharField(blank=True, max_length=200)),
                ("description_pt", models.TextField(blank=True)),
                ("description_en", models.TextField(blank=True)),
                ("icon", models.CharField(blank=True, max_length=50)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name_plural": "Service categories",
                "ordering": ["sort_order", "name_pt"],
            },
        ),
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name_pt", models.CharField(max_length=200)),
                ("name_en", models.CharField(blank=True, max_length=200)),
                (
                    "description_pt",
                    models.TextField(
                        blank=True,
                        help_text="Free text. Used line by line as the included items when none are listed.",
                    ),
                ),
                ("description_en", models.TextField(blank=True)),
                (
                    "pricing_type",
                    models.CharField(choices=PRICING_TYPE_CHOICES, default="per_person", max_length=20),
                ),
                (
                    "base_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Leave blank only for services priced on request.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                ("unit_pt", models.CharField(blank=True, default="pessoa", max_length=50)),
                ("unit_en", models.CharField(blank=True, default="person", max_length=50)),
                ("min_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("max_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "included_items_pt",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="One included item per entry. Fallback when no included item rows exist.",
                    ),
                ),
                ("included_items_en", models.JSONField(blank=True, default=list)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="services",
                        to="client_proposals.servicecategory",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "name_pt"],
            },
        ),
        migrations.CreateModel(
            name="ServiceIncludedItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("section_key", models.CharField(blank=True, default="default", max_length=50)),
                ("text_pt", models.CharField(max_length=500)),
                ("text_en", models.CharField(blank=True, max_length=500)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="included_items",
                        to="client_proposals.service",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order"],
            },
        ),
        migrations.CreateModel(
            name="ServicePricedOption",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name_pt", models.CharField(max_length=200)),
                ("name_en", models.CharField(blank=True, max_length=200)),
                ("description_pt", models.TextField(blank=True)),
                ("description_en", models.TextField(blank=True)),
                (
                    "pricing_type",
                    models.CharField(choices=PRICING_TYPE_CHOICES, default="fixed", max_length=20),
                ),
                ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("min_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="priced_options",
                        to="client_proposals.service",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order"],
            },
        ),
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("company", models.CharField(blank=True, max_length=200)),
                (
                    "nif",
                    models.CharField(
                        blank=True,
                        max_length=20,
                        validators=[client_proposals.validators.validate_nif],
                        verbose_name="NIF",
                    ),
                ),
                ("address_street", models.CharField(blank=True, max_length=255)),
                ("address_city", models.CharField(blank=True, max_length=100)),
                ("address_postal_code", models.CharField(blank=True, max_length=20)),
                ("address_country", models.CharField(blank=True, max_length=100)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="TermsTemplate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("content_pt", models.TextField(blank=True)),
                ("content_en", models.TextField(blank=True)),
                ("is_default", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Proposal",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("sent", "Sent"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("reference_number", models.CharField(blank=True, max_length=50)),
                ("client_name", models.CharField(max_length=200)),
                ("client_email", models.EmailField(blank=True, max_length=254)),
                ("client_phone", models.CharField(blank=True, max_length=50)),
                ("client_company", models.CharField(blank=True, max_length=200)),
                ("client_nif", models.CharField(blank=True, max_length=20, verbose_name="Client NIF")),
                (
                    "event_type",
                    models.CharField(choices=EVENT_TYPE_CHOICES, default="other", max_length=20),
                ),
                ("event_type_custom_pt", models.CharField(blank=True, max_length=100)),
                ("event_type_custom_en", models.CharField(blank=True, max_length=100)),
                ("event_title", models.CharField(blank=True, max_length=200)),
                ("event_date", models.DateField(blank=True, null=True)),
                ("event_location", models.CharField(blank=True, max_length=255)),
                ("guest_count", models.PositiveIntegerField(default=0)),
                ("event_notes", models.TextField(blank=True)),
                (
                    "language",
                    models.CharField(
                        choices=[("pt", "Português"), ("en", "English")], default="pt", max_length=2
                    ),
                ),
                ("show_vat", models.BooleanField(default=False)),
                (
                    "vat_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=client_proposals.models.default_vat_rate,
                        max_digits=5,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("vat_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("valid_until", models.DateField(blank=True, null=True)),
                ("custom_intro_pt", models.TextField(blank=True)),
                ("custom_intro_en", models.TextField(blank=True)),
                ("terms_pt", models.TextField(blank=True)),
                ("terms_en", models.TextField(blank=True)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProposalService",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("service_name_pt", models.CharField(max_length=200)),
                ("service_name_en", models.CharField(blank=True, max_length=200)),
                ("pricing_type", models.CharField(choices=PRICING_TYPE_CHOICES, max_length=20)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "custom_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="If set, replaced the catalog price when the proposal was composed.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "included_in_total",
                    models.BooleanField(
                        default=True,
                        help_text="Unchecked lines are presented to the client but left out of the total.",
                    ),
                ),
                (
                    "included_items",
                    models.TextField(blank=True, help_text="One included item per line, as printed on the proposal."),
                ),
                ("notes", models.TextField(blank=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "proposal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="service_lines",
                        to="client_proposals.proposal",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="proposal_lines",
                        to="client_proposals.service",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order"],
            },
        ),
        migrations.CreateModel(
            name="ProposalServiceOption",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("option_name_pt", models.CharField(blank=True, max_length=200)),
                ("option_name_en", models.CharField(blank=True, max_length=200)),
                (
                    "pricing_type",
                    models.CharField(choices=PRICING_TYPE_CHOICES, default="fixed", max_length=20),
                ),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("notes", models.TextField(blank=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "priced_option",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="proposal_lines",
                        to="client_proposals.servicepricedoption",
                    ),
                ),
                (
                    "proposal_service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="option_lines",
                        to="client_proposals.proposalservice",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order"],
            },
        ),
        migrations.CreateModel(
            name="CalendarEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("event_date", models.DateField()),
                ("event_time", models.TimeField(blank=True, null=True)),
                ("event_end_date", models.DateField(blank=True, null=True)),
                ("client_name", models.CharField(blank=True, max_length=200)),
                ("client_email", models.EmailField(blank=True, max_length=254)),
                ("client_phone", models.CharField(blank=True, max_length=50)),
                ("client_company", models.CharField(blank=True, max_length=200)),
                ("client_nif", models.CharField(blank=True, max_length=20)),
                ("event_location", models.CharField(blank=True, max_length=255)),
                ("guest_count", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "event_type",
                    models.CharField(choices=EVENT_TYPE_CHOICES, default="other", max_length=20),
                ),
                ("notes", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="confirmed",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["event_date", "event_time"],
            },
        ),
        migrations.CreateModel(
            name="StaffRole",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                (
                    "default_hourly_rate",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=8),
                ),
                ("sort_order", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["sort_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="StaffMember",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("phone", models.CharField(blank=True, max_length=50)),
                (
                    "nif",
                    models.CharField(
                        blank=True,
                        max_length=20,
                        validators=[client_proposals.validators.validate_nif],
                        verbose_name="NIF",
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["first_name", "last_name"],
            },
        ),
        migrations.CreateModel(
            name="StaffMemberRole",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "custom_hourly_rate",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Overrides the role's default rate for this person.",
                        max_digits=8,
                        null=True,
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="member_roles",
                        to="client_proposals.staffrole",
                    ),
                ),
                (
                    "staff_member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="member_roles",
                        to="client_proposals.staffmember",
                    ),
                ),
            ],
            options={
                "unique_together": {("staff_member", "role")},
            },
        ),
        migrations.AddField(
            model_name="staffmember",
            name="roles",
            field=models.ManyToManyField(
                blank=True,
                related_name="members",
                through="client_proposals.StaffMemberRole",
                to="client_proposals.staffrole",
            ),
        ),
        migrations.CreateModel(
            name="StaffAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "custom_hourly_rate",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True),
                ),
                ("hours_worked", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ("total_pay", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "calendar_event",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_assignments",
                        to="client_proposals.calendarevent",
                    ),
                ),
                (
                    "proposal",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_assignments",
                        to="client_proposals.proposal",
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assignments",
                        to="client_proposals.staffrole",
                    ),
                ),
                (
                    "staff_member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="client_proposals.staffmember",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
    ]
