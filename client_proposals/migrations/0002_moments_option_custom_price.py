import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("client_proposals", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="proposalserviceoption",
            name="custom_price",
            field=models.DecimalField(
                blank=True,
                decimal_places=2,
                help_text="Manual price that replaced the option's catalog price, including 0.",
                max_digits=10,
                null=True,
            ),
        ),
        migrations.CreateModel(
            name="ProposalMoment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("key", models.SlugField(help_text="e.g. casa_noivos", unique=True)),
                ("title_pt", models.CharField(max_length=200)),
                ("title_en", models.CharField(max_length=200)),
                (
                    "sort_order",
                    models.PositiveIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["sort_order", "title_pt"],
            },
        ),
        migrations.CreateModel(
            name="MomentItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "is_default",
                    models.BooleanField(
                        default=False, help_text="Pre-selected when the moment is added to a proposal."
                    ),
                ),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "moment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="moment_items",
                        to="client_proposals.proposalmoment",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="moment_items",
                        to="client_proposals.service",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order"],
            },
        ),
        migrations.AddConstraint(
            model_name="momentitem",
            constraint=models.UniqueConstraint(fields=("moment", "service"), name="unique_moment_service"),
        ),
        migrations.AddField(
            model_name="proposalmoment",
            name="services",
            field=models.ManyToManyField(
                blank=True,
                related_name="moments",
                through="client_proposals.MomentItem",
                to="client_proposals.service",
            ),
        ),
    ]
