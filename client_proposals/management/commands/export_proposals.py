from pathlib import Path

from django.core import serializers
from django.core.management.base import BaseCommand, CommandError

from client_proposals.models import (
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
    TermsTemplate,
)


class Command(BaseCommand):
    help = "Export the catalog, clients and proposals as a JSON fixture."

    def add_arguments(self, parser):
        parser.add_argument(
            "-o",
            "--output",
            help="Optional file path for the JSON fixture. Prints to stdout if omitted.",
        )
        parser.add_argument(
            "--status",
            action="append",
            choices=[code for code, _ in Proposal.STATUS_CHOICES],
            help="Only export proposals with this status. Repeat for several.",
        )
        parser.add_argument(
            "--no-catalog",
            action="store_true",
            help="Skip company profile, categories, services and terms templates.",
        )

    def handle(self, output: str | None = None, status=None, no_catalog=False, **options):
        proposals = Proposal.objects.all()
        if status:
            proposals = proposals.filter(status__in=status)
        proposal_ids = list(proposals.values_list("pk", flat=True))

        querysets = []
        if not no_catalog:
            querysets += [
                CompanyProfile.objects.all(),
                ServiceCategory.objects.all(),
                Service.objects.all(),
                ServiceIncludedItem.objects.all(),
                ServicePricedOption.objects.all(),
                ProposalMoment.objects.all(),
                MomentItem.objects.all(),
                TermsTemplate.objects.all(),
            ]
        querysets += [
            Client.objects.all(),
            Proposal.objects.filter(pk__in=proposal_ids),
            ProposalService.objects.filter(proposal_id__in=proposal_ids),
            ProposalServiceOption.objects.filter(proposal_service__proposal_id__in=proposal_ids),
        ]

        # Parents come before children so the fixture loads in order.
        objects, counts = [], {}
        for qs in querysets:
            rows = list(qs)
            if rows:
                counts[str(qs.model._meta.verbose_name_plural).lower()] = len(rows)
                objects.extend(rows)

        if not objects:
            raise CommandError("Nothing to export.")

        fixture = serializers.serialize("json", objects, indent=2)
        if not output:
            self.stdout.write(fixture)
            return

        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(fixture, encoding="utf-8")
        summary = ", ".join(f"{count} {name}" for name, count in counts.items())
        self.stdout.write(self.style.SUCCESS(f"Exported {summary} to {output_path}"))
