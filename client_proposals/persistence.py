"""
Maps composed proposals to database rows and back.

Stored prices and totals are authoritative: reloading a proposal never re-prices
it, only the display language changes.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import transaction

from .catalog import INCLUDED_ITEM_FIELDS, SERVICE_FIELDS, normalize_catalog, pick, split_lines
from .composer import (
    ClientInfo,
    ComposedLine,
    ComposedOption,
    EventInfo,
    build_document,
    value_of,
)
from .pricing import PRICE_NOTES, ZERO, quantize, to_decimal

logger = logging.getLogger(__name__)

PROPOSAL_ROW_FIELDS = [
    "id",
    "status",
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
SERVICE_ROW_FIELDS = [
    "id",
    "service_id",
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
OPTION_ROW_FIELDS = [
    "id",
    "proposal_service_id",
    "priced_option_id",
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


@dataclass
class ProposalRows:
    proposal: dict
    services: list = field(default_factory=list)
    # Each option row carries `service_index`, the position of its parent in `services`.
    options: list = field(default_factory=list)


def to_rows(document) -> ProposalRows:
    client, event = document.client, document.event
    proposal = {
        "reference_number": document.reference_number,
        "client_name": client.name,
        "client_email": client.email,
        "client_phone": client.phone,
        "client_company": client.company,
        "client_nif": client.nif,
        "event_type": event.event_type or "other",
        "event_type_custom_pt": event.custom_label_pt,
        "event_type_custom_en": event.custom_label_en,
        "event_title": event.title,
        "event_date": event.date,
        "event_location": event.location,
        "guest_count": event.guest_count or 0,
        "event_notes": event.notes,
        "language": document.language,
        "show_vat": document.show_vat,
        "vat_rate": document.vat_rate,
        "subtotal": document.subtotal,
        "vat_amount": document.vat_amount,
        "total": document.total,
        "valid_until": document.valid_until,
        "custom_intro_pt": document.intro_texts.get("pt") or "",
        "custom_intro_en": document.intro_texts.get("en") or "",
        "terms_pt": document.terms_texts.get("pt") or "",
        "terms_en": document.terms_texts.get("en") or "",
    }
    services, options = [], []
    for index, line in enumerate(document.lines):
        services.append(
            {
                "service_id": line.service_id,
                "service_name_pt": line.name_pt,
                "service_name_en": line.name_en,
                "pricing_type": line.pricing_type,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "custom_price": line.custom_price,
                "total_price": line.total_price,
                "included_in_total": line.included_in_total,
                "included_items": line.included_items_override,
                "notes": line.notes,
                "sort_order": index + 1,
            }
        )
        for position, opt in enumerate(line.options, start=1):
            options.append(
                {
                    "service_index": index,
                    "priced_option_id": opt.option_id,
                    "option_name_pt": opt.name_pt,
                    "option_name_en": opt.name_en,
                    "pricing_type": opt.pricing_type,
                    "quantity": opt.quantity,
                    "unit_price": opt.unit_price,
                    "custom_price": opt.custom_price,
                    "total_price": opt.total_price,
                    "notes": opt.notes,
                    "sort_order": position,
                }
            )
    return ProposalRows(proposal=proposal, services=services, options=options)


def next_reference_number():
    """
    Issue the next reference from the active company profile's counter.
    Must run inside a transaction.
    """
    from .models import CompanyProfile

    prefix = getattr(settings, "PROPOSAL_REFERENCE_PREFIX", "PROP")
    company = CompanyProfile.objects.select_for_update().order_by("-updated_at").first()
    if company is None:
        company = CompanyProfile.objects.create(
            name=getattr(settings, "COMPANY_DEFAULT_NAME", "MSilva")
        )
        logger.info("Created default company profile %s", company.pk)
    counter = company.proposal_number_counter or 1000
    company.proposal_number_counter = counter + 1
    company.save(update_fields=["proposal_number_counter"])
    return f"{prefix}-{counter}"


def save_rows(rows: ProposalRows, status=None):
    """
    Insert the proposal, its service lines, then the options of each line.

    Option rows find their parent through `service_index`. Everything runs in one
    transaction so a failure leaves no partial proposal behind.
    """
    from .models import Proposal, ProposalService, ProposalServiceOption

    with transaction.atomic():
        data = dict(rows.proposal)
        if not data.get("reference_number"):
            data["reference_number"] = next_reference_number()
        data.pop("status", None)
        proposal = Proposal.objects.create(status=Proposal.initial_status(status), **data)

        service_ids = []
        for row in rows.services:
            line = ProposalService.objects.create(proposal=proposal, **row)
            service_ids.append(line.pk)

        for row in rows.options:
            row = dict(row)
            index = row.pop("service_index")
            ProposalServiceOption.objects.create(proposal_service_id=service_ids[index], **row)

    logger.info(
        "Saved proposal %s (%s) with %s lines",
        proposal.reference_number,
        proposal.pk,
        len(service_ids),
    )
    return proposal


def _price_note(pricing_type, unit_price, custom_price, language):
    if pricing_type == "on_request" and custom_price is None and not unit_price:
        return PRICE_NOTES["en" if language == "en" else "pt"]
    return ""


def from_rows(proposal_row, service_rows, option_rows=(), included_item_rows=(), company=None, language="pt"):
    """
    Rebuild the document for a stored proposal in `language`.

    Included items come from the line's stored list when present, otherwise from
    the included item rows of the linked catalog service.
    """
    language = "en" if language == "en" else "pt"

    items_by_service = {}
    for row in sorted(included_item_rows, key=lambda r: value_of(r, "sort_order", 0) or 0):
        text = pick(language, value_of(row, "text_pt"), value_of(row, "text_en"))
        items_by_service.setdefault(str(value_of(row, "service_id")), []).append(text)

    options_by_line = {}
    for row in sorted(option_rows, key=lambda r: value_of(r, "sort_order", 0) or 0):
        pricing_type = value_of(row, "pricing_type") or "fixed"
        unit_price = quantize(value_of(row, "unit_price", ZERO))
        custom_price = to_decimal(value_of(row, "custom_price", None))
        name = pick(language, value_of(row, "option_name_pt"), value_of(row, "option_name_en"))
        options_by_line.setdefault(str(value_of(row, "proposal_service_id")), []).append(
            ComposedOption(
                option_id=str(value_of(row, "priced_option_id")) if value_of(row, "priced_option_id", None) else None,
                name_pt=value_of(row, "option_name_pt"),
                name_en=value_of(row, "option_name_en"),
                name=name or ("Option" if language == "en" else "Opção"),
                pricing_type=pricing_type,
                quantity=value_of(row, "quantity", 1),
                unit_price=unit_price,
                total_price=quantize(value_of(row, "total_price", ZERO)),
                custom_price=custom_price,
                price_note=_price_note(pricing_type, unit_price, custom_price, language),
                notes=value_of(row, "notes"),
                sort_order=value_of(row, "sort_order", 0) or 0,
            )
        )

    lines = []
    for row in sorted(service_rows, key=lambda r: value_of(r, "sort_order", 0) or 0):
        service_id = value_of(row, "service_id", None)
        service_id = str(service_id) if service_id else None
        stored_items = value_of(row, "included_items")
        custom_price = to_decimal(value_of(row, "custom_price", None))
        unit_price = quantize(value_of(row, "unit_price", ZERO))
        pricing_type = value_of(row, "pricing_type") or "fixed"
        lines.append(
            ComposedLine(
                service_id=service_id,
                name_pt=value_of(row, "service_name_pt"),
                name_en=value_of(row, "service_name_en"),
                name=pick(language, value_of(row, "service_name_pt"), value_of(row, "service_name_en")),
                pricing_type=pricing_type,
                quantity=value_of(row, "quantity", 1),
                unit_price=unit_price,
                total_price=quantize(value_of(row, "total_price", ZERO)),
                custom_price=custom_price,
                price_note=_price_note(pricing_type, unit_price, custom_price, language),
                included_in_total=value_of(row, "included_in_total", True),
                included_items=split_lines(stored_items) or list(items_by_service.get(service_id or "", [])),
                included_items_override=stored_items,
                notes=value_of(row, "notes"),
                options=options_by_line.get(str(value_of(row, "id")), []),
                sort_order=value_of(row, "sort_order", 0) or 0,
            )
        )

    p = proposal_row
    return build_document(
        language=language,
        lines=lines,
        subtotal=value_of(p, "subtotal", ZERO),
        vat_amount=value_of(p, "vat_amount", ZERO),
        total=value_of(p, "total", ZERO),
        client=ClientInfo(
            name=value_of(p, "client_name"),
            email=value_of(p, "client_email"),
            phone=value_of(p, "client_phone"),
            company=value_of(p, "client_company"),
            nif=value_of(p, "client_nif"),
        ),
        event=EventInfo(
            event_type=value_of(p, "event_type") or "other",
            custom_label_pt=value_of(p, "event_type_custom_pt"),
            custom_label_en=value_of(p, "event_type_custom_en"),
            title=value_of(p, "event_title"),
            date=value_of(p, "event_date", None),
            location=value_of(p, "event_location"),
            guest_count=value_of(p, "guest_count", 0) or 0,
            notes=value_of(p, "event_notes"),
        ),
        company=company,
        intro={"pt": value_of(p, "custom_intro_pt"), "en": value_of(p, "custom_intro_en")},
        terms={"pt": value_of(p, "terms_pt"), "en": value_of(p, "terms_en")},
        show_vat=value_of(p, "show_vat", False),
        vat_rate=value_of(p, "vat_rate", None),
        reference_number=value_of(p, "reference_number"),
        proposal_id=value_of(p, "id", None),
        valid_until=value_of(p, "valid_until", None),
    )


def catalog_included_item_rows(service_ids):
    """
    Included item rows for the given services, using the same fallbacks as the
    catalog (list field, then description lines) when a service has no rows.
    """
    from .models import Service, ServiceIncludedItem

    service_rows = list(Service.objects.filter(pk__in=service_ids).values(*SERVICE_FIELDS))
    catalog = normalize_catalog(
        service_rows,
        ServiceIncludedItem.objects.filter(service_id__in=service_ids).values(*INCLUDED_ITEM_FIELDS),
    )
    rows = []
    for service in catalog.values():
        for position, text_pt in enumerate(service.included_pt):
            text_en = service.included_en[position] if position < len(service.included_en) else ""
            rows.append(
                {
                    "service_id": service.id,
                    "text_pt": text_pt,
                    "text_en": text_en,
                    "sort_order": position,
                }
            )
    return rows


def load_document(proposal, language=None):
    from .models import CompanyProfile, ProposalServiceOption

    language = language or proposal.language
    service_rows = list(proposal.service_lines.values(*SERVICE_ROW_FIELDS))
    option_rows = list(
        ProposalServiceOption.objects.filter(proposal_service__proposal=proposal).values(
            *OPTION_ROW_FIELDS
        )
    )
    service_ids = [row["service_id"] for row in service_rows if row["service_id"]]
    return from_rows(
        proposal,
        service_rows,
        option_rows,
        catalog_included_item_rows(service_ids),
        company=CompanyProfile.active(),
        language=language,
    )
