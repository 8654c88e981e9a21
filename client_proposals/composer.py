"""
Assembles the language-specific proposal document consumed by the PDF renderer
and the HTML preview.
"""
import datetime
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal

from django.conf import settings

from .catalog import pick, split_lines
from .pricing import ZERO, price_line, quantize, to_decimal

logger = logging.getLogger(__name__)

EVENT_TYPE_LABELS = {
    "pt": {
        "wedding": "Casamento",
        "corporate": "Empresa",
        "private": "Privado",
        "other": "Evento",
    },
    "en": {
        "wedding": "Wedding",
        "corporate": "Corporate",
        "private": "Private",
        "other": "Event",
    },
}


@dataclass
class ClientInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    nif: str = ""


@dataclass
class EventInfo:
    event_type: str = "other"
    custom_label_pt: str = ""
    custom_label_en: str = ""
    title: str = ""
    date: datetime.date | None = None
    location: str = ""
    guest_count: int = 0
    notes: str = ""


@dataclass
class CompanyBlock:
    name: str
    tagline: str = ""
    logo_url: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    instagram: str = ""
    facebook: str = ""
    address: str = ""

    def contact_lines(self):
        return [v for v in [self.phone, self.email, self.website, self.instagram, self.facebook, self.address] if v]


@dataclass
class ComposedOption:
    option_id: str | None
    name_pt: str
    name_en: str
    name: str
    pricing_type: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    custom_price: Decimal | None = None
    price_note: str = ""
    notes: str = ""
    sort_order: int = 0


@dataclass
class ComposedLine:
    service_id: str | None
    name_pt: str
    name_en: str
    name: str
    pricing_type: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    custom_price: Decimal | None = None
    price_note: str = ""
    included_in_total: bool = True
    included_items: list = field(default_factory=list)
    included_items_override: str = ""
    notes: str = ""
    options: list = field(default_factory=list)
    sort_order: int = 0

    @property
    def options_total(self):
        return sum((opt.total_price for opt in self.options), ZERO)

    @property
    def line_sum(self):
        return self.total_price + self.options_total


@dataclass
class Section:
    title: str
    body: str


@dataclass
class ComposedDocument:
    language: str
    title: str
    document_title: str
    company: CompanyBlock
    client: ClientInfo
    event: EventInfo
    event_type_label: str
    event_date_display: str
    guest_basis: str
    vat_note: str
    lines: list
    subtotal: Decimal
    vat_amount: Decimal
    total: Decimal
    show_vat: bool
    vat_rate: Decimal
    sections: list = field(default_factory=list)
    terms: list = field(default_factory=list)
    intro_texts: dict = field(default_factory=dict)
    terms_texts: dict = field(default_factory=dict)
    reference_number: str = ""
    proposal_id: str | None = None
    valid_until: datetime.date | None = None

    @property
    def services(self):
        return [line for line in self.lines if line.included_in_total]

    @property
    def optional_services(self):
        return [line for line in self.lines if not line.included_in_total]


def localized(texts, language):
    """Text for `language` from a {"pt": ..., "en": ...} mapping, falling back to the other one."""
    if not texts:
        return ""
    if isinstance(texts, str):
        return texts
    return pick(language, texts.get("pt") or "", texts.get("en") or "")


def value_of(obj, name, default=""):
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(name)
    else:
        value = getattr(obj, name, None)
    return default if value is None else value


def company_block(company, language) -> CompanyBlock:
    default_name = getattr(settings, "COMPANY_DEFAULT_NAME", "MSilva")
    address = ", ".join(
        p
        for p in [
            value_of(company, "address_street"),
            " ".join(
                p for p in [value_of(company, "address_postal_code"), value_of(company, "address_city")] if p
            ),
            value_of(company, "address_country"),
        ]
        if p
    )
    return CompanyBlock(
        name=value_of(company, "name") or default_name,
        tagline=pick(language, value_of(company, "tagline_pt"), value_of(company, "tagline_en")),
        logo_url=value_of(company, "logo_url"),
        phone=value_of(company, "contact_phone"),
        email=value_of(company, "contact_email"),
        website=value_of(company, "contact_website"),
        instagram=value_of(company, "contact_instagram"),
        facebook=value_of(company, "contact_facebook"),
        address=address,
    )


def parse_date(value):
    if not value:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Ignoring unparseable event date %r", value)
        return None


def format_event_date(value):
    value = parse_date(value)
    return value.strftime("%d/%m/%Y") if value else "-"


def event_type_label(event: EventInfo, language):
    custom = pick(language, event.custom_label_pt, event.custom_label_en)
    if custom:
        return custom
    labels = EVENT_TYPE_LABELS["en" if language == "en" else "pt"]
    return labels.get(event.event_type) or labels["other"]


def build_title(event: EventInfo, language):
    base = (event.title or "").strip() or event_type_label(event, language)
    if language == "en":
        return f"QUOTE PROPOSAL - {base.upper()}"
    return f"PROPOSTA DE ORÇAMENTO - {base.upper()}"


def build_document_title(language, reference_number, proposal_id, event_date):
    parts = [
        "Proposal" if language == "en" else "Proposta",
        reference_number or (str(proposal_id) if proposal_id else ""),
        event_date.isoformat() if event_date else "",
    ]
    title = "_".join(p for p in parts if p)
    return title.replace("/", "-").replace("\\", "-")


def vat_note(show_vat, language):
    if language == "en":
        return "Values shown: including VAT" if show_vat else "Values shown: excluding VAT"
    return "Valores apresentados: com IVA" if show_vat else "Valores apresentados: sem IVA"


def guest_basis(guest_count, language):
    if not guest_count:
        return ""
    if language == "en":
        return f"Quote based on {guest_count} guests"
    return f"Orçamento baseado em {guest_count} pessoas"


def compute_totals(lines, show_vat, vat_rate):
    subtotal = quantize(sum((line.line_sum for line in lines if line.included_in_total), ZERO))
    vat_amount = quantize(subtotal * to_decimal(vat_rate) / 100) if show_vat else quantize(ZERO)
    return subtotal, vat_amount, quantize(subtotal + vat_amount)


def build_document(
    *,
    language,
    lines,
    subtotal,
    vat_amount,
    total,
    client=None,
    event=None,
    company=None,
    intro=None,
    terms=None,
    show_vat=False,
    vat_rate=None,
    reference_number="",
    proposal_id=None,
    valid_until=None,
) -> ComposedDocument:
    """
    Header, free-text and totals around already priced lines.
    """
    language = "en" if language == "en" else "pt"
    client = client or ClientInfo()
    event = replace(event, date=parse_date(event.date)) if event else EventInfo()
    if vat_rate is None:
        vat_rate = getattr(settings, "PROPOSAL_DEFAULT_VAT_RATE", Decimal("23"))

    sections = []
    intro_text = localized(intro, language)
    if intro_text:
        sections.append(
            Section(
                title="Service Context" if language == "en" else "Enquadramento do Serviço",
                body=intro_text,
            )
        )

    return ComposedDocument(
        language=language,
        title=build_title(event, language),
        document_title=build_document_title(language, reference_number, proposal_id, event.date),
        company=company_block(company, language),
        client=client,
        event=event,
        event_type_label=event_type_label(event, language),
        event_date_display=format_event_date(event.date),
        guest_basis=guest_basis(event.guest_count, language),
        vat_note=vat_note(show_vat, language),
        lines=lines,
        subtotal=quantize(subtotal),
        vat_amount=quantize(vat_amount),
        total=quantize(total),
        show_vat=bool(show_vat),
        vat_rate=to_decimal(vat_rate),
        sections=sections,
        terms=split_lines(localized(terms, language)),
        intro_texts=intro if isinstance(intro, dict) else {language: intro or ""},
        terms_texts=terms if isinstance(terms, dict) else {language: terms or ""},
        reference_number=reference_number or "",
        proposal_id=str(proposal_id) if proposal_id else None,
        valid_until=valid_until,
    )


def _compose_options(entry, service, language):
    priced = []
    for selected in entry.options.values():
        option = service.option(selected.option_id)
        if option is None:
            logger.warning(
                "Skipping option %s no longer offered by service %s",
                selected.option_id,
                service.id,
            )
            continue
        result = price_line(
            option.pricing_type, option.price, selected.quantity, selected.custom_price, language
        )
        priced.append(
            ComposedOption(
                option_id=option.id,
                name_pt=option.name_pt,
                name_en=option.name_en,
                name=option.name(language),
                pricing_type=option.pricing_type,
                quantity=selected.quantity,
                unit_price=result.unit_price,
                total_price=result.total,
                custom_price=selected.custom_price,
                price_note=result.note,
                notes=selected.notes,
                sort_order=option.sort_order,
            )
        )
    priced.sort(key=lambda opt: opt.sort_order)
    return priced


def compose(
    selection,
    catalog,
    language="pt",
    client=None,
    event=None,
    company=None,
    intro=None,
    terms=None,
    show_vat=False,
    vat_rate=None,
    reference_number="",
) -> ComposedDocument:
    """
    Price every selected line against the live catalog and build the document.

    Lines follow the selection's sort order; a service that left the catalog is
    dropped without error.
    """
    language = "en" if language == "en" else "pt"
    lines = []
    for entry in selection.ordered():
        service = catalog.get(entry.service_id)
        if service is None:
            logger.warning("Skipping service %s missing from catalog", entry.service_id)
            continue
        result = price_line(
            service.pricing_type, service.base_price, entry.quantity, entry.custom_price, language
        )
        override_items = split_lines(entry.notes)
        lines.append(
            ComposedLine(
                service_id=service.id,
                name_pt=service.name_pt,
                name_en=service.name_en,
                name=service.name(language),
                pricing_type=service.pricing_type,
                quantity=entry.quantity,
                unit_price=result.unit_price,
                total_price=result.total,
                custom_price=entry.custom_price,
                price_note=result.note,
                included_in_total=entry.included_in_total,
                included_items=override_items or service.included_items(language),
                included_items_override=entry.notes.strip(),
                options=_compose_options(entry, service, language),
                sort_order=entry.sort_order,
            )
        )

    if vat_rate is None:
        vat_rate = getattr(settings, "PROPOSAL_DEFAULT_VAT_RATE", Decimal("23"))
    subtotal, vat_amount, total = compute_totals(lines, show_vat, vat_rate)
    event = event or EventInfo()
    if not event.guest_count:
        event = replace(event, guest_count=selection.guest_count)

    return build_document(
        language=language,
        lines=lines,
        subtotal=subtotal,
        vat_amount=vat_amount,
        total=total,
        client=client,
        event=event,
        company=company,
        intro=intro,
        terms=terms,
        show_vat=show_vat,
        vat_rate=vat_rate,
        reference_number=reference_number,
    )
