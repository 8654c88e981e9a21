"""
Turns a composed proposal into PDF bytes (reportlab) or an HTML preview.
"""
import io
import logging
from decimal import Decimal
from xml.sax.saxutils import escape

from django.conf import settings
from django.template.loader import render_to_string
from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    KeepTogether,
    ListFlowable,
    ListItem,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

logger = logging.getLogger(__name__)

TEXT_COLOR = colors.HexColor("#111411")
MUTED_COLOR = colors.HexColor("#5A605A")
BORDER_COLOR = colors.HexColor("#E6E8E6")
SURFACE_ALT = colors.HexColor("#F7F8F7")

MARGIN = 18 * mm
# SimpleDocTemplate frames pad 6pt on each side.
CONTENT_WIDTH = A4[0] - 2 * MARGIN - 12
BLOCK_PADDING = 8
BLOCK_WIDTH = CONTENT_WIDTH - 2 * BLOCK_PADDING

LABELS = {
    "pt": {
        "eyebrow": "Proposta de Orçamento",
        "client": "Cliente",
        "name": "Nome",
        "email": "Email",
        "phone": "Telefone",
        "company": "Empresa",
        "nif": "NIF",
        "event": "Evento",
        "title": "Título",
        "date": "Data",
        "location": "Local",
        "guests": "Convidados",
        "contact": "Contacto",
        "address": "Morada",
        "services_selected": "Serviços Selecionados",
        "no_services": "Nenhum serviço selecionado.",
        "includes": "Inclui",
        "options": "Opções",
        "options_presented": "Opções Apresentadas",
        "subtotal": "Subtotal",
        "vat": "IVA",
        "total": "Total",
        "general_terms": "Condições Gerais",
        "per_person": "pessoa",
    },
    "en": {
        "eyebrow": "Quote Proposal",
        "client": "Client",
        "name": "Name",
        "email": "Email",
        "phone": "Phone",
        "company": "Company",
        "nif": "VAT number",
        "event": "Event",
        "title": "Title",
        "date": "Date",
        "location": "Location",
        "guests": "Guests",
        "contact": "Contact",
        "address": "Address",
        "services_selected": "Selected Services",
        "no_services": "No services selected.",
        "includes": "Includes",
        "options": "Options",
        "options_presented": "Options Presented",
        "subtotal": "Subtotal",
        "vat": "VAT",
        "total": "Total",
        "general_terms": "General Terms",
        "per_person": "person",
    },
}


def labels_for(language):
    return LABELS["en" if language == "en" else "pt"]


def format_currency(value, language="pt"):
    value = Decimal(value or 0).quantize(Decimal("0.01"))
    if language == "en":
        return f"€{value:,.2f}"
    grouped = f"{value:,.2f}".replace(",", " ").replace(".", ",").replace(" ", ".")
    return f"{grouped} €"


def price_label(line, language="pt"):
    """
    What the price column shows for a line or option.
    """
    if line.price_note:
        return line.price_note
    if line.pricing_type == "per_person":
        return f"{format_currency(line.unit_price, language)} / {labels_for(language)['per_person']}"
    return format_currency(line.total_price, language)


def quantity_label(line, language="pt"):
    if line.pricing_type != "per_person":
        return ""
    if language == "en":
        return f"{line.quantity} guests"
    return f"{line.quantity} pessoas"


def pdf_filename(document):
    name = f"{document.document_title or 'proposta'}.pdf"
    return name.replace("/", "-").replace("\\", "-")


def render_html(document):
    return render_to_string(
        "client_proposals/proposal_preview.html",
        {"document": document, "labels": labels_for(document.language)},
    )


class _Styles:
    def __init__(self, brand):
        base = getSampleStyleSheet()
        normal = base["Normal"]
        self.body = ParagraphStyle("Body", parent=normal, fontSize=9.5, leading=13, textColor=TEXT_COLOR)
        self.muted = ParagraphStyle("Muted", parent=self.body, textColor=MUTED_COLOR)
        self.eyebrow = ParagraphStyle(
            "Eyebrow", parent=self.body, fontSize=8, textColor=MUTED_COLOR, spaceAfter=2
        )
        self.company = ParagraphStyle(
            "Company", parent=normal, fontName="Times-Bold", fontSize=20, leading=24, textColor=brand
        )
        self.title = ParagraphStyle(
            "Title", parent=normal, fontName="Helvetica-Bold", fontSize=13, leading=17,
            textColor=brand, spaceBefore=6, spaceAfter=4,
        )
        self.section = ParagraphStyle(
            "Section", parent=normal, fontName="Helvetica-Bold", fontSize=11, leading=15,
            textColor=brand, spaceBefore=10, spaceAfter=4,
        )
        self.subsection = ParagraphStyle(
            "Subsection", parent=self.body, fontName="Helvetica-Bold", fontSize=8.5, textColor=MUTED_COLOR
        )
        self.line_name = ParagraphStyle("LineName", parent=self.body, fontName="Helvetica-Bold")
        self.right = ParagraphStyle("Right", parent=self.body, alignment=TA_RIGHT)
        self.right_bold = ParagraphStyle("RightBold", parent=self.right, fontName="Helvetica-Bold")


def _p(text, style):
    return Paragraph(escape(str(text or "")), style)


def _rows_table(rows, styles, label_width=32 * mm):
    data = [[_p(label, styles.muted), _p(value or "-", styles.body)] for label, value in rows]
    table = Table(data, colWidths=[label_width, CONTENT_WIDTH - label_width])
    table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                ("TOPPADDING", (0, 0), (-1, -1), 2),
            ]
        )
    )
    return table


def _bullets(items, styles):
    return ListFlowable(
        [ListItem(_p(item, styles.body), leftIndent=10) for item in items],
        bulletType="bullet",
        start="•",
        leftIndent=10,
        bulletFontSize=7,
    )


def _service_block(line, document, styles, labels):
    language = document.language
    head = Table(
        [[
            _p(line.name, styles.line_name),
            _p(quantity_label(line, language), styles.muted),
            _p(price_label(line, language), styles.right_bold),
        ]],
        colWidths=[BLOCK_WIDTH - 70 * mm, 30 * mm, 40 * mm],
    )
    head.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ]
        )
    )
    parts = [head]
    if line.included_items:
        parts.append(_p(labels["includes"], styles.subsection))
        parts.append(_bullets(line.included_items, styles))
    if line.options:
        parts.append(_p(labels["options"], styles.subsection))
        option_rows = [
            [_p(opt.name, styles.body), _p(price_label(opt, language), styles.right)]
            for opt in line.options
        ]
        options = Table(option_rows, colWidths=[BLOCK_WIDTH - 40 * mm, 40 * mm])
        options.setStyle(
            TableStyle(
                [
                    ("LEFTPADDING", (0, 0), (-1, -1), 10),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                ]
            )
        )
        parts.append(options)
    wrapper = Table([[parts]], colWidths=[CONTENT_WIDTH])
    wrapper.setStyle(
        TableStyle(
            [
                ("BOX", (0, 0), (-1, -1), 0.5, BORDER_COLOR),
                ("LEFTPADDING", (0, 0), (-1, -1), BLOCK_PADDING),
                ("RIGHTPADDING", (0, 0), (-1, -1), BLOCK_PADDING),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    return KeepTogether([wrapper, Spacer(1, 4)])


def _totals_table(document, styles, labels):
    language = document.language
    rows = [[_p(labels["subtotal"], styles.body), _p(format_currency(document.subtotal, language), styles.right)]]
    if document.show_vat:
        rows.append(
            [
                _p(f"{labels['vat']} ({document.vat_rate.normalize():f}%)", styles.body),
                _p(format_currency(document.vat_amount, language), styles.right),
            ]
        )
        rows.append(
            [
                _p(labels["total"], styles.line_name),
                _p(format_currency(document.total, language), styles.right_bold),
            ]
        )
    table = Table(rows, colWidths=[CONTENT_WIDTH - 45 * mm, 45 * mm])
    table.setStyle(
        TableStyle(
            [
                ("LINEABOVE", (0, 0), (-1, 0), 0.75, BORDER_COLOR),
                ("BACKGROUND", (0, 0), (-1, -1), SURFACE_ALT),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return table


def build_story(document, styles):
    labels = labels_for(document.language)
    company = document.company
    story = [
        _p(labels["eyebrow"].upper(), styles.eyebrow),
        _p(company.name, styles.company),
    ]
    if company.tagline:
        story.append(_p(company.tagline, styles.muted))
    story.append(_p(document.title, styles.title))
    story.append(
        _p(" | ".join([document.event_type_label, document.event_date_display]), styles.muted)
    )
    story.append(_p(f"{labels['location']}: {document.event.location or '-'}", styles.muted))
    if document.guest_basis:
        story.append(_p(document.guest_basis, styles.muted))
    story.append(_p(document.vat_note, styles.muted))

    client = document.client
    client_rows = [
        (labels["name"], client.name),
        (labels["email"], client.email),
        (labels["phone"], client.phone),
    ]
    if client.company:
        client_rows.append((labels["company"], client.company))
    if client.nif:
        client_rows.append((labels["nif"], client.nif))
    story += [_p(labels["client"], styles.section), _rows_table(client_rows, styles)]

    event = document.event
    story += [
        _p(labels["event"], styles.section),
        _rows_table(
            [
                (labels["title"], event.title),
                (labels["date"], document.event_date_display),
                (labels["location"], event.location),
                (labels["guests"], str(event.guest_count) if event.guest_count else ""),
            ],
            styles,
        ),
    ]

    contact_rows = [
        (label, value)
        for label, value in [
            (labels["phone"], company.phone),
            (labels["email"], company.email),
            ("Website", company.website),
            ("Instagram", company.instagram),
            ("Facebook", company.facebook),
            (labels["address"], company.address),
        ]
        if value
    ]
    if contact_rows:
        story += [_p(labels["contact"], styles.section), _rows_table(contact_rows, styles)]

    story.append(_p(labels["services_selected"], styles.section))
    if document.services:
        story += [_service_block(line, document, styles, labels) for line in document.services]
    else:
        story.append(_p(labels["no_services"], styles.muted))

    if document.optional_services:
        story.append(_p(labels["options_presented"], styles.section))
        story += [_service_block(line, document, styles, labels) for line in document.optional_services]

    for section in document.sections:
        story.append(_p(section.title, styles.section))
        for paragraph in section.body.splitlines():
            if paragraph.strip():
                story.append(_p(paragraph.strip(), styles.body))

    story += [Spacer(1, 8), _totals_table(document, styles, labels)]

    if document.terms:
        story += [PageBreak(), _p(labels["general_terms"], styles.section)]
        for number, paragraph in enumerate(document.terms, start=1):
            story.append(_p(f"{number}. {paragraph}", styles.body))
            story.append(Spacer(1, 3))
    return story


def render_pdf(document) -> bytes:
    brand = colors.HexColor(getattr(settings, "PROPOSAL_PDF_BRAND_COLOR", "#445044"))
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=16 * mm,
        bottomMargin=16 * mm,
        title=document.document_title,
        author=document.company.name,
    )
    doc.build(build_story(document, _Styles(brand)))
    pdf = buffer.getvalue()
    logger.info(
        "Rendered proposal PDF %s (%s, %s bytes)",
        document.document_title,
        document.language,
        len(pdf),
    )
    return pdf
