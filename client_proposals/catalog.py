"""
In-memory view of the service catalog used when composing a new proposal.

Rows come in as plain dicts (``QuerySet.values()`` output or decoded JSON) and
are folded into one ``CatalogService`` per service id.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from .pricing import to_decimal

logger = logging.getLogger(__name__)

SERVICE_FIELDS = [
    "id",
    "category_id",
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
INCLUDED_ITEM_FIELDS = ["service_id", "text_pt", "text_en", "sort_order"]
OPTION_FIELDS = [
    "id",
    "service_id",
    "name_pt",
    "name_en",
    "description_pt",
    "description_en",
    "pricing_type",
    "price",
    "min_quantity",
    "sort_order",
]


@dataclass
class CatalogOption:
    id: str
    name_pt: str
    name_en: str = ""
    description_pt: str = ""
    description_en: str = ""
    pricing_type: str = "fixed"
    price: Decimal | None = None
    min_quantity: int | None = None
    sort_order: int = 0

    def name(self, language):
        return pick(language, self.name_pt, self.name_en)


@dataclass
class CatalogService:
    id: str
    name_pt: str
    name_en: str = ""
    description_pt: str = ""
    description_en: str = ""
    pricing_type: str = "per_person"
    base_price: Decimal | None = None
    unit_pt: str = ""
    unit_en: str = ""
    category_id: str | None = None
    min_quantity: int | None = None
    max_quantity: int | None = None
    tags: list = field(default_factory=list)
    sort_order: int = 0
    is_active: bool = True
    included_pt: list = field(default_factory=list)
    included_en: list = field(default_factory=list)
    options: list = field(default_factory=list)

    def name(self, language):
        return pick(language, self.name_pt, self.name_en)

    def included_items(self, language):
        if language != "en":
            return list(self.included_pt)
        return [
            (self.included_en[i] if i < len(self.included_en) and self.included_en[i] else text)
            for i, text in enumerate(self.included_pt)
        ]

    def option(self, option_id):
        option_id = str(option_id)
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


def pick(language, text_pt, text_en):
    if language == "en":
        return text_en or text_pt or ""
    return text_pt or text_en or ""


def split_lines(text):
    if not text:
        return []
    return [line.strip() for line in str(text).splitlines() if line.strip()]


def _clean_list(values):
    if not values:
        return []
    if isinstance(values, str):
        return split_lines(values)
    return [str(v).strip() for v in values if v and str(v).strip()]


def _sort_key(row):
    return row.get("sort_order") or 0


def _included_lists(service_row, item_rows):
    """
    Explicit item rows first, then the list fields, then the description lines.
    """
    if item_rows:
        rows = sorted(item_rows, key=_sort_key)
        return (
            [r.get("text_pt") or "" for r in rows],
            [r.get("text_en") or "" for r in rows],
        )
    listed_pt = _clean_list(service_row.get("included_items_pt"))
    if listed_pt:
        return listed_pt, _clean_list(service_row.get("included_items_en"))
    return (
        split_lines(service_row.get("description_pt")),
        split_lines(service_row.get("description_en")),
    )


def normalize_catalog(service_rows, included_item_rows=(), option_rows=()):
    items_by_service = {}
    for row in included_item_rows:
        items_by_service.setdefault(str(row["service_id"]), []).append(row)

    options_by_service = {}
    for row in sorted(option_rows, key=_sort_key):
        options_by_service.setdefault(str(row["service_id"]), []).append(
            CatalogOption(
                id=str(row["id"]),
                name_pt=row.get("name_pt") or "",
                name_en=row.get("name_en") or "",
                description_pt=row.get("description_pt") or "",
                description_en=row.get("description_en") or "",
                pricing_type=row.get("pricing_type") or "fixed",
                price=to_decimal(row.get("price")),
                min_quantity=row.get("min_quantity"),
                sort_order=row.get("sort_order") or 0,
            )
        )

    catalog = {}
    for row in service_rows:
        service_id = str(row["id"])
        included_pt, included_en = _included_lists(row, items_by_service.get(service_id))
        category_id = row.get("category_id")
        catalog[service_id] = CatalogService(
            id=service_id,
            name_pt=row.get("name_pt") or "",
            name_en=row.get("name_en") or "",
            description_pt=row.get("description_pt") or "",
            description_en=row.get("description_en") or "",
            pricing_type=row.get("pricing_type") or "per_person",
            base_price=to_decimal(row.get("base_price")),
            unit_pt=row.get("unit_pt") or "",
            unit_en=row.get("unit_en") or "",
            category_id=str(category_id) if category_id else None,
            min_quantity=row.get("min_quantity"),
            max_quantity=row.get("max_quantity"),
            tags=list(row.get("tags") or []),
            sort_order=row.get("sort_order") or 0,
            is_active=row.get("is_active", True),
            included_pt=included_pt,
            included_en=included_en,
            options=options_by_service.get(service_id, []),
        )
    logger.debug("Normalized catalog with %s services", len(catalog))
    return catalog


def load_catalog(active_only=True):
    from .models import Service, ServiceIncludedItem, ServicePricedOption

    services = Service.objects.all()
    if active_only:
        services = services.filter(is_active=True)
    service_rows = list(services.values(*SERVICE_FIELDS))
    ids = [row["id"] for row in service_rows]
    return normalize_catalog(
        service_rows,
        ServiceIncludedItem.objects.filter(service_id__in=ids).values(*INCLUDED_ITEM_FIELDS),
        ServicePricedOption.objects.filter(service_id__in=ids).values(*OPTION_FIELDS),
    )
