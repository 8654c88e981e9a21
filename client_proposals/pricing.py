"""
Line pricing for proposals.

A price of ``None`` means the price is undetermined (service sold on request
with no manual price): it shows as a note on the document and counts as zero.
"""
from dataclasses import dataclass
from decimal import Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PRICE_NOTES = {
    "pt": "Sob consulta",
    "en": "On request",
}


def to_decimal(value):
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value) -> Decimal:
    return (to_decimal(value) or ZERO).quantize(CENT)


def effective_unit_price(pricing_type, base_price, override=None):
    override = to_decimal(override)
    if override is not None:
        return override
    if pricing_type == "on_request":
        return None
    return to_decimal(base_price) or ZERO


def line_total(price, quantity) -> Decimal:
    if price is None:
        return ZERO
    return quantize(price * max(int(quantity or 0), 1))


def price_note(price, language="pt"):
    if price is not None:
        return ""
    return PRICE_NOTES.get(language, PRICE_NOTES["pt"])


@dataclass
class PricedLine:
    unit_price: Decimal
    total: Decimal
    note: str = ""
    undetermined: bool = False


def price_line(pricing_type, base_price, quantity, override=None, language="pt") -> PricedLine:
    price = effective_unit_price(pricing_type, base_price, override)
    return PricedLine(
        unit_price=quantize(price),
        total=line_total(price, quantity),
        note=price_note(price, language),
        undetermined=price is None,
    )


def default_quantity(pricing_type, guest_count) -> int:
    if pricing_type == "per_person":
        return guest_count or 1
    return 1


def synced_quantity(pricing_type, quantity, previous_guests, new_guests) -> int:
    """
    Follow the guest count on per-person lines whose quantity was still equal
    to the previous guest count. Any other quantity was edited by hand and stays.
    """
    if pricing_type != "per_person":
        return quantity
    if quantity != previous_guests:
        return quantity
    return new_guests or 1
