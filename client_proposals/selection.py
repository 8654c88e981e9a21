"""
What the user picked for one proposal before it is composed.

Each entry carries its own ``sort_order``; reordering swaps the values of two
neighbouring entries instead of maintaining a separate order list.
"""
from dataclasses import dataclass, field

from .pricing import default_quantity, synced_quantity, to_decimal


class SelectionError(ValueError):
    """A payload value that cannot be turned into a selection."""


def parse_count(value, label, default=0):
    """Whole, non-negative number from a JSON value ("12" and 12 both work)."""
    if value is None or value == "":
        return default
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise SelectionError(f"{label} must be a whole number.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise SelectionError(f"{label} must be a whole number.") from None
    if number < 0:
        raise SelectionError(f"{label} cannot be negative.")
    return number


def parse_price(value, label):
    if isinstance(value, bool):
        raise SelectionError(f"{label} must be a number.")
    try:
        price = to_decimal(value)
    except (ArithmeticError, TypeError, ValueError):
        raise SelectionError(f"{label} must be a number.") from None
    if price is None:
        return None
    if not price.is_finite():
        raise SelectionError(f"{label} must be a number.")
    if price < 0:
        raise SelectionError(f"{label} cannot be negative.")
    return price


@dataclass
class SelectedOption:
    option_id: str
    quantity: int = 1
    pricing_type: str = "fixed"
    custom_price: object = None
    notes: str = ""


@dataclass
class SelectionEntry:
    service_id: str
    pricing_type: str = "fixed"
    quantity: int = 1
    custom_price: object = None
    included_in_total: bool = True
    notes: str = ""
    sort_order: int = 0
    options: dict = field(default_factory=dict)


class Selection:
    def __init__(self, guest_count=0):
        self.guest_count = int(guest_count or 0)
        self.entries = {}

    def __contains__(self, service_id):
        return str(service_id) in self.entries

    def __len__(self):
        return len(self.entries)

    def get(self, service_id):
        return self.entries.get(str(service_id))

    def add_service(self, service, quantity=None, **extra):
        """
        Select a catalog service. Per-person lines start at the guest count.
        """
        service_id = str(service.id)
        if service_id in self.entries:
            return self.entries[service_id]
        if quantity is None:
            quantity = default_quantity(service.pricing_type, self.guest_count)
        next_order = max((e.sort_order for e in self.entries.values()), default=0) + 1
        entry = SelectionEntry(
            service_id=service_id,
            pricing_type=service.pricing_type,
            quantity=int(quantity),
            sort_order=extra.pop("sort_order", next_order),
            **extra,
        )
        self.entries[service_id] = entry
        return entry

    def remove_service(self, service_id):
        self.entries.pop(str(service_id), None)

    def toggle_option(self, service_id, option, quantity=None):
        entry = self.entries[str(service_id)]
        option_id = str(option.id)
        if option_id in entry.options:
            del entry.options[option_id]
            return None
        if quantity is None:
            quantity = default_quantity(option.pricing_type, self.guest_count)
        selected = SelectedOption(
            option_id=option_id, quantity=int(quantity), pricing_type=option.pricing_type
        )
        entry.options[option_id] = selected
        return selected

    def set_quantity(self, service_id, quantity):
        self.entries[str(service_id)].quantity = max(int(quantity or 0), 0)

    def set_custom_price(self, service_id, price):
        self.entries[str(service_id)].custom_price = to_decimal(price)

    def set_included(self, service_id, included):
        self.entries[str(service_id)].included_in_total = bool(included)

    def set_guest_count(self, guest_count):
        previous = self.guest_count
        new = max(int(guest_count or 0), 0)
        for entry in self.entries.values():
            entry.quantity = synced_quantity(entry.pricing_type, entry.quantity, previous, new)
            for opt in entry.options.values():
                opt.quantity = synced_quantity(opt.pricing_type, opt.quantity, previous, new)
        self.guest_count = new

    def ordered(self):
        return sorted(self.entries.values(), key=lambda e: e.sort_order)

    def move(self, service_id, offset):
        """Swap sort order with the neighbour `offset` steps away (-1 up, +1 down)."""
        ordered = self.ordered()
        index = next(
            (i for i, e in enumerate(ordered) if e.service_id == str(service_id)), None
        )
        if index is None:
            return
        target = index + offset
        if target < 0 or target >= len(ordered):
            return
        a, b = ordered[index], ordered[target]
        a.sort_order, b.sort_order = b.sort_order, a.sort_order

    def move_up(self, service_id):
        self.move(service_id, -1)

    def move_down(self, service_id):
        self.move(service_id, 1)

    @classmethod
    def from_payload(cls, payload, catalog):
        """
        Build a selection from a JSON payload::

            {"guestCount": 80, "services": [{"serviceId": ..., "quantity": 80,
              "customPrice": null, "includedInTotal": true, "notes": "",
              "sortOrder": 1, "options": [{"optionId": ..., "quantity": 1}]}]}

        Services missing from the catalog keep their entry; the composer skips them.
        Raises SelectionError for malformed numbers or negative counts and prices.
        """
        selection = cls(guest_count=parse_count(payload.get("guestCount"), "guestCount"))
        services = payload.get("services") or []
        if not isinstance(services, list):
            raise SelectionError("services must be a list.")
        for position, raw in enumerate(services, start=1):
            if not isinstance(raw, dict):
                raise SelectionError("Each service must be an object.")
            service_id = str(raw.get("serviceId") or "")
            if not service_id:
                continue
            service = catalog.get(service_id)
            pricing_type = service.pricing_type if service else "fixed"
            entry = SelectionEntry(
                service_id=service_id,
                pricing_type=pricing_type,
                quantity=parse_count(
                    raw.get("quantity"),
                    "quantity",
                    default=default_quantity(pricing_type, selection.guest_count),
                ),
                custom_price=parse_price(raw.get("customPrice"), "customPrice"),
                included_in_total=raw.get("includedInTotal", True) is not False,
                notes=raw.get("notes") or "",
                sort_order=parse_count(raw.get("sortOrder"), "sortOrder", default=position) or position,
            )
            options = raw.get("options") or []
            if not isinstance(options, list):
                raise SelectionError("options must be a list.")
            for opt_raw in options:
                if not isinstance(opt_raw, dict):
                    raise SelectionError("Each option must be an object.")
                option_id = str(opt_raw.get("optionId") or "")
                if not option_id:
                    continue
                option = service.option(option_id) if service else None
                opt_type = option.pricing_type if option else "fixed"
                entry.options[option_id] = SelectedOption(
                    option_id=option_id,
                    quantity=parse_count(
                        opt_raw.get("quantity"),
                        "quantity",
                        default=default_quantity(opt_type, selection.guest_count),
                    ),
                    pricing_type=opt_type,
                    custom_price=parse_price(opt_raw.get("customPrice"), "customPrice"),
                    notes=opt_raw.get("notes") or "",
                )
            selection.entries[service_id] = entry
        return selection
