from django import template

from client_proposals.rendering import format_currency, price_label as line_price_label
from client_proposals.rendering import quantity_label as line_quantity_label
from client_proposals.validators import digits_only as _digits_only

register = template.Library()


@register.filter
def currency(value, language="pt"):
    return format_currency(value, language)


@register.filter
def price_label(line, language="pt"):
    return line_price_label(line, language)


@register.filter
def quantity_label(line, language="pt"):
    return line_quantity_label(line, language)


@register.filter
def digits_only(value):
    return _digits_only(value)


@register.filter
def paragraphs(value):
    if not value:
        return []
    return [line.strip() for line in str(value).splitlines() if line.strip()]
