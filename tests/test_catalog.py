from decimal import Decimal

from client_proposals.catalog import normalize_catalog

from .conftest import OPTION_CHAMPAGNE, OPTION_COCKTAILS, SERVICE_BAR, SERVICE_BUFFET, SERVICE_DJ


class TestIncludedItems:
    """Explicit rows win over the list field, which wins over the description."""

    def test_explicit_rows_sorted_by_sort_order(self, catalog):
        assert catalog[SERVICE_BUFFET].included_items("pt") == ["Entradas", "Sobremesa"]

    def test_english_falls_back_to_portuguese_by_position(self, catalog):
        assert catalog[SERVICE_BUFFET].included_items("en") == ["Entradas", "Dessert"]

    def test_list_field_used_without_rows(self, catalog):
        assert catalog[SERVICE_BAR].included_items("pt") == ["Bar de gin", "Cocktails"]
        assert catalog[SERVICE_BAR].included_items("en") == ["Gin bar", "Cocktails"]

    def test_description_lines_used_last(self, service_rows):
        catalog = normalize_catalog(service_rows)
        assert catalog[SERVICE_BUFFET].included_items("pt") == ["Entradas", "Prato principal", "Sobremesa"]
        assert catalog[SERVICE_BUFFET].included_items("en") == ["Starters", "Main course", "Sobremesa"]

    def test_service_without_any_text_has_no_items(self, catalog):
        assert catalog[SERVICE_DJ].included_items("pt") == []


class TestNormalizeCatalog:
    def test_keyed_by_string_id(self, catalog):
        assert set(catalog) == {SERVICE_BUFFET, SERVICE_BAR, SERVICE_DJ}

    def test_options_attached_in_sort_order(self, catalog):
        bar = catalog[SERVICE_BAR]
        assert [o.id for o in bar.options] == [OPTION_CHAMPAGNE, OPTION_COCKTAILS]
        assert bar.option(OPTION_COCKTAILS).price == Decimal("6.50")
        assert bar.option("missing") is None

    def test_names_fall_back_between_languages(self, catalog):
        dj = catalog[SERVICE_DJ]
        assert dj.name("en") == "Animação DJ"
        assert catalog[SERVICE_BUFFET].name("en") == "Dinner Buffet"

    def test_on_request_price_stays_empty(self, catalog):
        assert catalog[SERVICE_DJ].base_price is None
        assert catalog[SERVICE_DJ].pricing_type == "on_request"
