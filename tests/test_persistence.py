from decimal import Decimal

import pytest

from client_proposals.catalog import load_catalog
from client_proposals.composer import compose
from client_proposals.models import (
    CompanyProfile,
    Proposal,
    ProposalService,
    ProposalServiceOption,
    ServicePricedOption,
)
from client_proposals.persistence import (
    from_rows,
    load_document,
    next_reference_number,
    save_rows,
    to_rows,
)
from client_proposals.selection import Selection

pytestmark = pytest.mark.django_db


def composed(db_catalog, event_info, client_info, **kwargs):
    catalog = load_catalog()
    bar = catalog[str(db_catalog["bar"].pk)]
    selection = Selection(guest_count=event_info.guest_count)
    selection.add_service(catalog[str(db_catalog["buffet"].pk)])
    selection.add_service(bar)
    selection.toggle_option(bar.id, bar.option(db_catalog["champagne"].pk))
    selection.add_service(catalog[str(db_catalog["dj"].pk)])
    return compose(selection, catalog, client=client_info, event=event_info, **kwargs)


class TestSaveRows:
    def test_round_trip_keeps_lines_and_totals(self, db_catalog, event_info, client_info, company_profile):
        document = composed(db_catalog, event_info, client_info, show_vat=True, vat_rate=23)
        proposal = save_rows(to_rows(document))

        assert proposal.status == "draft"
        assert proposal.reference_number == "PROP-1000"
        assert proposal.subtotal == Decimal("4450.00")
        assert proposal.service_lines.count() == 3
        assert ProposalServiceOption.objects.filter(proposal_service__proposal=proposal).count() == 1

        reloaded = load_document(proposal)
        assert [line.name for line in reloaded.lines] == ["Buffet Jantar", "Open Bar", "Animação DJ"]
        assert reloaded.lines[0].included_items == ["Entradas", "Sobremesa"]
        assert reloaded.lines[1].included_items == ["Bar de gin"]
        assert reloaded.lines[1].options[0].name == "Champanhe"
        assert reloaded.lines[2].price_note == "Sob consulta"
        assert reloaded.total == document.total
        assert reloaded.company.name == "Sabores da Quinta"
        assert reloaded.document_title == "Proposta_PROP-1000_2025-09-20"

    def test_reload_in_english_uses_english_snapshots(self, db_catalog, event_info, client_info):
        proposal = save_rows(to_rows(composed(db_catalog, event_info, client_info)))
        reloaded = load_document(proposal, language="en")
        assert reloaded.title == "QUOTE PROPOSAL - WEDDING"
        assert reloaded.lines[0].name == "Dinner Buffet"
        assert reloaded.lines[0].included_items == ["Starters", "Dessert"]
        assert reloaded.lines[1].options[0].name == "Champagne"
        assert reloaded.lines[2].price_note == "On request"

    def test_catalog_price_change_does_not_reprice(self, db_catalog, event_info, client_info):
        proposal = save_rows(to_rows(composed(db_catalog, event_info, client_info)))
        buffet = db_catalog["buffet"]
        buffet.base_price = Decimal("99.00")
        buffet.save()
        reloaded = load_document(proposal)
        assert reloaded.lines[0].unit_price == Decimal("35.00")
        assert reloaded.subtotal == Decimal("4450.00")

    def test_deleted_option_keeps_its_name(self, db_catalog, event_info, client_info):
        proposal = save_rows(to_rows(composed(db_catalog, event_info, client_info)))
        db_catalog["champagne"].delete()
        reloaded = load_document(proposal)
        assert reloaded.lines[1].options[0].name == "Champanhe"
        assert reloaded.lines[1].options[0].option_id is None

    def test_option_override_of_zero_survives_reload(self, db_catalog, event_info, client_info):
        bar = db_catalog["bar"]
        tasting = ServicePricedOption.objects.create(
            service=bar, name_pt="Prova de vinhos", name_en="Wine tasting", pricing_type="on_request"
        )
        fireworks = ServicePricedOption.objects.create(
            service=bar, name_pt="Fogo de artifício", name_en="Fireworks", pricing_type="on_request"
        )
        catalog = load_catalog()
        bar_entry = catalog[str(bar.pk)]
        selection = Selection(guest_count=event_info.guest_count)
        selection.add_service(bar_entry)
        selection.toggle_option(bar_entry.id, bar_entry.option(tasting.pk)).custom_price = Decimal("0")
        selection.toggle_option(bar_entry.id, bar_entry.option(fireworks.pk))
        document = compose(selection, catalog, client=client_info, event=event_info)
        live_notes = {opt.name_pt: opt.price_note for opt in document.lines[0].options}
        assert live_notes == {"Prova de vinhos": "", "Fogo de artifício": "Sob consulta"}

        proposal = save_rows(to_rows(document))
        stored = ProposalServiceOption.objects.get(proposal_service__proposal=proposal, priced_option=tasting)
        assert stored.custom_price == Decimal("0.00")

        for language in ("pt", "en"):
            reloaded = load_document(proposal, language=language)
            notes = {opt.name_pt: opt.price_note for opt in reloaded.lines[0].options}
            assert notes["Prova de vinhos"] == ""
        assert notes["Fogo de artifício"] == "On request"

    def test_requested_status_is_honoured(self, db_catalog, event_info, client_info):
        proposal = save_rows(to_rows(composed(db_catalog, event_info, client_info)), status="sent")
        assert proposal.status == "sent"
        other = save_rows(to_rows(composed(db_catalog, event_info, client_info)), status="cancelled")
        assert other.status == "draft"

    def test_failure_leaves_nothing_behind(self, db_catalog, event_info, client_info):
        rows = to_rows(composed(db_catalog, event_info, client_info))
        rows.options[0]["service_index"] = 10
        with pytest.raises(IndexError):
            save_rows(rows)
        assert Proposal.objects.count() == 0
        assert ProposalService.objects.count() == 0


class TestReferenceNumbers:
    def test_counter_increments(self, company_profile):
        assert next_reference_number() == "PROP-1000"
        assert next_reference_number() == "PROP-1001"
        company_profile.refresh_from_db()
        assert company_profile.proposal_number_counter == 1002

    def test_profile_created_when_missing(self, settings):
        settings.PROPOSAL_REFERENCE_PREFIX = "ORC"
        assert next_reference_number() == "ORC-1000"
        assert CompanyProfile.objects.count() == 1


def test_from_rows_keeps_stored_totals():
    document = from_rows(
        {
            "id": "abc",
            "reference_number": "PROP-7",
            "client_name": "Ana",
            "event_type": "corporate",
            "guest_count": 20,
            "subtotal": Decimal("100.00"),
            "vat_amount": Decimal("23.00"),
            "total": Decimal("123.00"),
            "show_vat": True,
            "vat_rate": Decimal("23.00"),
        },
        [
            {
                "id": "l1",
                "service_name_pt": "Coffee break",
                "pricing_type": "per_person",
                "quantity": 20,
                "unit_price": Decimal("7.00"),
                "total_price": Decimal("140.00"),
                "included_items": "Café\nBolos",
                "sort_order": 1,
            }
        ],
        language="en",
    )
    assert document.total == Decimal("123.00")
    assert document.subtotal == Decimal("100.00")
    assert document.lines[0].included_items == ["Café", "Bolos"]
    assert document.event_type_label == "Corporate"
    assert document.company.name == "MSilva"
