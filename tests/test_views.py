import datetime
import json
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.db import DatabaseError
from django.urls import reverse

from client_proposals.models import (
    CalendarEvent,
    Client,
    MomentItem,
    Proposal,
    ProposalMoment,
    StaffAssignment,
    StaffMember,
    TermsTemplate,
)

pytestmark = pytest.mark.django_db

MISSING_ID = "99999999-9999-4999-8999-999999999999"


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


def patch_json(client, url, payload):
    return client.patch(url, data=json.dumps(payload), content_type="application/json")


@pytest.fixture
def composed_proposal(client, db_catalog, company_profile):
    TermsTemplate.objects.create(name="Base", content_pt="Sinal de 30%\nIVA à taxa legal", is_default=True)
    response = post_json(
        client,
        reverse("proposal_compose"),
        {
            "client": {"name": "Ana Costa", "email": "ana@example.com", "nif": "501442600"},
            "event": {"type": "wedding", "date": "2025-09-20", "location": "Quinta do Lago"},
            "guestCount": 100,
            "showVat": True,
            "services": [
                {"serviceId": str(db_catalog["buffet"].pk)},
                {
                    "serviceId": str(db_catalog["bar"].pk),
                    "options": [{"optionId": str(db_catalog["champagne"].pk)}],
                },
                {"serviceId": str(db_catalog["dj"].pk), "includedInTotal": False},
            ],
        },
    )
    assert response.status_code == 201, response.content
    return Proposal.objects.get(pk=response.json()["id"])


class TestIds:
    def test_malformed_id_is_rejected(self, client):
        response = client.get(reverse("proposal_detail", args=["not-a-uuid"]))
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid id."}

    def test_unknown_id_is_not_found(self, client):
        response = client.get(reverse("proposal_detail", args=[MISSING_ID]))
        assert response.status_code == 404


class TestCompose:
    def test_compose_prices_and_stores(self, composed_proposal):
        proposal = composed_proposal
        assert proposal.reference_number == "PROP-1000"
        assert proposal.subtotal == Decimal("4450.00")
        assert proposal.vat_amount == Decimal("1023.50")
        assert proposal.total == Decimal("5473.50")
        assert proposal.terms_pt.startswith("Sinal de 30%")
        assert proposal.service_lines.filter(included_in_total=False).count() == 1

    def test_invalid_nif_is_rejected(self, client, db_catalog):
        response = post_json(
            client,
            reverse("proposal_compose"),
            {"client": {"name": "Ana", "nif": "123456780"}, "services": []},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid NIF."
        assert Proposal.objects.count() == 0

    def test_client_name_required(self, client):
        response = post_json(client, reverse("proposal_compose"), {"client": {}})
        assert response.status_code == 400

    def test_stored_client_is_used(self, client, db_catalog):
        stored = Client.objects.create(name="Empresa X", company="Empresa X Lda", nif="999999990")
        response = post_json(
            client,
            reverse("proposal_compose"),
            {"clientId": str(stored.pk), "event": {"type": "corporate"}, "services": []},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["client_company"] == "Empresa X Lda"
        assert data["client_nif"] == "999999990"

    def test_malformed_json(self, client):
        response = client.post(reverse("proposal_compose"), data="{", content_type="application/json")
        assert response.status_code == 400
        assert response.json()["error"] == "Malformed JSON body."

    @pytest.mark.parametrize(
        "top, line, message",
        [
            ({"guestCount": "lots"}, {}, "guestCount must be a whole number."),
            ({"guestCount": -5}, {}, "guestCount cannot be negative."),
            ({"vatRate": "abc"}, {}, "vatRate must be a number."),
            ({}, {"quantity": "abc"}, "quantity must be a whole number."),
            ({}, {"quantity": -2}, "quantity cannot be negative."),
            ({}, {"customPrice": "cheap"}, "customPrice must be a number."),
            ({}, {"customPrice": "-10"}, "customPrice cannot be negative."),
            ({}, {"options": [{"optionId": MISSING_ID, "quantity": "x"}]}, "quantity must be a whole number."),
            ({}, {"options": "champagne"}, "options must be a list."),
        ],
    )
    def test_bad_numbers_are_rejected(self, client, db_catalog, top, line, message):
        payload = {
            "client": {"name": "Ana Costa"},
            "services": [{"serviceId": str(db_catalog["buffet"].pk), **line}],
            **top,
        }
        response = post_json(client, reverse("proposal_compose"), payload)
        assert response.status_code == 400
        assert response.json()["error"] == message
        assert Proposal.objects.count() == 0

    def test_numeric_strings_are_accepted(self, client, db_catalog):
        response = post_json(
            client,
            reverse("proposal_compose"),
            {
                "client": {"name": "Ana Costa"},
                "guestCount": "50",
                "showVat": True,
                "vatRate": "6",
                "services": [{"serviceId": str(db_catalog["buffet"].pk), "customPrice": "30.00"}],
            },
        )
        assert response.status_code == 201, response.content
        data = response.json()
        assert data["guest_count"] == 50
        assert data["subtotal"] == "1500.00"
        assert data["vat_amount"] == "90.00"

    def test_language_defaults_to_setting(self, client, db_catalog, settings):
        settings.PROPOSAL_DEFAULT_LANGUAGE = "en"
        response = post_json(client, reverse("proposal_compose"), {"client": {"name": "Ana Costa"}})
        assert response.json()["language"] == "en"


class TestProposalDetail:
    def test_patch_status_and_language(self, client, composed_proposal):
        url = reverse("proposal_detail", args=[composed_proposal.pk])
        response = patch_json(client, url, {"status": "rejected", "language": "en"})
        assert response.status_code == 200
        composed_proposal.refresh_from_db()
        assert composed_proposal.status == "rejected"
        assert composed_proposal.language == "en"

    def test_patch_needs_a_field(self, client, composed_proposal):
        url = reverse("proposal_detail", args=[composed_proposal.pk])
        assert patch_json(client, url, {}).status_code == 400
        assert patch_json(client, url, {"status": "archived"}).status_code == 400
        assert patch_json(client, url, {"language": "fr"}).status_code == 400

    def test_get_includes_rows(self, client, composed_proposal):
        data = client.get(reverse("proposal_detail", args=[composed_proposal.pk])).json()
        assert len(data["proposal_services"]) == 3
        assert len(data["proposal_service_options"]) == 1

    def test_accept(self, client, composed_proposal):
        response = client.post(reverse("proposal_accept", args=[composed_proposal.pk]))
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"


class TestDocuments:
    def test_pdf_marks_proposal_sent(self, client, composed_proposal):
        response = client.get(reverse("proposal_pdf", args=[composed_proposal.pk]), {"lang": "en"})
        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert 'filename="Proposal_PROP-1000_2025-09-20.pdf"' in response["Content-Disposition"]
        composed_proposal.refresh_from_db()
        assert composed_proposal.status == "sent"
        assert composed_proposal.language == "en"
        assert composed_proposal.sent_at is not None

    def test_pdf_keeps_accepted_status(self, client, composed_proposal):
        composed_proposal.mark_accepted()
        client.get(reverse("proposal_pdf", args=[composed_proposal.pk]))
        composed_proposal.refresh_from_db()
        assert composed_proposal.status == "accepted"

    def test_preview_html(self, client, composed_proposal):
        response = client.get(reverse("proposal_preview", args=[composed_proposal.pk]))
        assert response.status_code == 200
        html = response.content.decode()
        assert "PROPOSTA DE ORÇAMENTO - CASAMENTO" in html
        assert "Opções Apresentadas" in html
        assert "Sob consulta" in html
        assert "5.473,50 €" in html

    def test_preview_language_defaults_to_setting(self, client, composed_proposal, settings):
        settings.PROPOSAL_DEFAULT_LANGUAGE = "en"
        html = client.get(reverse("proposal_preview", args=[composed_proposal.pk])).content.decode()
        assert "QUOTE PROPOSAL - WEDDING" in html


class TestCalendar:
    def test_create_and_list(self, client):
        response = post_json(
            client,
            reverse("calendar_events"),
            {"title": "Jantar", "event_date": "2024-06-10", "event_type": "private"},
        )
        assert response.status_code == 201
        entries = client.get(reverse("calendar_events"), {"start": "2024-06-01", "end": "2024-06-30"}).json()
        assert [e["title"] for e in entries] == ["Jantar"]

    def test_malformed_range_is_rejected(self, client):
        response = client.get(reverse("calendar_events"), {"start": "garbage"})
        assert response.status_code == 400
        assert response.json()["error"] == "start must be a date (YYYY-MM-DD)."
        response = client.get(reverse("calendar_events"), {"start": "2024-06-01", "end": "2024-02-30"})
        assert response.status_code == 400
        assert response.json()["error"] == "end must be a date (YYYY-MM-DD)."

    def test_cancel_validation(self, client):
        url = reverse("calendar_event_cancel")
        assert post_json(client, url, {"source": "manual"}).status_code == 400
        assert post_json(client, url, {"source": "other", "id": MISSING_ID}).status_code == 400
        assert post_json(client, url, {"source": "manual", "id": "abc"}).status_code == 400
        assert post_json(client, url, {"source": "manual", "id": MISSING_ID}).status_code == 404

    def test_cancel_removes_assignments(self, client, staff_setup):
        event = CalendarEvent.objects.create(title="Jantar", event_date=datetime.date(2024, 6, 10))
        StaffAssignment.objects.create(calendar_event=event, staff_member=staff_setup["rita"])
        response = post_json(client, reverse("calendar_event_cancel"), {"source": "manual", "id": str(event.pk)})
        assert response.json() == {"success": True, "removedAssignments": 1}

    def test_storage_errors_become_json(self, client, monkeypatch):
        def broken(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr("client_proposals.views.scheduling.calendar_entries", broken)
        response = client.get(reverse("calendar_events"))
        assert response.status_code == 500
        assert response.json() == {"error": "connection lost"}


class TestStaff:
    def test_member_with_roles(self, client, staff_setup):
        response = post_json(
            client,
            reverse("staff_members"),
            {
                "first_name": "Carla",
                "last_name": "Sousa",
                "phone": "912 345 678",
                "roles": [{"role": str(staff_setup["waiter"].pk), "custom_hourly_rate": "9.50"}],
            },
        )
        assert response.status_code == 201, response.content
        data = response.json()
        assert data["full_name"] == "Carla Sousa"
        assert data["roles"][0]["custom_hourly_rate"] == "9.50"

    def test_unknown_role_is_rejected(self, client):
        response = post_json(client, reverse("staff_members"), {"first_name": "X", "roles": [MISSING_ID]})
        assert response.status_code == 400
        assert not StaffMember.objects.filter(first_name="X").exists()

    def test_delete_deactivates(self, client, staff_setup):
        rita = staff_setup["rita"]
        response = client.delete(reverse("staff_member_detail", args=[rita.pk]))
        assert response.status_code == 200
        rita.refresh_from_db()
        assert rita.is_active is False
        names = [m["first_name"] for m in client.get(reverse("staff_members")).json()]
        assert names == ["Bruno"]
        assert len(client.get(reverse("staff_members"), {"all": "1"}).json()) == 2

    def test_assignment_needs_a_service(self, client, staff_setup):
        response = post_json(client, reverse("service_staff"), {"staff_member": str(staff_setup["rita"].pk)})
        assert response.status_code == 400

    def test_clock_in_and_out(self, client, staff_setup):
        event = CalendarEvent.objects.create(title="Jantar", event_date=datetime.date(2024, 6, 1))
        assignment = StaffAssignment.objects.create(
            calendar_event=event, staff_member=staff_setup["rita"], role=staff_setup["waiter"]
        )
        url = reverse("service_staff_clock", args=[assignment.pk])
        assert post_json(client, url, {"serviceDate": "2024-06-01"}).status_code == 400
        assert post_json(client, url, {"serviceDate": "2024-06-01", "startTime": "25:00"}).status_code == 400

        post_json(client, url, {"serviceDate": "2024-06-01", "startTime": "23:30"})
        data = post_json(client, url, {"serviceDate": "2024-06-01", "endTime": "00:15"}).json()
        assert data["hoursWorked"] == "0.75"
        assert data["totalPay"] == "7.50"

    def test_summary_requires_month(self, client):
        assert client.get(reverse("staff_summary")).status_code == 400
        assert client.get(reverse("staff_summary"), {"month": "2024-13"}).status_code == 400
        assert client.get(reverse("staff_summary"), {"month": "2024-06"}).json()["staffCount"] == 0

    def test_assignments_require_staff_id(self, client):
        assert client.get(reverse("staff_assignments")).status_code == 400
        assert client.get(reverse("staff_assignments"), {"staffId": "abc"}).status_code == 400


class TestCatalogEndpoints:
    def test_service_with_children(self, client):
        response = post_json(
            client,
            reverse("services"),
            {
                "name_pt": "Brunch",
                "pricing_type": "per_person",
                "base_price": "22.00",
                "included_item_rows": [{"text_pt": "Sumos", "text_en": "Juices"}],
                "priced_options": [{"name_pt": "Mimosas", "pricing_type": "per_person", "price": "4"}],
            },
        )
        assert response.status_code == 201, response.content
        data = response.json()
        assert data["included_item_rows"][0]["text_en"] == "Juices"
        assert data["priced_options"][0]["name_pt"] == "Mimosas"

    def test_priced_service_needs_a_price(self, client):
        response = post_json(client, reverse("services"), {"name_pt": "Bolo", "pricing_type": "fixed"})
        assert response.status_code == 400

    def test_client_nif_validated(self, client):
        response = post_json(client, reverse("clients"), {"name": "Ana", "nif": "123456780"})
        assert response.status_code == 400
        assert "nif" in response.json()["fields"]

    def test_single_default_terms_template(self, client):
        first = TermsTemplate.objects.create(name="A", is_default=True)
        post_json(client, reverse("terms_templates"), {"name": "B", "content_pt": "x", "is_default": True})
        first.refresh_from_db()
        assert first.is_default is False


class TestMoments:
    @pytest.fixture
    def moment(self):
        return ProposalMoment.objects.create(key="casa_noivos", title_pt="Casa dos noivos", title_en="Couple's house")

    def replace(self, client, moment_id, items):
        return post_json(client, reverse("moment_items_replace"), {"moment_id": moment_id, "items": items})

    def test_create_list_and_patch(self, client):
        response = post_json(
            client,
            reverse("moments"),
            {"key": "cocktail", "title_pt": "Cocktail de boas-vindas", "title_en": "Welcome cocktail", "sort_order": 2},
        )
        assert response.status_code == 201, response.content
        moment_id = response.json()["id"]
        assert response.json()["items"] == []

        response = patch_json(client, reverse("moment_detail", args=[moment_id]), {"is_active": False})
        assert response.status_code == 200
        assert response.json()["title_pt"] == "Cocktail de boas-vindas"
        assert client.get(reverse("moments"), {"active": "1"}).json() == []
        assert len(client.get(reverse("moments")).json()) == 1

    def test_moment_validation(self, client, moment):
        url = reverse("moments")
        assert post_json(client, url, {"key": "jantar", "title_pt": "Jantar", "title_en": "Dinner", "sort_order": 0}).status_code == 400
        assert post_json(client, url, {"key": "casa_noivos", "title_pt": "Outra", "title_en": "Other"}).status_code == 400
        assert post_json(client, url, {"key": "jantar", "title_pt": "Jantar"}).status_code == 400

    def test_replace_items(self, client, db_catalog, moment):
        buffet, bar, dj = db_catalog["buffet"], db_catalog["bar"], db_catalog["dj"]
        response = self.replace(
            client,
            str(moment.pk),
            [
                {"service_id": str(bar.pk), "is_default": True},
                {"service_id": str(buffet.pk), "sort_order": 5},
            ],
        )
        assert response.status_code == 200, response.content
        items = response.json()["items"]
        assert [(i["name_pt"], i["is_default"], i["sort_order"]) for i in items] == [
            ("Open Bar", True, 1),
            ("Buffet Jantar", False, 5),
        ]
        assert moment.default_services() == [bar]

        self.replace(client, str(moment.pk), [{"service_id": str(dj.pk)}])
        assert list(moment.moment_items.values_list("service_id", flat=True)) == [dj.pk]

        self.replace(client, str(moment.pk), [])
        assert moment.moment_items.count() == 0

    def test_failed_replace_keeps_previous_items(self, client, db_catalog, moment):
        MomentItem.objects.create(moment=moment, service=db_catalog["bar"], is_default=True, sort_order=1)
        buffet = str(db_catalog["buffet"].pk)
        for items in (
            [{"service_id": buffet}, {"service_id": MISSING_ID}],
            [{"service_id": buffet}, {"service_id": buffet}],
            [{"service_id": buffet, "sort_order": "first"}],
        ):
            assert self.replace(client, str(moment.pk), items).status_code == 400
        assert list(moment.moment_items.values_list("service_id", flat=True)) == [db_catalog["bar"].pk]

    def test_replace_needs_a_moment(self, client):
        assert self.replace(client, "12", []).status_code == 400
        assert self.replace(client, MISSING_ID, []).status_code == 404

    def test_delete_removes_items(self, client, db_catalog, moment):
        MomentItem.objects.create(moment=moment, service=db_catalog["bar"])
        response = client.delete(reverse("moment_detail", args=[moment.pk]))
        assert response.status_code == 200
        assert MomentItem.objects.count() == 0
        assert db_catalog["bar"].moments.count() == 0


def test_export_command(composed_proposal):
    out = StringIO()
    call_command("export_proposals", "--status", "draft", stdout=out)
    data = json.loads(out.getvalue())
    models = {item["model"] for item in data}
    assert "client_proposals.proposal" in models
    assert "client_proposals.service" in models


def test_export_command_reports_counts(composed_proposal, db_catalog, tmp_path):
    moment = ProposalMoment.objects.create(key="jantar", title_pt="Jantar", title_en="Dinner")
    MomentItem.objects.create(moment=moment, service=db_catalog["buffet"], is_default=True)
    target = tmp_path / "export" / "fixture.json"
    out = StringIO()
    call_command("export_proposals", "--output", str(target), stdout=out)
    message = out.getvalue()
    assert "1 proposals" in message
    assert "3 proposal services" in message
    assert "1 proposal moments" in message
    assert "clients" not in message
    models = {item["model"] for item in json.loads(target.read_text(encoding="utf-8"))}
    assert {"client_proposals.proposalmoment", "client_proposals.momentitem"} <= models


class TestProposalRows:
    def test_post_prepared_rows(self, client, db_catalog, company_profile):
        response = post_json(
            client,
            reverse("proposals"),
            {
                "proposal": {
                    "client_name": "Ana Costa",
                    "event_type": "private",
                    "guest_count": 20,
                    "subtotal": "950.00",
                    "total": "950.00",
                },
                "services": [
                    {
                        "service": str(db_catalog["bar"].pk),
                        "service_name_pt": "Open Bar",
                        "pricing_type": "fixed",
                        "unit_price": "800.00",
                        "total_price": "800.00",
                        "sort_order": 1,
                    }
                ],
                "options": [
                    {
                        "service_index": 0,
                        "priced_option": str(db_catalog["champagne"].pk),
                        "option_name_pt": "Champanhe",
                        "unit_price": "150.00",
                        "total_price": "150.00",
                    }
                ],
                "status": "sent",
            },
        )
        assert response.status_code == 201, response.content
        data = response.json()
        assert data["status"] == "sent"
        assert data["reference_number"] == "PROP-1000"
        assert data["proposal_services"][0]["included_in_total"] is True
        assert len(data["proposal_service_options"]) == 1

    def test_option_must_point_at_a_line(self, client):
        response = post_json(
            client,
            reverse("proposals"),
            {"proposal": {"client_name": "Ana"}, "options": [{"service_index": 0, "option_name_pt": "X"}]},
        )
        assert response.status_code == 400
        assert Proposal.objects.count() == 0

    def test_list_by_status(self, client, composed_proposal):
        assert len(client.get(reverse("proposals"), {"status": "draft"}).json()) == 1
        assert client.get(reverse("proposals"), {"status": "accepted"}).json() == []


def test_company_profile_upsert(client, company_profile):
    response = post_json(client, reverse("company_profile"), {"name": "Sabores do Monte"})
    assert response.status_code == 200
    company_profile.refresh_from_db()
    assert company_profile.name == "Sabores do Monte"
    assert company_profile.address_city == "Lisboa"
    assert company_profile.proposal_number_counter == 1000
