import datetime
from decimal import Decimal

import pytest

from client_proposals.catalog import normalize_catalog
from client_proposals.composer import ClientInfo, EventInfo

SERVICE_BUFFET = "11111111-1111-4111-8111-111111111111"
SERVICE_BAR = "22222222-2222-4222-8222-222222222222"
SERVICE_DJ = "33333333-3333-4333-8333-333333333333"
OPTION_CHAMPAGNE = "44444444-4444-4444-8444-444444444444"
OPTION_COCKTAILS = "55555555-5555-4555-8555-555555555555"


@pytest.fixture
def service_rows():
    return [
        {
            "id": SERVICE_BUFFET,
            "name_pt": "Buffet Jantar",
            "name_en": "Dinner Buffet",
            "description_pt": "Entradas\n\nPrato principal\nSobremesa",
            "description_en": "Starters\nMain course",
            "pricing_type": "per_person",
            "base_price": Decimal("35.00"),
            "sort_order": 1,
        },
        {
            "id": SERVICE_BAR,
            "name_pt": "Open Bar",
            "name_en": "Open Bar",
            "pricing_type": "fixed",
            "base_price": Decimal("800.00"),
            "included_items_pt": ["Bar de gin", "Cocktails"],
            "included_items_en": ["Gin bar"],
            "sort_order": 2,
        },
        {
            "id": SERVICE_DJ,
            "name_pt": "Animação DJ",
            "name_en": "",
            "pricing_type": "on_request",
            "base_price": None,
            "sort_order": 3,
        },
    ]


@pytest.fixture
def included_item_rows():
    return [
        {"service_id": SERVICE_BUFFET, "text_pt": "Sobremesa", "text_en": "Dessert", "sort_order": 2},
        {"service_id": SERVICE_BUFFET, "text_pt": "Entradas", "text_en": "", "sort_order": 1},
    ]


@pytest.fixture
def option_rows():
    return [
        {
            "id": OPTION_COCKTAILS,
            "service_id": SERVICE_BAR,
            "name_pt": "Cocktails de autor",
            "name_en": "Signature cocktails",
            "pricing_type": "per_person",
            "price": Decimal("6.50"),
            "sort_order": 2,
        },
        {
            "id": OPTION_CHAMPAGNE,
            "service_id": SERVICE_BAR,
            "name_pt": "Champanhe",
            "name_en": "Champagne",
            "pricing_type": "fixed",
            "price": Decimal("150.00"),
            "sort_order": 1,
        },
    ]


@pytest.fixture
def catalog(service_rows, included_item_rows, option_rows):
    return normalize_catalog(service_rows, included_item_rows, option_rows)


@pytest.fixture
def client_info():
    return ClientInfo(name="Ana Costa", email="ana@example.com", phone="+351912345678", nif="501442600")


@pytest.fixture
def event_info():
    return EventInfo(
        event_type="wedding",
        title="",
        date=datetime.date(2025, 9, 20),
        location="Quinta do Lago",
        guest_count=100,
    )


@pytest.fixture
def company_profile(db):
    from client_proposals.models import CompanyProfile

    return CompanyProfile.objects.create(
        name="Sabores da Quinta",
        tagline_pt="Catering de eventos",
        tagline_en="Event catering",
        contact_email="geral@example.com",
        address_street="Rua das Flores 10",
        address_postal_code="1200-001",
        address_city="Lisboa",
        address_country="Portugal",
    )


@pytest.fixture
def db_catalog(db):
    """Services stored in the database, mirroring the in-memory rows above."""
    from client_proposals.models import Service, ServiceIncludedItem, ServicePricedOption

    buffet = Service.objects.create(
        name_pt="Buffet Jantar",
        name_en="Dinner Buffet",
        pricing_type="per_person",
        base_price=Decimal("35.00"),
        sort_order=1,
    )
    ServiceIncludedItem.objects.create(service=buffet, text_pt="Entradas", text_en="Starters", sort_order=1)
    ServiceIncludedItem.objects.create(service=buffet, text_pt="Sobremesa", text_en="Dessert", sort_order=2)
    bar = Service.objects.create(
        name_pt="Open Bar",
        name_en="Open Bar",
        pricing_type="fixed",
        base_price=Decimal("800.00"),
        included_items_pt=["Bar de gin"],
        included_items_en=["Gin bar"],
        sort_order=2,
    )
    champagne = ServicePricedOption.objects.create(
        service=bar, name_pt="Champanhe", name_en="Champagne", pricing_type="fixed", price=Decimal("150.00")
    )
    dj = Service.objects.create(name_pt="Animação DJ", pricing_type="on_request", sort_order=3)
    return {"buffet": buffet, "bar": bar, "champagne": champagne, "dj": dj}


@pytest.fixture
def staff_setup(db):
    from client_proposals.models import StaffMember, StaffMemberRole, StaffRole

    waiter = StaffRole.objects.create(name="Empregado de mesa", default_hourly_rate=Decimal("8.00"))
    chef = StaffRole.objects.create(name="Chefe", default_hourly_rate=Decimal("15.00"))
    rita = StaffMember.objects.create(first_name="Rita", last_name="Alves")
    bruno = StaffMember.objects.create(first_name="Bruno", last_name="Dias")
    StaffMemberRole.objects.create(staff_member=rita, role=waiter, custom_hourly_rate=Decimal("10.00"))
    StaffMemberRole.objects.create(staff_member=bruno, role=chef)
    return {"waiter": waiter, "chef": chef, "rita": rita, "bruno": bruno}
