"""
Integration tests for resources with references, context filters and
restify-style errors.
"""

import json
from decimal import Decimal

import pytest
from django.test import Client

from test_app.models import Company, Employee, Order, Person, Tag

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

ORDERS = "/api/v1/Order"
COMPANIES = "/rest/v2/companies"


def _json(response):
    return json.loads(response.content.decode("utf-8"))


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def people():
    ada = Person.objects.create(name="Ada", ssn="1", salary=Decimal("10.00"))
    grace = Person.objects.create(name="Grace", ssn="2", salary=Decimal("20.00"))
    return ada, grace


@pytest.fixture
def orders(people):
    ada, grace = people
    tag = Tag.objects.create(label="rush", internal_code="R-1")
    first = Order.objects.create(
        reference="A-1", total=Decimal("5.00"), margin=Decimal("1.00"), owner=ada, approver=grace
    )
    first.tags.add(tag)
    second = Order.objects.create(reference="G-1", owner=grace)
    return first, second


def test_populated_owner_is_filtered(client, orders):
    first, _ = orders

    response = client.get(f"{ORDERS}/{first.pk}", {"populate": "owner,approver,tags"})

    order = _json(response)
    assert response.status_code == 200
    assert "margin" not in order
    assert order["owner"]["name"] == "Ada"
    assert "ssn" not in order["owner"]
    assert "salary" not in order["owner"]
    assert "ssn" not in order["approver"]
    assert order["tags"] == [{"id": order["tags"][0]["id"], "label": "rush"}]


def test_protected_caller_sees_protected_reference_fields(client, orders):
    first, _ = orders

    order = _json(
        client.get(f"{ORDERS}/{first.pk}", {"populate": "owner"}, HTTP_X_ACCESS="protected")
    )

    assert "margin" not in order
    assert Decimal(order["owner"]["salary"]) == Decimal("10.00")
    assert "ssn" not in order["owner"]


def test_unpopulated_references_are_keys(client, orders):
    first, _ = orders

    order = _json(client.get(f"{ORDERS}/{first.pk}"))

    assert order["owner"] == first.owner_id
    assert order["tags"] == [first.tags.get().pk]


def test_context_filter_scopes_every_operation(client, people, orders):
    ada, _ = people
    first, second = orders

    payload = _json(client.get(ORDERS, HTTP_X_OWNER=str(ada.pk)))
    assert [o["reference"] for o in payload] == ["A-1"]
    assert client.get(f"{ORDERS}/{second.pk}", HTTP_X_OWNER=str(ada.pk)).status_code == 404
    assert _json(client.get(f"{ORDERS}/count", HTTP_X_OWNER=str(ada.pk))) == {"count": 1}


def test_update_with_document_lookup(client, orders):
    first, _ = orders

    response = client.patch(
        f"{ORDERS}/{first.pk}",
        data=json.dumps({"reference": "A-2", "total": "7.50", "id": 999}),
        content_type="application/json",
        HTTP_X_ACCESS="private",
    )

    assert response.status_code == 200
    first.refresh_from_db()
    assert first.reference == "A-2"
    assert first.total == Decimal("7.50")
    assert _json(response)["id"] == first.pk


def test_create_with_relations(client, people):
    ada, _ = people
    tag = Tag.objects.create(label="bulk")

    response = client.post(
        ORDERS,
        data=json.dumps({"reference": "N-1", "owner": ada.pk, "tags": [tag.pk]}),
        content_type="application/json",
    )

    assert response.status_code == 201
    order = Order.objects.get(reference="N-1")
    assert order.owner == ada
    assert list(order.tags.all()) == [tag]


def test_delete_with_document_lookup(client, orders):
    first, _ = orders

    assert client.delete(f"{ORDERS}/{first.pk}").status_code == 204
    assert not Order.objects.filter(pk=first.pk).exists()
    assert client.delete(f"{ORDERS}/{first.pk}").status_code == 404


def test_limit_option_caps_page_size(client, people):
    ada, _ = people
    Order.objects.bulk_create(Order(reference=f"B-{i}", owner=ada) for i in range(60))

    assert len(_json(client.get(ORDERS, {"limit": "100"}))) == 50


def test_restify_errors_use_code_and_message(client):
    response = client.get(f"{COMPANIES}/12345")

    assert response.status_code == 404
    assert _json(response) == {"code": "not_found", "message": "Company not found"}


def test_invalid_identifier(client):
    response = client.get(f"{COMPANIES}/not-a-number")

    assert response.status_code == 400
    assert _json(response)["code"] == "invalid_query"


def test_company_revenue_is_protected(client):
    Company.objects.create(name="Acme", revenue=Decimal("1.00"))

    assert "revenue" not in _json(client.get(COMPANIES))[0]


def test_populated_unserved_model_is_filtered(client):
    mentor = Employee.objects.create(name="Lin", badge="B-1")
    ceo = Employee.objects.create(name="Sam", badge="B-2", mentor=mentor)
    Company.objects.create(name="Acme", ceo=ceo)

    company = _json(client.get(COMPANIES, {"populate": "ceo.mentor"}))[0]

    assert company["ceo"]["name"] == "Sam"
    assert "badge" not in company["ceo"]
    assert company["ceo"]["mentor"]["name"] == "Lin"
    assert "badge" not in company["ceo"]["mentor"]
