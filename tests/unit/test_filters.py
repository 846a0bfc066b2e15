"""
Unit tests for compiled filters and the filter applicator.
"""

import pytest

from django_restify.access import (
    Filter,
    FilteredKeys,
    build_filter,
    classify_model,
    filter_input,
    filter_output,
)
from django_restify.access.filter import remove_path
from django_restify.levels import AccessLevel, AccessMode
from django_restify.schema import FieldDeclaration, FieldKind, ModelRegistry, ModelSchema
from test_app.models import Company, Order, Person

pytestmark = pytest.mark.unit

LEVELS = [AccessLevel.PUBLIC, AccessLevel.PROTECTED, AccessLevel.PRIVATE]


def _person_document():
    return {
        "id": 1,
        "name": "Ada",
        "ssn": "123-45-6789",
        "salary": "1000.00",
        "email": "ada@example.com",
        "address": {"street": "Main", "zip": "12345"},
        "contacts": [
            {"label": "home", "phone": "555-1"},
            {"label": "work", "phone": "555-2"},
        ],
    }


@pytest.fixture
def person_registry(registry):
    registry.register_model(Person)
    classification = classify_model(registry, "Person")
    build_filter("Person", registry, classification, AccessMode.READ)
    build_filter("Person", registry, classification, AccessMode.WRITE)
    return registry


def test_remove_path_descends_into_lists():
    document = {"items": [{"a": 1, "b": 2}, {"a": 3}], "c": {"d": 4}}

    remove_path(document, ["items", "a"])
    remove_path(document, ["c", "missing", "x"])

    assert document == {"items": [{"b": 2}, {}], "c": {"d": 4}}


def test_get_excluded_per_level():
    model_filter = Filter("Thing", FilteredKeys(["a"], ["b"]))

    assert model_filter.get_excluded("public") == ("a", "b")
    assert model_filter.get_excluded(AccessLevel.PROTECTED) == ("a",)
    assert model_filter.get_excluded("private") == ()
    # unresolved access reads as public
    assert model_filter.get_excluded(None) == ("a", "b")


def test_public_output_hides_private_and_protected(person_registry):
    result = filter_output(_person_document(), "public", "Person", person_registry)

    assert "ssn" not in result
    assert "salary" not in result
    assert result["address"] == {"street": "Main"}
    assert result["contacts"] == [{"label": "home"}, {"label": "work"}]
    assert result["name"] == "Ada"


def test_protected_output_hides_private_only(person_registry):
    result = filter_output(_person_document(), "protected", "Person", person_registry)

    assert "ssn" not in result
    assert result["salary"] == "1000.00"
    assert result["address"] == {"street": "Main"}
    assert result["contacts"][0]["phone"] == "555-1"


def test_private_output_is_unchanged(person_registry):
    document = _person_document()
    assert filter_output(document, "private", "Person", person_registry) == document


def test_visibility_grows_with_level(person_registry):
    documents = [
        filter_output(_person_document(), level, "Person", person_registry) for level in LEVELS
    ]

    for lower, higher in zip(documents, documents[1:]):
        assert set(lower) <= set(higher)
        assert set(lower["address"]) <= set(higher["address"])


def test_filtering_is_idempotent_and_pure(person_registry):
    document = _person_document()

    once = filter_output(document, "public", "Person", person_registry)
    twice = filter_output(once, "public", "Person", person_registry)

    assert once == twice
    assert document == _person_document()


def test_lists_are_filtered_element_wise(person_registry):
    result = filter_output(
        [_person_document(), _person_document()], "public", "Person", person_registry
    )
    assert all("ssn" not in item for item in result)


def test_read_and_write_classifications_are_independent(person_registry):
    body = {"name": "Ada", "ssn": "1", "salary": 10, "email": "a@b.c"}

    public_input = filter_input(body, "public", "Person", person_registry)
    protected_input = filter_input(body, "protected", "Person", person_registry)

    # ssn is read-private but writable
    assert public_input == {"name": "Ada", "ssn": "1"}
    assert protected_input == {"name": "Ada", "ssn": "1", "email": "a@b.c"}
    assert filter_input(body, "private", "Person", person_registry) == body


def test_unknown_model_filters_nothing(registry):
    document = {"a": 1}
    assert filter_output(document, "public", "Nobody", registry) == document


def test_populated_references_are_filtered(registry):
    registry.register_model(Order)
    for model_name in ("Person", "Order"):
        classification = classify_model(registry, model_name)
        build_filter(model_name, registry, classification, AccessMode.READ)

    document = {
        "id": 7,
        "reference": "A-1",
        "margin": "3.00",
        "owner": {"id": 1, "name": "Ada", "ssn": "1", "salary": "5.00", "address": {}},
        "approver": None,
        "tags": [],
    }

    result = filter_output(document, "protected", "Order", registry, ["owner"])

    assert "margin" not in result
    assert "ssn" not in result["owner"]
    assert result["owner"]["salary"] == "5.00"


def test_populated_path_uses_referenced_model_keys():
    registry = ModelRegistry()
    registry.register(ModelSchema("Author", [FieldDeclaration("email", access="private")]))
    registry.register(
        ModelSchema("Book", [FieldDeclaration("author", FieldKind.REFERENCE, ref="Author")])
    )
    build_filter("Author", registry, FilteredKeys(["email"]), AccessMode.READ)
    book_filter = Filter("Book", FilteredKeys(), AccessMode.READ, registry)

    result = book_filter.filter_object(
        {"author": {"email": "x", "name": "y"}}, "public", ["author"]
    )

    assert result == {"author": {"name": "y"}}


def test_unserved_populated_model_is_classified_on_demand(registry):
    registry.register_model(Company)
    classification = classify_model(registry, "Company")
    company_filter = build_filter("Company", registry, classification, AccessMode.READ)
    document = {
        "id": 1,
        "name": "Acme",
        "ceo": {"id": 2, "badge": "B-2", "mentor": {"id": 3, "badge": "B-1"}},
    }

    result = company_filter.filter_object(document, "public", ["ceo.mentor"])

    assert "badge" not in result["ceo"]
    assert result["ceo"]["mentor"] == {"id": 3}
    assert registry.get_filter("Employee", AccessMode.READ) is None
    assert "badge" in registry.get_filtered_keys("Employee", AccessMode.READ).private
    assert "badge" in registry.get_filtered_keys("Employee", AccessMode.WRITE).private
