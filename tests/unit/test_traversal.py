"""
Unit tests for schema traversal and field classification.
"""

import logging

import pytest

from django_restify.access import (
    FieldClassification,
    SchemaTraverser,
    classify_annotation,
    classify_model,
    traverse,
)
from django_restify.access.traversal import UNRECOGNIZED_ERROR
from django_restify.exceptions import ConfigurationError
from django_restify.levels import AccessMode
from django_restify.schema import FieldDeclaration, FieldKind, ModelSchema
from test_app.models import Company, Employee, Order, Person

pytestmark = pytest.mark.unit


def _schema(name, *fields):
    return ModelSchema(name, fields)


def test_classify_annotation_is_case_insensitive():
    assert classify_annotation("Private", "ssn") == "private"
    assert classify_annotation("PROTECTED", "salary") == "protected"
    assert classify_annotation("public", "name") is None
    assert classify_annotation(None, "name") is None


def test_unrecognized_annotation_is_public_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="django_restify"):
        assert classify_annotation("secret", "nickname") is None
    assert "nickname" in caplog.text


def test_unrecognized_annotation_can_be_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        classify_annotation("secret", "nickname", UNRECOGNIZED_ERROR)
    assert exc_info.value.details["field"] == "nickname"


def test_traverser_rejects_unknown_policy(registry):
    with pytest.raises(ConfigurationError):
        SchemaTraverser(registry, "ignore")


def test_flat_schema_classification(registry):
    schema = _schema(
        "Flat",
        FieldDeclaration("a", access="private"),
        FieldDeclaration("b", access="protected", write_access="private"),
        FieldDeclaration("c"),
    )

    read = traverse(schema, FieldClassification(), AccessMode.READ, registry=registry)
    write = traverse(schema, FieldClassification(), AccessMode.WRITE, registry=registry)

    assert read.private == ["a"]
    assert read.protected == ["b"]
    assert write.write_private == ["b"]
    assert write.write_protected == []


def test_nested_sub_schemas_are_prefixed(registry):
    inner = _schema("Inner", FieldDeclaration("secret", access="private"))
    schema = _schema(
        "Outer",
        FieldDeclaration("child", FieldKind.EMBEDDED, schema=inner),
        FieldDeclaration("children", FieldKind.ARRAY, schema=inner),
    )

    classification = traverse(schema, FieldClassification(), registry=registry)

    assert classification.private == ["child.secret", "children.secret"]


def test_container_annotation_does_not_classify_the_container(registry):
    inner = _schema("Inner", FieldDeclaration("x"))
    schema = _schema(
        "Outer", FieldDeclaration("child", FieldKind.EMBEDDED, access="private", schema=inner)
    )

    classification = traverse(schema, FieldClassification(), registry=registry)

    assert classification.private == []


def test_person_classification(registry):
    registry.register_model(Person)

    classification = classify_model(registry, "Person")

    assert classification.private == ["ssn", "address.zip"]
    assert classification.protected == ["salary", "contacts.phone"]
    assert classification.write_private == ["salary", "contacts.phone"]
    assert classification.write_protected == ["email"]


def test_initial_lists_are_kept(registry):
    registry.register_model(Person)
    initial = FieldClassification.from_lists(private=["name"], protected=["ssn"])

    classification = classify_model(registry, "Person", initial)

    assert "name" in classification.private
    # private wins over the initial protected entry
    assert "ssn" in classification.private
    assert "ssn" not in classification.protected


def test_order_classifies_every_reference_prefix(registry):
    registry.register_model(Order)
    traverser = SchemaTraverser(registry)
    classification = FieldClassification()

    traverser.traverse(registry.get_schema("Order"), classification, AccessMode.READ)
    traverser.traverse(registry.get_schema("Order"), classification, AccessMode.WRITE)

    assert set(classification.private) == {
        "margin",
        "owner.ssn",
        "owner.address.zip",
        "approver.ssn",
        "approver.address.zip",
    }
    assert set(classification.protected) == {
        "owner.salary",
        "owner.contacts.phone",
        "approver.salary",
        "approver.contacts.phone",
        "tags.internal_code",
    }
    assert set(classification.write_protected) == {"total", "owner.email", "approver.email"}
    # Person is walked once per direction despite two references to it.
    assert traverser.walks[("Person", AccessMode.READ)] == 1
    assert traverser.walks[("Person", AccessMode.WRITE)] == 1


def test_self_reference_terminates(registry):
    registry.register_model(Employee)

    classification = classify_model(registry, "Employee")

    assert set(classification.private) == {"badge", "mentor.badge", "company.ceo.badge"}
    assert set(classification.protected) == {"company.revenue", "mentor.company.revenue"}


def test_mutual_references_terminate(registry):
    registry.register_model(Company)

    classification = classify_model(registry, "Company")

    assert classification.private == ["ceo.badge"]
    assert set(classification.protected) == {"revenue", "ceo.company.revenue"}


def test_unregistered_reference_is_skipped(registry):
    schema = _schema(
        "Loose",
        FieldDeclaration("owner", FieldKind.REFERENCE, ref="Nobody"),
        FieldDeclaration("code", access="private"),
    )

    classification = traverse(schema, FieldClassification(), registry=registry)

    assert classification.private == ["code"]


def test_classification_never_duplicates_paths(registry):
    registry.register_model(Person)
    classification = classify_model(registry, "Person")
    classify_model(registry, "Person", classification)

    for paths in (
        classification.private,
        classification.protected,
        classification.write_private,
        classification.write_protected,
    ):
        assert len(paths) == len(set(paths))
    assert not set(classification.private) & set(classification.protected)
