"""
Unit tests for resource paths and URL patterns.
"""

import pytest
from django.urls import reverse

from django_restify.http.routing import build_resource_paths, to_django_route

pytestmark = pytest.mark.unit


def test_default_paths():
    paths = build_resource_paths("/api", "/v1", "Person")

    assert paths.item == "/api/v1/Person/:id"
    assert paths.items == "/api/v1/Person"
    assert paths.count == "/api/v1/Person/count"
    assert paths.shallow == "/api/v1/Person/:id/shallow"


def test_name_carrying_placeholder():
    paths = build_resource_paths("", "", "tenants/:id")

    assert paths.item == "/tenants/:id"
    assert paths.items == "/tenants"


def test_django_route_conversion():
    assert to_django_route("/api/v1/Person/:id") == "api/v1/Person/<str:id>"
    assert to_django_route("/api/v1/Person/count") == "api/v1/Person/count"


def test_resource_urls_are_reversible():
    assert reverse("Person-items") == "/api/v1/Person"
    assert reverse("Person-count") == "/api/v1/Person/count"
    assert reverse("Person-item", kwargs={"id": "3"}) == "/api/v1/Person/3"
    assert reverse("Person-shallow", kwargs={"id": "3"}) == "/api/v1/Person/3/shallow"
    assert reverse("companies-items") == "/rest/v2/companies"
