"""
Unit tests for query string parsing.
"""

import pytest
from django.db.models import Q
from django.http import QueryDict

from django_restify.exceptions import QueryParseError, RegexNotAllowedError
from django_restify.query import build_conditions, prepare_query

pytestmark = pytest.mark.unit


def test_plain_and_operator_conditions():
    conditions = build_conditions(
        {"name": "Ada", "salary": {"$gte": 10, "$lt": 20}, "address.zip": "123"}
    )

    assert conditions == (
        Q(name="Ada") & (Q(salary__gte=10) & Q(salary__lt=20)) & Q(address__zip="123")
    )


def test_negated_and_exists_operators():
    conditions = build_conditions({"ssn": {"$ne": ""}, "email": {"$exists": False}})

    assert conditions == ~Q(ssn__exact="") & Q(email__isnull=True)


def test_or_conditions():
    conditions = build_conditions({"$or": [{"name": "Ada"}, {"name": "Grace"}]})
    assert conditions == (Q(name="Ada") | Q(name="Grace"))


def test_regex_conditions():
    assert build_conditions({"name": "~^A"}) == Q(name__regex="^A")
    assert build_conditions({"name": {"$regex": "^a", "$options": "i"}}) == Q(
        name__iregex="^a"
    )


def test_regex_can_be_disabled():
    with pytest.raises(RegexNotAllowedError) as exc_info:
        build_conditions({"name": "~^A"}, allow_regex=False)
    assert exc_info.value.details == {"field": "name"}


def test_unknown_operator_is_rejected():
    with pytest.raises(QueryParseError):
        build_conditions({"name": {"$near": 1}})


def test_prepare_query_parses_every_parameter():
    params = QueryDict(
        "query=%7B%22name%22%3A%22Ada%22%7D&sort=-salary,name&skip=5&limit=10"
        "&select=name,-ssn&populate=owner,tags&distinct=name"
    )

    query = prepare_query(params)

    assert query.conditions == Q(name="Ada")
    assert query.sort == ["-salary", "name"]
    assert query.skip == 5
    assert query.limit == 10
    assert query.select == ["name"]
    assert query.exclude == ["ssn"]
    assert query.populate == ["owner", "tags"]
    assert query.distinct == "name"


def test_json_sort():
    query = prepare_query({"sort": '{"salary": -1, "name": 1}'})
    assert query.sort == ["-salary", "name"]


def test_limit_is_capped():
    assert prepare_query({"limit": "500"}, max_limit=50).limit == 50
    assert prepare_query({}, max_limit=50).limit == 50
    assert prepare_query({"limit": "5"}, max_limit=50).limit == 5


@pytest.mark.parametrize(
    "params",
    [{"query": "{not json"}, {"query": "[1]"}, {"skip": "-1"}, {"limit": "many"}],
)
def test_malformed_parameters_are_rejected(params):
    with pytest.raises(QueryParseError):
        prepare_query(params)
