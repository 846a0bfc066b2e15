"""
Query string parsing.

Supported parameters:
    query     JSON object of conditions. Values may be plain values, the
              "~pattern" regex shorthand or an operator object using
              $gt, $gte, $lt, $lte, $in, $nin, $ne, $regex (+ $options "i"),
              $exists. "$or" takes a list of condition objects.
    sort      "-created,name" or a JSON object {"created": -1, "name": 1}
    skip      non-negative integer
    limit     non-negative integer, capped by the resource's limit option
    select    "name,email" (inclusion) or "-ssn,-salary" (exclusion)
    populate  "owner,items.product"
    distinct  field name
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from django.db.models import Q, QuerySet

from .exceptions import QueryParseError, RegexNotAllowedError

logger = logging.getLogger(__name__)

OPERATOR_LOOKUPS = {
    "$gt": "gt",
    "$gte": "gte",
    "$lt": "lt",
    "$lte": "lte",
    "$in": "in",
    "$regex": "regex",
    "$eq": "exact",
}

NEGATED_OPERATOR_LOOKUPS = {
    "$ne": "exact",
    "$nin": "in",
}


@dataclass
class QueryOptions:
    """Parsed query string of one request."""

    conditions: Q = field(default_factory=Q)
    sort: list[str] = field(default_factory=list)
    skip: int = 0
    limit: Optional[int] = None
    select: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    populate: list[str] = field(default_factory=list)
    distinct: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)


def _to_lookup(key: str) -> str:
    return key.replace(".", "__")


def _parse_json(name: str, value: str) -> Any:
    try:
        return json.loads(value)
    except (TypeError, ValueError) as exc:
        raise QueryParseError(
            f'invalid_json_{name}', details={"parameter": name, "value": value}
        ) from exc


def _parse_int(name: str, value: Optional[str]) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        parsed = -1
    if parsed < 0:
        raise QueryParseError(
            f"invalid_{name}", details={"parameter": name, "value": value}
        )
    return parsed


def _split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _regex_condition(key: str, pattern: Any, case_insensitive: bool, allow_regex: bool) -> Q:
    if not allow_regex:
        raise RegexNotAllowedError(key)
    lookup = "iregex" if case_insensitive else "regex"
    return Q(**{f"{_to_lookup(key)}__{lookup}": pattern})


def _operator_condition(key: str, operators: dict[str, Any], allow_regex: bool) -> Q:
    condition = Q()
    case_insensitive = "i" in str(operators.get("$options", ""))
    for operator, operand in operators.items():
        if operator == "$options":
            continue
        if operator == "$regex":
            condition &= _regex_condition(key, operand, case_insensitive, allow_regex)
        elif operator == "$exists":
            condition &= Q(**{f"{_to_lookup(key)}__isnull": not bool(operand)})
        elif operator in OPERATOR_LOOKUPS:
            condition &= Q(**{f"{_to_lookup(key)}__{OPERATOR_LOOKUPS[operator]}": operand})
        elif operator in NEGATED_OPERATOR_LOOKUPS:
            condition &= ~Q(
                **{f"{_to_lookup(key)}__{NEGATED_OPERATOR_LOOKUPS[operator]}": operand}
            )
        else:
            raise QueryParseError(
                f"Unsupported query operator {operator}",
                details={"field": key, "operator": operator},
            )
    return condition


def build_conditions(query: Any, allow_regex: bool = True) -> Q:
    """Translate a JSON query object into a Django Q object."""
    if not isinstance(query, dict):
        raise QueryParseError("invalid_json_query", details={"parameter": "query"})

    conditions = Q()
    for key, value in query.items():
        if key == "$or":
            if not isinstance(value, list):
                raise QueryParseError("$or expects a list", details={"field": key})
            alternatives = Q()
            for branch in value:
                alternatives |= build_conditions(branch, allow_regex)
            conditions &= alternatives
        elif isinstance(value, dict):
            conditions &= _operator_condition(key, value, allow_regex)
        elif isinstance(value, str) and value.startswith("~"):
            conditions &= _regex_condition(key, value[1:], False, allow_regex)
        else:
            conditions &= Q(**{_to_lookup(key): value})
    return conditions


def _parse_sort(value: Optional[str]) -> list[str]:
    if not value:
        return []
    if value.lstrip().startswith("{"):
        parsed = _parse_json("sort", value)
        if not isinstance(parsed, dict):
            raise QueryParseError("invalid_json_sort", details={"parameter": "sort"})
        return [
            ("-" if str(direction) in ("-1", "desc", "descending") else "") + _to_lookup(key)
            for key, direction in parsed.items()
        ]
    return [
        ("-" + _to_lookup(item[1:])) if item.startswith("-") else _to_lookup(item)
        for item in _split_list(value.replace(" ", ","))
    ]


def prepare_query(params: Any, allow_regex: bool = True, max_limit: Optional[int] = None) -> QueryOptions:
    """
    Parse request query parameters into :class:`QueryOptions`.

    Args:
        params: ``request.GET`` or any mapping with ``get``
        allow_regex: Whether regex conditions are accepted
        max_limit: Upper bound applied to ``limit``

    Raises:
        QueryParseError: on malformed JSON or paging values
        RegexNotAllowedError: on regex conditions when they are disabled
    """
    params = params or {}
    raw = {key: params.get(key) for key in params}
    query = QueryOptions(raw=raw)

    query_value = params.get("query")
    if query_value:
        query.conditions = build_conditions(_parse_json("query", query_value), allow_regex)

    query.sort = _parse_sort(params.get("sort"))
    query.skip = _parse_int("skip", params.get("skip")) or 0
    query.limit = _parse_int("limit", params.get("limit"))
    if max_limit is not None and (query.limit is None or query.limit > max_limit):
        query.limit = max_limit

    for item in _split_list(params.get("select")):
        if item.startswith("-"):
            query.exclude.append(item[1:])
        else:
            query.select.append(item)

    query.populate = _split_list(params.get("populate"))
    query.distinct = params.get("distinct") or None
    return query


def apply_query(queryset: QuerySet, query: QueryOptions, paginate: bool = True) -> QuerySet:
    """Apply conditions, ordering and paging to a queryset."""
    queryset = queryset.filter(query.conditions)
    if query.sort:
        queryset = queryset.order_by(*query.sort)
    if paginate:
        if query.limit is not None:
            queryset = queryset[query.skip : query.skip + query.limit]
        elif query.skip:
            queryset = queryset[query.skip :]
    return queryset
