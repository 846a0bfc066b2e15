"""
Schema-driven field access control.

This package provides:
- schema traversal that classifies fields as private/protected
- compiled per-model filters
- per-request access level resolvers
- helpers applying filters to responses and request bodies

Example usage:
    >>> registry = ModelRegistry()
    >>> registry.register_model(Person)
    >>> classification = classify_model(registry, "Person")
    >>> build_filter("Person", registry, classification, AccessMode.READ)
    >>> filter_output({"name": "Ada", "ssn": "123"}, "public", "Person", registry)
    {'name': 'Ada'}
"""

from .applicator import filter_input, filter_output, get_model_filter
from .classification import FieldClassification, FilteredKeys
from .filter import Filter, build_filter
from .resolver import (
    AccessResolver,
    CallbackAccess,
    FixedAccess,
    SyncAccess,
    coerce_resolver,
    resolve_access,
)
from .traversal import (
    UNRECOGNIZED_ACCESS_POLICY,
    SchemaTraverser,
    classify_annotation,
    classify_model,
    traverse,
)

__all__ = [
    "FieldClassification",
    "FilteredKeys",
    "SchemaTraverser",
    "classify_annotation",
    "classify_model",
    "traverse",
    "UNRECOGNIZED_ACCESS_POLICY",
    "Filter",
    "build_filter",
    "AccessResolver",
    "FixedAccess",
    "SyncAccess",
    "CallbackAccess",
    "coerce_resolver",
    "resolve_access",
    "filter_input",
    "filter_output",
    "get_model_filter",
]
