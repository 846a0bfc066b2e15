"""
Apply compiled filters to in-flight payloads.
"""

import logging
from typing import Any, Optional, Sequence

from ..levels import AccessMode
from ..schema.registry import ModelRegistry
from .filter import Filter, get_model_keys

logger = logging.getLogger(__name__)


def get_model_filter(registry: ModelRegistry, model_name: str, mode: AccessMode) -> Filter:
    """
    Return the compiled filter of a model.

    Models that were only registered as reference targets have no compiled
    filter; a filter over their classified keys (or no keys) is returned.
    """
    model_filter = registry.get_filter(model_name, mode)
    if model_filter is None:
        model_filter = Filter(
            model_name, get_model_keys(registry, model_name, mode), mode, registry
        )
    return model_filter


def filter_output(
    payload: Any,
    level: Any,
    model_name: str,
    registry: ModelRegistry,
    populate: Optional[Sequence[str]] = None,
    model_filter: Optional[Filter] = None,
) -> Any:
    """
    Remove the fields ``level`` may not read from a document or a list of
    documents. Populated paths are filtered with their own model's keys.

    ``model_filter`` is the serving resource's own read filter; the model's
    registered filter is used when it is omitted.
    """
    if model_filter is None:
        model_filter = get_model_filter(registry, model_name, AccessMode.READ)
    return model_filter.filter_object(payload, level, populate)


def filter_input(
    payload: Any,
    level: Any,
    model_name: str,
    registry: ModelRegistry,
    model_filter: Optional[Filter] = None,
) -> Any:
    """
    Remove the fields ``level`` may not write from a request payload.

    Keys that are not classified pass through unchanged.
    """
    if model_filter is None:
        model_filter = get_model_filter(registry, model_name, AccessMode.WRITE)
    filtered = model_filter.filter_object(payload, level)
    logger.debug("Filtered %s input at %s: %s", model_name, level, filtered)
    return filtered


def is_excluded_path(
    path: str, level: Any, model_filter: Filter
) -> bool:
    """
    Whether ``path`` is hidden from ``level``, or contains or lies inside
    a hidden path.
    """
    for excluded in model_filter.get_excluded(level):
        if path == excluded or excluded.startswith(path + ".") or path.startswith(excluded + "."):
            return True
    return False
