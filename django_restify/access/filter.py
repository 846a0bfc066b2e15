"""
Compiled per-model field filters.

A :class:`Filter` is built once per model and direction at setup time. It
owns the private/protected field paths of its model and removes the paths
a given access level may not see from a document or a list of documents.
"""

import copy
import logging
from typing import Any, Iterable, Optional, Sequence, Union

from ..levels import AccessLevel, AccessMode, parse_access_level, parse_mode
from ..schema.registry import ModelRegistry
from .classification import FieldClassification, FilteredKeys
from .traversal import classify_model

logger = logging.getLogger(__name__)


def _split(path: str) -> list[str]:
    return [segment for segment in path.split(".") if segment]


def get_model_keys(
    registry: Optional[ModelRegistry], model_name: str, mode: Any
) -> Optional[FilteredKeys]:
    """
    Return the classified keys of a model.

    A registered model that no resource serves is classified on first use
    and its keys are cached on the registry. Unknown models return None.
    """
    if registry is None:
        return None
    keys = registry.get_filtered_keys(model_name, mode)
    if keys is None and registry.has_model(model_name):
        classification = classify_model(registry, model_name)
        for direction in AccessMode:
            registry.cache_derived_keys(model_name, direction, classification.keys_for(direction))
        keys = registry.get_filtered_keys(model_name, mode)
    return keys


def remove_path(item: Any, segments: Sequence[str]) -> None:
    """Remove a dotted path in place, descending into dicts and lists."""
    if isinstance(item, list):
        for element in item:
            remove_path(element, segments)
        return
    if not isinstance(item, dict) or not segments:
        return
    head, rest = segments[0], segments[1:]
    if not rest:
        item.pop(head, None)
    elif head in item:
        remove_path(item[head], rest)


def iter_path_values(item: Any, segments: Sequence[str]) -> Iterable[Any]:
    """Yield every value reachable through a dotted path."""
    if isinstance(item, list):
        for element in item:
            yield from iter_path_values(element, segments)
        return
    if not segments:
        yield item
        return
    if isinstance(item, dict) and segments[0] in item:
        yield from iter_path_values(item[segments[0]], segments[1:])


class Filter:
    """
    Field filter bound to one model and one direction.

    Attributes:
        model_name: Name of the model the filter belongs to
        mode: AccessMode.READ for responses, AccessMode.WRITE for requests
        filtered_keys: Private and protected paths of the model
        registry: Registry used to look up referenced models' keys
    """

    def __init__(
        self,
        model_name: str,
        filtered_keys: Optional[FilteredKeys] = None,
        mode: Union[AccessMode, str] = AccessMode.READ,
        registry: Optional[ModelRegistry] = None,
    ):
        self.model_name = model_name
        self.filtered_keys = filtered_keys or FilteredKeys()
        self.mode = parse_mode(mode)
        self.registry = registry

    def get_excluded(
        self, access: Any = None, model_name: Optional[str] = None
    ) -> tuple[str, ...]:
        """
        Return the paths to remove for ``access``.

        ``model_name`` selects another registered model's keys (used for
        populated sub-documents); unknown models add nothing.
        """
        level = parse_access_level(access) or AccessLevel.PUBLIC
        if level == AccessLevel.PRIVATE:
            return ()

        keys = self.filtered_keys
        if model_name and model_name != self.model_name:
            # Referenced paths are already in our own keys under their prefix.
            keys = get_model_keys(self.registry, model_name, self.mode)
            if keys is None:
                return ()

        if level == AccessLevel.PROTECTED:
            return keys.private
        return keys.private + keys.protected

    def filter_item(self, item: Any, excluded: Iterable[str]) -> Any:
        """Remove ``excluded`` paths from ``item`` in place and return it."""
        if isinstance(item, list):
            for element in item:
                self.filter_item(element, excluded)
            return item
        if isinstance(item, dict):
            for path in excluded:
                remove_path(item, _split(path))
        return item

    def filter_populated_item(
        self, item: Any, access: Any, populate: Sequence[str]
    ) -> Any:
        """Filter populated sub-documents with their own model's keys."""
        if self.registry is None:
            return item
        for path in populate:
            ref = self.registry.resolve_reference(self.model_name, path)
            if ref is None:
                continue
            excluded = self.get_excluded(access, ref)
            if not excluded:
                continue
            for value in iter_path_values(item, _split(path)):
                self.filter_item(value, excluded)
        return item

    def filter_object(
        self,
        resource: Any,
        access: Any = AccessLevel.PUBLIC,
        populate: Optional[Sequence[str]] = None,
    ) -> Any:
        """
        Return a filtered copy of a document or list of documents.

        The input is never modified.
        """
        filtered = copy.deepcopy(resource)
        self.filter_item(filtered, self.get_excluded(access))
        if populate:
            filtered = self.filter_populated_item(filtered, access, populate)
        return filtered

    def __repr__(self) -> str:
        return (
            f"<Filter model={self.model_name} mode={self.mode.value} "
            f"private={list(self.filtered_keys.private)} "
            f"protected={list(self.filtered_keys.protected)}>"
        )


def build_filter(
    model_name: str,
    registry: ModelRegistry,
    filtered_keys: Union[FilteredKeys, FieldClassification],
    mode: Union[AccessMode, str] = AccessMode.READ,
) -> Filter:
    """
    Compile a Filter for one model and direction and register it.

    The filter's keys are stored in the registry under the model name so
    other models populating this one filter it consistently.
    """
    mode = parse_mode(mode)
    if isinstance(filtered_keys, FieldClassification):
        filtered_keys = filtered_keys.keys_for(mode)
    model_filter = Filter(model_name, filtered_keys, mode, registry)
    registry.set_filter(model_filter)
    logger.debug("Built %r", model_filter)
    return model_filter
