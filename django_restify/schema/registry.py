"""
ModelRegistry implementation.

The registry is the single owner of model schemas, per-model field
classifications and compiled filters. It is populated during application
start-up (every ``serve()`` call registers its model) and is read-only once
requests are being served. Components receive the registry explicitly.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Optional

from django.db import models

from ..exceptions import RegistryFrozenError, UnknownModelError
from ..levels import AccessMode, parse_mode
from .introspection import get_model_name, schema_from_model
from .types import FieldKind, ModelSchema

if TYPE_CHECKING:
    from ..access.classification import FilteredKeys
    from ..access.filter import Filter

logger = logging.getLogger(__name__)


class ModelRegistry:
    """
    Central registry of model schemas and their visibility classification.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, ModelSchema] = {}
        self._models: dict[str, type[models.Model]] = {}
        self._filtered_keys: dict[AccessMode, dict[str, "FilteredKeys"]] = {
            AccessMode.READ: {},
            AccessMode.WRITE: {},
        }
        self._filters: dict[AccessMode, dict[str, "Filter"]] = {
            AccessMode.READ: {},
            AccessMode.WRITE: {},
        }
        # Keys classified on demand for models no resource serves.
        self._derived_keys: dict[AccessMode, dict[str, "FilteredKeys"]] = {
            AccessMode.READ: {},
            AccessMode.WRITE: {},
        }
        self._lock = threading.Lock()
        self._frozen = False

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Refuse further registrations."""
        self._frozen = True

    def _ensure_writable(self, what: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {what}: registry is frozen")

    def register(
        self, schema: ModelSchema, model: Optional[type[models.Model]] = None
    ) -> ModelSchema:
        """Register a schema, optionally bound to its Django model."""
        with self._lock:
            self._ensure_writable(f"model '{schema.name}'")
            existing = self._schemas.get(schema.name)
            if existing is not None and existing != schema:
                logger.warning("Replacing registered schema for model %s", schema.name)
            self._schemas[schema.name] = schema
            if model is not None:
                self._models[schema.name] = model
        return schema

    def register_model(self, model: type[models.Model]) -> ModelSchema:
        """
        Introspect and register a Django model.

        Related models are registered as well so references can always be
        resolved by name.
        """
        pending = [model]
        root_schema: Optional[ModelSchema] = None
        while pending:
            current = pending.pop()
            name = get_model_name(current)
            if name in self._schemas and self._models.get(name) is current:
                schema = self._schemas[name]
            else:
                schema = self.register(schema_from_model(current), current)
                for model_field in current._meta.get_fields():
                    related = getattr(model_field, "related_model", None)
                    if (
                        model_field.is_relation
                        and related is not None
                        and not model_field.auto_created
                        and get_model_name(related) not in self._schemas
                    ):
                        pending.append(related)
            if current is model:
                root_schema = schema
        return root_schema

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    def has_model(self, name: str) -> bool:
        return name in self._schemas

    def get_schema(self, name: str) -> ModelSchema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownModelError(name) from None

    def get_model(self, name: str) -> Optional[type[models.Model]]:
        return self._models.get(name)

    def get_model_names(self) -> list[str]:
        return list(self._schemas)

    def resolve_reference(self, model_name: str, path: str) -> Optional[str]:
        """
        Return the name of the model a dotted path points to.

        Embedded and array fields are descended into, references switch to
        the referenced model. Returns None when the path does not end on a
        reference.
        """
        schema = self.get_schema(model_name)
        segments = path.split(".")
        for index, segment in enumerate(segments):
            declaration = next((f for f in schema if f.name == segment), None)
            if declaration is None:
                return None
            is_last = index == len(segments) - 1
            if declaration.kind == FieldKind.REFERENCE:
                if is_last:
                    return declaration.ref
                if not self.has_model(declaration.ref):
                    return None
                schema = self.get_schema(declaration.ref)
            elif declaration.has_sub_schema and not is_last:
                schema = declaration.schema
            else:
                return None
        return None

    # ------------------------------------------------------------------ #
    # Classification maps and filters
    # ------------------------------------------------------------------ #
    def set_filtered_keys(self, name: str, mode: Any, keys: "FilteredKeys") -> None:
        with self._lock:
            self._ensure_writable(f"filtered keys for '{name}'")
            self._filtered_keys[parse_mode(mode)][name] = keys

    def get_filtered_keys(self, name: str, mode: Any) -> Optional["FilteredKeys"]:
        mode = parse_mode(mode)
        keys = self._filtered_keys[mode].get(name)
        if keys is None:
            keys = self._derived_keys[mode].get(name)
        return keys

    def cache_derived_keys(self, name: str, mode: Any, keys: "FilteredKeys") -> None:
        """
        Remember keys classified while serving requests.

        Allowed on a frozen registry; served models keep their own keys.
        """
        with self._lock:
            self._derived_keys[parse_mode(mode)].setdefault(name, keys)

    def set_filter(self, model_filter: "Filter") -> None:
        with self._lock:
            self._ensure_writable(f"filter for '{model_filter.model_name}'")
            self._filters[model_filter.mode][model_filter.model_name] = model_filter
            self._filtered_keys[model_filter.mode][model_filter.model_name] = (
                model_filter.filtered_keys
            )

    def get_filter(self, name: str, mode: Any) -> Optional["Filter"]:
        return self._filters[parse_mode(mode)].get(name)

    def clear(self) -> None:
        """Forget everything. Intended for tests."""
        with self._lock:
            self._schemas.clear()
            self._models.clear()
            for mapping in (
                *self._filtered_keys.values(),
                *self._derived_keys.values(),
                *self._filters.values(),
            ):
                mapping.clear()
            self._frozen = False

    def __repr__(self) -> str:
        return f"<ModelRegistry models={sorted(self._schemas)} frozen={self._frozen}>"


# Convenience registry used when serve() is not given one explicitly.
default_registry = ModelRegistry()
