"""
Schema traversal.

Walks a model schema depth-first and records which field paths are private
or protected, for reads (``access`` annotations) and writes
(``write_access`` annotations). Embedded and array sub-schemas are walked
with the same mode; references are followed into the referenced model,
which is classified for both modes under the ``<field>.`` prefix.

Cycle guard: ``visited`` is an immutable set of model names extended per
call frame. A reference to a model already in ``visited`` is not followed.
Within one :class:`SchemaTraverser` the classification of a referenced
model is memoised, so a model referenced by several fields is walked once
and its result reused under each field's prefix.
"""

import logging
from collections import Counter
from typing import Any, FrozenSet, Optional, Union

from ..exceptions import ConfigurationError
from ..levels import CLASSIFYING_ANNOTATIONS, AccessMode, parse_mode
from ..schema.registry import ModelRegistry
from ..schema.types import FieldDeclaration, ModelSchema
from .classification import FieldClassification

logger = logging.getLogger(__name__)

# What to do with an access annotation that is neither "private",
# "protected" nor "public": treat the field as public, or refuse the schema.
UNRECOGNIZED_PUBLIC = "public"
UNRECOGNIZED_ERROR = "error"
UNRECOGNIZED_ACCESS_POLICY = UNRECOGNIZED_PUBLIC

_ANNOTATION_ATTRIBUTE = {
    AccessMode.READ: "access",
    AccessMode.WRITE: "write_access",
}


def classify_annotation(
    annotation: Any, path: str, policy: str = UNRECOGNIZED_ACCESS_POLICY
) -> Optional[str]:
    """
    Map a raw field annotation to "private", "protected" or None (public).

    Annotations are case-insensitive. Unrecognised values follow ``policy``.
    """
    if annotation is None:
        return None
    value = str(annotation).strip().lower()
    if value in CLASSIFYING_ANNOTATIONS:
        return value
    if value in ("", "public"):
        return None
    if policy == UNRECOGNIZED_ERROR:
        raise ConfigurationError(
            f"Unrecognized access annotation {annotation!r} on field '{path}'",
            details={"field": path, "annotation": annotation},
        )
    logger.warning(
        "Unrecognized access annotation %r on field %s, treating it as public",
        annotation,
        path,
    )
    return None


class SchemaTraverser:
    """
    Classifies schema fields, following references through the registry.

    Attributes:
        registry: Registry used to resolve referenced models.
        policy: Handling of unrecognised annotations.
        walks: Counter of ``(model_name, mode)`` walks of referenced models.
    """

    def __init__(
        self, registry: ModelRegistry, policy: str = UNRECOGNIZED_ACCESS_POLICY
    ):
        if policy not in (UNRECOGNIZED_PUBLIC, UNRECOGNIZED_ERROR):
            raise ConfigurationError(f"Unknown unrecognized-access policy: {policy!r}")
        self.registry = registry
        self.policy = policy
        self.walks: Counter = Counter()
        self._memo: dict[tuple[str, FrozenSet[str]], FieldClassification] = {}

    def traverse(
        self,
        schema: Optional[ModelSchema],
        classification: FieldClassification,
        mode: Union[AccessMode, str] = AccessMode.READ,
        prefix: str = "",
        visited: FrozenSet[str] = frozenset(),
    ) -> FieldClassification:
        """Classify every field of ``schema`` into ``classification``."""
        if schema is None:
            return classification
        mode = parse_mode(mode)
        attribute = _ANNOTATION_ATTRIBUTE[mode]

        for declaration in schema:
            path = prefix + declaration.name

            if declaration.is_reference:
                self._follow_reference(declaration, classification, f"{path}.", visited)

            if declaration.has_sub_schema:
                self.traverse(declaration.schema, classification, mode, f"{path}.", visited)
                continue

            level = classify_annotation(getattr(declaration, attribute), path, self.policy)
            if level:
                classification.add(mode, level, path)

        return classification

    def _follow_reference(
        self,
        declaration: FieldDeclaration,
        classification: FieldClassification,
        prefix: str,
        visited: FrozenSet[str],
    ) -> None:
        ref = declaration.ref
        if ref in visited:
            return
        if not self.registry.has_model(ref):
            logger.debug("Reference %s points to unregistered model %s", prefix[:-1], ref)
            return

        inner_visited = visited | {ref}
        key = (ref, inner_visited)
        referenced = self._memo.get(key)
        if referenced is None:
            referenced = FieldClassification()
            schema = self.registry.get_schema(ref)
            for mode in AccessMode:
                self.walks[(ref, mode)] += 1
                self.traverse(schema, referenced, mode, "", inner_visited)
            self._memo[key] = referenced
        classification.merge(referenced, prefix)


def traverse(
    schema: Optional[ModelSchema],
    classification: FieldClassification,
    mode: Union[AccessMode, str] = AccessMode.READ,
    prefix: str = "",
    visited: FrozenSet[str] = frozenset(),
    *,
    registry: ModelRegistry,
    policy: str = UNRECOGNIZED_ACCESS_POLICY,
) -> FieldClassification:
    """Traverse ``schema`` in one mode with a fresh :class:`SchemaTraverser`."""
    traverser = SchemaTraverser(registry, policy)
    return traverser.traverse(schema, classification, mode, prefix, frozenset(visited))


def classify_model(
    registry: ModelRegistry,
    model_name: str,
    classification: Optional[FieldClassification] = None,
    policy: str = UNRECOGNIZED_ACCESS_POLICY,
) -> FieldClassification:
    """
    Classify a registered model for both directions.

    ``classification`` may carry initial top-level lists (the resource's
    ``private``/``protected`` options); discovered paths are added to it.
    """
    classification = classification or FieldClassification()
    schema = registry.get_schema(model_name)
    traverser = SchemaTraverser(registry, policy)
    traverser.traverse(schema, classification, AccessMode.READ)
    traverser.traverse(schema, classification, AccessMode.WRITE)
    logger.debug(
        "Classified %s: private=%s protected=%s write_private=%s write_protected=%s",
        model_name,
        classification.private,
        classification.protected,
        classification.write_private,
        classification.write_protected,
    )
    return classification
