"""
Schema data structures.

A :class:`ModelSchema` is the ordered list of field declarations of one
registered model. Schemas are usually introspected from Django models (see
:mod:`django_restify.schema.introspection`) but can be declared by hand for
sub-documents stored in JSON fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class FieldKind(Enum):
    """
    Kind of a field declaration:
    - SCALAR: plain value
    - ARRAY: list of sub-documents described by ``schema``
    - EMBEDDED: single sub-document described by ``schema``
    - REFERENCE: foreign key / many-to-many to another registered model
    """

    SCALAR = "scalar"
    ARRAY = "array"
    EMBEDDED = "embedded"
    REFERENCE = "reference"


@dataclass(frozen=True)
class FieldDeclaration:
    """
    One field of a model schema.

    Attributes:
        name: Field name (a single path segment).
        kind: The field kind.
        access: Raw read visibility annotation ("private", "protected", ...).
        write_access: Raw write visibility annotation.
        schema: Sub-schema for ARRAY and EMBEDDED fields.
        ref: Referenced model name for REFERENCE fields.
        many: True for references that hold several documents.
    """

    name: str
    kind: FieldKind = FieldKind.SCALAR
    access: Optional[str] = None
    write_access: Optional[str] = None
    schema: Optional["ModelSchema"] = None
    ref: Optional[str] = None
    many: bool = False

    @property
    def has_sub_schema(self) -> bool:
        return self.kind in (FieldKind.ARRAY, FieldKind.EMBEDDED) and self.schema is not None

    @property
    def is_reference(self) -> bool:
        return self.kind == FieldKind.REFERENCE and bool(self.ref)


@dataclass(frozen=True)
class ModelSchema:
    """An ordered collection of field declarations bound to a model name."""

    name: str
    fields: tuple[FieldDeclaration, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def __iter__(self) -> Iterator[FieldDeclaration]:
        return iter(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, path: str) -> Optional[FieldDeclaration]:
        """
        Resolve a dotted path through embedded and array sub-schemas.

        References are not followed: ``"owner.name"`` on a schema where
        ``owner`` is a reference returns None. Use
        ``ModelRegistry.resolve_reference`` for that.
        """
        head, _, rest = path.partition(".")
        for declaration in self.fields:
            if declaration.name != head:
                continue
            if not rest:
                return declaration
            if declaration.has_sub_schema:
                return declaration.schema.get_field(rest)
            return None
        return None
