"""
Build :class:`ModelSchema` objects from Django models.

Per-field visibility is declared on an inner ``RestifyMeta`` class::

    class Person(models.Model):
        name = models.CharField(max_length=100)
        ssn = models.CharField(max_length=11)
        salary = models.DecimalField(max_digits=10, decimal_places=2)
        address = models.JSONField(default=dict)

        class RestifyMeta:
            access = {"ssn": "private", "salary": "protected"}
            write_access = {"salary": "protected"}
            embedded = {
                "address": ModelSchema(
                    "Address",
                    [FieldDeclaration("zip", access="private")],
                ),
            }

An ``embedded`` value wrapped in a list (``[ModelSchema(...)]``) declares an
array of sub-documents.
"""

import logging
from typing import Any, Optional

from django.db import models

from .types import FieldDeclaration, FieldKind, ModelSchema

logger = logging.getLogger(__name__)

META_ATTRIBUTE = "RestifyMeta"


def get_model_name(model: type[models.Model]) -> str:
    """Return the registry name of a Django model."""
    return model.__name__


def get_restify_meta(model: type[models.Model]) -> Any:
    return getattr(model, META_ATTRIBUTE, None)


def _meta_mapping(meta: Any, attribute: str) -> dict[str, Any]:
    value = getattr(meta, attribute, None) if meta is not None else None
    return dict(value or {})


def _iter_forward_fields(model: type[models.Model]):
    for model_field in model._meta.get_fields():
        if getattr(model_field, "concrete", False):
            yield model_field
        elif model_field.many_to_many and not model_field.auto_created:
            yield model_field


def _embedded_declaration(
    name: str, declaration: Any, access: Optional[str], write_access: Optional[str]
) -> FieldDeclaration:
    if isinstance(declaration, (list, tuple)):
        if len(declaration) != 1 or not isinstance(declaration[0], ModelSchema):
            raise TypeError(
                f"Embedded array declaration for '{name}' must hold exactly one ModelSchema"
            )
        return FieldDeclaration(
            name, FieldKind.ARRAY, access, write_access, schema=declaration[0]
        )
    if not isinstance(declaration, ModelSchema):
        raise TypeError(f"Embedded declaration for '{name}' must be a ModelSchema")
    return FieldDeclaration(name, FieldKind.EMBEDDED, access, write_access, schema=declaration)


def schema_from_model(model: type[models.Model]) -> ModelSchema:
    """
    Introspect a Django model into a ModelSchema.

    ForeignKey and OneToOneField become references, ManyToManyField becomes
    a reference holding many documents, fields listed in
    ``RestifyMeta.embedded`` become embedded/array sub-documents and every
    other concrete field is a scalar.
    """
    meta = get_restify_meta(model)
    access = _meta_mapping(meta, "access")
    write_access = _meta_mapping(meta, "write_access")
    embedded = _meta_mapping(meta, "embedded")

    declarations: list[FieldDeclaration] = []
    for model_field in _iter_forward_fields(model):
        name = model_field.name
        read_annotation = access.get(name)
        write_annotation = write_access.get(name)

        if name in embedded:
            declarations.append(
                _embedded_declaration(name, embedded[name], read_annotation, write_annotation)
            )
        elif model_field.is_relation and model_field.related_model is not None:
            declarations.append(
                FieldDeclaration(
                    name,
                    FieldKind.REFERENCE,
                    read_annotation,
                    write_annotation,
                    ref=get_model_name(model_field.related_model),
                    many=bool(model_field.many_to_many),
                )
            )
        else:
            declarations.append(
                FieldDeclaration(name, FieldKind.SCALAR, read_annotation, write_annotation)
            )

    known = {d.name for d in declarations}
    for mapping_name, mapping in (("access", access), ("write_access", write_access)):
        unknown = sorted(set(mapping) - known)
        if unknown:
            logger.warning(
                "RestifyMeta.%s on %s names unknown fields: %s",
                mapping_name,
                get_model_name(model),
                ", ".join(unknown),
            )

    return ModelSchema(get_model_name(model), tuple(declarations))
