"""
Django ORM storage collaborator.

Executes find/count/create/update/delete for one model and turns model
instances into plain dictionaries. Nothing here filters fields by access
level; storage errors propagate unchanged.
"""

import logging
from typing import Any, Iterable, Optional, Sequence

from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db import models, transaction

from .exceptions import NotFoundError, QueryParseError
from .query import QueryOptions, apply_query

logger = logging.getLogger(__name__)


def _group_paths(paths: Iterable[str]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for path in paths:
        head, _, rest = path.partition(".")
        nested = grouped.setdefault(head, [])
        if rest:
            nested.append(rest)
    return grouped


def serialize_instance(
    instance: Optional[models.Model],
    populate: Sequence[str] = (),
    select: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> Optional[dict[str, Any]]:
    """
    Convert a model instance to a plain dict.

    Relations are rendered as primary keys unless their name is listed in
    ``populate``, in which case the related objects are serialised
    recursively. ``select`` keeps only the listed top-level fields (the
    primary key is always kept); ``exclude`` drops fields.
    """
    if instance is None:
        return None

    populated = _group_paths(populate)
    opts = instance._meta
    data: dict[str, Any] = {}

    for model_field in opts.concrete_fields:
        if model_field.is_relation:
            if model_field.name in populated:
                related = getattr(instance, model_field.name)
                data[model_field.name] = serialize_instance(related, populated[model_field.name])
            else:
                data[model_field.name] = getattr(instance, model_field.attname)
        else:
            data[model_field.name] = model_field.value_from_object(instance)

    if instance.pk is not None:
        for model_field in opts.many_to_many:
            manager = getattr(instance, model_field.name)
            if model_field.name in populated:
                data[model_field.name] = [
                    serialize_instance(related, populated[model_field.name])
                    for related in manager.all()
                ]
            else:
                data[model_field.name] = list(manager.values_list("pk", flat=True))

    if select:
        keep = set(select) | {opts.pk.name}
        data = {key: value for key, value in data.items() if key in keep}
    for key in exclude:
        if key != opts.pk.name:
            data.pop(key, None)
    return data


def serialize_result(result: Any, query: Optional[QueryOptions] = None) -> Any:
    """Serialise an instance, a list of instances or pass plain data through."""
    populate = query.populate if query else ()
    select = query.select if query else ()
    exclude = query.exclude if query else ()
    if isinstance(result, models.Model):
        return serialize_instance(result, populate, select, exclude)
    if isinstance(result, (list, tuple)):
        return [serialize_result(item, query) for item in result]
    return result


class DjangoStorage:
    """
    Storage operations for one Django model.

    Attributes:
        model: The Django model class
        id_property: Field used to look documents up by identifier
        lean: Return plain dicts instead of model instances
        run_validators: Call ``full_clean()`` before saving
    """

    def __init__(
        self,
        model: type[models.Model],
        id_property: str = "pk",
        lean: bool = True,
        run_validators: bool = False,
    ):
        self.model = model
        self.id_property = id_property
        self.lean = lean
        self.run_validators = run_validators

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _output(self, result: Any, query: Optional[QueryOptions]) -> Any:
        return serialize_result(result, query) if self.lean else result

    def _lookup(self, queryset: models.QuerySet, identifier: Any) -> models.QuerySet:
        try:
            return queryset.filter(**{self.id_property: identifier})
        except (ValueError, ValidationError) as exc:
            raise QueryParseError("invalid_id", details={"id": identifier}) from exc

    def _with_relations(self, queryset: models.QuerySet, query: Optional[QueryOptions]) -> models.QuerySet:
        if not query or not query.populate:
            return queryset
        single: list[str] = []
        many: list[str] = []
        for path in query.populate:
            lookup = path.replace(".", "__")
            head = path.split(".")[0]
            try:
                model_field = self.model._meta.get_field(head)
            except FieldDoesNotExist:
                logger.debug("Ignoring populate path %s on %s", path, self.model.__name__)
                continue
            if model_field.many_to_many or model_field.one_to_many or "." in path:
                many.append(lookup)
            elif model_field.is_relation:
                single.append(lookup)
        if single:
            queryset = queryset.select_related(*single)
        if many:
            queryset = queryset.prefetch_related(*many)
        return queryset

    def _split_data(self, data: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Split a payload into concrete field values and many-to-many values."""
        opts = self.model._meta
        concrete: dict[str, Any] = {}
        many: dict[str, Any] = {}
        for key, value in data.items():
            try:
                model_field = opts.get_field(key)
            except FieldDoesNotExist:
                logger.debug("Ignoring unknown field %s for %s", key, self.model.__name__)
                continue
            if model_field.many_to_many and not model_field.auto_created:
                many[key] = [self._related_pk(item) for item in (value or [])]
            elif getattr(model_field, "concrete", False):
                if model_field.primary_key and model_field.auto_created:
                    continue
                if model_field.is_relation:
                    concrete[model_field.attname] = self._related_pk(value)
                else:
                    concrete[model_field.attname] = value
        return concrete, many

    @staticmethod
    def _related_pk(value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("pk", value.get("id"))
        if isinstance(value, models.Model):
            return value.pk
        return value

    def _validate_values(self, values: dict[str, Any]) -> None:
        errors: dict[str, Any] = {}
        opts = self.model._meta
        for attname, value in values.items():
            model_field = next(f for f in opts.concrete_fields if f.attname == attname)
            if model_field.is_relation:
                continue
            try:
                model_field.clean(value, None)
            except ValidationError as exc:
                errors[model_field.name] = exc.messages
        if errors:
            raise ValidationError(errors)

    def _save(self, instance: models.Model, many: dict[str, Any]) -> models.Model:
        if self.run_validators:
            instance.full_clean()
        instance.save()
        for name, values in many.items():
            getattr(instance, name).set(values)
        return instance

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def find(self, queryset: models.QuerySet, query: QueryOptions) -> Any:
        if query.distinct:
            values = queryset.filter(query.conditions).values_list(
                query.distinct.replace(".", "__"), flat=True
            ).distinct()
            return list(values)
        queryset = self._with_relations(apply_query(queryset, query), query)
        return self._output(list(queryset), query)

    def count(self, queryset: models.QuerySet, query: QueryOptions) -> int:
        return apply_query(queryset, query, paginate=False).count()

    def find_document(self, queryset: models.QuerySet, identifier: Any,
                      query: Optional[QueryOptions] = None) -> models.Model:
        """Return the model instance for ``identifier``."""
        queryset = self._with_relations(self._lookup(queryset, identifier), query)
        if query is not None:
            queryset = queryset.filter(query.conditions)
        instance = queryset.first()
        if instance is None:
            raise NotFoundError(
                f"{self.model.__name__} not found", details={"id": identifier}
            )
        return instance

    def find_by_id(self, queryset: models.QuerySet, identifier: Any,
                   query: Optional[QueryOptions] = None) -> Any:
        return self._output(self.find_document(queryset, identifier, query), query)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #
    def create(self, data: Any) -> Any:
        """Create one document, or several when ``data`` is a list."""
        if isinstance(data, list):
            with transaction.atomic():
                created = [self._create_one(item) for item in data]
            return self._output(created, None)
        return self._output(self._create_one(data), None)

    def _create_one(self, data: dict[str, Any]) -> models.Model:
        concrete, many = self._split_data(data or {})
        instance = self.model(**concrete)
        return self._save(instance, many)

    def update(self, queryset: models.QuerySet, identifier: Any, data: dict[str, Any]) -> Any:
        """Find-and-modify in one statement, then return the updated document."""
        concrete, many = self._split_data(data or {})
        if self.run_validators:
            self._validate_values(concrete)
        with transaction.atomic():
            matched = self._lookup(queryset, identifier)
            if concrete:
                updated = matched.update(**concrete)
            else:
                updated = matched.count()
            if not updated:
                raise NotFoundError(
                    f"{self.model.__name__} not found", details={"id": identifier}
                )
            instance = self._lookup(self.model._default_manager.all(), identifier).first()
            for name, values in many.items():
                getattr(instance, name).set(values)
        return self._output(instance, None)

    def update_document(self, instance: models.Model, data: dict[str, Any]) -> Any:
        """Apply ``data`` to an already fetched instance and save it."""
        concrete, many = self._split_data(data or {})
        for attname, value in concrete.items():
            setattr(instance, attname, value)
        with transaction.atomic():
            self._save(instance, many)
        return self._output(instance, None)

    def delete_many(self, queryset: models.QuerySet, query: QueryOptions) -> int:
        deleted, _ = apply_query(queryset, query, paginate=False).delete()
        return deleted

    def delete_by_id(self, queryset: models.QuerySet, identifier: Any) -> None:
        deleted, _ = self._lookup(queryset, identifier).delete()
        if not deleted:
            raise NotFoundError(
                f"{self.model.__name__} not found", details={"id": identifier}
            )

    def delete_document(self, instance: models.Model) -> None:
        instance.delete()
