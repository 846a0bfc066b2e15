"""
REST resource registration.

``serve()`` registers a Django model, classifies its fields, compiles its
read and write filters and returns a :class:`Resource` whose ``urls`` can
be included in a URLconf::

    from django_restify import serve

    people = serve(Person, {"access": SyncAccess(level_for_user)})
    urlpatterns = [*people.urls]
"""

import logging
from typing import Any, Optional

from django.db import models
from django.urls import URLPattern, path

from .access.classification import FieldClassification
from .access.filter import build_filter
from .access.traversal import classify_model
from .http.routing import ResourcePaths, build_resource_paths, to_django_route
from .http.views import ResourceView
from .levels import AccessMode
from .options import RestifyOptions, build_options
from .pipeline.base import RequestPipeline
from .pipeline.builder import OPERATIONS, PipelineBuilder
from .schema.registry import ModelRegistry, default_registry

logger = logging.getLogger(__name__)

UPDATE_METHODS = ("post", "put", "patch")


class Resource:
    """
    A model exposed as a REST resource.

    Attributes:
        model: The Django model class
        model_name: Registry name of the model
        options: Normalised resource options
        registry: Registry holding the model's schema and filters
        paths: Resource paths (item, items, count, shallow)
    """

    def __init__(
        self,
        model: type[models.Model],
        model_name: str,
        options: RestifyOptions,
        registry: ModelRegistry,
    ):
        self.model = model
        self.model_name = model_name
        self.options = options
        self.registry = registry
        self.paths: ResourcePaths = build_resource_paths(
            options.prefix, options.version, options.name
        )
        self.builder = PipelineBuilder(options)
        self._pipelines: dict[tuple[str, Optional[str]], RequestPipeline] = {}
        for operation in OPERATIONS:
            if operation == "modify_object":
                for method in UPDATE_METHODS:
                    self._pipelines[(operation, method)] = self.builder.build(operation, method)
            else:
                self._pipelines[(operation, None)] = self.builder.build(operation)

    @property
    def base_path(self) -> str:
        return self.paths.items

    def get_pipeline(self, operation: str, method: Optional[str] = None) -> RequestPipeline:
        key = (operation, method.lower() if operation == "modify_object" and method else None)
        return self._pipelines[key]

    def _view(self, route: str):
        return ResourceView.as_view(resource=self, route=route)

    @property
    def urls(self) -> list[URLPattern]:
        """URL patterns of the resource; count and shallow precede the item route."""
        name = self.options.name
        return [
            path(to_django_route(self.paths.count), self._view("count"), name=f"{name}-count"),
            path(to_django_route(self.paths.shallow), self._view("shallow"), name=f"{name}-shallow"),
            path(to_django_route(self.paths.item), self._view("item"), name=f"{name}-item"),
            path(to_django_route(self.paths.items), self._view("items"), name=f"{name}-items"),
        ]

    def __repr__(self) -> str:
        return f"<Resource model={self.model_name} path={self.base_path}>"


def serve(
    model: type[models.Model],
    options: Optional[dict[str, Any]] = None,
    registry: Optional[ModelRegistry] = None,
) -> Resource:
    """
    Expose ``model`` as a REST resource.

    Args:
        model: Django model class
        options: Resource options (snake_case or camelCase names)
        registry: Registry to use, ``default_registry`` when omitted

    Raises:
        ConfigurationError: when options are invalid
    """
    registry = registry if registry is not None else default_registry
    schema = registry.register_model(model)
    resource_options = build_options(schema.name, options)

    classification = FieldClassification.from_lists(
        resource_options.private,
        resource_options.protected,
        resource_options.write_private,
        resource_options.write_protected,
    )
    classify_model(registry, schema.name, classification, resource_options.unrecognized_access)

    resource_options.private = list(classification.private)
    resource_options.protected = list(classification.protected)
    resource_options.write_private = list(classification.write_private)
    resource_options.write_protected = list(classification.write_protected)
    resource_options.read_filter = build_filter(
        schema.name, registry, classification, AccessMode.READ
    )
    resource_options.write_filter = build_filter(
        schema.name, registry, classification, AccessMode.WRITE
    )

    resource = Resource(model, schema.name, resource_options, registry)
    logger.info("Registered REST resource %s at %s", schema.name, resource.base_path)
    return resource
