"""
django-restify: REST APIs generated from Django models with field-level
access control.

Usage:
    >>> import django_restify
    >>> django_restify.defaults({"prefix": "/rest"})
    >>> people = django_restify.serve(Person, {"access": "protected"})
    >>> people.base_path
    '/rest/v1/Person'
"""

from .access import (
    CallbackAccess,
    Filter,
    FixedAccess,
    SyncAccess,
    filter_input,
    filter_output,
)
from .defaults import set_custom_defaults as defaults
from .exceptions import (
    AccessConfigurationError,
    AccessResolutionError,
    ConfigurationError,
    RestifyError,
)
from .levels import AccessLevel, AccessMode
from .resource import Resource, serve
from .schema import FieldDeclaration, FieldKind, ModelRegistry, ModelSchema, default_registry

__version__ = "0.1.0"

__all__ = [
    "serve",
    "defaults",
    "Resource",
    "AccessLevel",
    "AccessMode",
    "FixedAccess",
    "SyncAccess",
    "CallbackAccess",
    "Filter",
    "filter_input",
    "filter_output",
    "FieldDeclaration",
    "FieldKind",
    "ModelSchema",
    "ModelRegistry",
    "default_registry",
    "RestifyError",
    "ConfigurationError",
    "AccessConfigurationError",
    "AccessResolutionError",
]
