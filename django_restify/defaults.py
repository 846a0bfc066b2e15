"""
Default configuration for the django-restify library.

Resource options are resolved from, lowest to highest priority:
    1. ``LIBRARY_DEFAULTS``
    2. the ``DJANGO_RESTIFY`` Django setting
    3. custom defaults installed with :func:`set_custom_defaults`
    4. the options passed to ``serve()``

Custom defaults are meant to be installed once during start-up, before any
request is served.
"""

from __future__ import annotations

from typing import Any, Optional

from .config_proxy import get_settings_dict

LIBRARY_DEFAULTS: dict[str, Any] = {
    "prefix": "/api",
    "version": "/v1",
    "id_property": "pk",
    "find_one_and_update": True,
    "find_one_and_remove": True,
    "lean": True,
    "restify": False,
    "run_validators": False,
    "allow_regex": True,
    "limit": None,
    "total_count_header": False,
    "private": [],
    "protected": [],
    "write_private": [],
    "write_protected": [],
}

# camelCase option names, accepted for every option.
CAMEL_CASE_ALIASES: dict[str, str] = {
    "idProperty": "id_property",
    "findOneAndUpdate": "find_one_and_update",
    "findOneAndRemove": "find_one_and_remove",
    "runValidators": "run_validators",
    "allowRegex": "allow_regex",
    "totalCountHeader": "total_count_header",
    "writePrivate": "write_private",
    "writeProtected": "write_protected",
    "writeAccess": "write_access",
    "contextFilter": "context_filter",
    "modelFactory": "model_factory",
    "onError": "on_error",
    "outputFn": "output_fn",
    "preMiddleware": "pre_middleware",
    "preCreate": "pre_create",
    "preRead": "pre_read",
    "preUpdate": "pre_update",
    "preDelete": "pre_delete",
    "postCreate": "post_create",
    "postRead": "post_read",
    "postUpdate": "post_update",
    "postDelete": "post_delete",
}

_custom_defaults: Optional[dict[str, Any]] = None


def normalize_option_names(options: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Return a copy of ``options`` with camelCase keys mapped to snake_case."""
    normalized: dict[str, Any] = {}
    for key, value in (options or {}).items():
        normalized[CAMEL_CASE_ALIASES.get(key, key)] = value
    return normalized


def set_custom_defaults(options: Optional[dict[str, Any]]) -> None:
    """Install process-wide custom defaults. ``None`` clears them."""
    global _custom_defaults
    _custom_defaults = normalize_option_names(options) if options else None


def get_custom_defaults() -> dict[str, Any]:
    return dict(_custom_defaults or {})


def get_defaults() -> dict[str, Any]:
    """Return library defaults merged with settings and custom defaults."""
    merged = dict(LIBRARY_DEFAULTS)
    merged.update(normalize_option_names(get_settings_dict()))
    merged.update(get_custom_defaults())
    return merged


def merge_options(options: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Merge per-resource ``options`` on top of :func:`get_defaults`."""
    merged = get_defaults()
    merged.update(normalize_option_names(options))
    return merged
