"""
Resource options.

``serve()`` merges the caller's options over the defaults (see
:mod:`django_restify.defaults`) and normalises them into a
:class:`RestifyOptions` instance, validating everything that can be
validated at setup time.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional

from .access.filter import Filter
from .access.resolver import AccessResolver, coerce_resolver
from .access.traversal import UNRECOGNIZED_ACCESS_POLICY
from .defaults import merge_options
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

HOOK_OPTIONS = (
    "pre_middleware",
    "pre_create",
    "pre_read",
    "pre_update",
    "pre_delete",
    "post_create",
    "post_read",
    "post_update",
    "post_delete",
)

FIELD_LIST_OPTIONS = ("private", "protected", "write_private", "write_protected")


def default_context_filter(queryset: Any, request: Any, done: Callable[[Any], None]) -> None:
    """Hand the queryset back unchanged."""
    done(queryset)


def ensure_list(value: Any) -> list:
    """Coerce a hook option to a list: None -> [], single hook -> [hook]."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def validate_field_list(name: str, value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f'"options.{name}" must be an array of fields')
    return list(value)


@dataclass
class RestifyOptions:
    """
    Normalised options of one REST resource.

    Attributes:
        name: Resource name used in the URL (defaults to the model name)
        prefix: URL prefix, e.g. "/api"
        version: URL version segment, e.g. "/v1"
        id_property: Field used as the resource identifier
        private/protected: Initial read classification lists
        write_private/write_protected: Initial write classification lists
        access/write_access: Access resolvers
        context_filter: Hook scoping every queryset per request
        on_error/output_fn: Error and output emission collaborators
    """

    name: str
    prefix: str = "/api"
    version: str = "/v1"
    id_property: str = "pk"
    find_one_and_update: bool = True
    find_one_and_remove: bool = True
    lean: bool = True
    restify: bool = False
    run_validators: bool = False
    allow_regex: bool = True
    limit: Optional[int] = None
    total_count_header: bool = False
    private: list[str] = field(default_factory=list)
    protected: list[str] = field(default_factory=list)
    write_private: list[str] = field(default_factory=list)
    write_protected: list[str] = field(default_factory=list)
    access: Optional[AccessResolver] = None
    write_access: Optional[AccessResolver] = None
    context_filter: Callable = default_context_filter
    model_factory: Any = None
    on_error: Optional[Callable] = None
    output_fn: Optional[Callable] = None
    unrecognized_access: str = UNRECOGNIZED_ACCESS_POLICY
    pre_middleware: list[Callable] = field(default_factory=list)
    pre_create: list[Callable] = field(default_factory=list)
    pre_read: list[Callable] = field(default_factory=list)
    pre_update: list[Callable] = field(default_factory=list)
    pre_delete: list[Callable] = field(default_factory=list)
    post_create: list[Callable] = field(default_factory=list)
    post_read: list[Callable] = field(default_factory=list)
    post_update: list[Callable] = field(default_factory=list)
    post_delete: list[Callable] = field(default_factory=list)
    read_filter: Optional[Filter] = None
    write_filter: Optional[Filter] = None

    def hooks(self, name: str) -> list[Callable]:
        return getattr(self, name)


_KNOWN_OPTIONS = {f.name for f in fields(RestifyOptions)}


def build_options(model_name: str, options: Optional[dict[str, Any]] = None) -> RestifyOptions:
    """
    Merge ``options`` with the defaults and normalise them.

    Raises:
        ConfigurationError: on invalid field lists, resolvers or limits.
    """
    from .http.handlers import default_error_handler, default_output_fn

    merged = merge_options(options)

    unknown = sorted(set(merged) - _KNOWN_OPTIONS)
    if unknown:
        logger.warning("Ignoring unknown restify options for %s: %s", model_name, ", ".join(unknown))
        for key in unknown:
            merged.pop(key)

    for key in FIELD_LIST_OPTIONS:
        merged[key] = validate_field_list(key, merged.get(key, []))

    for key in HOOK_OPTIONS:
        merged[key] = ensure_list(merged.get(key))
        for hook in merged[key]:
            if not callable(hook):
                raise ConfigurationError(f'"options.{key}" must contain callables')

    merged["access"] = coerce_resolver(merged.get("access"), "access")
    merged["write_access"] = coerce_resolver(merged.get("write_access"), "write_access")

    if not merged.get("context_filter"):
        merged["context_filter"] = default_context_filter

    limit = merged.get("limit")
    if limit is not None and (not isinstance(limit, int) or limit <= 0):
        raise ConfigurationError('"options.limit" must be a positive integer')

    restify_mode = bool(merged.get("restify"))
    if not merged.get("on_error"):
        merged["on_error"] = default_error_handler(restify_mode)
    if not merged.get("output_fn"):
        merged["output_fn"] = default_output_fn()

    merged["name"] = merged.get("name") or model_name
    return RestifyOptions(**merged)
