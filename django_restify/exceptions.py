"""
Custom exceptions for django-restify.

Every error raised by the library derives from :class:`RestifyError`, which
carries the HTTP status the default error handler should answer with.
"""

from typing import Any, Optional


class RestifyError(Exception):
    """Base exception for django-restify errors."""

    status_code: int = 400
    code: str = "restify_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(RestifyError):
    """Raised when resource options are invalid. Fatal at setup time."""

    status_code = 500
    code = "configuration_error"


class AccessConfigurationError(ConfigurationError):
    """Raised when an access resolver yields something other than a level."""

    code = "unsupported_access"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            'Unsupported access, must be "private", "protected" or "public"',
            details={"value": repr(value)},
        )


class AccessResolutionError(RestifyError):
    """Raised when an asynchronous access resolver reports a failure."""

    status_code = 500
    code = "access_resolution_failed"


class RegistryFrozenError(ConfigurationError):
    """Raised when registering a model after the registry was frozen."""

    code = "registry_frozen"


class UnknownModelError(ConfigurationError):
    """Raised when a reference points at a model that was never registered."""

    code = "unknown_model"

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"Model '{model_name}' is not registered")


class QueryParseError(RestifyError):
    """Raised when the query string cannot be parsed."""

    code = "invalid_query"


class RegexNotAllowedError(QueryParseError):
    """Raised when a regex filter is sent while regex filters are disabled."""

    code = "regex_filter_not_allowed"

    def __init__(self, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(
            "Regex filters are not allowed", details={"field": field_name}
        )


class ContentTypeError(RestifyError):
    """Raised when a write request carries no JSON body."""

    code = "invalid_content_type"


class NotFoundError(RestifyError):
    """Raised when the requested document does not exist."""

    status_code = 404
    code = "not_found"
