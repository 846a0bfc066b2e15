"""
Per-request access level resolution.

The ``access`` and ``write_access`` options are resolvers, chosen
explicitly at configuration time:

    FixedAccess("protected")
    SyncAccess(lambda request: "private" if request.user.is_staff else "public")
    CallbackAccess(lookup_level)   # lookup_level(request, done); done(error, level)

A plain level string is coerced to ``FixedAccess`` and a plain callable to
``SyncAccess``. Callback resolvers must call ``done`` before returning.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from ..exceptions import (
    AccessConfigurationError,
    AccessResolutionError,
    ConfigurationError,
    RestifyError,
)
from ..levels import AccessLevel, parse_access_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedAccess:
    """Resolves every request to the same level."""

    level: AccessLevel

    def __post_init__(self) -> None:
        level = parse_access_level(self.level)
        if level is None:
            raise AccessConfigurationError(self.level)
        object.__setattr__(self, "level", level)


@dataclass(frozen=True)
class SyncAccess:
    """Calls ``fn(request)`` and uses its return value."""

    fn: Callable[[Any], Any]


@dataclass(frozen=True)
class CallbackAccess:
    """Calls ``fn(request, done)``; the level is reported via ``done(error, level)``."""

    fn: Callable[[Any, Callable[..., None]], None]


AccessResolver = Union[FixedAccess, SyncAccess, CallbackAccess]

_RESOLVER_TYPES = (FixedAccess, SyncAccess, CallbackAccess)


def coerce_resolver(value: Any, option_name: str = "access") -> Optional[AccessResolver]:
    """
    Turn an ``access``/``write_access`` option value into a resolver.

    Raises:
        ConfigurationError: if the value cannot be used as a resolver.
    """
    if value is None:
        return None
    if isinstance(value, _RESOLVER_TYPES):
        return value
    if isinstance(value, (str, AccessLevel)):
        return FixedAccess(value)
    if callable(value):
        return SyncAccess(value)
    raise ConfigurationError(
        f'"{option_name}" must be an access level, a callable or an access resolver',
        details={"option": option_name, "value": repr(value)},
    )


def validate_level(value: Any) -> AccessLevel:
    level = parse_access_level(value)
    if level is None:
        raise AccessConfigurationError(value)
    return level


def _resolve_callback(resolver: CallbackAccess, request: Any) -> AccessLevel:
    outcome: dict[str, Any] = {}

    def done(error: Any = None, level: Any = None) -> None:
        if "called" in outcome:
            logger.warning("Access resolver callback called more than once")
            return
        outcome.update(called=True, error=error, level=level)

    resolver.fn(request, done)

    if "called" not in outcome:
        raise AccessResolutionError("Access resolver returned without calling its callback")

    error = outcome["error"]
    if error:
        if isinstance(error, RestifyError):
            raise error
        if isinstance(error, Exception):
            raise AccessResolutionError(str(error) or "Access resolution failed") from error
        raise AccessResolutionError(str(error))
    return validate_level(outcome["level"])


def resolve_access(resolver: Optional[AccessResolver], request: Any) -> AccessLevel:
    """
    Resolve the caller's access level.

    Returns PUBLIC when no resolver is configured.

    Raises:
        AccessConfigurationError: the resolver produced an unknown level
        AccessResolutionError: a callback resolver reported an error
    """
    if resolver is None:
        return AccessLevel.PUBLIC
    if isinstance(resolver, FixedAccess):
        return resolver.level
    if isinstance(resolver, SyncAccess):
        return validate_level(resolver.fn(request))
    if isinstance(resolver, CallbackAccess):
        return _resolve_callback(resolver, request)
    raise ConfigurationError(f"Unsupported access resolver: {resolver!r}")
