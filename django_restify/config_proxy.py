"""
Access to the ``DJANGO_RESTIFY`` Django setting.

The setting is a plain dictionary of resource option defaults, e.g.::

    DJANGO_RESTIFY = {
        "prefix": "/rest",
        "version": "/v2",
        "allow_regex": False,
    }
"""

from typing import Any

from django.conf import settings

SETTINGS_NAME = "DJANGO_RESTIFY"


def get_settings_dict() -> dict[str, Any]:
    """Return a copy of the ``DJANGO_RESTIFY`` setting (empty if unset)."""
    value = getattr(settings, SETTINGS_NAME, None)
    if not isinstance(value, dict):
        return {}
    return dict(value)

