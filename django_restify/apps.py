"""
Django app configuration for django-restify.
"""

import logging

from django.apps import AppConfig as BaseAppConfig
from django.core.exceptions import ImproperlyConfigured

from .config_proxy import SETTINGS_NAME

logger = logging.getLogger(__name__)


class DjangoRestifyConfig(BaseAppConfig):
    """Django app configuration for django-restify."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_restify"
    verbose_name = "Django Restify"
    label = "django_restify"

    def ready(self):
        """Validate the library settings once Django has loaded."""
        from django.conf import settings

        value = getattr(settings, SETTINGS_NAME, None)
        if value is not None and not isinstance(value, dict):
            raise ImproperlyConfigured(f"{SETTINGS_NAME} must be a dictionary")
        logger.debug("django-restify ready (settings: %s)", sorted(value or {}))
