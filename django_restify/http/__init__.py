"""
HTTP collaborators: route paths, the resource view and default handlers.
"""

from .handlers import default_error_handler, default_output_fn, get_status_code
from .routing import ResourcePaths, build_resource_paths, to_django_route
from .views import ResourceView

__all__ = [
    "ResourcePaths",
    "ResourceView",
    "build_resource_paths",
    "default_error_handler",
    "default_output_fn",
    "get_status_code",
    "to_django_route",
]
