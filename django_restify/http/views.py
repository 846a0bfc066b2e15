"""
Resource view.

One view class serves every route of a resource; the route kind and the
HTTP method select the pipeline to run.
"""

import logging
from typing import TYPE_CHECKING, Optional

from django.http import HttpRequest, HttpResponseBase
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from ..exceptions import ConfigurationError
from ..pipeline.context import RequestContext

if TYPE_CHECKING:
    from ..resource import Resource

logger = logging.getLogger(__name__)

ROUTE_OPERATIONS: dict[str, dict[str, str]] = {
    "items": {"get": "get_items", "post": "create_object", "delete": "delete_items"},
    "count": {"get": "get_count"},
    "item": {
        "get": "get_item",
        "post": "modify_object",
        "put": "modify_object",
        "patch": "modify_object",
        "delete": "delete_item",
    },
    "shallow": {"get": "get_shallow"},
}


@method_decorator(csrf_exempt, name="dispatch")
class ResourceView(View):
    """Dispatch a request to the pipeline of its operation."""

    resource: Optional["Resource"] = None
    route: str = "items"

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponseBase:
        method = request.method.lower()
        operation = ROUTE_OPERATIONS[self.route].get(method)
        if operation is None:
            return self.http_method_not_allowed(request, *args, **kwargs)

        resource = self.resource
        ctx = RequestContext(
            request=request,
            model=resource.model,
            model_name=resource.model_name,
            registry=resource.registry,
            options=resource.options,
            operation=operation,
            identifier=kwargs.get("id"),
        )
        ctx = resource.get_pipeline(operation, method).execute(ctx)

        if ctx.response is None:
            error = ConfigurationError(f"Pipeline for {operation} produced no response")
            return resource.options.on_error(error, ctx)
        return ctx.response

    def _allowed_methods(self):
        return [m.upper() for m in ROUTE_OPERATIONS[self.route]]
