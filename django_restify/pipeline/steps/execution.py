"""
Storage operation stages.

Each stage runs one CRUD operation against the storage collaborator and
stores the unfiltered result on the context.
"""

import logging
from typing import Any

from ...access.applicator import get_model_filter, is_excluded_path
from ...exceptions import ContentTypeError
from ...levels import AccessMode
from ...storage import serialize_result
from ..base import Stage
from ..context import RequestContext

IDENTIFIER_KEYS = ("pk", "id")

logger = logging.getLogger(__name__)


class GetItemsStage(Stage):
    """List documents matching the query."""

    name = "get_items"

    def execute(self, ctx: RequestContext) -> RequestContext:
        if ctx.query.distinct and self._hides_distinct_field(ctx):
            logger.debug(
                "Distinct on %s.%s hidden at %s", ctx.model_name, ctx.query.distinct, ctx.access
            )
            ctx.result = []
            return ctx
        ctx.result = ctx.storage.find(ctx.queryset, ctx.query)
        if ctx.options.total_count_header and not ctx.query.distinct:
            ctx.total_count = ctx.storage.count(ctx.queryset, ctx.query)
        return ctx

    @staticmethod
    def _hides_distinct_field(ctx: RequestContext) -> bool:
        model_filter = ctx.options.read_filter or get_model_filter(
            ctx.registry, ctx.model_name, AccessMode.READ
        )
        path = ctx.query.distinct.replace("__", ".")
        return is_excluded_path(path, ctx.access, model_filter)


class GetCountStage(Stage):
    """Count documents matching the query."""

    name = "get_count"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.result = {"count": ctx.storage.count(ctx.queryset, ctx.query)}
        return ctx


class GetItemStage(Stage):
    """Fetch one document, with populated references."""

    name = "get_item"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.result = ctx.storage.find_by_id(ctx.queryset, ctx.identifier, ctx.query)
        return ctx


def make_shallow(item: Any) -> Any:
    """Replace nested objects and lists with ``True``."""
    if not isinstance(item, dict):
        return item
    return {
        key: True if isinstance(value, (dict, list)) else value
        for key, value in item.items()
    }


class GetShallowStage(Stage):
    """Fetch one document without populating it; nested values become ``True``."""

    name = "get_shallow"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.query.populate = []
        document = ctx.storage.find_document(ctx.queryset, ctx.identifier, ctx.query)
        ctx.result = make_shallow(serialize_result(document, ctx.query))
        return ctx


def _require_document_body(ctx: RequestContext, allow_list: bool = False) -> Any:
    body = ctx.body if ctx.body is not None else {}
    if isinstance(body, dict) or (allow_list and isinstance(body, list)):
        return body
    raise ContentTypeError("invalid_body", details={"type": type(body).__name__})


class CreateObjectStage(Stage):
    """Create one document, or several when the body is a list."""

    name = "create_object"

    def execute(self, ctx: RequestContext) -> RequestContext:
        body = _require_document_body(ctx, allow_list=True)
        ctx.result = ctx.storage.create(body)
        ctx.status_code = 201
        return ctx


class ModifyObjectStage(Stage):
    """Update one document, atomically unless it was fetched beforehand."""

    name = "modify_object"

    def execute(self, ctx: RequestContext) -> RequestContext:
        body = dict(_require_document_body(ctx))
        for key in {*IDENTIFIER_KEYS, ctx.options.id_property}:
            body.pop(key, None)

        if ctx.document is not None:
            ctx.result = ctx.storage.update_document(ctx.document, body)
        else:
            ctx.result = ctx.storage.update(ctx.queryset, ctx.identifier, body)
        return ctx


class DeleteItemsStage(Stage):
    """Delete every document matching the query."""

    name = "delete_items"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.extra["deleted"] = ctx.storage.delete_many(ctx.queryset, ctx.query)
        ctx.result = None
        ctx.status_code = 204
        return ctx


class DeleteItemStage(Stage):
    """Delete one document."""

    name = "delete_item"

    def execute(self, ctx: RequestContext) -> RequestContext:
        if ctx.document is not None:
            ctx.storage.delete_document(ctx.document)
        else:
            ctx.storage.delete_by_id(ctx.queryset, ctx.identifier)
        ctx.result = None
        ctx.status_code = 204
        return ctx
