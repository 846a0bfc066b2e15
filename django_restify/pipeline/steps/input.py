"""
Request body stages.

Parses the JSON body, strips the fields the caller may not write and
checks the content type of write requests.
"""

import json

from ...access.applicator import filter_input
from ...exceptions import ContentTypeError, QueryParseError
from ..base import Stage
from ..context import RequestContext

JSON_CONTENT_TYPE = "application/json"


def _content_type(request) -> str:
    return (request.META.get("CONTENT_TYPE") or "").split(";")[0].strip().lower()


class ParseBodyStage(Stage):
    """Decode a JSON request body into ``ctx.body``."""

    name = "parse_body"

    def execute(self, ctx: RequestContext) -> RequestContext:
        request = ctx.request
        if not request.body or _content_type(request) != JSON_CONTENT_TYPE:
            ctx.body = None
            return ctx
        try:
            ctx.body = json.loads(request.body.decode(request.encoding or "utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise QueryParseError("invalid_json_body") from exc
        return ctx


class PrepareInputStage(Stage):
    """Remove the fields ``ctx.write_access`` may not write from the body."""

    name = "prepare_input"

    def execute(self, ctx: RequestContext) -> RequestContext:
        if ctx.body is not None:
            ctx.body = filter_input(
                ctx.body,
                ctx.write_access,
                ctx.model_name,
                ctx.registry,
                model_filter=ctx.options.write_filter,
            )
        return ctx


class EnsureContentTypeStage(Stage):
    """Reject write requests that are not sent as JSON."""

    name = "ensure_content_type"

    def execute(self, ctx: RequestContext) -> RequestContext:
        content_type = _content_type(ctx.request)
        if not content_type:
            raise ContentTypeError("missing_content_type")
        if content_type != JSON_CONTENT_TYPE:
            raise ContentTypeError(
                "invalid_content_type", details={"content_type": content_type}
            )
        return ctx
