"""
Output stages.

Filter the storage result for the caller's access level and hand it to
the output emission collaborator.
"""

from ...access.applicator import filter_output
from ...storage import serialize_result
from ..base import Stage
from ..context import RequestContext


class PrepareOutputStage(Stage):
    """Serialise ``ctx.result`` and remove the fields ``ctx.access`` may not read."""

    name = "prepare_output"

    def execute(self, ctx: RequestContext) -> RequestContext:
        # Distinct values were checked against the caller's level by GetItemsStage.
        if ctx.result is None or (ctx.query is not None and ctx.query.distinct):
            return ctx
        payload = serialize_result(ctx.result, ctx.query)
        ctx.result = filter_output(
            payload,
            ctx.access,
            ctx.model_name,
            ctx.registry,
            ctx.populate,
            model_filter=ctx.options.read_filter,
        )
        return ctx


class EmitStage(Stage):
    """Produce the response with ``options.output_fn``."""

    name = "emit"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.response = ctx.options.output_fn(ctx.result, ctx.status_code, ctx)
        return ctx
