"""
Access resolution stages.

Resolve the caller's read and write access levels and store them on the
request context.
"""

from ...access.resolver import resolve_access
from ..base import Stage
from ..context import RequestContext


class ReadAccessStage(Stage):
    """Resolve ``options.access`` into ``ctx.access``."""

    name = "read_access"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.access = resolve_access(ctx.options.access, ctx.request)
        return ctx


class WriteAccessStage(Stage):
    """Resolve ``options.write_access`` into ``ctx.write_access``."""

    name = "write_access"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.write_access = resolve_access(ctx.options.write_access, ctx.request)
        return ctx
