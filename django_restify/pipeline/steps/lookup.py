"""
Document lookup stage.

Fetches the current document before update/delete when the storage
operation should not find-and-modify atomically.
"""

from ..base import Stage
from ..context import RequestContext


class FindDocumentStage(Stage):
    """Load the targeted instance into ``ctx.document``."""

    name = "find_document"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.document = ctx.storage.find_document(ctx.queryset, ctx.identifier, ctx.query)
        return ctx
