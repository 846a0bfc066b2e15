"""
Query preparation stages.
"""

import logging
import warnings

from ...exceptions import ConfigurationError
from ...query import prepare_query
from ..base import Stage
from ..context import RequestContext

logger = logging.getLogger(__name__)


class PrepareQueryStage(Stage):
    """Parse the query string into ``ctx.query``."""

    name = "prepare_query"

    def execute(self, ctx: RequestContext) -> RequestContext:
        ctx.query = prepare_query(
            ctx.request.GET,
            allow_regex=ctx.options.allow_regex,
            max_limit=ctx.options.limit,
        )
        return ctx


class DeprecatedPrepareQueryStage(PrepareQueryStage):
    """PrepareQueryStage that warns once that its route is deprecated."""

    def __init__(self, message: str):
        self.message = message
        self._warned = False

    def execute(self, ctx: RequestContext) -> RequestContext:
        if not self._warned:
            self._warned = True
            logger.warning(self.message)
            warnings.warn(self.message, DeprecationWarning, stacklevel=2)
        return super().execute(ctx)


class ContextFilterStage(Stage):
    """
    Scope the base queryset with ``options.context_filter``.

    The hook receives ``(queryset, request, done)`` and must call
    ``done(queryset)`` before returning.
    """

    name = "context_filter"

    def execute(self, ctx: RequestContext) -> RequestContext:
        scoped = {}

        def done(queryset) -> None:
            scoped["queryset"] = queryset

        ctx.options.context_filter(ctx.model._default_manager.all(), ctx.request, done)
        if "queryset" not in scoped:
            raise ConfigurationError("context_filter returned without calling done()")
        ctx.queryset = scoped["queryset"]
        return ctx
