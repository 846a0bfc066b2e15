"""
Base classes for the request pipeline.

Provides the Stage abstract base class and the RequestPipeline driver.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .context import RequestContext

logger = logging.getLogger(__name__)


class Stage(ABC):
    """
    Base class for pipeline stages.

    Each stage performs one task of request processing such as resolving
    access, filtering the request body, running the storage operation or
    emitting the response.

    Example:
        class StampStage(Stage):
            name = "stamp"

            def execute(self, ctx: RequestContext) -> RequestContext:
                ctx.extra["stamped"] = True
                return ctx
    """

    # Stage identifier for debugging/logging
    name: str = "base"

    @abstractmethod
    def execute(self, ctx: RequestContext) -> RequestContext:
        """
        Execute this stage.

        Raising an exception halts the pipeline and hands the exception to
        the resource's error handler.
        """

    def should_run(self, ctx: RequestContext) -> bool:
        """Skip the stage once the context has been aborted."""
        return not ctx.should_abort

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"


class RequestPipeline:
    """
    Executes an ordered sequence of stages.

    Stages run strictly in the declared order. The first exception stops
    the pipeline: it is stored on the context and passed with the context
    to ``error_handler``, whose return value becomes ``ctx.response``. A
    stage may also stop the pipeline by setting ``ctx.should_abort`` after
    providing ``ctx.response`` itself.

    Example:
        pipeline = RequestPipeline([
            ReadAccessStage(),
            GetItemsStage(),
            PrepareOutputStage(),
            EmitStage(),
        ], error_handler=on_error)
        ctx = pipeline.execute(RequestContext(...))
    """

    def __init__(
        self,
        stages: List[Stage],
        error_handler: Optional[Callable[[BaseException, RequestContext], object]] = None,
    ):
        self.stages = list(stages)
        self.error_handler = error_handler

    def execute(self, ctx: RequestContext) -> RequestContext:
        for stage in self.stages:
            if not stage.should_run(ctx):
                continue
            try:
                ctx = stage.execute(ctx)
            except Exception as exc:
                logger.debug("Stage %s halted %s: %r", stage.name, ctx.operation, exc)
                ctx.abort(exc)
                break
            if ctx.should_abort:
                break

        if ctx.error is not None and self.error_handler is not None:
            ctx.response = self.error_handler(ctx.error, ctx)
        return ctx

    def get_stage_names(self) -> List[str]:
        return [s.name for s in self.stages]

    def __repr__(self) -> str:
        return f"<RequestPipeline stages={self.get_stage_names()}>"


class ConditionalStage(Stage):
    """
    Wraps a stage with a custom condition function.

    Example:
        stage = ConditionalStage(
            FindDocumentStage(),
            condition=lambda ctx: not ctx.options.find_one_and_update,
        )
    """

    def __init__(self, stage: Stage, condition: Callable[[RequestContext], bool]):
        self._stage = stage
        self._condition = condition
        self.name = f"conditional:{stage.name}"

    def should_run(self, ctx: RequestContext) -> bool:
        return super().should_run(ctx) and self._condition(ctx)

    def execute(self, ctx: RequestContext) -> RequestContext:
        return self._stage.execute(ctx)
