"""
Request context setup stage.
"""

from ...storage import DjangoStorage
from ..base import Stage
from ..context import RequestContext


class SetupContextStage(Stage):
    """
    Resolve the target model and its storage for this request.

    ``options.model_factory.get_model(request)`` may substitute the model
    per request (e.g. a tenant-specific proxy model).
    """

    name = "setup_context"

    def execute(self, ctx: RequestContext) -> RequestContext:
        factory = ctx.options.model_factory
        get_model = getattr(factory, "get_model", None)
        if callable(get_model):
            ctx.model = get_model(ctx.request)
        ctx.storage = DjangoStorage(
            ctx.model,
            id_property=ctx.options.id_property,
            lean=ctx.options.lean,
            run_validators=ctx.options.run_validators,
        )
        return ctx
