"""
User hook stages.

Hooks are callables taking the request context. A hook stops the pipeline
by raising (the error handler answers) or by returning an ``HttpResponse``,
which is sent as is.
"""

from django.http import HttpResponseBase

from ..base import Stage
from ..context import RequestContext


class HookStage(Stage):
    """Run the hooks configured under ``options.<option_name>`` in order."""

    def __init__(self, option_name: str):
        self.option_name = option_name
        self.name = f"hooks:{option_name}"

    def execute(self, ctx: RequestContext) -> RequestContext:
        for hook in ctx.options.hooks(self.option_name):
            response = hook(ctx)
            if isinstance(response, HttpResponseBase):
                ctx.response = response
                ctx.should_abort = True
                break
        return ctx
