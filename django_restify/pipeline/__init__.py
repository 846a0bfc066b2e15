"""
Request pipeline: ordered stages over a per-request context.
"""

from .base import ConditionalStage, RequestPipeline, Stage
from .builder import OPERATIONS, PipelineBuilder
from .context import RequestContext

__all__ = [
    "Stage",
    "ConditionalStage",
    "RequestPipeline",
    "RequestContext",
    "PipelineBuilder",
    "OPERATIONS",
]
