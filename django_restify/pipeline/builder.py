"""
Pipeline Builder - Builds request pipelines for every CRUD operation.

Each operation gets an ordered list of stages:

    setup -> [parse body -> write access -> input filtering] -> query
    preparation -> [content type check] -> pre hooks -> read access ->
    [fetch current document] -> storage operation -> post hooks ->
    output filtering -> emission

Bracketed stages only appear for operations that need them.
"""

from typing import List, Optional

from ..options import RestifyOptions
from .base import ConditionalStage, RequestPipeline, Stage
from .steps import (
    ContextFilterStage,
    CreateObjectStage,
    DeleteItemStage,
    DeleteItemsStage,
    DeprecatedPrepareQueryStage,
    EmitStage,
    EnsureContentTypeStage,
    FindDocumentStage,
    GetCountStage,
    GetItemStage,
    GetItemsStage,
    GetShallowStage,
    HookStage,
    ModifyObjectStage,
    ParseBodyStage,
    PrepareInputStage,
    PrepareOutputStage,
    PrepareQueryStage,
    ReadAccessStage,
    SetupContextStage,
    WriteAccessStage,
)

READ_OPERATIONS = ("get_items", "get_count", "get_item", "get_shallow")
WRITE_OPERATIONS = ("create_object", "modify_object")
DELETE_OPERATIONS = ("delete_items", "delete_item")
OPERATIONS = READ_OPERATIONS + WRITE_OPERATIONS + DELETE_OPERATIONS

DEPRECATION_MESSAGES = {
    "post": (
        "django-restify: in a future major version, the POST method to update "
        "resources will be removed. Use PATCH instead."
    ),
    "put": (
        "django-restify: in a future major version, the PUT method will replace "
        "rather than update a resource. Use PATCH instead."
    ),
}

_OPERATION_STAGES = {
    "get_items": GetItemsStage,
    "get_count": GetCountStage,
    "get_item": GetItemStage,
    "get_shallow": GetShallowStage,
    "create_object": CreateObjectStage,
    "modify_object": ModifyObjectStage,
    "delete_items": DeleteItemsStage,
    "delete_item": DeleteItemStage,
}


class PipelineBuilder:
    """
    Builds request pipelines for one resource.

    Example:
        builder = PipelineBuilder(options)
        builder.add_stage(AuditStage())
        pipeline = builder.build("get_items")
        ctx = pipeline.execute(RequestContext(...))
    """

    def __init__(self, options: RestifyOptions):
        self.options = options
        self._custom_stages: List[Stage] = []
        self._skip_stages: List[str] = []

    def add_stage(self, stage: Stage) -> "PipelineBuilder":
        """Add a stage that runs right before emission."""
        self._custom_stages.append(stage)
        return self

    def skip_stage(self, stage_name: str) -> "PipelineBuilder":
        self._skip_stages.append(stage_name)
        return self

    def _filter_stages(self, stages: List[Stage]) -> List[Stage]:
        if not self._skip_stages:
            return stages
        return [s for s in stages if s.name not in self._skip_stages]

    def _pre_hook_option(self, operation: str) -> str:
        if operation in READ_OPERATIONS:
            return "pre_read"
        if operation == "create_object":
            return "pre_create"
        if operation == "modify_object":
            return "pre_update"
        return "pre_delete"

    def _post_hook_option(self, operation: str) -> str:
        return "post" + self._pre_hook_option(operation)[3:]

    def _needs_lookup(self, operation: str) -> bool:
        if operation == "modify_object":
            return not self.options.find_one_and_update
        if operation == "delete_item":
            return not self.options.find_one_and_remove
        return False

    def build(self, operation: str, method: Optional[str] = None) -> RequestPipeline:
        """
        Build the pipeline of ``operation``.

        Args:
            operation: One of ``OPERATIONS``
            method: HTTP method, used to flag deprecated update routes
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")

        is_write = operation in WRITE_OPERATIONS
        stages: List[Stage] = [SetupContextStage()]

        if is_write:
            stages += [ParseBodyStage(), WriteAccessStage(), PrepareInputStage()]

        deprecation = DEPRECATION_MESSAGES.get((method or "").lower())
        if operation == "modify_object" and deprecation:
            stages.append(DeprecatedPrepareQueryStage(deprecation))
        else:
            stages.append(PrepareQueryStage())
        stages.append(ContextFilterStage())

        if is_write:
            stages.append(EnsureContentTypeStage())

        stages.append(HookStage("pre_middleware"))
        if self._needs_lookup(operation):
            stages.append(FindDocumentStage())
        stages.append(HookStage(self._pre_hook_option(operation)))

        if operation not in DELETE_OPERATIONS:
            stages.append(ReadAccessStage())

        stages.append(_OPERATION_STAGES[operation]())
        stages.append(HookStage(self._post_hook_option(operation)))

        if operation not in DELETE_OPERATIONS and operation != "get_count":
            stages.append(
                ConditionalStage(PrepareOutputStage(), lambda ctx: ctx.result is not None)
            )

        stages += [*self._custom_stages, EmitStage()]
        return RequestPipeline(self._filter_stages(stages), error_handler=self.options.on_error)
