"""
RequestContext - Carries state through the request pipeline.

The context is created when a request reaches a resource view and is passed
through each pipeline stage. It belongs to that request only and is
discarded once the response is produced.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from ..levels import AccessLevel

if TYPE_CHECKING:
    from django.db import models
    from django.http import HttpRequest

    from ..options import RestifyOptions
    from ..query import QueryOptions
    from ..schema.registry import ModelRegistry
    from ..storage import DjangoStorage


@dataclass
class RequestContext:
    """
    Carries state through the request pipeline.

    Attributes:
        request: The Django request
        model: The Django model class targeted by this request
        model_name: Registry name used to look up filters
        registry: Model registry holding schemas and compiled filters
        options: Normalised resource options
        operation: Operation name ("get_items", "create_object", ...)
        identifier: Value of the id path parameter, if any
        access: Resolved read access level
        write_access: Resolved write access level
        body: Parsed (and filtered) request body
        query: Parsed query string
        queryset: Base queryset after context filtering
        document: Instance fetched before update/delete
        result: Storage result, later the filtered output payload
        status_code: HTTP status of the response
        total_count: Total number of matching documents (list operations)
        error: Exception that halted the pipeline
        should_abort: Flag indicating the pipeline should stop
        response: Response produced by the emission stage or error handler
        extra: Dictionary for storing additional stage-specific data
    """

    request: "HttpRequest"
    model: type["models.Model"]
    model_name: str
    registry: "ModelRegistry"
    options: "RestifyOptions"
    operation: str
    identifier: Optional[str] = None

    access: AccessLevel = AccessLevel.PUBLIC
    write_access: AccessLevel = AccessLevel.PUBLIC

    body: Any = None
    query: Optional["QueryOptions"] = None
    queryset: Any = None
    storage: Optional["DjangoStorage"] = None

    document: Optional["models.Model"] = None
    result: Any = None
    status_code: int = 200
    total_count: Optional[int] = None

    error: Optional[BaseException] = None
    should_abort: bool = False
    response: Any = None

    extra: dict[str, Any] = field(default_factory=dict)

    def abort(self, error: BaseException) -> None:
        """Record the error and stop the pipeline."""
        self.error = error
        self.should_abort = True

    @property
    def user(self) -> Any:
        """Convenience accessor for request user."""
        return getattr(self.request, "user", None)

    @property
    def populate(self) -> list[str]:
        return list(self.query.populate) if self.query is not None else []
