"""
Pipeline stages.
"""

from .access import ReadAccessStage, WriteAccessStage
from .execution import (
    CreateObjectStage,
    DeleteItemStage,
    DeleteItemsStage,
    GetCountStage,
    GetItemStage,
    GetItemsStage,
    GetShallowStage,
    ModifyObjectStage,
)
from .hooks import HookStage
from .input import EnsureContentTypeStage, ParseBodyStage, PrepareInputStage
from .lookup import FindDocumentStage
from .output import EmitStage, PrepareOutputStage
from .query import ContextFilterStage, DeprecatedPrepareQueryStage, PrepareQueryStage
from .setup import SetupContextStage

__all__ = [
    "SetupContextStage",
    "ReadAccessStage",
    "WriteAccessStage",
    "ParseBodyStage",
    "PrepareInputStage",
    "EnsureContentTypeStage",
    "PrepareQueryStage",
    "DeprecatedPrepareQueryStage",
    "ContextFilterStage",
    "HookStage",
    "FindDocumentStage",
    "GetItemsStage",
    "GetCountStage",
    "GetItemStage",
    "GetShallowStage",
    "CreateObjectStage",
    "ModifyObjectStage",
    "DeleteItemsStage",
    "DeleteItemStage",
    "PrepareOutputStage",
    "EmitStage",
]
