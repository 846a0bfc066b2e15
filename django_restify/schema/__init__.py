"""
Model schemas and the model registry.
"""

from .introspection import get_model_name, schema_from_model
from .registry import ModelRegistry, default_registry
from .types import FieldDeclaration, FieldKind, ModelSchema

__all__ = [
    "FieldDeclaration",
    "FieldKind",
    "ModelSchema",
    "ModelRegistry",
    "default_registry",
    "get_model_name",
    "schema_from_model",
]
