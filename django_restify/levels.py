"""
Access levels and traversal modes.
"""

from enum import Enum
from typing import Any, Optional


class AccessLevel(Enum):
    """
    Visibility tier resolved per request:
    - PUBLIC: sees unclassified fields only
    - PROTECTED: also sees fields classified protected
    - PRIVATE: sees everything
    """

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"

    def __str__(self) -> str:
        return self.value


class AccessMode(Enum):
    """Direction of a classification: READ for responses, WRITE for requests."""

    READ = "read"
    WRITE = "write"


# Field annotations that classify a field. Everything else is public.
CLASSIFYING_ANNOTATIONS = ("private", "protected")


def parse_access_level(value: Any) -> Optional[AccessLevel]:
    """
    Convert a value to AccessLevel.

    Returns None when the value is not one of the three levels. Matching is
    exact: resolvers must return "public", "protected" or "private".
    """
    if isinstance(value, AccessLevel):
        return value
    if isinstance(value, str):
        try:
            return AccessLevel(value)
        except ValueError:
            return None
    return None


def parse_mode(value: Any) -> AccessMode:
    if isinstance(value, AccessMode):
        return value
    return AccessMode(str(value).lower())
