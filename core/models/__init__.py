"""Core data models - backend-neutral canonical types.

This package contains the canonical person model that is intentionally
independent of any specific system of record.
"""

from core.models.canonical import (
    CanonicalBase,
    CanonicalPerson,
)

__all__ = [
    "CanonicalBase",
    "CanonicalPerson",
]
