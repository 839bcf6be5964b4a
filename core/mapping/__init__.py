"""Core mapping engine - raw attribute to canonical person mapping.

Backend-specific translations (canonical <-> native record) are provided by
connectors.
"""

from core.mapping.engine import (
    ATTRIBUTE_RULES,
    AttributeMappingEngine,
    AttributeRule,
    to_canonical,
)

__all__ = [
    "ATTRIBUTE_RULES",
    "AttributeMappingEngine",
    "AttributeRule",
    "to_canonical",
]
