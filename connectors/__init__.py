"""Person Connectors - Pluggable system-of-record integrations.

This package contains the abstract connector interface, the registry that
resolves system identifiers, and concrete implementations for specific
backends (iTop, ...).

Canonical person models are backend-neutral. This package handles:
- Backend-specific authentication
- Data transformation (canonical <-> native record)
- API communication

Key Design Principle:
- The CLI depends ONLY on the PersonConnector interface and ConnectorFactory
- All methods accept and return CanonicalPerson
- No iTop-specific types should leak through the interface

To add a new backend:
1. Create a new folder (e.g., ldap/)
2. Implement PersonConnector
3. Register using the @register_connector decorator
4. Import the package below so the registration runs at startup
"""

from connectors.base import (
    ConnectorFactory,
    CreatedPersonRef,
    LookupStatus,
    PersonConnector,
    PersonLookupResult,
    register_connector,
)

# Built-in connectors register themselves on import
from connectors import itop  # noqa: F401

__all__ = [
    "ConnectorFactory",
    "CreatedPersonRef",
    "LookupStatus",
    "PersonConnector",
    "PersonLookupResult",
    "register_connector",
]
