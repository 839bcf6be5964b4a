"""Abstract Person Connector Interface.

This module defines the interface that every system-of-record connector must
implement. It is intentionally backend-agnostic - no iTop specifics here.

Connectors implement this interface to:
1. Authenticate with their backend
2. Transform canonical persons to the backend's native record and back
3. Create, read, update, delete and search person records

Key Design Principles:
- All methods accept and return CanonicalPerson - not backend-specific records
  (create additionally echoes the native record that was stored)
- The CLI depends ONLY on this interface and the ConnectorFactory
- Backend-specific implementations live in connector subfolders
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Type, TypeVar

from core.config import ConnectorConfig, load_config
from core.errors import BridgeError, ConnectorError, InvalidIdError
from core.models.canonical import CanonicalPerson


# =============================================================================
# Result Types
# =============================================================================

class LookupStatus(str, Enum):
    """Outcome of a single-person lookup."""
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


@dataclass
class PersonLookupResult:
    """Result of looking a person up by identifier.

    Exactly one of ``person`` (FOUND) or ``error`` (ERROR) is set; NOT_FOUND
    carries neither.
    """
    status: LookupStatus
    person: Optional[CanonicalPerson] = None
    error: Optional[BridgeError] = None

    @classmethod
    def found(cls, person: CanonicalPerson) -> "PersonLookupResult":
        return cls(status=LookupStatus.FOUND, person=person)

    @classmethod
    def not_found(cls) -> "PersonLookupResult":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: BridgeError) -> "PersonLookupResult":
        return cls(status=LookupStatus.ERROR, error=error)

    @property
    def is_found(self) -> bool:
        return self.status == LookupStatus.FOUND


@dataclass
class CreatedPersonRef:
    """Reference to a person created in the backend.

    Returned by create_person(). ``data`` is the backend's native record as
    it was stored.
    """
    id: str
    data: Any


# =============================================================================
# Abstract Connector Interface
# =============================================================================

class PersonConnector(ABC):
    """Abstract base class for person connectors.

    All system-specific connectors must implement this interface.
    This keeps the CLI and the canonical model backend-agnostic.

    Implementations:
    - connectors/itop/itop_connector.py
    """

    system_name: str = ""

    def __init__(self, config: ConnectorConfig, debug: bool = False):
        """Initialize connector with configuration."""
        self.config = config
        self.debug = debug

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if the backend is reachable and accepts our credentials.

        Never raises; any failure is reported as False.
        """

    @abstractmethod
    async def create_person(self, person: CanonicalPerson) -> CreatedPersonRef:
        """Create a person.

        Raises:
            ValidationError: No usable name
            ApiError: Backend rejected the record or returned no object
        """

    @abstractmethod
    async def lookup_person(self, person_id: str) -> PersonLookupResult:
        """Look a person up by identifier.

        Backend failures are returned as an ERROR result, not raised.

        Raises:
            InvalidIdError: person_id is not a valid identifier
        """

    async def get_person(self, person_id: str) -> Optional[CanonicalPerson]:
        """Get a specific person by identifier.

        Returns:
            CanonicalPerson if found, None if the backend reports it missing

        Raises:
            InvalidIdError: person_id is not a valid identifier
            ApiError: Any other backend failure
        """
        result = await self.lookup_person(person_id)
        if result.is_found:
            return result.person
        if result.status == LookupStatus.ERROR:
            raise result.error
        return None

    @abstractmethod
    async def search_persons(
        self,
        query: Optional[str] = None,
        limit: int = 100,
    ) -> List[CanonicalPerson]:
        """Search persons by substring over name, first name and email.

        An empty query lists up to ``limit`` records. Never returns None.
        """

    @abstractmethod
    async def update_person(self, person_id: str, person: CanonicalPerson) -> CanonicalPerson:
        """Apply the populated fields of ``person`` to an existing record.

        Raises:
            InvalidIdError: person_id is not a valid identifier
            ApiError: Backend rejected the update or returned no object
        """

    @abstractmethod
    async def delete_person(self, person_id: str) -> None:
        """Delete a person.

        Raises:
            InvalidIdError: person_id is not a valid identifier
            ApiError: Backend rejected the deletion
        """

    # -------------------------------------------------------------------------
    # Utilities
    # -------------------------------------------------------------------------

    def get_connector_name(self) -> str:
        """Get the name of this connector."""
        return self.system_name

    @staticmethod
    def parse_numeric_id(person_id: str) -> int:
        """Parse a positive integer identifier.

        Raises:
            InvalidIdError: If person_id is not a plain positive integer
        """
        value = (person_id or "").strip()
        if not (value.isascii() and value.isdigit()) or int(value) <= 0:
            raise InvalidIdError(person_id)
        return int(value)


# =============================================================================
# Connector Registry
# =============================================================================

ConnectorType = TypeVar("ConnectorType", bound=Type[PersonConnector])

_connector_registry: Dict[str, Callable[..., PersonConnector]] = {}


def register_connector(system: str) -> Callable[[ConnectorType], ConnectorType]:
    """Decorator to register a connector implementation."""
    def decorator(cls: ConnectorType) -> ConnectorType:
        key = system.lower()
        _connector_registry[key] = cls
        cls.system_name = key
        return cls
    return decorator


def _resolves(factory: Any) -> bool:
    return (
        inspect.isclass(factory)
        and issubclass(factory, PersonConnector)
        and not inspect.isabstract(factory)
    )


class ConnectorFactory:
    """Resolves system identifiers to connector instances."""

    @staticmethod
    def create(
        system: str,
        debug: bool = False,
        config: Optional[ConnectorConfig] = None,
    ) -> PersonConnector:
        """Create a connector instance for the specified system.

        Args:
            system: System identifier (e.g. "itop")
            debug: Enable request/response debug logging
            config: Connector configuration (loaded with load_config() if omitted)

        Returns:
            Configured connector instance

        Raises:
            ConnectorError: Unknown system, or construction failed
        """
        key = (system or "").strip().lower()
        factory = _connector_registry.get(key)

        if factory is None or not _resolves(factory):
            available = sorted(ConnectorFactory.list_available())
            raise ConnectorError(
                system,
                f"no connector registered (available: {', '.join(available) or 'none'})",
            )

        try:
            if config is None:
                config = load_config()
            return factory(config, debug=debug)
        except Exception as e:
            raise ConnectorError(system, f"construction failed: {e}") from e

    @staticmethod
    def list_available() -> Set[str]:
        """List registered systems whose implementation resolves."""
        return {name for name, factory in _connector_registry.items() if _resolves(factory)}

    @staticmethod
    def has_connector(system: str) -> bool:
        """Check if a connector exists for the given system."""
        return (system or "").strip().lower() in ConnectorFactory.list_available()
