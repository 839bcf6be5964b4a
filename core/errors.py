"""Error taxonomy shared by the connector layer and the CLI.

Every error raised on purpose by this code base derives from BridgeError and
carries a stable ``code`` string that the CLI can log alongside the message.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for all application-specific errors."""
    code: str = "BRIDGE_ERROR"


class ConfigurationError(BridgeError):
    """Missing or malformed configuration."""
    code = "CONFIG_ERROR"


class ConnectorError(BridgeError):
    """A system identifier could not be resolved or its connector failed to build."""
    code = "CONNECTOR_ERROR"

    def __init__(self, system: str, reason: str):
        super().__init__(f"Connector error for system '{system}': {reason}")
        self.system = system
        self.reason = reason


class InvalidIdError(BridgeError):
    """Identifier passed to get/update/delete is not valid for the backend."""
    code = "INVALID_PERSON_ID"

    def __init__(self, person_id: str):
        super().__init__(f"Invalid person ID: {person_id!r}")
        self.person_id = person_id


class ApiError(BridgeError):
    """Backend reported a failure, or the exchange with it failed."""
    code = "API_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(f"API Error: {message}")
        self.status_code = status_code


class ApiTransportError(ApiError):
    """Network-layer failure: connection, timeout, HTTP status or unreadable body."""
    code = "API_TRANSPORT_ERROR"


class ValidationError(BridgeError):
    """A field required by an operation was absent."""
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, operation: str):
        verb = "are" if "," in field else "is"
        super().__init__(f"{field} {verb} required for {operation}")
        self.field = field
        self.operation = operation
