"""iTop Connector Package.

Implements the PersonConnector interface for the iTop CMDB.
"""

from connectors.itop.itop_client import ITopApiClient
from connectors.itop.itop_connector import ITopConnector
from connectors.itop.itop_mapping import from_native, to_native
from connectors.itop.itop_models import (
    ITopErrorCode,
    ITopObject,
    ITopOperation,
    ITopPerson,
    ITopPersonPatch,
    ITopRequest,
    ITopResponse,
)

__all__ = [
    # Connector
    "ITopConnector",
    "ITopApiClient",
    # Mapping
    "to_native",
    "from_native",
    # Models
    "ITopErrorCode",
    "ITopObject",
    "ITopOperation",
    "ITopPerson",
    "ITopPersonPatch",
    "ITopRequest",
    "ITopResponse",
]
