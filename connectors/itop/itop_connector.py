"""iTop Person Connector.

Implements the PersonConnector interface for the iTop CMDB.
"""

import re
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from connectors.base import (
    CreatedPersonRef,
    PersonConnector,
    PersonLookupResult,
    register_connector,
)
from connectors.itop.itop_client import ITopApiClient
from connectors.itop.itop_mapping import from_native, to_native
from connectors.itop.itop_models import (
    ITopErrorCode,
    ITopObject,
    ITopPerson,
    ITopRequest,
)
from core.config import ConnectorConfig
from core.errors import ApiError, ValidationError
from core.models.canonical import CanonicalPerson
from core.observability.logging import get_logger

logger = get_logger(__name__)

PERSON_CLASS = "Person"
OUTPUT_FIELDS = "id,name,first_name,email,phone,org_id,status,function"

CREATE_COMMENT = "Created via MidPoint IGA"
UPDATE_COMMENT = "Updated via MidPoint IGA"
DELETE_COMMENT = "Deleted via MidPoint IGA"

SEARCH_ALL_OQL = "SELECT Person"
SEARCH_OQL_TEMPLATE = (
    "SELECT Person WHERE name LIKE '%{term}%' "
    "OR first_name LIKE '%{term}%' "
    "OR email LIKE '%{term}%'"
)

# Messages iTop uses when a key does not match any object
_NOT_FOUND_PATTERN = re.compile(r"not found|no item found|invalid object", re.IGNORECASE)


def escape_oql_like(term: str) -> str:
    """Escape a search term for use inside a quoted OQL LIKE pattern.

    Backslash, quote and the LIKE wildcards are escaped so the term only
    ever matches literally.
    """
    escaped = term.replace("\\", "\\\\")
    for char in ("'", "%", "_"):
        escaped = escaped.replace(char, "\\" + char)
    return escaped


def build_search_key(query: Optional[str]) -> str:
    """OQL expression for a person search."""
    if not query:
        return SEARCH_ALL_OQL
    return SEARCH_OQL_TEMPLATE.format(term=escape_oql_like(query))


@register_connector("itop")
class ITopConnector(PersonConnector):
    """iTop connector implementation.

    Talks to iTop through webservices/rest.php. The REST client is created
    once, at construction, with the connector's configuration and debug flag.

    Required configuration:
    - base_url, api_version
    - auth_token, or username + password

    Optional configuration:
    - default_org_id: organization for new persons without o/ou (default: 1)
    - verify_tls: verify the server certificate (default: True)
    """

    def __init__(self, config: ConnectorConfig, debug: bool = False):
        super().__init__(config, debug)
        self.client = ITopApiClient(config, debug=debug)

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def test_connection(self) -> bool:
        """Test the endpoint with a list_operations call."""
        try:
            operations = await self.client.list_operations()
            logger.debug("iTop connection OK", extra_fields={"operations": len(operations)})
            return True
        except Exception as e:
            logger.warning(f"iTop connection test failed: {e}")
            return False

    # =========================================================================
    # Person Operations
    # =========================================================================

    async def create_person(self, person: CanonicalPerson) -> CreatedPersonRef:
        record = to_native(person, is_partial_update=False, default_org_id=self.config.default_org_id)
        if not record.name:
            raise ValidationError("name", "person creation")

        response = await self.client.make_request(ITopRequest(
            operation="core/create",
            comment=CREATE_COMMENT,
            object_class=PERSON_CLASS,
            output_fields=OUTPUT_FIELDS,
            fields=record.to_fields(),
        ))

        created = response.objects_of_class(PERSON_CLASS)
        if not created:
            raise ApiError("No objects returned from create operation")
        if len(created) > 1:
            raise ApiError(f"Create operation returned {len(created)} {PERSON_CLASS} objects, expected 1")

        obj = created[0]
        logger.info(f"Created {PERSON_CLASS}::{obj.key}")
        return CreatedPersonRef(id=str(obj.key), data=self._to_record(obj))

    async def lookup_person(self, person_id: str) -> PersonLookupResult:
        key = self.parse_numeric_id(person_id)

        try:
            response = await self.client.make_request(ITopRequest(
                operation="core/get",
                object_class=PERSON_CLASS,
                key=key,
                output_fields=OUTPUT_FIELDS,
            ))
            obj = response.find_object(PERSON_CLASS, key)
            if obj is None:
                return PersonLookupResult.not_found()
            return PersonLookupResult.found(self._to_canonical(obj))
        except ApiError as e:
            if self._is_not_found(e):
                return PersonLookupResult.not_found()
            return PersonLookupResult.failed(e)

    async def search_persons(
        self,
        query: Optional[str] = None,
        limit: int = 100,
    ) -> List[CanonicalPerson]:
        response = await self.client.make_request(ITopRequest(
            operation="core/get",
            object_class=PERSON_CLASS,
            key=build_search_key(query),
            output_fields=OUTPUT_FIELDS,
            limit=limit,
        ))

        return [
            self._to_canonical(obj)
            for obj in response.objects_of_class(PERSON_CLASS)
        ]

    async def update_person(self, person_id: str, person: CanonicalPerson) -> CanonicalPerson:
        key = self.parse_numeric_id(person_id)
        patch = to_native(person, is_partial_update=True)

        response = await self.client.make_request(ITopRequest(
            operation="core/update",
            comment=UPDATE_COMMENT,
            object_class=PERSON_CLASS,
            key=key,
            output_fields=OUTPUT_FIELDS,
            fields=patch.to_fields(),
        ))

        obj = response.find_object(PERSON_CLASS, key)
        if obj is None:
            raise ApiError(f"No {PERSON_CLASS}::{key} returned from update operation")
        return self._to_canonical(obj)

    async def delete_person(self, person_id: str) -> None:
        key = self.parse_numeric_id(person_id)

        await self.client.make_request(ITopRequest(
            operation="core/delete",
            comment=DELETE_COMMENT,
            object_class=PERSON_CLASS,
            key=key,
            simulate=False,
        ))
        logger.info(f"Deleted {PERSON_CLASS}::{key}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_record(obj: ITopObject) -> ITopPerson:
        try:
            return obj.as_person()
        except PydanticValidationError as e:
            raise ApiError(f"Malformed {obj.object_class}::{obj.key} record: {e}") from e

    @classmethod
    def _to_canonical(cls, obj: ITopObject) -> CanonicalPerson:
        person = from_native(cls._to_record(obj))
        if not person.instanceID:
            # projection without id; the object key is the same identifier
            person = person.model_copy(update={"instanceID": str(obj.key)})
        return person

    @staticmethod
    def _is_not_found(error: ApiError) -> bool:
        return (
            error.status_code == ITopErrorCode.INTERNAL_ERROR
            and bool(_NOT_FOUND_PATTERN.search(str(error)))
        )
