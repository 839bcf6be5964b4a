"""iTop REST/JSON data models.

These are iTop-specific models that map to the iTop REST API schema
(webservices/rest.php). They are separate from the canonical models in
/core/models/.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ITopErrorCode(IntEnum):
    """Status codes returned in the ``code`` member of a response."""
    OK = 0
    UNAUTHORIZED = 1
    MISSING_VERSION = 2
    MISSING_JSON = 3
    INVALID_JSON = 4
    MISSING_AUTH_USER = 5
    MISSING_AUTH_PWD = 6
    UNSUPPORTED_VERSION = 10
    UNKNOWN_OPERATION = 11
    UNSAFE = 12
    INTERNAL_ERROR = 100


# =============================================================================
# iTop Person Records
# =============================================================================

class ITopBaseModel(BaseModel):
    """Base model for iTop API entities."""
    model_config = ConfigDict(populate_by_name=True)


class ITopPersonPatch(ITopBaseModel):
    """Fields to change on an existing iTop Person.

    Every field is optional; a field left as None is not sent and the
    backend keeps its current value.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: Optional[str] = None
    status: Optional[str] = None
    first_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    org_id: Optional[Union[int, str]] = None
    org_name: Optional[str] = None
    function: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        """Payload for the ``fields`` member of a request."""
        return self.model_dump(exclude_none=True)


class ITopPerson(ITopPersonPatch):
    """iTop Person entity.

    Maps to: class Person. Backend fields not modelled here are kept as
    extra attributes.
    """
    id: Optional[int] = None
    name: str
    status: str = "active"


# =============================================================================
# Request / Response Envelopes
# =============================================================================

class ITopRequest(ITopBaseModel):
    """One operation sent in the ``json_data`` form field."""
    operation: str
    object_class: Optional[str] = Field(None, alias="class")
    key: Optional[Union[int, str]] = None
    fields: Optional[Dict[str, Any]] = None
    output_fields: Optional[str] = None
    limit: Optional[int] = None
    simulate: Optional[bool] = None
    comment: Optional[str] = None

    def to_json_data(self) -> Dict[str, Any]:
        """Serializable form with unset members dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ITopObject(ITopBaseModel):
    """An object returned under ``objects``."""
    code: int = 0
    message: Optional[str] = None
    object_class: str = Field(..., alias="class")
    key: Union[int, str]
    fields: Dict[str, Any] = Field(default_factory=dict)

    def as_person(self) -> ITopPerson:
        return ITopPerson.model_validate(self.fields)


class ITopOperation(ITopBaseModel):
    """An entry of the ``list_operations`` response."""
    verb: str
    description: Optional[str] = None
    extension: Optional[str] = None


class ITopResponse(ITopBaseModel):
    """Parsed response body."""
    code: int
    message: Optional[str] = None
    objects: Optional[Dict[str, ITopObject]] = None
    operations: Optional[List[ITopOperation]] = None

    @property
    def is_success(self) -> bool:
        return self.code == ITopErrorCode.OK

    def find_object(self, object_class: str, key: Union[int, str]) -> Optional[ITopObject]:
        """Find the object for ``<object_class>::<key>``.

        Looks the composite key up first, then falls back to matching the
        class/key members of each entry. Never depends on mapping order.
        """
        if not self.objects:
            return None

        composite = f"{object_class}::{key}"
        obj = self.objects.get(composite)
        if obj is not None:
            return obj

        for obj in self.objects.values():
            if obj.object_class == object_class and str(obj.key) == str(key):
                return obj
        return None

    def objects_of_class(self, object_class: str) -> List[ITopObject]:
        """All returned objects of a class, in response order."""
        if not self.objects:
            return []
        return [obj for obj in self.objects.values() if obj.object_class == object_class]
