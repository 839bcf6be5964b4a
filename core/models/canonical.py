"""Canonical person model - backend-neutral identity representation.

CanonicalPerson follows the CIM_Person attribute vocabulary and is the only
shape the orchestrator side and the connector side agree on. Backend field
names (iTop ``first_name``, ``org_id`` ...) never appear here; those mappings
live in /connectors/.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Base Model
# =============================================================================

class CanonicalBase(BaseModel):
    """Base model for all canonical data structures."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Person
# =============================================================================

class CanonicalPerson(CanonicalBase):
    """Schema-neutral person record.

    ``commonName`` is always present (possibly ``""``). Every other field is
    ``None`` when no source attribute supplied it; callers must never write
    ``""`` into an optional field, because downstream converters treat
    ``None`` as "don't touch" on partial updates.
    """

    # Core identity
    commonName: str = Field(default="", description="Display name")
    givenName: Optional[str] = None
    surname: Optional[str] = None
    name: Optional[str] = Field(default=None, description="Full distinguished name")

    # Contact
    mail: Optional[str] = None
    telephoneNumber: Optional[str] = None
    mobile: Optional[str] = None
    facsimileTelephoneNumber: Optional[str] = None
    homePhone: Optional[str] = None
    pager: Optional[str] = None

    # Organizational
    ou: Optional[str] = Field(default=None, description="Organizational unit")
    organization: Optional[str] = None
    title: Optional[str] = Field(default=None, description="Job title/position")
    employeeNumber: Optional[str] = None
    employeeType: Optional[str] = Field(default=None, description="Employee, Contractor, etc.")
    manager: Optional[str] = Field(default=None, description="Manager reference")

    # System/technical
    userID: Optional[str] = Field(default=None, description="Login/username")
    instanceID: Optional[str] = Field(default=None, description="Backend identifier")

    # Location
    localityName: Optional[str] = Field(default=None, description="City")
    stateOrProvince: Optional[str] = None
    postalCode: Optional[str] = None
    postalAddress: Optional[List[str]] = None
    homePostalAddress: Optional[List[str]] = None

    # Additional
    businessCategory: Optional[str] = None
    preferredLanguage: Optional[str] = None
    secretary: Optional[str] = None
    jpegPhoto: Optional[str] = None
    description: Optional[str] = None
    caption: Optional[str] = None
    elementName: Optional[str] = None
    generation: Optional[int] = None

    @property
    def display_name(self) -> str:
        """Name the orchestrator shows for this person (surname, else commonName)."""
        return self.surname or self.commonName

    def present_fields(self) -> Dict[str, Any]:
        """Fields that carry a value, ``commonName`` included."""
        return self.model_dump(exclude_none=True)
