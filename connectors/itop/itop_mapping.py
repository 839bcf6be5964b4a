"""Canonical person <-> iTop Person translation.

iTop has a single ``name`` field (the surname by convention) and resolves
organizations either by ``org_id`` or by ``org_name``. The conversion back
from iTop is therefore narrower than the conversion into it: surname and
commonName both come back as ``name``, and the organization is not recovered.
"""

from typing import Dict, Optional, Union

from core.config import DEFAULT_ORG_ID
from core.models.canonical import CanonicalPerson
from connectors.itop.itop_models import ITopPerson, ITopPersonPatch


def _organization_name(person: CanonicalPerson) -> Optional[str]:
    # organization wins over ou
    return person.organization or person.ou or None


def to_native(
    person: CanonicalPerson,
    is_partial_update: bool = False,
    default_org_id: Union[int, str] = DEFAULT_ORG_ID,
) -> Union[ITopPerson, ITopPersonPatch]:
    """Convert a canonical person to an iTop record.

    Args:
        person: Canonical person
        is_partial_update: Build a patch that only carries populated fields.
            A patch never gets the default organization, a status, or an
            empty name.
        default_org_id: org_id used on full records when no organization
            or ou is known

    Returns:
        ITopPerson for full records, ITopPersonPatch for partial updates
    """
    values: Dict[str, object] = {}

    name = person.surname or person.commonName
    if name or not is_partial_update:
        values["name"] = name or ""

    if person.givenName:
        values["first_name"] = person.givenName
    if person.mail:
        values["email"] = person.mail
    if person.telephoneNumber:
        values["phone"] = person.telephoneNumber
    if person.title:
        values["function"] = person.title

    org_name = _organization_name(person)
    if org_name:
        values["org_name"] = org_name
    elif not is_partial_update:
        values["org_id"] = default_org_id

    if is_partial_update:
        return ITopPersonPatch(**values)
    return ITopPerson(status="active", **values)


def from_native(record: ITopPerson) -> CanonicalPerson:
    """Convert an iTop Person back to a canonical person."""
    values: Dict[str, str] = {"commonName": record.name or ""}

    if record.first_name:
        values["givenName"] = record.first_name
    if record.name:
        values["surname"] = record.name
    if record.email:
        values["mail"] = record.email
    if record.phone:
        values["telephoneNumber"] = record.phone
    if record.function:
        values["title"] = record.function
    if record.id:
        values["instanceID"] = str(record.id)

    return CanonicalPerson(**values)
