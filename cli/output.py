"""Output in the format expected by the midPoint CMD connector.

One ``key:value`` pair per line on stdout. ``__UID__`` and ``__NAME__`` are
reserved markers; every person block ends with ``status:active``.
"""

from typing import List, Optional, Tuple

from core.models.canonical import CanonicalPerson

UID_MARKER = "__UID__"
NAME_MARKER = "__NAME__"
RECORD_SEPARATOR = "---"

# (output key, canonical field) in output order, after name
PERSON_OUTPUT_FIELDS: List[Tuple[str, str]] = [
    ("first_name", "givenName"),
    ("email", "mail"),
    ("phone", "telephoneNumber"),
    ("function", "title"),
    ("organization", "organization"),
    ("ou", "ou"),
    ("userID", "userID"),
    ("employeeNumber", "employeeNumber"),
    ("employeeType", "employeeType"),
    ("manager", "manager"),
    ("localityName", "localityName"),
    ("stateOrProvince", "stateOrProvince"),
    ("postalCode", "postalCode"),
    ("description", "description"),
]


def _line(key: str, value: object) -> str:
    # one record per line; embedded line breaks would split the pair
    text = str(value).replace("\r", " ").replace("\n", " ")
    return f"{key}:{text}"


def format_person(person: CanonicalPerson, uid: Optional[str] = None) -> List[str]:
    """Render a person as CMD connector output lines."""
    lines: List[str] = []

    person_uid = uid or person.instanceID
    if person_uid:
        lines.append(_line(UID_MARKER, person_uid))

    name = person.display_name
    if name:
        lines.append(_line(NAME_MARKER, name))
        lines.append(_line("name", name))

    for key, attr in PERSON_OUTPUT_FIELDS:
        value = getattr(person, attr)
        if value:
            lines.append(_line(key, value))

    lines.append("status:active")
    return lines


def print_person(person: CanonicalPerson, uid: Optional[str] = None) -> None:
    for line in format_person(person, uid):
        print(line)


def print_persons(persons: List[CanonicalPerson]) -> None:
    """Print several persons, each followed by a separator line."""
    for person in persons:
        print_person(person)
        print(RECORD_SEPARATOR)
