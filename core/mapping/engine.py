"""Attribute mapping engine.

Translates the orchestrator's raw attribute map (``key=value`` pairs from
the CMD connector) into a CanonicalPerson.

This is backend-neutral - the canonical <-> native translations are provided
by each connector (see connectors/itop/itop_mapping.py).
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from core.models.canonical import CanonicalPerson


@dataclass(frozen=True)
class AttributeRule:
    """Maps a canonical field from an ordered list of source attribute names.

    The first source key holding a non-empty value wins.
    """
    target_field: str
    source_keys: Tuple[str, ...]

    def resolve(self, raw: Mapping[str, str]) -> Optional[str]:
        """Return the first non-empty source value, or None."""
        for key in self.source_keys:
            value = raw.get(key)
            if value:
                return value
        return None


# commonName is handled separately: it is the only field with a default.
COMMON_NAME_SOURCES: Tuple[str, ...] = ("commonName", "cn", "name")

ATTRIBUTE_RULES: List[AttributeRule] = [
    AttributeRule("givenName", ("givenName", "first_name")),
    AttributeRule("surname", ("sn", "surname", "last_name")),
    AttributeRule("mail", ("mail", "email")),
    AttributeRule("telephoneNumber", ("telephoneNumber", "phone")),
    AttributeRule("mobile", ("mobile",)),
    AttributeRule("ou", ("ou", "organizationalUnit")),
    AttributeRule("organization", ("o", "organization")),
    AttributeRule("title", ("title",)),
    AttributeRule("employeeNumber", ("employeeNumber", "employee_number")),
    AttributeRule("employeeType", ("employeeType", "employee_type")),
    AttributeRule("userID", ("uid", "userID")),
    AttributeRule("manager", ("manager",)),
    AttributeRule("localityName", ("l", "localityName", "city")),
    AttributeRule("stateOrProvince", ("st", "stateOrProvince", "state")),
    AttributeRule("postalCode", ("postalCode", "zipCode")),
    AttributeRule("description", ("description",)),
]


class AttributeMappingEngine:
    """Applies attribute rules to a raw attribute map."""

    def __init__(self, rules: Optional[Sequence[AttributeRule]] = None):
        """Initialize mapping engine.

        Args:
            rules: Rules to apply (defaults to ATTRIBUTE_RULES)
        """
        self._rules: List[AttributeRule] = list(rules if rules is not None else ATTRIBUTE_RULES)

    @property
    def rules(self) -> List[AttributeRule]:
        return list(self._rules)

    def to_canonical(self, raw: Mapping[str, str]) -> CanonicalPerson:
        """Convert raw orchestrator attributes to a CanonicalPerson.

        Fields with no non-empty source stay unset; commonName falls back
        to ``""``.
        """
        common_name = AttributeRule("commonName", COMMON_NAME_SOURCES).resolve(raw)
        values: Dict[str, str] = {"commonName": common_name or ""}

        for rule in self._rules:
            value = rule.resolve(raw)
            if value is not None:
                values[rule.target_field] = value

        return CanonicalPerson(**values)

    def recognized_keys(self) -> List[str]:
        """All raw attribute names the engine reads."""
        keys = list(COMMON_NAME_SOURCES)
        for rule in self._rules:
            keys.extend(rule.source_keys)
        return keys


_default_engine = AttributeMappingEngine()


def to_canonical(raw: Mapping[str, str]) -> CanonicalPerson:
    """Convert raw attributes using the default rule set."""
    return _default_engine.to_canonical(raw)
