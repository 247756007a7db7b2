"""
Geography resolution and matching for file routing.

A person's effective location starts from their personal district/town/
division and falls back, field by field, to the default location of their
role. Files without any geography of their own borrow the role location of
their creator.
"""
import logging
from dataclasses import dataclass

from .models import LevelScope

logger = logging.getLogger(__name__)

# Scopes that are organisational rather than geographic.
ORGANISATIONAL_SCOPES = frozenset({LevelScope.DEPARTMENT.value, LevelScope.TEAM.value, LevelScope.GLOBAL.value})

SCOPE_FIELDS = {
    LevelScope.DISTRICT.value: 'district_id',
    LevelScope.TOWN.value: 'town_id',
    LevelScope.DIVISION.value: 'division_id',
}


@dataclass(frozen=True)
class Location:
    district_id: int = None
    town_id: int = None
    division_id: int = None

    FIELDS = ('district_id', 'town_id', 'division_id')

    @classmethod
    def of(cls, obj):
        """Personal/own geography of a person or file, without any fallback."""
        if obj is None:
            return cls()
        return cls(
            district_id=getattr(obj, 'district_id', None),
            town_id=getattr(obj, 'town_id', None),
            division_id=getattr(obj, 'division_id', None),
        )

    @property
    def is_empty(self):
        return all(getattr(self, f) is None for f in self.FIELDS)

    def filled_from(self, other):
        """Copy of self with null fields taken from `other`. Never overwrites."""
        if other is None:
            return self
        return Location(**{
            f: getattr(self, f) if getattr(self, f) is not None else getattr(other, f)
            for f in self.FIELDS
        })

    def get(self, field):
        return getattr(self, field)


def _role_location(role_id, locations):
    if role_id is None:
        return None
    try:
        return locations.role_location(role_id)
    except Exception as e:
        # No fallback available; the caller continues with nulls.
        logger.warning("Role location lookup failed for role %s: %s", role_id, e)
        return None


def resolve_location(person, locations):
    """
    Effective location of a person: personal fields first, then the role's
    default location for whichever fields are still null.
    """
    personal = Location.of(person)
    if person is None:
        return personal
    if all(personal.get(f) is not None for f in Location.FIELDS):
        return personal
    return personal.filled_from(_role_location(getattr(person, 'role_id', None), locations))


def role_default_location(person, locations):
    if person is None:
        return None
    return _role_location(getattr(person, 'role_id', None), locations)


def resolve_file_location(efile, locations):
    """
    Location of a file. A file with no geography at all is located at its
    creator's role location.
    """
    own = Location.of(efile)
    if not own.is_empty:
        return own
    creator = getattr(efile, 'created_by', None)
    fallback = role_default_location(creator, locations)
    return fallback if fallback is not None else own


def scope_matches(scope, file_location, person_location):
    """
    Geographic scopes compare the one field they name; a null on either side
    never matches. Global always matches. Any other scope compares districts.
    """
    scope = (scope or LevelScope.DISTRICT).lower()
    if scope == LevelScope.GLOBAL:
        return True
    field = SCOPE_FIELDS.get(scope, SCOPE_FIELDS[LevelScope.DISTRICT.value])
    file_value = file_location.get(field)
    person_value = person_location.get(field)
    return file_value is not None and person_value is not None and file_value == person_value


def roles_share_division(actor_role_location, target_role_location):
    if actor_role_location is None or target_role_location is None:
        return False
    actor_division = actor_role_location.division_id
    return actor_division is not None and actor_division == target_role_location.division_id


def validate_geographic_match(file_location, target_location, expected_scope,
                              actor_role_location=None, target_role_location=None):
    """
    Checks the target's resolved location against the file's for the scope the
    target was allowed under.

    For division scope, two roles whose default locations name the same
    division match even when the personal division fields differ or are unset.
    """
    scope = (expected_scope or LevelScope.DISTRICT).lower()
    if scope in ORGANISATIONAL_SCOPES:
        return True
    if scope == LevelScope.DIVISION and roles_share_division(actor_role_location, target_role_location):
        return True
    return scope_matches(scope, file_location, target_location)
