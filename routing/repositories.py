"""
Read-only data access used by the routing engine.

Each repository is created per operation, so the small memo caches below
never outlive a single request. Tests swap these for in-memory fakes that
expose the same methods.
"""
from dataclasses import dataclass

from django.db import transaction

from accounts.models import EfilingUser, RoleLocation, UserTeam
from .geography import Location
from .models import SLAMatrixRule
from .sla import get_sla_hours


@dataclass(frozen=True)
class SLARule:
    from_role_code: str
    to_role_code: str
    level_scope: str
    sla_hours: int


PERSON_RELATED = ('user', 'role', 'department', 'district', 'town', 'division')


class LocationRepository:

    def __init__(self):
        self._cache = {}

    def role_location(self, role_id):
        if role_id in self._cache:
            return self._cache[role_id]
        # Savepoint so a failed lookup does not poison the caller's transaction.
        with transaction.atomic():
            row = RoleLocation.objects.filter(role_id=role_id).values(
                'district_id', 'town_id', 'division_id'
            ).first()
        location = Location(**row) if row else None
        self._cache[role_id] = location
        return location


class SLAMatrixRepository:

    def __init__(self):
        self._rules = None

    def active_rules(self):
        if self._rules is None:
            with transaction.atomic():
                self._rules = [
                    SLARule(r.from_role_code, r.to_role_code, r.level_scope, r.sla_hours)
                    for r in SLAMatrixRule.objects.filter(is_active=True).order_by('id')
                ]
        return self._rules

    def get_sla_hours(self, from_role_code, to_role_code):
        return get_sla_hours(from_role_code, to_role_code, self)


class PersonRepository:

    def get(self, person_id):
        return EfilingUser.objects.select_related(*PERSON_RELATED).filter(pk=person_id).first()

    def active(self, exclude_id=None):
        qs = EfilingUser.objects.select_related(*PERSON_RELATED).filter(is_active=True)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return list(qs.order_by('user__first_name', 'user__username'))

    def active_in_department(self, department_id, exclude_id=None):
        if department_id is None:
            return []
        qs = EfilingUser.objects.select_related(*PERSON_RELATED).filter(
            is_active=True, department_id=department_id
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return list(qs)


class TeamRepository:

    def team_members(self, manager_id):
        links = UserTeam.objects.select_related(
            *('team_member__' + r for r in PERSON_RELATED)
        ).filter(
            manager_id=manager_id, is_active=True, team_member__is_active=True
        ).order_by('team_role', 'team_member__user__username')
        return [link.team_member for link in links]

    def team_members_for_marking(self, person_id):
        """Active team members of a person, plus the person themselves."""
        members = self.team_members(person_id)
        owner = EfilingUser.objects.select_related(*PERSON_RELATED).filter(
            pk=person_id, is_active=True
        ).first()
        if owner is not None:
            members.append(owner)
        return members

    def assistants_for_manager(self, manager_id):
        links = UserTeam.objects.select_related('team_member__user').filter(
            manager_id=manager_id,
            is_active=True,
            team_member__is_active=True,
            team_role__in=[r.value for r in UserTeam.ASSISTANT_ROLES],
        )
        return [link.team_member for link in links]

    def is_team_member(self, manager_id, person_id):
        if manager_id is None or person_id is None:
            return False
        return UserTeam.objects.filter(
            manager_id=manager_id, team_member_id=person_id, is_active=True
        ).exists()
