"""
Recipient eligibility: who may receive a file next.

Candidates come from four independent sources, merged in precedence order
with first-match-wins on person id:

1. the routing matrix (SLA matrix rules against geography, or everyone for
   CEO/COO),
2. team members of the file's creator and of the actor,
3. Superintendent Engineers in the actor's department,
4. Superintendent Engineers in the actor's division.
"""
import logging
from dataclasses import dataclass

from accounts.utils import is_global_role, is_superintendent_engineer, role_pattern_matches
from .geography import Location, resolve_file_location, resolve_location, scope_matches
from .models import LevelScope

logger = logging.getLogger(__name__)


class Reason:
    GLOBAL_ROLE = 'GLOBAL_ROLE'
    SLA_RULE = 'SLA_RULE'
    TEAM_MEMBER = 'TEAM_MEMBER'
    DEPARTMENT_SE = 'DEPARTMENT_SE'
    DIVISION_SE = 'DIVISION_SE'


# Best scope first when several matrix rules match the same candidate.
SCOPE_PRIORITY = ('global', 'division', 'district', 'town')


@dataclass(frozen=True)
class RecipientCandidate:
    person_id: int
    display_name: str
    role_code: str
    allowed_level_scope: str
    allowed_reason: str

    @classmethod
    def for_person(cls, person, scope, reason):
        return cls(
            person_id=person.pk,
            display_name=person.display_name,
            role_code=person.role_code,
            allowed_level_scope=str(scope),
            allowed_reason=reason,
        )

    def as_dict(self):
        return {
            'id': self.person_id,
            'name': self.display_name,
            'role_code': self.role_code,
            'allowed_level_scope': self.allowed_level_scope,
            'allowed_reason': self.allowed_reason,
        }


def merge_candidates(*sources):
    """
    Ordered merge of candidate lists. The first candidate seen for a person
    wins; later ones for the same person are dropped.
    """
    merged = {}
    for source in sources:
        for candidate in source:
            if candidate.person_id not in merged:
                merged[candidate.person_id] = candidate
    return list(merged.values())


def pick_best_scope(scopes):
    if not scopes:
        return None
    normalised = [(s or '').lower() for s in scopes]
    for level in SCOPE_PRIORITY:
        if level in normalised:
            return level
    return normalised[0]


@dataclass
class ActorContext:
    """Inputs for the routing matrix lookup."""
    actor: object
    actor_location: Location
    base_location: Location
    department_type: str
    department_id: int = None


class RoutingMatrix:
    """
    Geographic/role matrix backed by SLA matrix rules.

    Rules whose from-pattern matches the actor's role apply; a candidate is
    allowed when a rule's to-pattern matches their role and they satisfy the
    rule's scope: the same department for `department` rules, otherwise their
    resolved location against the base location.
    """

    def __init__(self, people, sla_matrix, locations):
        self.people = people
        self.sla_matrix = sla_matrix
        self.locations = locations

    def applicable_rules(self, actor_role_code, department_type):
        rules = [
            rule for rule in self.sla_matrix.active_rules()
            if role_pattern_matches(actor_role_code, rule.from_role_code)
        ]
        if rules:
            return [(rule.to_role_code, rule.level_scope) for rule in rules]
        # No rule for this role: anyone within the department's own scope.
        return [('*', (department_type or LevelScope.DISTRICT.value).lower())]

    def scope_allows(self, scope, context, person, person_location):
        if (scope or '').lower() == LevelScope.DEPARTMENT:
            return context.department_id is not None and person.department_id == context.department_id
        return scope_matches(scope, context.base_location, person_location)

    def get_allowed_recipients(self, context):
        actor = context.actor
        others = self.people.active(exclude_id=actor.pk)

        if is_global_role(actor.role_code):
            return [RecipientCandidate.for_person(p, LevelScope.GLOBAL.value, Reason.GLOBAL_ROLE) for p in others]

        rules = self.applicable_rules(actor.role_code, context.department_type)
        allowed = []
        for person in others:
            person_location = resolve_location(person, self.locations)
            matched = [
                scope for to_pattern, scope in rules
                if role_pattern_matches(person.role_code, to_pattern)
                and self.scope_allows(scope, context, person, person_location)
            ]
            if matched:
                allowed.append(RecipientCandidate.for_person(person, pick_best_scope(matched), Reason.SLA_RULE))
        return merge_candidates(allowed)


def build_actor_context(efile, actor, locations):
    actor_location = resolve_location(actor, locations)
    file_location = resolve_file_location(efile, locations)
    department = efile.department or actor.department
    department_type = department.department_type if department else LevelScope.DISTRICT.value
    return ActorContext(
        actor=actor,
        actor_location=actor_location,
        base_location=file_location.filled_from(actor_location),
        department_type=department_type,
        department_id=department.pk if department else None,
    )


def team_candidates(efile, actor, teams):
    owners = [efile.created_by_id]
    if actor.pk != efile.created_by_id:
        owners.append(actor.pk)

    candidates = []
    for owner_id in owners:
        for member in teams.team_members_for_marking(owner_id):
            if member.pk == actor.pk:
                continue
            candidates.append(RecipientCandidate.for_person(member, LevelScope.TEAM.value, Reason.TEAM_MEMBER))
    return candidates


def department_se_candidates(actor, people):
    return [
        RecipientCandidate.for_person(p, LevelScope.DEPARTMENT.value, Reason.DEPARTMENT_SE)
        for p in people.active_in_department(actor.department_id, exclude_id=actor.pk)
        if is_superintendent_engineer(p.role_code, p.role_name)
    ]


def division_se_candidates(actor, actor_location, people, locations):
    division_id = actor_location.division_id
    if division_id is None:
        return []
    candidates = []
    for person in people.active(exclude_id=actor.pk):
        if not is_superintendent_engineer(person.role_code, person.role_name):
            continue
        if resolve_location(person, locations).division_id == division_id:
            candidates.append(RecipientCandidate.for_person(person, LevelScope.DIVISION.value, Reason.DIVISION_SE))
    return candidates


def compute_eligible_recipients(efile, actor, deps):
    """
    Full list of people `actor` may mark `efile` to, deduplicated by person id.
    """
    context = build_actor_context(efile, actor, deps.locations)
    recipients = merge_candidates(
        deps.matrix.get_allowed_recipients(context),
        team_candidates(efile, actor, deps.teams),
        department_se_candidates(actor, deps.people),
        division_se_candidates(actor, context.actor_location, deps.people, deps.locations),
    )
    logger.debug("File %s: %d eligible recipients for actor %s", efile.pk, len(recipients), actor.pk)
    return recipients
