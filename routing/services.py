import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from accounts.utils import (
    get_efiling_profile, is_chief_engineer, is_external_role, is_global_role, is_superintendent_engineer,
)
from filing.models import EFile, WorkflowState
from notifications.models import Notification
from notifications.outbox import Outbox
from .eligibility import RoutingMatrix, build_actor_context, compute_eligible_recipients
from .exceptions import (
    AuthorizationError, EligibilityError, FileNotFound, GeographicMismatchError, InactiveProfileError,
    MarkPermissionError, RoutingError, SignatureRequiredError,
)
from .geography import resolve_location, role_default_location, validate_geographic_match
from .ledger import get_movements, record_movement
from .permissions import SIGNATURE_REQUIRED, can_mark_file, can_mark_file_forward
from .repositories import LocationRepository, PersonRepository, SLAMatrixRepository, TeamRepository
from .sla import compute_deadline, effective_sla_status, pause_sla, resume_sla
from .workflow import WorkflowEvent, apply_event, classify_event, is_within_team_workflow

logger = logging.getLogger(__name__)


@dataclass
class RoutingDependencies:
    locations: object
    sla_matrix: object
    people: object
    teams: object
    matrix: object


def default_dependencies():
    """ORM-backed collaborators. Built per operation so their caches die with it."""
    locations = LocationRepository()
    sla_matrix = SLAMatrixRepository()
    people = PersonRepository()
    return RoutingDependencies(
        locations=locations,
        sla_matrix=sla_matrix,
        people=people,
        teams=TeamRepository(),
        matrix=RoutingMatrix(people, sla_matrix, locations),
    )


@dataclass
class MarkResult:
    workflow_state: str
    is_team_internal: bool
    tat_started: bool
    sla_deadline: object
    recipients: list
    movement: object

    def as_dict(self):
        return {
            'workflow_state': self.workflow_state,
            'is_team_internal': self.is_team_internal,
            'tat_started': self.tat_started,
            'sla_deadline': self.sla_deadline.isoformat() if self.sla_deadline else None,
            'recipients': self.recipients,
            'movement_id': self.movement.pk,
        }


def _require_profile(user):
    actor = get_efiling_profile(user)
    if actor is None:
        raise InactiveProfileError()
    return actor


def _load_file(file_id, for_update=False):
    qs = EFile.objects.select_related('file_type', 'workflow_state', 'department', 'created_by__role')
    if for_update:
        qs = qs.select_for_update(of=('self',))
    efile = qs.filter(pk=file_id).first()
    if efile is None:
        raise FileNotFound()
    return efile


def _parse_target_id(user_ids):
    if not user_ids:
        raise RoutingError("User IDs array is required")
    try:
        return int(user_ids[0])
    except (TypeError, ValueError):
        raise RoutingError("Invalid user id")


def _queue_notifications(outbox, efile, actor, target, event, remarks, teams):
    suffix = f" Remarks: {remarks}" if remarks else ''
    if event == WorkflowEvent.RETURN_TO_CREATOR:
        outbox.add(
            target, efile.pk, Notification.Type.FILE_RETURNED,
            f"File {efile.file_number} has been returned to you by {actor.display_name}.{suffix}",
            priority=Notification.Priority.HIGH, action_required=True, external=True,
        )
    else:
        outbox.add(
            target, efile.pk, Notification.Type.FILE_ASSIGNED,
            f"File {efile.file_number} has been marked to you by {actor.display_name}.{suffix}",
            action_required=True, external=True,
        )

    # SE/CE assistants see what lands on their manager's desk.
    if is_superintendent_engineer(target.role_code, target.role_name) or is_chief_engineer(target.role_code):
        for assistant in teams.assistants_for_manager(target.pk):
            if assistant.pk == actor.pk:
                continue
            outbox.add(
                assistant, efile.pk, Notification.Type.FILE_VISIBILITY,
                f"File {efile.file_number} has been marked to {target.display_name}.",
            )


def mark_file_to(file_id, user, user_ids, remarks='', deps=None):
    """
    Marks a file to the first person in `user_ids`.

    Everything happens in one transaction on the locked file row: permission
    and eligibility checks, geographic validation, the workflow transition,
    the SLA deadline, the assignment and the ledger entry. Notifications go
    out after commit.
    """
    target_id = _parse_target_id(user_ids)
    deps = deps or default_dependencies()
    outbox = Outbox()

    with transaction.atomic():
        actor = _require_profile(user)
        efile = _load_file(file_id, for_update=True)
        state = efile.workflow_state
        target = deps.people.get(target_id)

        if not user.is_superuser:
            if not can_mark_file(efile, actor, deps.teams):
                raise MarkPermissionError()
            if efile.file_type is not None and efile.file_type.requires_signature and target is not None:
                check = can_mark_file_forward(efile, actor, target, deps.teams)
                if not check.can_mark and check.reason == SIGNATURE_REQUIRED:
                    raise SignatureRequiredError(check.reason)

        eligible = compute_eligible_recipients(efile, actor, deps)
        candidate = next((c for c in eligible if c.person_id == target_id), None)
        if candidate is None:
            raise EligibilityError()
        if target is None or not target.is_active:
            raise EligibilityError("Target user not found or inactive")

        is_team_internal = is_within_team_workflow(efile, state, actor, target, deps.teams)

        if not is_global_role(actor.role_code) and not is_team_internal:
            context = build_actor_context(efile, actor, deps.locations)
            scope = candidate.allowed_level_scope
            if not validate_geographic_match(
                context.base_location,
                resolve_location(target, deps.locations),
                scope,
                actor_role_location=role_default_location(actor, deps.locations),
                target_role_location=role_default_location(target, deps.locations),
            ):
                raise GeographicMismatchError(scope)

        now = timezone.now()
        if EFile.objects.filter(pk=efile.pk, status=EFile.Status.DRAFT).update(
                status=EFile.Status.IN_PROGRESS, updated_at=now):
            efile.status = EFile.Status.IN_PROGRESS

        if state is None:
            state = WorkflowState.objects.create(
                creator_id=efile.created_by_id, current_state=WorkflowState.State.TEAM_INTERNAL
            )
            efile.workflow_state = state

        event = classify_event(
            state.current_state,
            is_target_creator=target.pk == efile.created_by_id,
            is_team_internal=is_team_internal,
            target_role_is_external=is_external_role(target.role_code),
        )
        tat_started = apply_event(state, event, actor, target, is_team_internal, now)
        state.save()

        update_fields = ['assigned_to', 'workflow_state', 'updated_at']
        if tat_started:
            deadline = compute_deadline(actor.role_code, target.role_code, now, deps.sla_matrix)
            # A failed lookup keeps whatever deadline the file already had.
            if deadline is not None:
                efile.sla_deadline = deadline
                update_fields.append('sla_deadline')
        efile.assigned_to = target
        efile.save(update_fields=update_fields)

        movement = record_movement(
            efile, actor, target, remarks, deps.locations,
            is_team_internal=is_team_internal,
            is_return_to_creator=event == WorkflowEvent.RETURN_TO_CREATOR,
            tat_started=tat_started,
        )

        _queue_notifications(outbox, efile, actor, target, event, remarks, deps.teams)
        outbox.dispatch_on_commit()

    logger.info(
        "File %s marked by %s to %s (%s -> %s, tat_started=%s)",
        efile.file_number, actor.pk, target.pk, event.value, state.current_state, tat_started,
    )
    return MarkResult(
        workflow_state=state.current_state,
        is_team_internal=is_team_internal,
        tat_started=tat_started,
        sla_deadline=efile.sla_deadline,
        recipients=[candidate.as_dict()],
        movement=movement,
    )


def get_marking_recipients(file_id, user, deps=None):
    """
    Eligible recipients for whoever effectively holds the file: the current
    user if it is with them, else the assignee, else the creator.
    """
    deps = deps or default_dependencies()
    actor = _require_profile(user)
    efile = _load_file(file_id)

    holds_file = actor.pk == efile.assigned_to_id or (
        efile.assigned_to_id is None and actor.pk == efile.created_by_id
    )
    if holds_file:
        holder = actor
    else:
        holder = deps.people.get(efile.assigned_to_id or efile.created_by_id) or actor

    return compute_eligible_recipients(efile, holder, deps)


def get_file_movements(file_id):
    if not EFile.objects.filter(pk=file_id).exists():
        raise FileNotFound()
    return list(get_movements(file_id).select_related('from_user', 'to_user'))


def get_sla_status(file_id):
    efile = _load_file(file_id)
    return effective_sla_status(efile, efile.workflow_state)


def _require_sla_manager(user):
    actor = _require_profile(user)
    if not (user.is_superuser or is_global_role(actor.role_code)):
        raise AuthorizationError("Only CEO/COO can pause or resume the SLA timer")
    return actor


def pause_file_sla(file_id, user, reason='CEO_REVIEW'):
    actor = _require_sla_manager(user)
    return pause_sla(file_id, by=actor, reason=reason)


def resume_file_sla(file_id, user, extension_hours=None):
    _require_sla_manager(user)
    return resume_sla(file_id, extension_hours=extension_hours)
