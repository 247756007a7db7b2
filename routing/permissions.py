from dataclasses import dataclass

from accounts.utils import (
    is_administrative_officer, is_director_medical_services, is_executive_engineer, is_external_role,
    is_superintendent_engineer, is_team_type_role,
)
from filing.models import FileSignature, WorkflowState

State = WorkflowState.State

SIGNATURE_REQUIRED = "E-signature required before marking forward"


@dataclass(frozen=True)
class ForwardCheck:
    can_mark: bool
    requires_signature: bool
    reason: str = ''


def can_mark_file(efile, person, teams):
    """
    Who may mark a file depends on where it is in the workflow:
    only the assignee while it is out in EXTERNAL routing, the creator and the
    creator's team while inside the team, only the creator once returned.
    """
    state = efile.workflow_state
    creator_id = efile.created_by_id

    if state is not None:
        if state.current_state == State.EXTERNAL and not state.is_within_team:
            return efile.assigned_to_id == person.pk

        if state.is_within_team or state.current_state == State.TEAM_INTERNAL:
            return person.pk == creator_id or teams.is_team_member(creator_id, person.pk)

        if state.current_state == State.RETURNED_TO_CREATOR:
            return person.pk == creator_id

    return person.pk in (creator_id, efile.assigned_to_id)


def has_signed(efile, person):
    return FileSignature.objects.filter(file=efile, signer=person, is_active=True).exists()


def requires_signature_before_marking(efile, from_person, to_person, teams):
    """
    Whether `from_person` must have signed before marking to `to_person`.

    Only files whose type asks for a signature are checked. Within the
    creator's team no signature is needed while the file is internal, nor
    between two team-type roles (AEE, DAO, AO, ...). Otherwise a signature is
    needed for XEN/RE to SE, Administrative Officer to Director Medical
    Services, any move to or from an external role, and any move while the
    file is out in EXTERNAL routing.
    """
    file_type = efile.file_type
    if file_type is None or not file_type.requires_signature:
        return False
    if to_person is None:
        return True

    state = efile.workflow_state
    if state is None or state.current_state == State.TEAM_INTERNAL:
        creator_id = efile.created_by_id
        from_in_team = from_person.pk == creator_id or teams.is_team_member(creator_id, from_person.pk)
        to_in_team = to_person.pk == creator_id or teams.is_team_member(creator_id, to_person.pk)
        if from_in_team and to_in_team:
            return False

    from_code, to_code = from_person.role_code, to_person.role_code
    to_team_type = is_team_type_role(to_code)
    if is_team_type_role(from_code) and to_team_type:
        return False

    if is_executive_engineer(from_code) and is_superintendent_engineer(to_code, to_person.role_name):
        return True
    if is_administrative_officer(from_code) and is_director_medical_services(to_code):
        return True
    if is_external_role(to_code) and not to_team_type:
        return True
    if is_external_role(from_code):
        return True
    return state is not None and state.current_state == State.EXTERNAL


def can_mark_file_forward(efile, from_person, to_person, teams):
    requires_signature = requires_signature_before_marking(efile, from_person, to_person, teams)
    if requires_signature and not has_signed(efile, from_person):
        return ForwardCheck(False, True, SIGNATURE_REQUIRED)

    if from_person.pk not in (efile.assigned_to_id, efile.created_by_id):
        return ForwardCheck(False, requires_signature, "Not assigned to file")

    return ForwardCheck(True, requires_signature)
