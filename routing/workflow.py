"""
Workflow state machine for file routing.

Event classification is a pure function of the current state and three
facts about the move; the resulting state comes from an explicit transition
table. Only EXTERNAL_ESCALATION starts the TAT clock.
"""
from enum import Enum

from filing.models import WorkflowState

State = WorkflowState.State


class WorkflowEvent(str, Enum):
    RETURN_TO_CREATOR = 'RETURN_TO_CREATOR'
    EXTERNAL_ESCALATION = 'EXTERNAL_ESCALATION'
    TEAM_INTERNAL_MOVE = 'TEAM_INTERNAL_MOVE'
    NO_OP = 'NO_OP'


def _build_transitions():
    table = {}
    for state in State:
        table[(state.value, WorkflowEvent.RETURN_TO_CREATOR.value)] = State.RETURNED_TO_CREATOR.value
        table[(state.value, WorkflowEvent.EXTERNAL_ESCALATION.value)] = State.EXTERNAL.value
        table[(state.value, WorkflowEvent.TEAM_INTERNAL_MOVE.value)] = State.TEAM_INTERNAL.value
        table[(state.value, WorkflowEvent.NO_OP.value)] = state.value
    return table


# (state, event) -> next state, all 12 pairs.
TRANSITIONS = _build_transitions()


def classify_event(current_state, is_target_creator, is_team_internal, target_role_is_external):
    current_state = current_state or State.TEAM_INTERNAL.value
    if is_target_creator and current_state == State.EXTERNAL.value:
        return WorkflowEvent.RETURN_TO_CREATOR
    if target_role_is_external and not is_team_internal:
        return WorkflowEvent.EXTERNAL_ESCALATION
    if is_team_internal:
        return WorkflowEvent.TEAM_INTERNAL_MOVE
    return WorkflowEvent.NO_OP


def next_state(current_state, event):
    current_state = current_state or State.TEAM_INTERNAL.value
    return TRANSITIONS[(str(current_state), WorkflowEvent(event).value)]


def starts_tat(event):
    return event == WorkflowEvent.EXTERNAL_ESCALATION


def is_within_team_workflow(efile, state, actor, target, teams):
    """
    A move stays inside the team when the file is not out in EXTERNAL routing
    and both ends are the creator or one of the creator's active team members.
    """
    if state is not None and state.current_state == State.EXTERNAL:
        return False
    if actor is None or target is None:
        return False

    creator_id = efile.created_by_id

    def in_creator_team(person):
        return person.pk == creator_id or teams.is_team_member(creator_id, person.pk)

    return in_creator_team(actor) and in_creator_team(target)


def apply_event(state, event, actor, target, is_team_internal, now):
    """
    Mutates `state` for a classified event. Returns True if the TAT clock was
    started. The caller saves.
    """
    state.current_state = next_state(state.current_state, event)
    state.last_actor = actor
    state.current_assigned_to = target

    if starts_tat(event):
        state.is_within_team = False
        state.tat_active = True
        state.tat_started_at = now
        state.last_external_mark_at = now
        return True

    if event == WorkflowEvent.RETURN_TO_CREATOR:
        state.is_within_team = True
        state.tat_active = False
    else:
        state.is_within_team = is_team_internal
    return False
