import json
from io import StringIO
from datetime import timedelta
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, Client, override_settings
from django.urls import reverse
from django.utils import timezone

from accounts.models import (
    Zone, District, Division, Department, Role, RoleLocation, EfilingUser, UserTeam
)
from filing.models import EFile, FileType, FileSignature, WorkflowState
from notifications.backends import LocmemMessageBackend
from notifications.models import Notification
from .eligibility import RecipientCandidate, merge_candidates, pick_best_scope, compute_eligible_recipients
from .exceptions import (
    EligibilityError, GeographicMismatchError, InactiveProfileError, MarkPermissionError, SignatureRequiredError
)
from .geography import Location, resolve_location, scope_matches, validate_geographic_match
from .models import FileMovement, SLAMatrixRule, SLAPauseRecord, TatLog
from .permissions import requires_signature_before_marking
from .repositories import LocationRepository, SLAMatrixRepository, SLARule
from .services import default_dependencies, get_marking_recipients, mark_file_to
from .sla import compute_deadline, get_sla_hours, pause_sla, resume_sla
from .tat import check_tat_warnings
from .workflow import TRANSITIONS, WorkflowEvent, classify_event, next_state

User = get_user_model()
State = WorkflowState.State


class FakeLocations:
    def __init__(self, by_role=None, fail=False):
        self.by_role = by_role or {}
        self.fail = fail

    def role_location(self, role_id):
        if self.fail:
            raise RuntimeError("database unavailable")
        return self.by_role.get(role_id)


class FakeMatrix:
    def __init__(self, rules=None, fail=False):
        self.rules = rules or []
        self.fail = fail

    def active_rules(self):
        if self.fail:
            raise RuntimeError("matrix unavailable")
        return self.rules


def person(role_id=1, **geo):
    return SimpleNamespace(role_id=role_id, district_id=geo.get('district_id'),
                           town_id=geo.get('town_id'), division_id=geo.get('division_id'))


class GeographyTest(SimpleTestCase):

    def test_missing_division_falls_back_to_role_location(self):
        locations = FakeLocations({7: Location(division_id=5)})
        resolved = resolve_location(person(role_id=7, district_id=2), locations)
        self.assertEqual(resolved, Location(district_id=2, division_id=5))

    def test_personal_values_are_never_overwritten(self):
        locations = FakeLocations({7: Location(district_id=9, division_id=5)})
        resolved = resolve_location(person(role_id=7, district_id=2), locations)
        self.assertEqual(resolved.district_id, 2)

    def test_resolution_is_idempotent(self):
        locations = FakeLocations({7: Location(town_id=3, division_id=5)})
        p = person(role_id=7)
        self.assertEqual(resolve_location(p, locations), resolve_location(p, locations))

    def test_lookup_failure_is_logged_and_not_fatal(self):
        with self.assertLogs('routing.geography', level='WARNING'):
            resolved = resolve_location(person(role_id=7, district_id=2), FakeLocations(fail=True))
        self.assertEqual(resolved, Location(district_id=2))

    def test_scope_matching_is_strict_on_nulls(self):
        self.assertTrue(scope_matches('division', Location(division_id=5), Location(division_id=5)))
        self.assertFalse(scope_matches('division', Location(division_id=5), Location(division_id=6)))
        self.assertFalse(scope_matches('division', Location(), Location()))
        self.assertFalse(scope_matches('town', Location(town_id=1), Location(district_id=1)))
        self.assertFalse(scope_matches('team', Location(), Location()))
        self.assertTrue(scope_matches('team', Location(district_id=1), Location(district_id=1)))
        self.assertTrue(scope_matches('global', Location(), Location()))

    def test_division_scope_passes_when_role_divisions_agree(self):
        self.assertTrue(validate_geographic_match(
            Location(division_id=5), Location(division_id=6), 'division',
            actor_role_location=Location(division_id=8), target_role_location=Location(division_id=8),
        ))
        self.assertFalse(validate_geographic_match(
            Location(division_id=5), Location(division_id=6), 'division',
            actor_role_location=Location(), target_role_location=Location(),
        ))


class WorkflowTest(SimpleTestCase):

    def test_return_to_creator_only_from_external(self):
        self.assertEqual(classify_event(State.EXTERNAL, True, False, False), WorkflowEvent.RETURN_TO_CREATOR)
        self.assertEqual(classify_event(State.TEAM_INTERNAL, True, True, False), WorkflowEvent.TEAM_INTERNAL_MOVE)

    def test_external_escalation_needs_external_target_outside_team(self):
        self.assertEqual(classify_event(State.TEAM_INTERNAL, False, False, True), WorkflowEvent.EXTERNAL_ESCALATION)
        self.assertEqual(classify_event(State.TEAM_INTERNAL, False, True, True), WorkflowEvent.TEAM_INTERNAL_MOVE)
        self.assertEqual(classify_event(State.EXTERNAL, False, False, False), WorkflowEvent.NO_OP)

    def test_transition_table_is_complete_and_deterministic(self):
        self.assertEqual(len(TRANSITIONS), 12)
        for state in State:
            self.assertEqual(next_state(state, WorkflowEvent.NO_OP), state.value)
            self.assertEqual(next_state(state, WorkflowEvent.EXTERNAL_ESCALATION), State.EXTERNAL)
            self.assertEqual(next_state(state, WorkflowEvent.RETURN_TO_CREATOR), State.RETURNED_TO_CREATOR)
            self.assertEqual(next_state(state, WorkflowEvent.TEAM_INTERNAL_MOVE), State.TEAM_INTERNAL)

    def test_missing_state_defaults_to_team_internal(self):
        self.assertEqual(next_state(None, WorkflowEvent.NO_OP), State.TEAM_INTERNAL)


class CandidateMergeTest(SimpleTestCase):

    def test_first_candidate_for_a_person_wins(self):
        a = RecipientCandidate(1, 'A', 'CE', 'division', 'SLA_RULE')
        b = RecipientCandidate(1, 'A', 'CE', 'team', 'TEAM_MEMBER')
        c = RecipientCandidate(2, 'B', 'AEE', 'team', 'TEAM_MEMBER')
        self.assertEqual(merge_candidates([a], [b, c]), [a, c])
        self.assertEqual(merge_candidates([b], [a]), [b])

    def test_best_scope_priority(self):
        self.assertEqual(pick_best_scope(['town', 'district', 'division']), 'division')
        self.assertEqual(pick_best_scope(['town', 'GLOBAL']), 'global')
        self.assertIsNone(pick_best_scope([]))


class SLAHoursTest(SimpleTestCase):

    def test_first_matching_rule_wins(self):
        matrix = FakeMatrix([SLARule('SE', 'CE', 'division', 48), SLARule('*', '*', 'district', 12)])
        self.assertEqual(get_sla_hours('SE', 'CE', matrix), 48)
        self.assertEqual(get_sla_hours('XEN', 'SE', matrix), 12)

    @override_settings(EFILING_DEFAULT_SLA_HOURS=24)
    def test_no_rule_uses_default(self):
        self.assertEqual(get_sla_hours('XEN', 'SE', FakeMatrix([SLARule('SE', 'CE', 'division', 48)])), 24)

    def test_zero_hour_rule_uses_default(self):
        matrix = FakeMatrix([SLARule('SE', 'CE', 'division', 0)])
        self.assertEqual(get_sla_hours('SE', 'CE', matrix), 24)

    def test_lookup_failure_gives_no_deadline(self):
        now = timezone.now()
        with self.assertLogs('routing.sla', level='WARNING'):
            self.assertIsNone(compute_deadline('SE', 'CE', now, FakeMatrix(fail=True)))


class SignatureRuleTest(SimpleTestCase):

    def check(self, from_code, to_code, current_state=State.TEAM_INTERNAL, requires_signature=True):
        efile = SimpleNamespace(
            file_type=SimpleNamespace(requires_signature=requires_signature),
            workflow_state=SimpleNamespace(current_state=current_state),
            created_by_id=99,
        )
        teams = SimpleNamespace(is_team_member=lambda manager_id, person_id: False)
        sender = SimpleNamespace(pk=1, role_code=from_code, role_name='')
        receiver = SimpleNamespace(pk=2, role_code=to_code, role_name='')
        return requires_signature_before_marking(efile, sender, receiver, teams)

    def test_unrestricted_file_type_never_needs_signature(self):
        self.assertFalse(self.check('XEN', 'SE', requires_signature=False))

    def test_internal_move_between_ordinary_roles_is_unsigned(self):
        self.assertFalse(self.check('XEN', 'CLERK'))

    def test_team_type_roles_are_exempt_even_when_external(self):
        self.assertFalse(self.check('AEE', 'DAO', current_state=State.EXTERNAL))
        self.assertFalse(self.check('ACCOUNT_OFFICER', 'SUB_ENGINEER'))

    def test_executive_engineer_to_se_needs_signature(self):
        self.assertTrue(self.check('XEN', 'SE'))
        self.assertTrue(self.check('RE_NORTH', 'SE_NORTH'))

    def test_admin_officer_to_medical_director_needs_signature(self):
        self.assertTrue(self.check('ADMIN_OFFICER', 'DIRECTOR_MEDICAL_SERVICES'))

    def test_external_roles_on_either_side_need_signature(self):
        self.assertTrue(self.check('CLERK', 'CE'))
        self.assertTrue(self.check('CEO', 'CLERK'))

    def test_any_move_while_external_needs_signature(self):
        self.assertTrue(self.check('CLERK', 'XEN', current_state=State.EXTERNAL))


class RoutingFixtureMixin:

    def make_person(self, username, role, department=None, **fields):
        user = User.objects.create_user(username=username, password='password', first_name=username.title())
        return EfilingUser.objects.create(user=user, role=role, department=department, **fields)

    def make_file(self, number, creator, **fields):
        return EFile.objects.create(file_number=number, subject=f"Subject {number}", created_by=creator, **fields)

    def setUp(self):
        self.zone = Zone.objects.create(name="South", code="S")
        self.district_a = District.objects.create(name="District A", code="DA", zone=self.zone)
        self.district_b = District.objects.create(name="District B", code="DB", zone=self.zone)
        self.div5 = Division.objects.create(name="Division 5", code="D5")
        self.div6 = Division.objects.create(name="Division 6", code="D6")

        self.works = Department.objects.create(name="Works", code="WORKS",
                                               department_type=Department.DepartmentType.DIVISION)
        self.head_office = Department.objects.create(name="Head Office", code="HO")

        self.role_xen = Role.objects.create(name="Executive Engineer", code="XEN", department=self.works)
        self.role_aee = Role.objects.create(name="Assistant Executive Engineer", code="AEE", department=self.works)
        self.role_se = Role.objects.create(name="Superintending Engineer", code="SE", department=self.works)
        self.role_ce = Role.objects.create(name="Chief Engineer", code="CE")
        self.role_ceo = Role.objects.create(name="Chief Executive Officer", code="CEO")
        self.role_ao = Role.objects.create(name="Account Officer", code="AO")
        RoleLocation.objects.create(role=self.role_ce, division=self.div5)

        self.xen = self.make_person('xen', self.role_xen, self.works, district=self.district_a, division=self.div5)
        self.aee = self.make_person('aee', self.role_aee, self.works, district=self.district_b)
        self.se = self.make_person('se', self.role_se, self.works, division=self.div5, contact_number='03001234567')
        self.ce = self.make_person('ce', self.role_ce, self.head_office, contact_number='03007654321')
        self.ceo = self.make_person('ceo', self.role_ceo, self.head_office)
        self.ce_assistant = self.make_person('ce_assistant', self.role_ao, self.head_office)

        UserTeam.objects.create(manager=self.xen, team_member=self.aee)
        UserTeam.objects.create(manager=self.ce, team_member=self.ce_assistant, team_role=UserTeam.TeamRole.ASSISTANT)

        SLAMatrixRule.objects.create(from_role_code='SE', to_role_code='CE', level_scope='division', sla_hours=48)
        SLAMatrixRule.objects.create(from_role_code='XEN', to_role_code='SE', level_scope='division', sla_hours=24)
        SLAMatrixRule.objects.create(from_role_code='XEN', to_role_code='*', level_scope='district', sla_hours=24)


class RepositoryTest(RoutingFixtureMixin, TestCase):

    def test_person_without_division_resolves_role_division(self):
        resolved = resolve_location(self.ce, LocationRepository())
        self.assertEqual(resolved.division_id, self.div5.pk)

    def test_role_location_is_cached_per_repository(self):
        repo = LocationRepository()
        repo.role_location(self.role_ce.pk)
        with self.assertNumQueries(0):
            repo.role_location(self.role_ce.pk)

    def test_sla_matrix_first_match_then_default(self):
        repo = SLAMatrixRepository()
        self.assertEqual(repo.get_sla_hours('XEN', 'SE'), 24)
        self.assertEqual(repo.get_sla_hours('SE', 'CE'), 48)
        with self.assertNumQueries(0):
            self.assertEqual(repo.get_sla_hours('CE', 'CEO'), 24)


class EligibilityTest(RoutingFixtureMixin, TestCase):

    def test_matrix_candidates_respect_geography(self):
        efile = self.make_file('F-1', self.se, division=self.div5, department=self.works)
        ids = {c.person_id: c for c in compute_eligible_recipients(efile, self.se, default_dependencies())}
        self.assertIn(self.ce.pk, ids)
        self.assertEqual(ids[self.ce.pk].allowed_reason, 'SLA_RULE')
        self.assertEqual(ids[self.ce.pk].allowed_level_scope, 'division')
        self.assertNotIn(self.se.pk, ids)

    def test_team_members_are_always_offered(self):
        efile = self.make_file('F-2', self.xen, district=self.district_a, department=self.works)
        ids = {c.person_id: c for c in compute_eligible_recipients(efile, self.xen, default_dependencies())}
        self.assertEqual(ids[self.aee.pk].allowed_reason, 'TEAM_MEMBER')
        self.assertEqual(ids[self.aee.pk].allowed_level_scope, 'team')

    def test_department_se_is_offered(self):
        efile = self.make_file('F-3', self.aee, district=self.district_b, department=self.works)
        ids = {c.person_id: c for c in compute_eligible_recipients(efile, self.aee, default_dependencies())}
        self.assertEqual(ids[self.se.pk].allowed_reason, 'DEPARTMENT_SE')

    def test_department_rule_requires_same_department(self):
        role_dao = Role.objects.create(name="Divisional Accounts Officer", code="DAO")
        dao_works = self.make_person('dao_works', role_dao, self.works, district=self.district_b)
        dao_other = self.make_person('dao_other', role_dao, self.head_office, district=self.district_b)
        SLAMatrixRule.objects.create(from_role_code='SE', to_role_code='DAO', level_scope='department', sla_hours=24)
        efile = self.make_file('F-6', self.se, division=self.div5, department=self.works)

        ids = {c.person_id: c for c in compute_eligible_recipients(efile, self.se, default_dependencies())}

        self.assertEqual(ids[dao_works.pk].allowed_level_scope, 'department')
        self.assertNotIn(dao_other.pk, ids)
        with self.assertRaises(EligibilityError):
            mark_file_to(efile.pk, self.se.user, [dao_other.pk], "")
        self.assertFalse(FileMovement.objects.filter(file=efile).exists())

    def test_division_se_is_offered_from_actor_division(self):
        # CE has no personal division; its role location names division 5.
        efile = self.make_file('F-7', self.ce, division=self.div5)
        ids = {c.person_id: c for c in compute_eligible_recipients(efile, self.ce, default_dependencies())}
        self.assertEqual(ids[self.se.pk].allowed_reason, 'DIVISION_SE')
        self.assertEqual(ids[self.se.pk].allowed_level_scope, 'division')

    def test_global_role_sees_everyone_else(self):
        efile = self.make_file('F-4', self.xen, district=self.district_a)
        candidates = compute_eligible_recipients(efile, self.ceo, default_dependencies())
        ids = {c.person_id for c in candidates}
        self.assertEqual(ids, set(EfilingUser.objects.exclude(pk=self.ceo.pk).values_list('pk', flat=True)))
        self.assertTrue(all(c.allowed_reason in ('GLOBAL_ROLE', 'TEAM_MEMBER') for c in candidates))

    def test_recipients_follow_the_current_holder(self):
        state = WorkflowState.objects.create(current_state=State.EXTERNAL, is_within_team=False, creator=self.xen)
        efile = self.make_file('F-5', self.xen, division=self.div5, assigned_to=self.se, workflow_state=state)
        ids = {c.person_id for c in get_marking_recipients(efile.pk, self.xen.user)}
        self.assertIn(self.ce.pk, ids)
        self.assertNotIn(self.se.pk, ids)


class MarkFileToTest(RoutingFixtureMixin, TestCase):

    def test_escalation_to_ce_starts_tat(self):
        efile = self.make_file('F-10', self.se, division=self.div5, department=self.works)
        before = timezone.now()

        with self.captureOnCommitCallbacks(execute=True):
            result = mark_file_to(efile.pk, self.se.user, [self.ce.pk], "Please review")

        self.assertEqual(result.workflow_state, State.EXTERNAL)
        self.assertTrue(result.tat_started)
        self.assertFalse(result.is_team_internal)
        self.assertEqual(result.movement.action_type, 'MARK_TO')
        self.assertGreaterEqual(result.sla_deadline, before + timedelta(hours=48))
        self.assertLessEqual(result.sla_deadline, timezone.now() + timedelta(hours=48))

        efile.refresh_from_db()
        self.assertEqual(efile.assigned_to, self.ce)
        self.assertEqual(efile.status, EFile.Status.IN_PROGRESS)
        self.assertTrue(efile.workflow_state.tat_active)

        self.assertTrue(Notification.objects.filter(person=self.ce, type=Notification.Type.FILE_ASSIGNED).exists())
        self.assertTrue(Notification.objects.filter(person=self.ce_assistant,
                                                    type=Notification.Type.FILE_VISIBILITY).exists())

    def test_movement_snapshots_resolved_location(self):
        efile = self.make_file('F-11', self.se, division=self.div5, department=self.works)
        result = mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")
        movement = result.movement
        self.assertEqual(movement.from_user_name, 'Se')
        self.assertEqual(movement.to_user_division, 'Division 5')
        self.assertEqual(movement.to_department, self.head_office)

    def test_return_to_creator_keeps_deadline(self):
        deadline = timezone.now() + timedelta(hours=5)
        state = WorkflowState.objects.create(current_state=State.EXTERNAL, is_within_team=False,
                                             creator=self.xen, tat_active=True)
        efile = self.make_file('F-12', self.xen, division=self.div5, department=self.works,
                               assigned_to=self.se, workflow_state=state, sla_deadline=deadline)

        with self.captureOnCommitCallbacks(execute=True):
            result = mark_file_to(efile.pk, self.se.user, [self.xen.pk], "Returned for corrections")

        self.assertEqual(result.workflow_state, State.RETURNED_TO_CREATOR)
        self.assertFalse(result.tat_started)
        self.assertTrue(result.movement.is_return_to_creator)
        efile.refresh_from_db()
        self.assertEqual(efile.sla_deadline, deadline)
        self.assertTrue(Notification.objects.filter(person=self.xen, type=Notification.Type.FILE_RETURNED).exists())

    def test_team_member_outside_geography_skips_validation(self):
        efile = self.make_file('F-13', self.xen, district=self.district_a, department=self.works)

        result = mark_file_to(efile.pk, self.xen.user, [self.aee.pk], "")

        self.assertTrue(result.is_team_internal)
        self.assertEqual(result.workflow_state, State.TEAM_INTERNAL)
        self.assertFalse(result.tat_started)
        self.assertIsNone(result.sla_deadline)
        self.assertTrue(result.movement.is_team_internal)

    def test_ineligible_target_is_rejected_without_side_effects(self):
        efile = self.make_file('F-14', self.se, division=self.div5, department=self.works)
        eligible = [c.person_id for c in compute_eligible_recipients(efile, self.se, default_dependencies())]
        self.assertNotIn(42, eligible)

        with self.assertRaises(EligibilityError) as ctx:
            mark_file_to(efile.pk, self.se.user, [42], "")

        self.assertIn("not allowed", ctx.exception.reason)
        self.assertEqual(FileMovement.objects.filter(file=efile).count(), 0)
        efile.refresh_from_db()
        self.assertIsNone(efile.assigned_to)
        self.assertIsNone(efile.workflow_state)
        self.assertEqual(efile.status, EFile.Status.DRAFT)

    def test_geographic_mismatch_rolls_back(self):
        role = Role.objects.create(name="Superintending Engineer North", code="SE_NORTH")
        se_north = self.make_person('se_north', role, self.head_office, division=self.div5)
        efile = self.make_file('F-15', self.xen, division=self.div6, department=self.works)

        with self.assertRaises(GeographicMismatchError) as ctx:
            mark_file_to(efile.pk, self.xen.user, [se_north.pk], "")

        self.assertEqual(ctx.exception.reason, "Geographic mismatch: required scope division")
        self.assertFalse(FileMovement.objects.filter(file=efile).exists())

    def test_shared_role_division_passes_geographic_check(self):
        RoleLocation.objects.create(role=self.role_se, division=self.div5)
        efile = self.make_file('F-17', self.ce, division=self.div6)

        result = mark_file_to(efile.pk, self.ce.user, [self.se.pk], "")

        self.assertEqual(result.workflow_state, State.EXTERNAL)
        self.assertEqual(FileMovement.objects.filter(file=efile).count(), 1)

    def test_global_actor_bypasses_geography(self):
        state = WorkflowState.objects.create(current_state=State.EXTERNAL, is_within_team=False, creator=self.xen)
        efile = self.make_file('F-16', self.xen, division=self.div6, assigned_to=self.ceo, workflow_state=state)

        result = mark_file_to(efile.pk, self.ceo.user, [self.aee.pk], "")

        # Not external, not team-internal, not the creator: state is unchanged.
        self.assertEqual(result.workflow_state, State.EXTERNAL)
        self.assertFalse(result.tat_started)

    def test_only_assignee_marks_external_file(self):
        state = WorkflowState.objects.create(current_state=State.EXTERNAL, is_within_team=False, creator=self.xen)
        efile = self.make_file('F-17', self.xen, division=self.div5, assigned_to=self.se, workflow_state=state)
        with self.assertRaises(MarkPermissionError):
            mark_file_to(efile.pk, self.xen.user, [self.aee.pk], "")

    def test_superuser_skips_mark_permission(self):
        self.xen.user.is_superuser = True
        self.xen.user.save()
        state = WorkflowState.objects.create(current_state=State.EXTERNAL, is_within_team=False, creator=self.xen)
        efile = self.make_file('F-18', self.xen, division=self.div5, assigned_to=self.se, workflow_state=state)
        result = mark_file_to(efile.pk, self.xen.user, [self.se.pk], "")
        self.assertEqual(result.movement.to_user, self.se)

    def test_user_without_profile_is_rejected(self):
        stranger = User.objects.create_user(username='stranger', password='password')
        efile = self.make_file('F-19', self.se, division=self.div5)
        with self.assertRaises(InactiveProfileError):
            mark_file_to(efile.pk, stranger, [self.ce.pk], "")

    def test_signature_required_outside_team(self):
        file_type = FileType.objects.create(name="Tender", code="TENDER", requires_signature=True)
        efile = self.make_file('F-20', self.se, division=self.div5, department=self.works, file_type=file_type)

        with self.assertRaises(SignatureRequiredError):
            mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")

        FileSignature.objects.create(file=efile, signer=self.se)
        result = mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")
        self.assertTrue(result.tat_started)

    def test_internal_move_to_ordinary_role_needs_no_signature(self):
        file_type = FileType.objects.create(name="Estimate", code="EST", requires_signature=True)
        clerk = self.make_person('clerk', Role.objects.create(name="Clerk", code="CLERK"), self.works,
                                 district=self.district_a)
        state = WorkflowState.objects.create(current_state=State.TEAM_INTERNAL, creator=self.xen)
        efile = self.make_file('F-26', self.xen, district=self.district_a, department=self.works,
                               file_type=file_type, workflow_state=state)

        result = mark_file_to(efile.pk, self.xen.user, [clerk.pk], "")

        self.assertFalse(result.tat_started)
        self.assertFalse(FileSignature.objects.filter(file=efile).exists())

    def test_failed_sla_lookup_keeps_previous_deadline(self):
        deadline = timezone.now() + timedelta(hours=3)
        efile = self.make_file('F-21', self.se, division=self.div5, department=self.works, sla_deadline=deadline)

        with mock.patch('routing.services.compute_deadline', return_value=None):
            result = mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")

        self.assertTrue(result.tat_started)
        efile.refresh_from_db()
        self.assertEqual(efile.sla_deadline, deadline)

    def test_each_mark_appends_one_movement(self):
        efile = self.make_file('F-22', self.xen, district=self.district_a, department=self.works)
        first = mark_file_to(efile.pk, self.xen.user, [self.aee.pk], "one").movement
        mark_file_to(efile.pk, self.aee.user, [self.xen.pk], "two")

        self.assertEqual(FileMovement.objects.filter(file=efile).count(), 2)
        first.refresh_from_db()
        self.assertEqual(first.remarks, "one")

    def test_movements_are_immutable(self):
        efile = self.make_file('F-23', self.xen, district=self.district_a, department=self.works)
        movement = mark_file_to(efile.pk, self.xen.user, [self.aee.pk], "").movement
        movement.remarks = "edited"
        with self.assertRaises(ValueError):
            movement.save()
        with self.assertRaises(ValueError):
            movement.delete()

    @override_settings(EFILING_MESSAGE_BACKEND='notifications.backends.LocmemMessageBackend')
    def test_external_message_sent_after_commit(self):
        LocmemMessageBackend.outbox.clear()
        efile = self.make_file('F-24', self.se, division=self.div5, department=self.works)

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")
        self.assertEqual(LocmemMessageBackend.outbox, [])

        for callback in callbacks:
            callback()
        self.assertEqual(len(LocmemMessageBackend.outbox), 1)
        self.assertEqual(LocmemMessageBackend.outbox[0][0], '03007654321')

    def test_notification_failure_does_not_undo_marking(self):
        efile = self.make_file('F-25', self.se, division=self.div5, department=self.works)
        with mock.patch('notifications.outbox.notify', side_effect=RuntimeError("down")):
            with self.assertLogs('notifications.outbox', level='ERROR'):
                with self.captureOnCommitCallbacks(execute=True):
                    mark_file_to(efile.pk, self.se.user, [self.ce.pk], "")
        self.assertEqual(FileMovement.objects.filter(file=efile).count(), 1)


class SLAPauseTest(RoutingFixtureMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.deadline = timezone.now() + timedelta(hours=10)
        self.efile = self.make_file('F-30', self.se, division=self.div5, sla_deadline=self.deadline)

    def test_pause_and_resume_with_extension(self):
        self.assertTrue(pause_sla(self.efile.pk, by=self.ceo, reason='CEO_REVIEW'))
        self.assertFalse(pause_sla(self.efile.pk, by=self.ceo))

        self.efile.refresh_from_db()
        self.assertTrue(self.efile.sla_paused)
        self.assertEqual(self.efile.sla_pause_count, 1)

        self.assertTrue(resume_sla(self.efile.pk, extension_hours=2))
        self.assertFalse(resume_sla(self.efile.pk))

        self.efile.refresh_from_db()
        self.assertFalse(self.efile.sla_paused)
        self.assertEqual(self.efile.sla_deadline, self.deadline + timedelta(hours=2))
        record = SLAPauseRecord.objects.get(file=self.efile)
        self.assertIsNotNone(record.resumed_at)
        self.assertEqual(record.pause_reason, 'CEO_REVIEW')


class TatWarningTest(RoutingFixtureMixin, TestCase):

    def test_warns_once_inside_window(self):
        now = timezone.now()
        efile = self.make_file('F-40', self.se, assigned_to=self.ce,
                               sla_deadline=now + timedelta(hours=1, minutes=2))
        self.make_file('F-41', self.se, assigned_to=self.ce, sla_deadline=now + timedelta(hours=3))
        self.make_file('F-42', self.se, assigned_to=self.ce, sla_paused=True,
                       sla_deadline=now + timedelta(hours=1, minutes=2))

        self.assertEqual(check_tat_warnings(now), (1, 0))
        log = TatLog.objects.get()
        self.assertEqual(log.file, efile)
        self.assertEqual(log.person, self.ce)
        self.assertTrue(Notification.objects.filter(person=self.ce, type=Notification.Type.TAT_WARNING).exists())

        self.assertEqual(check_tat_warnings(now), (0, 0))

    def test_management_command(self):
        out = StringIO()
        call_command('check_tat_warnings', stdout=out)
        self.assertIn('Sent 0 TAT warning(s)', out.getvalue())


class RoutingViewTest(RoutingFixtureMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = Client()
        self.efile = self.make_file('F-50', self.se, division=self.div5, department=self.works)

    def post_json(self, name, data):
        return self.client.post(reverse(name, args=[self.efile.pk]), data=json.dumps(data),
                                content_type='application/json')

    def test_login_required(self):
        response = self.post_json('routing:mark_to', {'user_ids': [self.ce.pk]})
        self.assertEqual(response.status_code, 403)

    def test_mark_to_and_movements(self):
        self.client.force_login(self.se.user)
        response = self.post_json('routing:mark_to', {'user_ids': [self.ce.pk], 'remarks': 'for approval'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['workflow_state'], 'EXTERNAL')
        self.assertTrue(response.json()['tat_started'])

        response = self.client.get(reverse('routing:movements', args=[self.efile.pk]))
        movements = response.json()['movements']
        self.assertEqual(len(movements), 1)
        self.assertEqual(movements[0]['remarks'], 'for approval')

    def test_mark_to_form_post(self):
        self.client.force_login(self.se.user)
        response = self.client.post(reverse('routing:mark_to', args=[self.efile.pk]),
                                    {'user_ids': [self.ce.pk], 'remarks': 'form'})
        self.assertEqual(response.status_code, 200)

    def test_ineligible_target_returns_error(self):
        self.client.force_login(self.se.user)
        response = self.post_json('routing:mark_to', {'user_ids': [42]})
        self.assertEqual(response.status_code, 400)
        self.assertIn("not allowed", response.json()['error'])

    def test_missing_file_returns_404(self):
        self.client.force_login(self.se.user)
        response = self.client.post(reverse('routing:mark_to', args=[999999]), data=json.dumps({'user_ids': [1]}),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 404)

    def test_marking_recipients(self):
        self.client.force_login(self.se.user)
        response = self.client.get(reverse('routing:marking_recipients', args=[self.efile.pk]))
        ids = [r['id'] for r in response.json()['recipients']]
        self.assertIn(self.ce.pk, ids)

    def test_sla_pause_requires_global_role(self):
        self.client.force_login(self.se.user)
        response = self.post_json('routing:sla_pause', {})
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.ceo.user)
        response = self.post_json('routing:sla_pause', {'reason': 'CEO_REVIEW'})
        self.assertTrue(response.json()['paused'])

        response = self.client.get(reverse('routing:sla_status', args=[self.efile.pk]))
        self.assertEqual(response.json()['status'], 'PAUSED')

        response = self.post_json('routing:sla_resume', {})
        self.assertTrue(response.json()['resumed'])
