from django.test import TestCase, SimpleTestCase, override_settings
from django.contrib.auth import get_user_model
from .models import Department, Role, EfilingUser
from .utils import (
    get_efiling_profile, role_pattern_matches, is_external_role, is_global_role,
    is_superintendent_engineer, is_chief_engineer, is_team_type_role, is_executive_engineer,
    is_administrative_officer, is_director_medical_services
)

User = get_user_model()

class RoleUtilsTests(SimpleTestCase):
    def test_role_pattern_matches(self):
        self.assertTrue(role_pattern_matches('SE_CEN', 'SE_*'))
        self.assertTrue(role_pattern_matches('xen_wat', 'XEN_*'))
        self.assertTrue(role_pattern_matches('CE', '*'))
        self.assertTrue(role_pattern_matches('CE', ''))
        self.assertTrue(role_pattern_matches('CE', 'ce'))
        self.assertFalse(role_pattern_matches('SE_CEN', 'SE'))
        self.assertFalse(role_pattern_matches('XSE_CEN', 'SE_*'))

    def test_superintendent_engineer_detection(self):
        self.assertTrue(is_superintendent_engineer('SE'))
        self.assertTrue(is_superintendent_engineer('SE_NORTH'))
        self.assertTrue(is_superintendent_engineer('WATER_SE'))
        self.assertTrue(is_superintendent_engineer('R12', 'Superintending Engineer (Water)'))
        self.assertFalse(is_superintendent_engineer('XEN', 'Executive Engineer'))
        self.assertFalse(is_superintendent_engineer('SEC'))

    def test_chief_engineer_detection(self):
        self.assertTrue(is_chief_engineer('CE'))
        self.assertTrue(is_chief_engineer('ce_water'))
        self.assertFalse(is_chief_engineer('CEO'))

    def test_signature_role_groups(self):
        self.assertTrue(is_team_type_role('AEE_NORTH'))
        self.assertTrue(is_team_type_role('sub-engineer'))
        self.assertFalse(is_team_type_role('XEN'))
        self.assertTrue(is_executive_engineer('XEN_WAT'))
        self.assertTrue(is_executive_engineer('RESIDENT_ENGINEER'))
        self.assertFalse(is_executive_engineer('REC'))
        self.assertTrue(is_administrative_officer('ADMIN_OFFICER_HQ'))
        self.assertTrue(is_director_medical_services('DIRECTOR_MEDICAL_SERVICES_2'))

    def test_default_role_sets(self):
        for code in ('SE', 'CE', 'CFO', 'COO', 'CEO'):
            self.assertTrue(is_external_role(code))
        self.assertFalse(is_external_role('XEN'))
        self.assertTrue(is_global_role('ceo'))
        self.assertFalse(is_global_role('CE'))

    @override_settings(EFILING_GLOBAL_ROLE_CODES=['MD'])
    def test_global_roles_are_configurable(self):
        self.assertTrue(is_global_role('MD'))
        self.assertFalse(is_global_role('CEO'))

class ProfileTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name="Works", code="WORKS")
        self.role = Role.objects.create(name="Executive Engineer", code="xen")
        self.user = User.objects.create_user(username="xen_user", password="password")
        self.profile = EfilingUser.objects.create(user=self.user, role=self.role, department=self.department)

    def test_active_profile_is_found(self):
        profile = get_efiling_profile(self.user)
        self.assertEqual(profile, self.profile)
        self.assertEqual(profile.role_code, 'XEN')
        self.assertEqual(profile.display_name, 'xen_user')

    def test_inactive_profile_is_ignored(self):
        self.profile.is_active = False
        self.profile.save()
        self.assertIsNone(get_efiling_profile(self.user))

    def test_user_without_profile(self):
        other = User.objects.create_user(username="other", password="password")
        self.assertIsNone(get_efiling_profile(other))
