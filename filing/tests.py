from django.test import TestCase, Client
from django.urls import reverse
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from accounts.models import District, Town, Division, Role, EfilingUser
from .models import EFile, WorkflowState

User = get_user_model()

class EFileTests(TestCase):
    def setUp(self):
        self.client = Client()
        self.district = District.objects.create(name="District A", code="DA")
        self.town = Town.objects.create(name="Town 1", district=self.district)
        self.division = Division.objects.create(name="Division 5", code="D5")
        role = Role.objects.create(name="Executive Engineer", code="XEN")
        self.user = User.objects.create_user(username="xen", password="password")
        self.creator = EfilingUser.objects.create(user=self.user, role=role)
        self.efile = EFile.objects.create(file_number="WB/2024/001", subject="Road repair", created_by=self.creator)

    def test_town_and_division_are_exclusive(self):
        self.efile.town = self.town
        self.efile.division = self.division
        with self.assertRaises(ValidationError):
            self.efile.clean()

        self.efile.division = None
        self.efile.clean()

    def test_status_view(self):
        url = reverse('filing:file_status', args=[self.efile.pk])

        response = self.client.get(url)
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.user)
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'DRAFT')
        self.assertIsNone(data['workflow_state'])
        self.assertIsNone(data['assigned_to'])

    def test_status_view_with_workflow_state(self):
        state = WorkflowState.objects.create(current_state=WorkflowState.State.EXTERNAL, is_within_team=False,
                                             tat_active=True)
        self.efile.workflow_state = state
        self.efile.assigned_to = self.creator
        self.efile.save()

        self.client.force_login(self.user)
        data = self.client.get(reverse('filing:file_status', args=[self.efile.pk])).json()
        self.assertEqual(data['workflow_state'], 'EXTERNAL')
        self.assertTrue(data['tat_active'])
        self.assertEqual(data['assigned_to']['id'], self.creator.pk)

    def test_check_status_by_file_number(self):
        self.client.force_login(self.user)
        url = reverse('filing:check_file_status')

        data = self.client.get(url, {'ref': ' wb/2024/001 '}).json()
        self.assertTrue(data['found'])
        self.assertEqual(data['file_number'], "WB/2024/001")

        data = self.client.get(url, {'ref': 'missing'}).json()
        self.assertFalse(data['found'])

    def test_status_view_requires_efiling_profile(self):
        stranger = User.objects.create_user(username="stranger", password="password")
        self.client.force_login(stranger)
        response = self.client.get(reverse('filing:file_status', args=[self.efile.pk]))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error'], 'Current user not found in e-filing system')
