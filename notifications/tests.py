from django.test import TestCase, override_settings
from django.contrib.auth import get_user_model
from accounts.models import EfilingUser
from filing.models import EFile
from .backends import LocmemMessageBackend
from .models import Notification
from .outbox import Outbox
from .services import notify, send_external_message

User = get_user_model()

@override_settings(EFILING_MESSAGE_BACKEND='notifications.backends.LocmemMessageBackend')
class NotificationTests(TestCase):
    def setUp(self):
        LocmemMessageBackend.outbox.clear()
        user = User.objects.create_user(username="ce", password="password")
        self.person = EfilingUser.objects.create(user=user, contact_number="03001112223")
        self.efile = EFile.objects.create(file_number="F-1", subject="Test", created_by=self.person)

    def test_notify_creates_row(self):
        notify(self.person.pk, self.efile.pk, Notification.Type.FILE_ASSIGNED, "Marked to you")
        n = Notification.objects.get()
        self.assertEqual(n.person, self.person)
        self.assertFalse(n.is_read)

    def test_external_message_needs_contact_number(self):
        self.assertTrue(send_external_message(self.person, "hello"))
        self.assertEqual(LocmemMessageBackend.outbox, [("03001112223", "hello")])

        self.person.contact_number = ''
        self.assertFalse(send_external_message(self.person, "hello"))
        self.assertEqual(len(LocmemMessageBackend.outbox), 1)

    @override_settings(EFILING_MESSAGE_BACKEND='notifications.backends.BaseMessageBackend')
    def test_backend_failure_is_logged(self):
        with self.assertLogs('notifications.services', level='WARNING'):
            self.assertFalse(send_external_message(self.person, "hello"))

    def test_outbox_dispatches_only_after_commit(self):
        outbox = Outbox()
        outbox.add(self.person, self.efile.pk, Notification.Type.FILE_ASSIGNED, "Marked", external=True)

        with self.captureOnCommitCallbacks(execute=True):
            outbox.dispatch_on_commit()
            self.assertFalse(Notification.objects.exists())

        self.assertEqual(Notification.objects.count(), 1)
        self.assertEqual(len(LocmemMessageBackend.outbox), 1)
