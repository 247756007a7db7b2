import logging

from django.conf import settings
from django.utils.module_loading import import_string

from .models import Notification

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_BACKEND = 'notifications.backends.LoggingMessageBackend'


def get_message_backend():
    path = getattr(settings, 'EFILING_MESSAGE_BACKEND', DEFAULT_MESSAGE_BACKEND)
    return import_string(path)()


def notify(person_id, file_id, type, message, priority=Notification.Priority.NORMAL, action_required=False):
    """Creates an in-app notification row for a person."""
    return Notification.objects.create(
        person_id=person_id,
        file_id=file_id,
        type=type,
        message=message,
        priority=priority,
        action_required=action_required,
    )


def send_external_message(person, message):
    """
    Sends a message through the configured backend. Returns False when the
    person has no contact number or delivery fails.
    """
    if not person.contact_number:
        return False
    try:
        return bool(get_message_backend().send(person.contact_number, message))
    except Exception:
        logger.warning("External message to person %s failed", person.pk, exc_info=True)
        return False
