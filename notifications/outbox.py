"""
Notifications queued during a routing transaction and delivered only after
it commits. A failing notification is logged and skipped; it never affects
the committed marking or the other notifications.
"""
import logging
from dataclasses import dataclass

from django.db import transaction

from .services import notify, send_external_message

logger = logging.getLogger(__name__)


@dataclass
class PendingNotification:
    person: object
    file_id: int
    type: str
    message: str
    priority: str = 'normal'
    action_required: bool = False
    external: bool = False


class Outbox:

    def __init__(self):
        self.pending = []

    def add(self, person, file_id, type, message, **kwargs):
        self.pending.append(PendingNotification(person, file_id, type, message, **kwargs))

    def dispatch(self):
        delivered = 0
        for item in self.pending:
            try:
                notify(item.person.pk, item.file_id, item.type, item.message,
                       priority=item.priority, action_required=item.action_required)
                if item.external:
                    send_external_message(item.person, item.message)
                delivered += 1
            except Exception:
                logger.exception("Notification %s to person %s failed", item.type, item.person.pk)
        return delivered

    def dispatch_on_commit(self):
        transaction.on_commit(self.dispatch)
