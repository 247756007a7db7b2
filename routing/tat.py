import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from filing.models import EFile
from notifications.models import Notification
from notifications.services import notify, send_external_message
from .models import TatLog

logger = logging.getLogger(__name__)


def warning_window(now):
    hours = getattr(settings, 'EFILING_TAT_WARNING_HOURS', 1)
    minutes = getattr(settings, 'EFILING_TAT_WARNING_WINDOW_MINUTES', 5)
    start = now + timedelta(hours=hours)
    return start, start + timedelta(minutes=minutes)


def files_due_for_warning(now):
    start, end = warning_window(now)
    recently_warned = TatLog.objects.filter(
        event_type=TatLog.EventType.ONE_HOUR_WARNING,
        created_at__gte=now - timedelta(hours=1),
    ).values('file_id')
    return EFile.objects.select_related('assigned_to__user').filter(
        sla_deadline__gte=start,
        sla_deadline__lte=end,
        sla_paused=False,
        assigned_to__isnull=False,
    ).exclude(pk__in=recently_warned)


def send_tat_warning(efile, now):
    person = efile.assigned_to
    remaining = (efile.sla_deadline - now).total_seconds() / 3600
    message = (
        f"TAT warning: file {efile.file_number} is due in {remaining:.1f} hour(s) "
        f"(deadline {timezone.localtime(efile.sla_deadline):%d %b %Y %H:%M})."
    )
    with transaction.atomic():
        notify(person.pk, efile.pk, Notification.Type.TAT_WARNING, message,
               priority=Notification.Priority.URGENT, action_required=True)
        sent = send_external_message(person, message)
        TatLog.objects.create(
            file=efile,
            person=person,
            event_type=TatLog.EventType.ONE_HOUR_WARNING,
            sla_deadline=efile.sla_deadline,
            time_remaining_hours=round(remaining, 2),
            message=message,
            notification_sent=sent,
        )


def check_tat_warnings(now=None):
    """
    Warns the holders of files whose deadline is about to pass.
    Returns (warned, failed) counts.
    """
    now = now or timezone.now()
    warned = failed = 0
    for efile in files_due_for_warning(now):
        try:
            send_tat_warning(efile, now)
            warned += 1
        except Exception:
            logger.exception("TAT warning for file %s failed", efile.file_number)
            failed += 1
    return warned, failed
