import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.utils import role_pattern_matches
from filing.models import EFile, WorkflowState
from .exceptions import FileNotFound
from .models import SLAPauseRecord

logger = logging.getLogger(__name__)

DEFAULT_SLA_HOURS = 24


def default_sla_hours():
    return getattr(settings, 'EFILING_DEFAULT_SLA_HOURS', DEFAULT_SLA_HOURS)


def get_sla_hours(from_role_code, to_role_code, sla_matrix):
    """
    Hours allowed for a (from role, to role) hop: the first active matrix rule
    matching both codes, else the default. Returns None if the lookup fails.
    """
    try:
        for rule in sla_matrix.active_rules():
            if role_pattern_matches(from_role_code, rule.from_role_code) and \
                    role_pattern_matches(to_role_code, rule.to_role_code):
                # A zero-hour rule means the default.
                return rule.sla_hours or default_sla_hours()
    except Exception:
        logger.warning("SLA lookup failed for %s -> %s", from_role_code, to_role_code, exc_info=True)
        return None
    return default_sla_hours()


def compute_deadline(from_role_code, to_role_code, now, sla_matrix):
    hours = get_sla_hours(from_role_code, to_role_code, sla_matrix)
    if hours is None:
        return None
    return now + timedelta(hours=hours)


def effective_sla_status(efile, state=None, now=None):
    """
    Effective SLA view of a file. No TAT applies while a file stays inside
    its team; a paused clock reports its accumulated pause time.
    """
    now = now or timezone.now()

    if state is not None and state.is_within_team and state.current_state == WorkflowState.State.TEAM_INTERNAL:
        return {
            'status': 'TEAM_INTERNAL',
            'message': 'File is within team workflow - TAT not applicable',
            'is_team_internal': True,
        }

    if efile.sla_paused:
        return {
            'status': 'PAUSED',
            'reason': 'SLA paused',
            'accumulated_hours': efile.sla_accumulated_hours or 0,
            'paused_at': efile.sla_paused_at,
            'pause_count': efile.sla_pause_count,
        }

    if efile.sla_deadline is None:
        return {'status': 'PENDING', 'message': 'No SLA deadline set'}

    remaining = (efile.sla_deadline - now).total_seconds() / 3600
    return {
        'status': 'BREACHED' if remaining < 0 else 'ACTIVE',
        'remaining_hours': round(remaining, 2),
        'accumulated_hours': efile.sla_accumulated_hours or 0,
        'deadline': efile.sla_deadline,
        'breached': remaining < 0,
    }


@transaction.atomic
def pause_sla(file_id, by=None, reason='MANUAL_PAUSE'):
    """
    Stops the SLA clock of a file. Pausing a paused file does nothing.
    Returns True if the clock was paused by this call.
    """
    efile = EFile.objects.select_for_update().filter(pk=file_id).first()
    if efile is None:
        raise FileNotFound()
    if efile.sla_paused:
        return False

    now = timezone.now()
    efile.sla_paused = True
    efile.sla_paused_at = now
    efile.sla_pause_count += 1
    efile.save(update_fields=['sla_paused', 'sla_paused_at', 'sla_pause_count', 'updated_at'])

    SLAPauseRecord.objects.create(file=efile, paused_at=now, pause_reason=reason, paused_by=by)
    logger.info("SLA paused for file %s (%s)", efile.file_number, reason)
    return True


@transaction.atomic
def resume_sla(file_id, extension_hours=None):
    """
    Restarts the SLA clock. The deadline moves forward by the pause duration,
    or by `extension_hours` when given. Resuming a running clock does nothing.
    """
    efile = EFile.objects.select_for_update().filter(pk=file_id).first()
    if efile is None:
        raise FileNotFound()
    if not efile.sla_paused or efile.sla_paused_at is None:
        return False

    now = timezone.now()
    paused_hours = (now - efile.sla_paused_at).total_seconds() / 3600
    additional = extension_hours if extension_hours is not None else paused_hours

    record = SLAPauseRecord.objects.filter(file=efile, resumed_at__isnull=True).order_by('-paused_at').first()
    if record:
        record.resumed_at = now
        record.duration_hours = paused_hours
        record.save(update_fields=['resumed_at', 'duration_hours'])

    efile.sla_paused = False
    efile.sla_paused_at = None
    if efile.sla_deadline is not None:
        efile.sla_deadline = efile.sla_deadline + timedelta(hours=additional)
    efile.sla_accumulated_hours = (efile.sla_accumulated_hours or 0) + paused_hours
    efile.save(update_fields=['sla_paused', 'sla_paused_at', 'sla_deadline', 'sla_accumulated_hours', 'updated_at'])

    logger.info("SLA resumed for file %s after %.2fh", efile.file_number, paused_hours)
    return True
