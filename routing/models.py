from django.db import models
from accounts.models import Department, EfilingUser
from filing.models import EFile


class LevelScope(models.TextChoices):
    DISTRICT = 'district', 'District'
    TOWN = 'town', 'Town'
    DIVISION = 'division', 'Division'
    DEPARTMENT = 'department', 'Department'
    TEAM = 'team', 'Team'
    GLOBAL = 'global', 'Global'


class SLAMatrixRule(models.Model):
    """
    Maps (from role, to role) -> geographic scope and SLA hours.
    Role codes may use '*' wildcards, e.g. 'XEN_*' -> 'SE_*'.
    """
    from_role_code = models.CharField(max_length=50)
    to_role_code = models.CharField(max_length=50)
    level_scope = models.CharField(max_length=20, choices=LevelScope.choices, default=LevelScope.DISTRICT)
    sla_hours = models.PositiveIntegerField(default=24)
    is_active = models.BooleanField(default=True, db_index=True)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['id']
        verbose_name = "SLA Matrix Rule"
        verbose_name_plural = "SLA Matrix Rules"

    def __str__(self):
        return f"{self.from_role_code} -> {self.to_role_code} ({self.level_scope}, {self.sla_hours}h)"


class FileMovement(models.Model):
    """
    Append-only custody ledger. Names, designations and locations are copied
    at the time of the action so later profile edits never rewrite history.
    """
    class ActionType(models.TextChoices):
        MARK_TO = 'MARK_TO', 'Marked To'

    file = models.ForeignKey(EFile, on_delete=models.PROTECT, related_name='movements')
    from_user = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    to_user = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    from_department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    to_department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    action_type = models.CharField(max_length=20, choices=ActionType.choices, default=ActionType.MARK_TO)
    remarks = models.TextField(blank=True)

    is_team_internal = models.BooleanField(default=False)
    is_return_to_creator = models.BooleanField(default=False)
    tat_started = models.BooleanField(default=False)

    from_user_name = models.CharField(max_length=255, blank=True)
    from_user_designation = models.CharField(max_length=150, blank=True)
    from_user_town = models.CharField(max_length=100, blank=True)
    from_user_division = models.CharField(max_length=100, blank=True)
    to_user_name = models.CharField(max_length=255, blank=True)
    to_user_designation = models.CharField(max_length=150, blank=True)
    to_user_town = models.CharField(max_length=100, blank=True)
    to_user_division = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "File Movement"
        verbose_name_plural = "File Movements"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("File movements are immutable once recorded.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("File movements cannot be deleted.")

    def __str__(self):
        return f"{self.file.file_number}: {self.from_user_name or '-'} -> {self.to_user_name or '-'}"


class SLAPauseRecord(models.Model):
    file = models.ForeignKey(EFile, on_delete=models.CASCADE, related_name='sla_pauses')
    paused_at = models.DateTimeField()
    resumed_at = models.DateTimeField(null=True, blank=True)
    pause_reason = models.CharField(max_length=50, default='MANUAL_PAUSE')
    paused_by = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    duration_hours = models.FloatField(null=True, blank=True)

    class Meta:
        ordering = ['-paused_at']

    def __str__(self):
        return f"SLA pause on {self.file.file_number} at {self.paused_at}"


class TatLog(models.Model):
    class EventType(models.TextChoices):
        ONE_HOUR_WARNING = 'ONE_HOUR_WARNING', 'Deadline Warning'

    file = models.ForeignKey(EFile, on_delete=models.CASCADE, related_name='tat_logs')
    person = models.ForeignKey(EfilingUser, on_delete=models.CASCADE, related_name='tat_logs')
    event_type = models.CharField(max_length=30, choices=EventType.choices)
    sla_deadline = models.DateTimeField(null=True, blank=True)
    time_remaining_hours = models.FloatField(null=True, blank=True)
    message = models.TextField(blank=True)
    notification_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.event_type} for {self.file.file_number}"
