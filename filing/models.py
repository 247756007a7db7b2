from django.core.exceptions import ValidationError
from django.db import models
from accounts.models import Department, District, Town, Division, EfilingUser


class FileType(models.Model):
    name = models.CharField(max_length=150)
    code = models.CharField(max_length=30, unique=True)
    requires_signature = models.BooleanField(
        default=False, help_text="Sender must e-sign before forwarding outside the team"
    )

    def __str__(self):
        return f"{self.name} ({self.code})"


class WorkflowState(models.Model):
    """
    Routing state of a single file. Created on first marking.
    """
    class State(models.TextChoices):
        TEAM_INTERNAL = 'TEAM_INTERNAL', 'Team Internal'
        EXTERNAL = 'EXTERNAL', 'External'
        RETURNED_TO_CREATOR = 'RETURNED_TO_CREATOR', 'Returned to Creator'

    current_state = models.CharField(max_length=30, choices=State.choices, default=State.TEAM_INTERNAL)
    creator = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    last_actor = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    current_assigned_to = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    is_within_team = models.BooleanField(default=True)

    tat_active = models.BooleanField(default=False)
    tat_started_at = models.DateTimeField(null=True, blank=True)
    last_external_mark_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.current_state} (TAT {'on' if self.tat_active else 'off'})"


class EFile(models.Model):
    class Status(models.TextChoices):
        DRAFT = 'DRAFT', 'Draft'
        IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
        COMPLETED = 'COMPLETED', 'Completed'
        CLOSED = 'CLOSED', 'Closed'

    file_number = models.CharField(max_length=50, unique=True)
    subject = models.CharField(max_length=255)
    file_type = models.ForeignKey(FileType, on_delete=models.SET_NULL, null=True, blank=True, related_name='files')
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='files')

    created_by = models.ForeignKey(EfilingUser, on_delete=models.PROTECT, related_name='created_files')
    assigned_to = models.ForeignKey(EfilingUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_files')

    # Files are routed either town-wise or division-wise, never both.
    district = models.ForeignKey(District, on_delete=models.SET_NULL, null=True, blank=True)
    town = models.ForeignKey(Town, on_delete=models.SET_NULL, null=True, blank=True)
    division = models.ForeignKey(Division, on_delete=models.SET_NULL, null=True, blank=True)

    workflow_state = models.OneToOneField(
        WorkflowState, on_delete=models.SET_NULL, null=True, blank=True, related_name='file'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)

    sla_deadline = models.DateTimeField(null=True, blank=True)
    sla_paused = models.BooleanField(default=False)
    sla_paused_at = models.DateTimeField(null=True, blank=True)
    sla_pause_count = models.PositiveIntegerField(default=0)
    sla_accumulated_hours = models.FloatField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "E-File"
        verbose_name_plural = "E-Files"

    def clean(self):
        if self.town_id and self.division_id:
            raise ValidationError("A file is routed either by town or by division, not both.")

    def __str__(self):
        return f"File {self.file_number}"


class FileSignature(models.Model):
    file = models.ForeignKey(EFile, on_delete=models.CASCADE, related_name='signatures')
    signer = models.ForeignKey(EfilingUser, on_delete=models.CASCADE, related_name='file_signatures')
    is_active = models.BooleanField(default=True)
    signed_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Signature by {self.signer} on {self.file.file_number}"
