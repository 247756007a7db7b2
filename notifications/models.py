from django.db import models
from accounts.models import EfilingUser
from filing.models import EFile


class Notification(models.Model):
    class Type(models.TextChoices):
        FILE_ASSIGNED = 'FILE_ASSIGNED', 'File Assigned'
        FILE_RETURNED = 'FILE_RETURNED', 'File Returned to Creator'
        FILE_VISIBILITY = 'FILE_VISIBILITY', 'File Visible to Assistant'
        TAT_WARNING = 'TAT_WARNING', 'TAT Warning'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        NORMAL = 'normal', 'Normal'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    person = models.ForeignKey(EfilingUser, on_delete=models.CASCADE, related_name='notifications')
    file = models.ForeignKey(EFile, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    type = models.CharField(max_length=30, choices=Type.choices)
    message = models.TextField()
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    action_required = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} -> {self.person}"
