from django.contrib import admin
from .models import SLAMatrixRule, FileMovement, SLAPauseRecord, TatLog

@admin.register(SLAMatrixRule)
class SLAMatrixRuleAdmin(admin.ModelAdmin):
    list_display = ('from_role_code', 'to_role_code', 'level_scope', 'sla_hours', 'is_active')
    list_filter = ('level_scope', 'is_active')
    search_fields = ('from_role_code', 'to_role_code', 'description')

@admin.register(FileMovement)
class FileMovementAdmin(admin.ModelAdmin):
    list_display = ('file', 'from_user_name', 'to_user_name', 'action_type', 'tat_started', 'created_at')
    list_filter = ('action_type', 'is_team_internal', 'tat_started')
    search_fields = ('file__file_number', 'from_user_name', 'to_user_name')

    # The ledger is append-only.
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

@admin.register(SLAPauseRecord)
class SLAPauseRecordAdmin(admin.ModelAdmin):
    list_display = ('file', 'paused_at', 'resumed_at', 'pause_reason', 'duration_hours')
    list_filter = ('pause_reason',)

@admin.register(TatLog)
class TatLogAdmin(admin.ModelAdmin):
    list_display = ('file', 'person', 'event_type', 'time_remaining_hours', 'notification_sent', 'created_at')
    list_filter = ('event_type', 'notification_sent')
