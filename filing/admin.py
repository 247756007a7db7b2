from django.contrib import admin
from .models import FileType, WorkflowState, EFile, FileSignature

@admin.register(FileType)
class FileTypeAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'requires_signature')
    search_fields = ('name', 'code')

@admin.register(WorkflowState)
class WorkflowStateAdmin(admin.ModelAdmin):
    list_display = ('id', 'current_state', 'is_within_team', 'tat_active', 'tat_started_at', 'updated_at')
    list_filter = ('current_state', 'tat_active')

@admin.register(EFile)
class EFileAdmin(admin.ModelAdmin):
    list_display = ('file_number', 'subject', 'status', 'department', 'assigned_to', 'sla_deadline')
    list_filter = ('status', 'department', 'file_type')
    search_fields = ('file_number', 'subject')
    raw_id_fields = ('created_by', 'assigned_to', 'workflow_state')

@admin.register(FileSignature)
class FileSignatureAdmin(admin.ModelAdmin):
    list_display = ('file', 'signer', 'is_active', 'signed_at')
    list_filter = ('is_active',)
