from django.shortcuts import get_object_or_404
from django.views import View
from accounts.mixins import EfilingProfileRequiredMixin
from django.http import JsonResponse
from .models import EFile


def search_efile(ref_number):
    """Helper to find a file by its file number."""
    if not ref_number:
        return None
    return EFile.objects.filter(file_number__iexact=ref_number.strip()).first()


def file_status_payload(efile):
    state = efile.workflow_state
    assignee = efile.assigned_to
    return {
        'id': efile.pk,
        'file_number': efile.file_number,
        'subject': efile.subject,
        'status': efile.status,
        'workflow_state': state.current_state if state else None,
        'is_within_team': state.is_within_team if state else True,
        'tat_active': state.tat_active if state else False,
        'assigned_to': {'id': assignee.pk, 'name': assignee.display_name} if assignee else None,
        'sla_deadline': efile.sla_deadline.isoformat() if efile.sla_deadline else None,
        'sla_paused': efile.sla_paused,
    }


class FileStatusView(EfilingProfileRequiredMixin, View):
    raise_exception = True

    def get(self, request, file_id):
        efile = get_object_or_404(
            EFile.objects.select_related('workflow_state', 'assigned_to__user'), pk=file_id
        )
        return JsonResponse(file_status_payload(efile))


class CheckFileStatusView(EfilingProfileRequiredMixin, View):
    raise_exception = True

    def get(self, request):
        efile = search_efile(request.GET.get('ref', ''))
        if efile:
            return JsonResponse({'found': True, **file_status_payload(efile)})
        return JsonResponse({'found': False})
