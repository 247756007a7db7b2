import json
import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.views.generic import View

from .exceptions import RoutingError
from .ledger import movement_as_dict
from .services import (
    get_file_movements, get_marking_recipients, get_sla_status, mark_file_to, pause_file_sla, resume_file_sla,
)

logger = logging.getLogger(__name__)


def parse_body(request):
    """JSON body when sent as JSON, form data otherwise."""
    if request.content_type == 'application/json':
        try:
            return json.loads(request.body or b'{}')
        except ValueError:
            raise RoutingError("Invalid JSON body")
    data = {key: request.POST.get(key) for key in request.POST}
    if 'user_ids' in request.POST:
        data['user_ids'] = request.POST.getlist('user_ids')
    return data


class RoutingApiView(LoginRequiredMixin, View):
    """
    Maps routing errors to JSON error responses. Anything unexpected is
    logged and reported as a generic 500.
    """
    raise_exception = True

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        try:
            return super().dispatch(request, *args, **kwargs)
        except RoutingError as e:
            return JsonResponse({'error': e.reason}, status=e.status_code)
        except Exception:
            logger.exception("Unhandled error in %s", self.__class__.__name__)
            return JsonResponse({'error': 'Internal server error'}, status=500)


class MarkToView(RoutingApiView):
    def post(self, request, file_id):
        body = parse_body(request)
        user_ids = body.get('user_ids')
        if not isinstance(user_ids, list):
            user_ids = [user_ids] if user_ids else []

        result = mark_file_to(file_id, request.user, user_ids, body.get('remarks') or '')
        return JsonResponse({'success': True, 'message': 'File marked successfully', **result.as_dict()})


class MarkingRecipientsView(RoutingApiView):
    def get(self, request, file_id):
        recipients = get_marking_recipients(file_id, request.user)
        return JsonResponse({'recipients': [c.as_dict() for c in recipients]})


class FileMovementsView(RoutingApiView):
    def get(self, request, file_id):
        movements = get_file_movements(file_id)
        return JsonResponse({'movements': [movement_as_dict(m) for m in movements]})


class SLAStatusView(RoutingApiView):
    def get(self, request, file_id):
        status = get_sla_status(file_id)
        for key in ('deadline', 'paused_at'):
            if status.get(key) is not None:
                status[key] = status[key].isoformat()
        return JsonResponse(status)


class SLAPauseView(RoutingApiView):
    def post(self, request, file_id):
        body = parse_body(request)
        paused = pause_file_sla(file_id, request.user, reason=body.get('reason') or 'CEO_REVIEW')
        return JsonResponse({'success': True, 'paused': paused})


class SLAResumeView(RoutingApiView):
    def post(self, request, file_id):
        body = parse_body(request)
        extension = body.get('extension_hours')
        try:
            extension = float(extension) if extension not in (None, '') else None
        except (TypeError, ValueError):
            raise RoutingError("extension_hours must be a number")
        resumed = resume_file_sla(file_id, request.user, extension_hours=extension)
        return JsonResponse({'success': True, 'resumed': resumed})
