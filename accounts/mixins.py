from django.contrib.auth.mixins import AccessMixin
from django.http import JsonResponse

from .utils import get_efiling_profile


class EfilingProfileRequiredMixin(AccessMixin):
    """Verify that the current user has an active e-filing profile."""
    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()

        self.profile = get_efiling_profile(request.user)
        if self.profile is None:
            return JsonResponse({'error': 'Current user not found in e-filing system'}, status=403)

        return super().dispatch(request, *args, **kwargs)
