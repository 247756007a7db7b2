import re

from django.conf import settings

from .models import EfilingUser

DEFAULT_EXTERNAL_ROLE_CODES = ('SE', 'CE', 'CFO', 'COO', 'CEO')
DEFAULT_GLOBAL_ROLE_CODES = ('CEO', 'COO')


def get_efiling_profile(user):
    """
    Returns the active EfilingUser linked to the given login account, or None.
    """
    if user is None or not user.is_authenticated:
        return None
    return EfilingUser.objects.select_related(
        'user', 'role', 'department', 'district', 'town', 'division'
    ).filter(user=user, is_active=True).first()


def normalise_role_code(code):
    return (code or '').strip().upper()


def role_pattern_matches(role_code, pattern):
    """
    Matches a role code against an SLA matrix pattern.
    '*' or an empty pattern matches everything; '*' inside a pattern is a wildcard.
    Example: role_pattern_matches('SE_CEN', 'SE_*') -> True
    """
    candidate = normalise_role_code(role_code)
    raw = normalise_role_code(pattern)

    if not raw or raw == '*':
        return True
    if '*' not in raw:
        return candidate == raw

    regex = '^' + '.*'.join(re.escape(part) for part in raw.split('*')) + '$'
    return re.match(regex, candidate) is not None


def external_role_codes():
    return {normalise_role_code(c) for c in getattr(settings, 'EFILING_EXTERNAL_ROLE_CODES', DEFAULT_EXTERNAL_ROLE_CODES)}


def global_role_codes():
    return {normalise_role_code(c) for c in getattr(settings, 'EFILING_GLOBAL_ROLE_CODES', DEFAULT_GLOBAL_ROLE_CODES)}


def is_external_role(role_code):
    return normalise_role_code(role_code) in external_role_codes()


def is_global_role(role_code):
    return normalise_role_code(role_code) in global_role_codes()


def is_superintendent_engineer(role_code, role_name=''):
    """
    SE detection by role code (SE, SE_xxx, xxx_SE) or by name/code spelling out
    "Superintendent Engineer" / "Superintending Engineer".
    """
    code = normalise_role_code(role_code)
    if code == 'SE' or code.startswith('SE_') or code.endswith('_SE'):
        return True

    for text in (code, normalise_role_code(role_name)):
        words = text.replace('_', ' ').replace('-', ' ')
        if 'SUPERINTEND' in words and 'ENGINEER' in words:
            return True
    return False


def is_chief_engineer(role_code):
    code = normalise_role_code(role_code)
    return code == 'CE' or code.startswith('CE_') or code.endswith('_CE')


# Roles that pass files among themselves without signing.
TEAM_ROLE_MARKERS = ('AEE', 'DAO', 'AO', 'ACCOUNT', 'SUB-ENGINEER', 'SUB_ENGINEER', 'SUBENGINEER')


def is_team_type_role(role_code):
    code = normalise_role_code(role_code)
    return any(marker in code for marker in TEAM_ROLE_MARKERS)


def is_executive_engineer(role_code):
    """XEN or RE (Resident Engineer), including suffixed codes like XEN_WAT."""
    code = normalise_role_code(role_code)
    if code in ('RE', 'XEN') or code.startswith(('RE_', 'XEN_')):
        return True
    return 'RESIDENT_ENGINEER' in code or 'EXECUTIVE_ENGINEER' in code


def is_administrative_officer(role_code):
    code = normalise_role_code(role_code)
    if code == 'ADMIN_OFFICER' or code.startswith('ADMIN_OFFICER_'):
        return True
    return 'ADMINISTRATIVE_OFFICER' in code or 'ADMINISTRATIVE OFFICER' in code


def is_director_medical_services(role_code):
    return 'DIRECTOR_MEDICAL_SERVICES' in normalise_role_code(role_code)
