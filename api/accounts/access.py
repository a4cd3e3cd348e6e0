"""Request blocking based on recent action log entries.

Each guarded operation has a per-IP and optionally a per-username limit in
``settings.ACCESS_BLOCK``; once the number of matching log rows inside the
interval reaches the limit the request is refused with 403.
"""
from django.conf import settings
from rest_framework.exceptions import PermissionDenied

from app.common.keys import t

from .models import ActionLog


class AccessBlocked(PermissionDenied):
    default_code = 'access_blocked'


def client_ip(request):
    return request.META.get('REMOTE_ADDR') if request is not None else None


def is_blocked(kind: str, actions, *, ip=None, username=None) -> bool:
    limits = settings.ACCESS_BLOCK[kind]
    interval = limits['interval']
    ip_limit = limits.get('ip_limit')
    if ip_limit and ActionLog.objects.count_by_ip(ip, actions, interval) >= ip_limit:
        return True
    username_limit = limits.get('username_limit')
    if username_limit and ActionLog.objects.count_by_username(username, actions, interval) >= username_limit:
        return True
    return False


def _guard(kind, actions, request, username=None):
    if is_blocked(kind, actions, ip=client_ip(request), username=username):
        raise AccessBlocked(t('violations.access_blocked'))


def check_login(request, username):
    _guard('login', [ActionLog.FAILED_LOGIN], request, username)


def check_password_reset(request, username):
    actions = [ActionLog.FAILED_PW_RESET_REQUEST, ActionLog.SUCCESSFUL_PW_RESET_REQUEST]
    _guard('password_reset', actions, request, username)


def check_validation(request):
    _guard('validation', [ActionLog.FAILED_VALIDATION], request)


def check_report(request):
    _guard('report', [ActionLog.REPORTED_PROJECT], request)
