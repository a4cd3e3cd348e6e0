from rest_framework.exceptions import AuthenticationFailed
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView

from app.common.keys import t

from . import access
from .models import ActionLog


def editable_project_ids(user) -> list:
    from projects.models import ACTIVE_ROLES, Project

    return list(
        Project.objects.filter(
            memberships__user=user, memberships__role__in=ACTIVE_ROLES, deleted_at__isnull=True
        ).values_list('id', flat=True)
    )


def editable_proposal_ids(project_ids) -> list:
    from proposals.models import Proposal

    return list(Proposal.objects.filter(project_id__in=project_ids).values_list('id', flat=True))


class ClaimsTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair carrying the ids of everything the holder may edit.

    The collaboration service consuming the token has no database access, so
    the editable project and proposal ids travel inside the access token.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        projects = editable_project_ids(user)
        token['id'] = user.pk
        token['username'] = user.username
        token['roles'] = user.get_roles()
        token['editable_projects'] = projects
        token['editable_proposals'] = editable_proposal_ids(projects)
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.validated:
            raise AuthenticationFailed(t('violations.user.not_validated'), code='not_validated')
        return data


class LoggedTokenObtainPairView(TokenObtainPairView):
    """JWT obtain pair view with throttling, access blocking and login audit rows."""

    serializer_class = ClaimsTokenObtainPairSerializer
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'login'

    def post(self, request, *args, **kwargs):
        username = (request.data or {}).get('username') or None
        access.check_login(request, username)
        try:
            response = super().post(request, *args, **kwargs)
        except AuthenticationFailed:
            ActionLog.record(ActionLog.FAILED_LOGIN, request=request, username=username)
            raise
        ActionLog.record(ActionLog.SUCCESSFUL_LOGIN, request=request, username=username)
        return response
