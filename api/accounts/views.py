import logging
from datetime import timedelta

from django.core.cache import cache
from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from app import events
from app.common.keys import t
from app.permissions import IsAdmin, IsAnonymous, IsProcessManager
from app.queue import enqueue
from app.viewsets import (
    GroupedGenericViewSet,
    GroupedRetrieveMixin,
    ResourceViewSet,
    message_response,
    query_flag,
)

from . import access
from .models import ActionLog, User, Validation
from .permissions import UserAccess
from .serializers import (
    ChangeEmailSerializer,
    ChangePasswordSerializer,
    NewPasswordSerializer,
    PasswordResetRequestSerializer,
    RegistrationSerializer,
    UserSerializer,
    ValidationConfirmSerializer,
    ValidationSerializer,
)

logger = logging.getLogger(__name__)


class UserViewSet(ResourceViewSet):
    entity_type = 'user'
    project_path = None
    serializer_class = UserSerializer

    def get_permissions(self):
        if self.action in ('list', 'statistics', 'new_password'):
            return [IsProcessManager()]
        if self.action == 'create':
            return [IsAdmin()]
        if self.action == 'register':
            return [AllowAny()]
        if self.action == 'reset_password':
            return [IsAnonymous()]
        return [UserAccess()]

    def get_queryset(self):
        qs = User.objects.all()
        if self.action != 'list':
            return qs
        params = self.request.query_params
        deleted = query_flag(params.get('deleted'))
        if deleted is None or deleted is False:
            qs = qs.filter(deleted_at__isnull=True)
        else:
            qs = qs.filter(deleted_at__isnull=False)
        for flag in ('active', 'validated'):
            value = query_flag(params.get(flag))
            if value is not None:
                qs = qs.filter(**{flag: value})
        if params.get('username'):
            qs = qs.filter(username__icontains=params['username'])
        if params.get('roles'):
            qs = qs.filter(roles__icontains=f'"{params["roles"]}"')
        pattern = params.get('pattern')
        if pattern:
            qs = qs.filter(
                Q(username__icontains=pattern)
                | Q(email__icontains=pattern)
                | Q(first_name__icontains=pattern)
                | Q(last_name__icontains=pattern)
            )
        return qs

    def perform_destroy(self, instance):
        from projects.cascades import delete_user

        delete_user(instance, viewer=self.viewer())

    @action(detail=False, methods=['post'], url_path='register')
    def register(self, request):
        from projects.models import ROLE_APPLICANT, ROLE_COORDINATOR, Project, ProjectMembership

        serializer = RegistrationSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            user = User.objects.create_user(
                data['username'],
                data['email'],
                data['password'],
                first_name=data.get('first_name') or None,
                last_name=data.get('last_name') or None,
            )
            for entry in data.get('created_projects', []):
                project = Project.objects.create(
                    title=entry['title'], topic=entry['topic'], council=entry['council'], created_by=user
                )
                ProjectMembership.objects.create(
                    project=project,
                    user=user,
                    role=ROLE_COORDINATOR,
                    motivation=entry['motivation'],
                    skills=entry['skills'],
                )
                ActionLog.record(ActionLog.CREATED_PROJECT, request=request, username=user.username)
            for entry in data.get('project_memberships', []):
                ProjectMembership.objects.create(
                    project=entry['project'],
                    user=user,
                    role=ROLE_APPLICANT,
                    motivation=entry['motivation'],
                    skills=entry['skills'],
                )
            events.user_registered.send(
                sender=User, user=user, request=request, validation_url=data['validation_url']
            )
        return Response(self.render(user), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='reset-password')
    def reset_password(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        username = serializer.validated_data['username']
        access.check_password_reset(request, username)
        user = serializer.find_user()
        if user is None or not user.active:
            ActionLog.record(ActionLog.FAILED_PW_RESET_REQUEST, request=request, username=username)
            logger.info('password reset requested for unknown or inactive account')
        else:
            ActionLog.record(ActionLog.SUCCESSFUL_PW_RESET_REQUEST, request=request, username=username)
            enqueue(
                'send-password-reset-email',
                {'user_id': user.pk, 'validation_url': serializer.validated_data['validation_url']},
            )
        # Same answer either way, account existence is not disclosed
        return message_response()

    @action(detail=False, methods=['get'], url_path='statistics')
    def statistics(self, request):
        key = 'statistics:users'
        data = cache.get(key)
        if data is None:
            since = timezone.now() - timedelta(days=1)
            live = User.objects.filter(deleted_at__isnull=True)
            data = {
                'existing': live.count(),
                'not_active': live.filter(active=False).count(),
                'not_validated': live.filter(validated=False).count(),
                'newly_registered': live.filter(created_at__gte=since).count(),
                'deleted': User.objects.filter(deleted_at__isnull=False).count(),
            }
            cache.set(key, data, settings.STATISTICS_CACHE_SECONDS)
        return Response(data)

    @action(detail=True, methods=['post'], url_path='change-email')
    def change_email(self, request, pk=None):
        user = self.get_object()
        serializer = ChangeEmailSerializer(data=request.data, context={'user': user})
        serializer.is_valid(raise_exception=True)
        enqueue(
            'send-email-change-email',
            {
                'user_id': user.pk,
                'email': serializer.validated_data['email'],
                'validation_url': serializer.validated_data['validation_url'],
            },
        )
        return message_response()

    @action(detail=True, methods=['post'], url_path='change-password')
    def change_password(self, request, pk=None):
        user = self.get_object()
        serializer = ChangePasswordSerializer(data=request.data, context={'user': user})
        serializer.is_valid(raise_exception=True)
        user.set_password(serializer.validated_data['password'])
        user.save(update_fields=['password'])
        return message_response('messages.password_changed', status.HTTP_200_OK)

    @action(detail=True, methods=['post'], url_path='new-password')
    def new_password(self, request, pk=None):
        user = self.get_object()
        if user.is_deleted():
            raise NotFound()
        serializer = NewPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user.set_unusable_password()
            user.save(update_fields=['password'])
            enqueue(
                'send-password-reset-email',
                {'user_id': user.pk, 'validation_url': serializer.validated_data['validation_url']},
            )
        return message_response()


class ValidationViewSet(GroupedRetrieveMixin, GroupedGenericViewSet):
    entity_type = 'validation'
    project_path = None
    serializer_class = ValidationSerializer
    queryset = Validation.objects.all()

    def get_permissions(self):
        if self.action == 'confirm':
            return [AllowAny()]
        return [IsAdmin()]

    @action(detail=True, methods=['post'], url_path='confirm')
    def confirm(self, request, pk=None):
        access.check_validation(request)
        serializer = ValidationConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validation = None
        if str(pk).isdigit():
            validation = Validation.objects.select_related('user').filter(pk=pk).first()
        if validation is None or not constant_time_compare(validation.token, serializer.validated_data['token']):
            ActionLog.record(ActionLog.FAILED_VALIDATION, request=request)
            raise NotFound(t('violations.validation.not_found'))
        if validation.is_expired():
            with transaction.atomic():
                events.validation_expired.send(sender=Validation, validation=validation)
                validation.delete()
            raise NotFound(t('violations.validation.not_found'))
        with transaction.atomic():
            events.validation_confirmed.send(
                sender=Validation,
                validation=validation,
                viewer=self.viewer(),
                data=serializer.validated_data,
                request=request,
            )
            validation.delete()
        return message_response('messages.validation_successful', status.HTTP_205_RESET_CONTENT)
