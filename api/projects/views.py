from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Q
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from accounts import access
from app import events
from app.common.keys import t
from app.permissions import IsStaffOrReadOnly, is_staff
from app.viewsets import ChildEntityViewSet, ResourceViewSet, filter_by_name, message_response, query_flag

from .cascades import delete_project
from .models import (
    READER_ROLES,
    STATE_PUBLIC,
    ActionMandate,
    Argument,
    Category,
    CounterArgument,
    FactionDetails,
    FactionInterest,
    FractionDetails,
    FractionInterest,
    Negation,
    Partner,
    Problem,
    Project,
    ProjectMembership,
)
from .permissions import MembershipAccess, ProjectAccess, ProjectChildAccess, can_edit_project
from .serializers import (
    ActionMandateSerializer,
    ArgumentSerializer,
    CategorySerializer,
    CounterArgumentSerializer,
    FactionDetailsSerializer,
    FactionInterestSerializer,
    FractionDetailsSerializer,
    FractionInterestSerializer,
    NegationSerializer,
    PartnerSerializer,
    ProblemSerializer,
    ProjectMembershipSerializer,
    ProjectReportSerializer,
    ProjectSerializer,
)
from .validators import validate_membership_create, validate_membership_update


class CategoryViewSet(ResourceViewSet):
    entity_type = 'category'
    project_path = None
    serializer_class = CategorySerializer
    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        qs = Category.objects.all()
        if self.action == 'list':
            qs = filter_by_name(qs, self.request.query_params)
        return qs


class ProjectViewSet(ResourceViewSet):
    entity_type = 'project'
    project_path = ()
    serializer_class = ProjectSerializer
    permission_classes = [ProjectAccess]

    def get_throttles(self):
        if self.action == 'report':
            self.throttle_scope = 'report'
            return [ScopedRateThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        qs = Project.objects.select_related('council', 'created_by')
        viewer = self.viewer()
        if self.action == 'list':
            return self.filter_collection(qs, viewer)
        if is_staff(viewer):
            return qs
        qs = qs.filter(deleted_at__isnull=True)
        if viewer is None:
            return qs.filter(state=STATE_PUBLIC, locked=False)
        member = Q(pk__in=ProjectMembership.objects.filter(user=viewer, role__in=READER_ROLES).values('project_id'))
        return qs.filter(Q(state=STATE_PUBLIC) | member).filter(Q(locked=False) | member)

    def filter_collection(self, qs, viewer):
        """Public, unlocked and non-deleted projects unless staff filtered explicitly.

        Logged in users filtering by ``id`` also get private and locked
        projects, e.g. to load the projects they are a member of.
        """
        params = self.request.query_params
        staff = is_staff(viewer)
        ids = [value for value in params.getlist('id') if value.isdigit()]
        if ids:
            qs = qs.filter(pk__in=ids)
        by_id = bool(ids) and viewer is not None

        deleted = query_flag(params.get('deleted')) if staff else None
        qs = qs.filter(deleted_at__isnull=True if deleted is None else not deleted)

        if staff and params.get('state'):
            qs = qs.filter(state=params['state'])
        elif not by_id:
            qs = qs.filter(state=STATE_PUBLIC)

        locked = query_flag(params.get('locked')) if staff else None
        if locked is not None:
            qs = qs.filter(locked=locked)
        elif not by_id:
            qs = qs.filter(locked=False)

        qs = filter_by_name(qs, params, 'title')
        if params.get('council', '').isdigit():
            qs = qs.filter(council_id=params['council'])
        pattern = params.get('pattern')
        if pattern:
            qs = qs.filter(
                Q(title__icontains=pattern) | Q(topic__icontains=pattern) | Q(description__icontains=pattern)
            )
        return qs

    def perform_destroy(self, instance):
        if instance.is_deleted():
            raise ValidationError({'deleted_at': [t('violations.project.already_deleted')]})
        delete_project(instance, viewer=self.viewer())

    @action(detail=False, methods=['get'], url_path='statistics')
    def statistics(self, request):
        key = 'statistics:projects'
        data = cache.get(key)
        if data is None:
            data = Project.objects.statistics()
            cache.set(key, data, settings.STATISTICS_CACHE_SECONDS)
        return Response(data)

    @action(detail=True, methods=['post'], url_path='report')
    def report(self, request, pk=None):
        project = self.get_object()
        access.check_report(request)
        serializer = ProjectReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            events.project_reported.send(
                sender=Project,
                project=project,
                viewer=self.viewer(),
                request=request,
                report=serializer.validated_data,
            )
        return message_response()


class ProjectMembershipViewSet(ChildEntityViewSet):
    entity_type = 'project_membership'
    serializer_class = ProjectMembershipSerializer
    permission_classes = [MembershipAccess]
    queryset = ProjectMembership.objects.select_related('project', 'user')

    def check_create_permission(self, data):
        validate_membership_create(self.viewer(), data)

    def check_update_rules(self, instance, data):
        validate_membership_update(self.viewer(), instance, data)


class ProjectWriteMixin:
    """Writes allowed for project writers and staff, checked against the target project."""

    permission_classes = [ProjectChildAccess]

    def check_create_permission(self, data):
        if not can_edit_project(self.viewer(), self.project_of(data)):
            raise PermissionDenied(t('violations.project.not_writable'))


class ProjectChildViewSet(ProjectWriteMixin, ChildEntityViewSet):
    pass


class ProblemViewSet(ProjectChildViewSet):
    entity_type = 'problem'
    serializer_class = ProblemSerializer
    queryset = Problem.objects.select_related('project')


class ArgumentViewSet(ProjectChildViewSet):
    entity_type = 'argument'
    serializer_class = ArgumentSerializer
    queryset = Argument.objects.select_related('project')


class CounterArgumentViewSet(ProjectChildViewSet):
    entity_type = 'counter_argument'
    serializer_class = CounterArgumentSerializer
    queryset = CounterArgument.objects.select_related('project')


class NegationViewSet(ProjectChildViewSet):
    entity_type = 'negation'
    project_path = ('counter_argument', 'project')
    serializer_class = NegationSerializer
    queryset = Negation.objects.select_related('counter_argument__project')


class ActionMandateViewSet(ProjectChildViewSet):
    entity_type = 'action_mandate'
    serializer_class = ActionMandateSerializer
    queryset = ActionMandate.objects.select_related('project')


class PartnerViewSet(ProjectChildViewSet):
    entity_type = 'partner'
    serializer_class = PartnerSerializer
    queryset = Partner.objects.select_related('project')


class FractionDetailsViewSet(ProjectChildViewSet):
    entity_type = 'fraction_details'
    serializer_class = FractionDetailsSerializer
    queryset = FractionDetails.objects.select_related('project', 'fraction')


class FactionDetailsViewSet(ProjectChildViewSet):
    entity_type = 'faction_details'
    serializer_class = FactionDetailsSerializer
    queryset = FactionDetails.objects.select_related('project', 'faction')


class FractionInterestViewSet(ProjectChildViewSet):
    entity_type = 'fraction_interest'
    project_path = ('details', 'project')
    serializer_class = FractionInterestSerializer
    queryset = FractionInterest.objects.select_related('details__project')


class FactionInterestViewSet(ProjectChildViewSet):
    entity_type = 'faction_interest'
    project_path = ('details', 'project')
    serializer_class = FactionInterestSerializer
    queryset = FactionInterest.objects.select_related('details__project')
