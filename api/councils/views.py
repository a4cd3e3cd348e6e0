from rest_framework.exceptions import ValidationError

from app.common.keys import t
from app.permissions import IsAdmin, IsProcessManager, IsStaffOrReadOnly, is_admin, is_staff
from app.viewsets import ChildEntityViewSet, ResourceViewSet, filter_by_name, query_flag

from .models import Council, Faction, FederalState, Fraction, Parliament
from .serializers import (
    CouncilSerializer,
    FactionSerializer,
    FederalStateSerializer,
    FractionSerializer,
    ParliamentSerializer,
)


class FederalStateViewSet(ResourceViewSet):
    entity_type = 'federal_state'
    project_path = None
    serializer_class = FederalStateSerializer
    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        qs = FederalState.objects.all()
        if self.action == 'list':
            qs = filter_by_name(qs, self.request.query_params)
        return qs


class PoliticalBodyViewSet(ResourceViewSet):
    """Councils and parliaments: soft deleted, hidden from the public once deleted."""

    project_path = None
    model = None

    def get_permissions(self):
        if self.action == 'destroy':
            return [self.destroy_permission()]
        return [IsStaffOrReadOnly()]

    def destroy_permission(self):
        return IsProcessManager()

    def get_queryset(self):
        qs = self.model.objects.all()
        viewer = self.viewer()
        params = self.request.query_params
        if self.action != 'list':
            return qs if is_staff(viewer) else self.public(qs)
        deleted = query_flag(params.get('deleted')) if is_staff(viewer) else None
        if deleted is None:
            qs = qs.filter(deleted_at__isnull=True)
        else:
            qs = qs.filter(deleted_at__isnull=not deleted)
        return filter_by_name(qs, params, 'title')

    def public(self, queryset):
        return queryset.filter(deleted_at__isnull=True)

    def perform_destroy(self, instance):
        if instance.is_deleted():
            raise ValidationError({'deleted_at': [t('violations.council.already_deleted')]})
        instance.mark_deleted()
        instance.updated_by = self.viewer()
        instance.save()


class CouncilViewSet(PoliticalBodyViewSet):
    entity_type = 'council'
    model = Council
    serializer_class = CouncilSerializer

    def destroy_permission(self):
        return IsAdmin()

    def public(self, queryset):
        return queryset.filter(deleted_at__isnull=True, active=True)

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action != 'list':
            return qs
        active = query_flag(self.request.query_params.get('active')) if is_admin(self.viewer()) else None
        return qs.filter(active=True if active is None else active)


class ParliamentViewSet(PoliticalBodyViewSet):
    entity_type = 'parliament'
    model = Parliament
    serializer_class = ParliamentSerializer


class PartyGroupViewSet(ChildEntityViewSet):
    """Fractions and factions: staff maintained, read through their council or parliament."""

    project_path = None
    delete_permission = IsProcessManager

    def get_permissions(self):
        if self.action == 'retrieve':
            return [IsAdmin()]
        if self.action == 'destroy':
            return [self.delete_permission()]
        return [IsProcessManager()]


class FractionViewSet(PartyGroupViewSet):
    entity_type = 'fraction'
    serializer_class = FractionSerializer
    queryset = Fraction.objects.select_related('council')
    delete_permission = IsAdmin


class FactionViewSet(PartyGroupViewSet):
    entity_type = 'faction'
    serializer_class = FactionSerializer
    queryset = Faction.objects.select_related('parliament')
