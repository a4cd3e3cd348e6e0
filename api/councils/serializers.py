from rest_framework import serializers

from app.common.keys import t
from app.context import field_groups as fg
from app.serializers import GroupedModelSerializer, is_staff_viewer

from .models import Council, Faction, FederalState, Fraction, Parliament

STAFF_READ = ('pm-read', 'admin-read')


def staff_read(*types):
    return fg(*(f'{kind}:{group}' for kind in types for group in STAFF_READ))


class FederalStateSerializer(GroupedModelSerializer):
    class Meta:
        model = FederalState
        fields = ['id', 'name', 'slug']
        read_only_fields = ['slug']


class FractionSerializer(GroupedModelSerializer):
    hidden_user_fields = ('updated_by',)
    field_groups = {
        'updated_at': staff_read('fraction', 'council'),
        'updated_by': staff_read('fraction', 'council'),
    }

    class Meta:
        model = Fraction
        fields = ['id', 'council', 'name', 'color', 'member_count', 'active', 'url', 'updated_at', 'updated_by']
        read_only_fields = ['updated_at', 'updated_by']

    def validate_color(self, value):
        if len(value) != 6 or any(c not in '0123456789abcdefABCDEF' for c in value):
            raise serializers.ValidationError(t('violations.fraction.color'))
        return value

    def validate_council(self, value):
        if self.instance is not None and value != self.instance.council:
            raise serializers.ValidationError(t('violations.fraction.council_immutable'))
        return value


class FactionSerializer(GroupedModelSerializer):
    hidden_user_fields = ('updated_by',)
    field_groups = {
        'updated_at': staff_read('faction', 'parliament'),
        'updated_by': staff_read('faction', 'parliament'),
    }

    class Meta:
        model = Faction
        fields = ['id', 'parliament', 'name', 'member_count', 'active', 'url', 'updated_at', 'updated_by']
        read_only_fields = ['updated_at', 'updated_by']

    def validate_parliament(self, value):
        if self.instance is not None and value != self.instance.parliament:
            raise serializers.ValidationError(t('violations.faction.parliament_immutable'))
        return value


BODY_FIELDS = [
    'id',
    'title',
    'slug',
    'head_of_administration',
    'head_of_administration_title',
    'location',
    'url',
    'wikipedia_url',
    'zip_area',
    'federal_state',
    'validated_at',
    'updated_at',
    'updated_by',
    'deleted_at',
]


class CouncilSerializer(GroupedModelSerializer):
    """Council with its fractions.

    Inactive fractions are only listed for staff, or when the council is
    rendered as part of a project (``context['in_project']``).
    """

    fractions = serializers.SerializerMethodField()

    hidden_user_fields = ('updated_by',)
    field_groups = {
        'active': fg('council:read', 'council:pm-write', 'council:admin-write'),
        'validated_at': fg('council:read', 'council:pm-write', 'council:admin-write'),
        'updated_by': staff_read('council'),
        'deleted_at': staff_read('council'),
    }

    class Meta:
        model = Council
        fields = BODY_FIELDS + ['active', 'fractions']
        read_only_fields = ['slug', 'updated_at', 'updated_by', 'deleted_at']
        extra_kwargs = {'title': {'required': True, 'allow_null': False}}

    def get_fractions(self, obj):
        fractions = obj.fractions.all()
        if not (self.context.get('in_project') or is_staff_viewer(self.context.get('viewer'))):
            fractions = fractions.filter(active=True)
        return FractionSerializer(fractions, many=True, context=self.context).data


class ParliamentSerializer(GroupedModelSerializer):
    factions = FactionSerializer(many=True, read_only=True)

    hidden_user_fields = ('updated_by',)
    field_groups = {
        'validated_at': fg('parliament:read', 'parliament:pm-write', 'parliament:admin-write'),
        'updated_by': staff_read('parliament'),
        'deleted_at': staff_read('parliament'),
    }

    class Meta:
        model = Parliament
        fields = BODY_FIELDS + ['factions']
        read_only_fields = ['slug', 'updated_at', 'updated_by', 'deleted_at']
        extra_kwargs = {'title': {'required': True, 'allow_null': False}}


class ProjectCouncilField(serializers.PrimaryKeyRelatedField):
    """Accepts a council id, renders the council with all of its fractions."""

    def use_pk_only_optimization(self):
        return False

    def to_representation(self, value):
        context = dict(self.context, in_project=True, groups=frozenset({'default:read', 'council:read'}))
        return CouncilSerializer(value, context=context).data
