from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from app.common.keys import t
from app.common.text import validate_contains_letter, validate_single_line
from app.context import field_groups as fg
from app.serializers import GroupedModelSerializer
from councils.models import Council
from councils.serializers import ProjectCouncilField

from .models import (
    ROLE_COORDINATOR,
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

READER_GROUPS = ('writer-read', 'coordinator-read', 'pm-read', 'admin-read')


def readers(*types):
    """Groups of project writers, coordinators and staff on the given entity types."""
    return fg(*(f'{kind}:{group}' for kind in types for group in READER_GROUPS))


def validate_project_title(value: str) -> str:
    if value is None or len(value) < 3:
        raise serializers.ValidationError(t('violations.project.title_length'))
    try:
        validate_contains_letter(value)
        validate_single_line(value)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(exc.messages) from None
    return value


class CategorySerializer(GroupedModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug']
        read_only_fields = ['slug']


class ProjectChildSerializer(GroupedModelSerializer):
    """Base for entities hanging off a project (directly or through a parent item).

    ``parent_field`` names the relation leading to the project; it is set on
    create and immutable afterwards.
    """

    parent_field = 'project'
    hidden_user_fields = ('updated_by',)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        parent = attrs.get(self.parent_field)
        if self.instance is not None and parent is not None and parent != getattr(self.instance, self.parent_field):
            raise serializers.ValidationError({self.parent_field: [t('violations.parent_immutable')]})
        return attrs


def argumentation_serializer(model, entity_type, parent_field='project'):
    class Serializer(ProjectChildSerializer):
        field_groups = {
            'priority': fg(
                f'{entity_type}:read',
                'project:read',
                f'{entity_type}:create',
                f'{entity_type}:coordinator-write',
                f'{entity_type}:pm-write',
                f'{entity_type}:admin-write',
            ),
            'updated_at': readers(entity_type, 'project'),
            'updated_by': readers(entity_type, 'project'),
        }

        class Meta:
            fields = ['id', parent_field, 'description', 'priority', 'updated_at', 'updated_by']
            read_only_fields = ['updated_at', 'updated_by']

    Serializer.parent_field = parent_field
    Serializer.Meta.model = model
    Serializer.__name__ = f'{model.__name__}Serializer'
    Serializer.__qualname__ = Serializer.__name__
    return Serializer


ProblemSerializer = argumentation_serializer(Problem, 'problem')
ArgumentSerializer = argumentation_serializer(Argument, 'argument')
ActionMandateSerializer = argumentation_serializer(ActionMandate, 'action_mandate')
NegationSerializer = argumentation_serializer(Negation, 'negation', parent_field='counter_argument')


class CounterArgumentSerializer(argumentation_serializer(CounterArgument, 'counter_argument')):
    negations = NegationSerializer(many=True, read_only=True)

    class Meta:
        model = CounterArgument
        fields = ['id', 'project', 'description', 'priority', 'updated_at', 'updated_by', 'negations']
        read_only_fields = ['updated_at', 'updated_by']


def contact_groups(entity_type):
    staff = readers(entity_type, 'project')
    member = fg(f'{entity_type}:member-read', 'project:member-read')
    writable = fg(f'{entity_type}:write')
    return {
        'contact_email': staff | member | writable,
        'contact_name': staff | member | writable,
        'contact_phone': staff | member | writable,
        'team_contact': staff | member | writable,
        'updated_at': staff,
        'updated_by': staff,
    }


CONTACT_FIELDS = ['contact_email', 'contact_name', 'contact_phone', 'team_contact', 'updated_at', 'updated_by']


class PartnerSerializer(ProjectChildSerializer):
    hidden_user_fields = ('updated_by', 'team_contact')
    field_groups = contact_groups('partner')

    class Meta:
        model = Partner
        fields = ['id', 'project', 'name', 'role', 'url'] + CONTACT_FIELDS
        read_only_fields = ['updated_at', 'updated_by']


class FractionInterestSerializer(ProjectChildSerializer):
    parent_field = 'details'
    field_groups = {
        'updated_at': readers('fraction_interest', 'project'),
        'updated_by': readers('fraction_interest', 'project'),
    }

    class Meta:
        model = FractionInterest
        fields = ['id', 'details', 'description', 'updated_at', 'updated_by']
        read_only_fields = ['updated_at', 'updated_by']


class FactionInterestSerializer(ProjectChildSerializer):
    parent_field = 'details'
    field_groups = {
        'updated_at': readers('faction_interest', 'project'),
        'updated_by': readers('faction_interest', 'project'),
    }

    class Meta:
        model = FactionInterest
        fields = ['id', 'details', 'description', 'updated_at', 'updated_by']
        read_only_fields = ['updated_at', 'updated_by']


class FractionDetailsSerializer(ProjectChildSerializer):
    interests = FractionInterestSerializer(many=True, read_only=True)

    hidden_user_fields = ('updated_by', 'team_contact')
    field_groups = contact_groups('fraction_details')

    class Meta:
        model = FractionDetails
        fields = ['id', 'project', 'fraction', 'possible_partner', 'possible_sponsor', 'interests'] + CONTACT_FIELDS
        read_only_fields = ['updated_at', 'updated_by']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is not None and 'fraction' in attrs and attrs['fraction'] != self.instance.fraction:
            raise serializers.ValidationError({'fraction': [t('violations.parent_immutable')]})
        project = attrs.get('project') or getattr(self.instance, 'project', None)
        fraction = attrs.get('fraction')
        if project is not None and fraction is not None and fraction.council_id != project.council_id:
            raise serializers.ValidationError({'fraction': [t('violations.project.fraction_council')]})
        return attrs


class FactionDetailsSerializer(ProjectChildSerializer):
    interests = FactionInterestSerializer(many=True, read_only=True)

    hidden_user_fields = ('updated_by', 'team_contact')
    field_groups = contact_groups('faction_details')

    class Meta:
        model = FactionDetails
        fields = ['id', 'project', 'faction', 'possible_partner', 'possible_proponent', 'interests'] + CONTACT_FIELDS
        read_only_fields = ['updated_at', 'updated_by']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is not None and 'faction' in attrs and attrs['faction'] != self.instance.faction:
            raise serializers.ValidationError({'faction': [t('violations.parent_immutable')]})
        return attrs


class ProjectMembershipSerializer(GroupedModelSerializer):
    hidden_user_fields = ('user',)
    field_groups = {
        'project': fg('project_membership:read', 'project_membership:create', 'user:read'),
        'user': fg(
            'project_membership:read',
            'project_membership:create',
            'project:member-read',
            'project:pm-read',
            'project:admin-read',
        ),
        'role': fg(
            'project_membership:read',
            'project:member-read',
            'project:pm-read',
            'project:admin-read',
            'user:read',
            'project_membership:create',
            'project_membership:member-write',
            'project_membership:pm-write',
            'project_membership:admin-write',
        ),
        'motivation': fg(
            'project_membership:read',
            'project_membership:write',
            'project:member-read',
            'project:pm-read',
            'project:admin-read',
            'user:read',
        ),
        'skills': fg(
            'project_membership:read',
            'project_membership:write',
            'project:member-read',
            'project:pm-read',
            'project:admin-read',
            'user:read',
        ),
    }

    class Meta:
        model = ProjectMembership
        fields = ['id', 'project', 'user', 'role', 'motivation', 'skills']
        # Uniqueness of (project, user) is checked by the membership rules
        validators = []


class ProjectSerializer(GroupedModelSerializer):
    council = ProjectCouncilField(queryset=Council.objects.all())
    memberships = ProjectMembershipSerializer(many=True, read_only=True)
    problems = ProblemSerializer(many=True, read_only=True)
    arguments = ArgumentSerializer(many=True, read_only=True)
    counter_arguments = CounterArgumentSerializer(many=True, read_only=True)
    action_mandates = ActionMandateSerializer(many=True, read_only=True)
    partners = PartnerSerializer(many=True, read_only=True)
    fraction_details = FractionDetailsSerializer(many=True, read_only=True)
    faction_details = FactionDetailsSerializer(many=True, read_only=True)
    proposals = serializers.SerializerMethodField()
    motivation = serializers.CharField(min_length=10, max_length=1000, write_only=True)
    skills = serializers.CharField(min_length=10, max_length=1000, write_only=True)

    hidden_user_fields = ('created_by',)
    field_groups = {
        'state': fg(
            'project:read',
            'project:create',
            'project:coordinator-update',
            'project:pm-update',
            'project:admin-update',
        ),
        'locked': fg(
            'project:member-read',
            'project:pm-read',
            'project:admin-read',
            'project:pm-update',
            'project:admin-update',
        ),
        'council': fg('project:read', 'project:create', 'project:pm-update', 'project:admin-update'),
        'created_by': fg('project:member-read', 'project:pm-read', 'project:admin-read'),
        'deleted_at': fg('project:pm-read', 'project:admin-read'),
        'memberships': fg('project:member-read', 'project:pm-read', 'project:admin-read'),
        'motivation': fg('project:create'),
        'skills': fg('project:create'),
    }

    class Meta:
        model = Project
        fields = [
            'id',
            'title',
            'slug',
            'topic',
            'description',
            'impact',
            'state',
            'locked',
            'council',
            'categories',
            'created_by',
            'created_at',
            'updated_at',
            'deleted_at',
            'memberships',
            'problems',
            'arguments',
            'counter_arguments',
            'action_mandates',
            'partners',
            'fraction_details',
            'faction_details',
            'proposals',
            'motivation',
            'skills',
        ]
        read_only_fields = ['slug', 'created_by', 'created_at', 'updated_at', 'deleted_at']
        extra_kwargs = {'title': {'required': True, 'allow_null': False}}

    def validate_title(self, value):
        return validate_project_title(value)

    def validate_council(self, value):
        if self.instance is not None and value == self.instance.council:
            return value
        if value.is_deleted() or not value.active:
            raise serializers.ValidationError(t('violations.project.council_inactive'))
        return value

    def create(self, validated_data):
        motivation = validated_data.pop('motivation')
        skills = validated_data.pop('skills')
        project = super().create(validated_data)
        ProjectMembership.objects.create(
            project=project,
            user=project.created_by,
            role=ROLE_COORDINATOR,
            motivation=motivation,
            skills=skills,
        )
        return project

    def get_proposals(self, obj):
        from proposals.serializers import ProposalSerializer

        return ProposalSerializer(obj.proposals.all(), many=True, context=self.context).data


class ProjectReportSerializer(serializers.Serializer):
    report_message = serializers.CharField(min_length=5, max_length=1000)
    reporter_name = serializers.CharField(min_length=5, max_length=200)
    reporter_email = serializers.EmailField(min_length=5, max_length=255)
