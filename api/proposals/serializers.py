from rest_framework import serializers

from app.common.keys import t
from app.context import field_groups as fg
from app.serializers import GroupedModelSerializer
from projects.serializers import ProjectChildSerializer, readers

from .models import (
    Proposal,
    UsedActionMandate,
    UsedArgument,
    UsedCounterArgument,
    UsedFractionInterest,
    UsedNegation,
    UsedProblem,
)


def used_item_serializer(model, entity_type):
    item_field = model.item_field

    class Serializer(GroupedModelSerializer):
        hidden_user_fields = ('created_by',)
        field_groups = {'created_by': readers(entity_type, 'proposal', 'project')}

        class Meta:
            fields = ['id', 'proposal', item_field, 'created_at', 'created_by']
            read_only_fields = ['created_at', 'created_by']

        def validate(self, attrs):
            attrs = super().validate(attrs)
            if attrs[item_field].project.pk != attrs['proposal'].project_id:
                raise serializers.ValidationError({item_field: [t('violations.proposal.foreign_item')]})
            return attrs

    Serializer.Meta.model = model
    Serializer.__name__ = f'{model.__name__}Serializer'
    Serializer.__qualname__ = Serializer.__name__
    return Serializer


UsedArgumentSerializer = used_item_serializer(UsedArgument, 'used_argument')
UsedProblemSerializer = used_item_serializer(UsedProblem, 'used_problem')
UsedCounterArgumentSerializer = used_item_serializer(UsedCounterArgument, 'used_counter_argument')
UsedNegationSerializer = used_item_serializer(UsedNegation, 'used_negation')
UsedActionMandateSerializer = used_item_serializer(UsedActionMandate, 'used_action_mandate')
UsedFractionInterestSerializer = used_item_serializer(UsedFractionInterest, 'used_fraction_interest')


class ProposalSerializer(ProjectChildSerializer):
    used_arguments = UsedArgumentSerializer(many=True, read_only=True)
    used_problems = UsedProblemSerializer(many=True, read_only=True)
    used_counter_arguments = UsedCounterArgumentSerializer(many=True, read_only=True)
    used_negations = UsedNegationSerializer(many=True, read_only=True)
    used_action_mandates = UsedActionMandateSerializer(many=True, read_only=True)
    used_fraction_interests = UsedFractionInterestSerializer(many=True, read_only=True)

    field_groups = {
        'comment': readers('proposal', 'project') | fg('proposal:write'),
        'document_file': readers('proposal', 'project'),
        'updated_at': readers('proposal', 'project'),
        'updated_by': readers('proposal', 'project'),
    }

    class Meta:
        model = Proposal
        fields = [
            'id',
            'project',
            'title',
            'introduction',
            'reasoning',
            'action_mandate',
            'comment',
            'sponsor',
            'url',
            'document_file',
            'created_at',
            'updated_at',
            'updated_by',
            'used_arguments',
            'used_problems',
            'used_counter_arguments',
            'used_negations',
            'used_action_mandates',
            'used_fraction_interests',
        ]
        read_only_fields = ['document_file', 'created_at', 'updated_at', 'updated_by']
