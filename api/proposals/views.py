import os

from django.http import FileResponse
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from app.common.keys import t
from app.queue import enqueue
from app.viewsets import AppendOnlyViewSet, message_response
from projects.views import ProjectChildViewSet, ProjectWriteMixin

from .models import (
    Proposal,
    UsedActionMandate,
    UsedArgument,
    UsedCounterArgument,
    UsedFractionInterest,
    UsedNegation,
    UsedProblem,
)
from .serializers import (
    ProposalSerializer,
    UsedActionMandateSerializer,
    UsedArgumentSerializer,
    UsedCounterArgumentSerializer,
    UsedFractionInterestSerializer,
    UsedNegationSerializer,
    UsedProblemSerializer,
)


class ProposalViewSet(ProjectChildViewSet):
    entity_type = 'proposal'
    serializer_class = ProposalSerializer
    queryset = Proposal.objects.select_related('project')

    @action(detail=True, methods=['post'], url_path='export')
    def export(self, request, pk=None):
        proposal = self.get_object()
        enqueue('export-proposal-document', {'proposal_id': proposal.pk, 'user_id': request.user.pk})
        return message_response()

    @action(detail=True, methods=['post'], url_path='document-download')
    def document_download(self, request, pk=None):
        proposal = self.get_object()
        if not proposal.document_file:
            raise NotFound(t('violations.proposal.no_document'))
        return FileResponse(
            proposal.document_file.open('rb'),
            as_attachment=True,
            filename=os.path.basename(proposal.document_file.name),
        )

class UsedItemViewSet(ProjectWriteMixin, AppendOnlyViewSet):
    project_path = ('proposal', 'project')


class UsedArgumentViewSet(UsedItemViewSet):
    entity_type = 'used_argument'
    serializer_class = UsedArgumentSerializer
    queryset = UsedArgument.objects.select_related('proposal__project')


class UsedProblemViewSet(UsedItemViewSet):
    entity_type = 'used_problem'
    serializer_class = UsedProblemSerializer
    queryset = UsedProblem.objects.select_related('proposal__project')


class UsedCounterArgumentViewSet(UsedItemViewSet):
    entity_type = 'used_counter_argument'
    serializer_class = UsedCounterArgumentSerializer
    queryset = UsedCounterArgument.objects.select_related('proposal__project')


class UsedNegationViewSet(UsedItemViewSet):
    entity_type = 'used_negation'
    serializer_class = UsedNegationSerializer
    queryset = UsedNegation.objects.select_related('proposal__project')


class UsedActionMandateViewSet(UsedItemViewSet):
    entity_type = 'used_action_mandate'
    serializer_class = UsedActionMandateSerializer
    queryset = UsedActionMandate.objects.select_related('proposal__project')


class UsedFractionInterestViewSet(UsedItemViewSet):
    entity_type = 'used_fraction_interest'
    serializer_class = UsedFractionInterestSerializer
    queryset = UsedFractionInterest.objects.select_related('proposal__project')
