import logging

from celery import shared_task
from django.core.files.base import ContentFile

from accounts.models import User
from app.common.text import make_slug
from app.mail import send_templated_mail

from .models import Proposal
from .utils import DOCX_MIMETYPE, render_proposal_docx

logger = logging.getLogger(__name__)


@shared_task
def export_proposal(proposal_id: int, user_id: int):
    proposal = Proposal.objects.select_related('project').filter(pk=proposal_id).first()
    if proposal is None or proposal.project.is_deleted():
        logger.info('proposal %s missing or its project deleted, skipping export', proposal_id)
        return None
    user = User.objects.find_non_deleted(user_id)
    if user is None:
        logger.info('requesting user %s gone, skipping export of proposal %s', user_id, proposal_id)
        return None

    data = render_proposal_docx(proposal)
    filename = f'{make_slug(proposal.title) or "proposal"}-{proposal.pk}.docx'
    if proposal.document_file:
        proposal.document_file.delete(save=False)
    proposal.document_file.save(filename, ContentFile(data), save=False)
    proposal.save(update_fields=['document_file'])

    send_templated_mail(
        'proposal_export',
        [user.email],
        attachments=[(filename, data, DOCX_MIMETYPE)],
        username=user.username,
        proposal=proposal.title,
    )
    logger.info('proposal %s exported to %s', proposal.pk, proposal.document_file.name)
    return proposal.document_file.name
