import logging

from celery import shared_task
from django.conf import settings

from accounts.models import User
from app.mail import send_templated_mail
from app.serializers import user_is_presentable

from .models import ROLE_APPLICANT, ROLE_COORDINATOR, Project, ProjectMembership

logger = logging.getLogger(__name__)


def project_url(project) -> str:
    return f'{settings.PUBLIC_BASE_URL.rstrip("/")}/projects/{project.pk}/{project.slug}'


def _manager_emails():
    return [user.email for user in User.objects.load_process_managers()]


@shared_task
def notify_new_application(membership_id: int):
    membership = ProjectMembership.objects.select_related('project', 'user').filter(pk=membership_id).first()
    if membership is None or membership.role != ROLE_APPLICANT:
        logger.info('membership %s gone or no longer an application, skipping', membership_id)
        return 0
    project = membership.project
    if project.is_deleted():
        logger.info('project %s deleted, skipping application notice', project.pk)
        return 0
    coordinators = [
        m.user.email
        for m in project.members_by_role(ROLE_COORDINATOR).select_related('user')
        if user_is_presentable(m.user)
    ]
    return send_templated_mail(
        'new_application',
        coordinators,
        project=project.title,
        username=membership.user.username,
        url=project_url(project),
    )


@shared_task
def notify_all_members_left(project_id: int):
    project = Project.objects.filter(pk=project_id).first()
    if project is None or project.is_deleted() or not project.locked:
        logger.info('project %s missing, deleted or unlocked, skipping abandonment notice', project_id)
        return 0
    return send_templated_mail(
        'all_members_left', _manager_emails(), project=project.title, url=project_url(project)
    )


@shared_task
def notify_project_reported(project_id: int, report: dict):
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        logger.warning('reported project %s no longer exists', project_id)
        return 0
    return send_templated_mail(
        'project_reported',
        _manager_emails(),
        project=project.title or f'#{project.pk}',
        url=project_url(project),
        message=report.get('report_message', ''),
        reporter_name=report.get('reporter_name', ''),
        reporter_email=report.get('reporter_email', ''),
    )
