"""Outbox for deferred side effects.

``enqueue('notify-on-application', {'membership_id': 1})`` schedules the Celery
task registered under that type once the surrounding transaction commits.
Handlers only receive ids and re-fetch their entities, so a message processed
after its entity was removed is a logged no-op.
"""
import logging
from importlib import import_module

from django.db import transaction

logger = logging.getLogger(__name__)

TASKS = {
    'notify-on-application': 'projects.tasks.notify_new_application',
    'notify-on-abandonment': 'projects.tasks.notify_all_members_left',
    'project-reported': 'projects.tasks.notify_project_reported',
    'purge-logs': 'accounts.tasks.cleanup_action_log',
    'purge-validations': 'accounts.tasks.purge_validations',
    'export-proposal-document': 'proposals.tasks.export_proposal',
    'send-registration-email': 'accounts.tasks.send_registration_email',
    'send-email-change-email': 'accounts.tasks.send_email_change_email',
    'send-password-reset-email': 'accounts.tasks.send_password_reset_email',
    'send-welcome-email': 'accounts.tasks.send_welcome_email',
}


class UnknownTaskType(ValueError):
    pass


def resolve_task(task_type: str):
    try:
        dotted = TASKS[task_type]
    except KeyError:
        raise UnknownTaskType(task_type) from None
    module_name, attr = dotted.rsplit('.', 1)
    return getattr(import_module(module_name), attr)


def enqueue(task_type: str, payload: dict | None = None) -> None:
    task = resolve_task(task_type)
    kwargs = dict(payload or {})
    logger.info('enqueue %s %s', task_type, kwargs)
    transaction.on_commit(lambda: task.delay(**kwargs))
