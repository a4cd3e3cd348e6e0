"""Removal cascades around memberships.

Deleting a membership, a project or a user goes through these functions so
the lock invariant holds: a project losing its last coordinator or writer
gets locked, and process managers are notified when nobody is left to
work on it.
"""
import logging

from django.db import transaction

from app.permissions import is_staff
from app.queue import enqueue

from .models import ACTIVE_ROLES, Project

logger = logging.getLogger(__name__)


def lock_if_last_active_member(membership) -> bool:
    """Lock the project when ``membership`` (still stored) is its last active one."""
    if membership.role not in ACTIVE_ROLES:
        return False
    project = membership.project
    if project.locked or project.members_by_role(*ACTIVE_ROLES).count() != 1:
        return False
    project.locked = True
    Project.objects.filter(pk=project.pk).update(locked=True)
    logger.info('project %s locked, last active member left', project.pk)
    return True


def notify_if_abandoned(project, viewer=None) -> bool:
    if is_staff(viewer):
        return False
    if project.members_by_role(*ACTIVE_ROLES).exists():
        return False
    enqueue('notify-on-abandonment', {'project_id': project.pk})
    return True


def remove_membership(membership, viewer=None):
    project = membership.project
    lock_if_last_active_member(membership)
    membership.delete()
    notify_if_abandoned(project, viewer)


def delete_project(project, viewer=None):
    with transaction.atomic():
        memberships = list(project.memberships.all())
        for membership in memberships:
            lock_if_last_active_member(membership)
        project.memberships.all().delete()
        project.mark_deleted()
        project.save()
        if memberships:
            notify_if_abandoned(project, viewer)
    logger.info('project %s deleted with %d memberships', project.pk, len(memberships))


def delete_user(user, viewer=None):
    with transaction.atomic():
        for membership in list(user.project_memberships.select_related('project')):
            remove_membership(membership, viewer)
        user.mark_deleted()
        user.save()
    logger.info('user %s deleted', user.pk)
