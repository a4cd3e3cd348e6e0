import logging

from django.dispatch import receiver
from rest_framework.exceptions import ValidationError

from accounts.models import ActionLog
from app import events
from app.common.keys import t
from app.queue import enqueue

from . import cascades
from .models import (
    ROLE_APPLICANT,
    ActionMandate,
    Argument,
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

logger = logging.getLogger(__name__)

# Relation path from each child entity (or its validated data) to the project
PARENT_PATHS = {
    Problem: ('project',),
    Argument: ('project',),
    CounterArgument: ('project',),
    ActionMandate: ('project',),
    Partner: ('project',),
    FractionDetails: ('project',),
    FactionDetails: ('project',),
    Negation: ('counter_argument', 'project'),
    FractionInterest: ('details', 'project'),
    FactionInterest: ('details', 'project'),
}


def follow(source, path):
    value = source
    for name in path:
        if value is None:
            return None
        value = value.get(name) if isinstance(value, dict) else getattr(value, name, None)
    return value


def stamp_parent(sender, source, *, required=False):
    project = follow(source, PARENT_PATHS[sender])
    if project is None:
        if required:
            raise ValidationError({'project': [t('violations.project.unresolvable')]})
        return
    project.stamp()


def connect_stamping(models, paths=None):
    """Stamp the owning project's ``updated_at`` whenever one of ``models`` changes."""
    if paths:
        PARENT_PATHS.update(paths)

    def on_pre_create(sender, data, **kwargs):
        stamp_parent(sender, data, required=True)

    def on_change(sender, instance, **kwargs):
        stamp_parent(sender, instance)

    for model in models:
        events.api_pre_create.connect(on_pre_create, sender=model, weak=False)
        events.api_pre_update.connect(on_change, sender=model, weak=False)
        events.api_pre_delete.connect(on_change, sender=model, weak=False)


connect_stamping(list(PARENT_PATHS))


@receiver(events.api_pre_create, sender=Project)
def on_project_pre_create(sender, data, viewer=None, request=None, **kwargs):
    ActionLog.record(ActionLog.CREATED_PROJECT, request=request, username=getattr(viewer, 'username', None))


@receiver(events.project_reported, sender=Project)
def on_project_reported(sender, project, viewer=None, request=None, report=None, **kwargs):
    ActionLog.record(ActionLog.REPORTED_PROJECT, request=request, username=getattr(viewer, 'username', None))
    enqueue('project-reported', {'project_id': project.pk, 'report': dict(report or {})})


@receiver(events.api_post_create, sender=ProjectMembership)
def on_membership_created(sender, instance, **kwargs):
    user = instance.user
    if instance.role == ROLE_APPLICANT and user.validated and user.active:
        enqueue('notify-on-application', {'membership_id': instance.pk})


@receiver(events.api_pre_delete, sender=ProjectMembership)
def on_membership_pre_delete(sender, instance, **kwargs):
    cascades.lock_if_last_active_member(instance)


@receiver(events.api_post_delete, sender=ProjectMembership)
def on_membership_post_delete(sender, instance, viewer=None, **kwargs):
    cascades.notify_if_abandoned(instance.project, viewer)
