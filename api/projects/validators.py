"""Rules for membership requests that depend on who is asking."""
from rest_framework.exceptions import ValidationError

from app.common.keys import t
from app.permissions import is_staff

from .models import ROLE_APPLICANT, ROLE_COORDINATOR, ProjectMembership


def _fail(field, key):
    raise ValidationError({field: [t(key)]})


def validate_membership_create(viewer, data):
    project = data['project']
    user = data['user']
    role = data.get('role', ROLE_APPLICANT)
    if project.is_deleted() or project.locked:
        _fail('project', 'violations.project.locked')
    if ProjectMembership.objects.filter(project=project, user=user).exists():
        _fail('user', 'violations.membership.duplicate')
    privileged = is_staff(viewer) or project.user_role(viewer) == ROLE_COORDINATOR
    if privileged:
        if user.pk != viewer.pk and role == ROLE_APPLICANT:
            _fail('role', 'violations.membership.member_role_required')
        return
    if user.pk != viewer.pk:
        _fail('user', 'violations.membership.self_only')
    if role != ROLE_APPLICANT:
        _fail('role', 'violations.membership.applicant_only')


def validate_membership_update(viewer, membership, data):
    project = membership.project
    role = data.get('role', membership.role)
    if 'role' in data and role == ROLE_APPLICANT and membership.role != ROLE_APPLICANT:
        _fail('role', 'violations.membership.no_applicant')
    if (
        membership.role == ROLE_COORDINATOR
        and role != ROLE_COORDINATOR
        and project.members_by_role(ROLE_COORDINATOR).count() == 1
    ):
        _fail('role', 'violations.membership.last_coordinator')
    if is_staff(viewer):
        return
    viewer_role = project.user_role(viewer)
    if membership.user_id == viewer.pk:
        if role != membership.role and viewer_role != ROLE_COORDINATOR:
            _fail('role', 'violations.membership.own_role')
        return
    if viewer_role != ROLE_COORDINATOR:
        return
    if membership.role == ROLE_COORDINATOR and role != ROLE_COORDINATOR:
        _fail('role', 'violations.membership.coordinator_downgrade')
    for field in ('motivation', 'skills'):
        if field in data and data[field] != getattr(membership, field):
            _fail(field, 'violations.membership.foreign_texts')
