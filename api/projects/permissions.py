from rest_framework.permissions import BasePermission

from app.permissions import is_admin, is_staff

from .models import ROLE_COORDINATOR, ROLE_WRITER


def can_edit_project(user, project) -> bool:
    if is_staff(user):
        return True
    if project is None or project.is_deleted() or project.locked:
        return False
    return project.user_can_write(user)


def can_read_project(user, project) -> bool:
    if is_staff(user):
        return True
    if project is None or project.is_deleted():
        return False
    return project.user_can_read(user)


def can_edit_membership(user, membership) -> bool:
    project = membership.project
    if project.is_deleted():
        return False
    if is_staff(user):
        return True
    if project.locked:
        return False
    if membership.user_id == user.pk:
        return True
    return project.user_role(user) == ROLE_COORDINATOR


def can_delete_membership(user, membership) -> bool:
    project = membership.project
    if membership.role == ROLE_COORDINATOR and project.members_by_role(ROLE_COORDINATOR).count() == 1:
        if project.members_by_role(ROLE_WRITER).exists():
            return False
    if is_staff(user):
        return True
    if membership.user_id == user.pk:
        return True
    if project.is_deleted() or project.locked:
        return False
    return project.user_role(user) == ROLE_COORDINATOR and membership.role != ROLE_COORDINATOR


class ProjectAccess(BasePermission):
    def has_permission(self, request, view) -> bool:
        if view.action == 'statistics':
            return is_staff(request.user)
        if view.action in ('list', 'retrieve', 'report'):
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj) -> bool:
        if view.action in ('update', 'partial_update'):
            return can_edit_project(request.user, obj)
        if view.action == 'destroy':
            return is_staff(request.user) and obj.locked
        return True


class ProjectChildAccess(BasePermission):
    """Children are written by project writers and staff; single items are read by admins only."""

    def has_permission(self, request, view) -> bool:
        if not (request.user and request.user.is_authenticated):
            return False
        if view.action == 'retrieve':
            return is_admin(request.user)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        if view.action == 'retrieve':
            return True
        if view.action == 'document_download':
            return can_read_project(request.user, view.project_of(obj))
        return can_edit_project(request.user, view.project_of(obj))


class MembershipAccess(BasePermission):
    def has_permission(self, request, view) -> bool:
        if not (request.user and request.user.is_authenticated):
            return False
        if view.action == 'retrieve':
            return is_admin(request.user)
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        if view.action in ('update', 'partial_update'):
            return can_edit_membership(request.user, obj)
        if view.action == 'destroy':
            return can_delete_membership(request.user, obj)
        return True
