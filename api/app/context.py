"""Serialization groups for a request.

Every serializer field is tagged with the groups that may see it (read) or set
it (write), e.g. ``project:coordinator-write``. ``resolve_groups`` computes the
groups a viewer holds for one entity type and operation; it depends only on
its arguments, so capability rules can be tested without HTTP.
"""
from __future__ import annotations

READ = 'read'
WRITE = 'write'

MEMBER_READ_ROLES = ('coordinator', 'writer', 'observer')
MEMBER_WRITE_ROLES = ('coordinator', 'writer')

_STANDARD_ACTIONS = {'list', 'retrieve', 'destroy', 'metadata', None}
_CANONICAL_ACTIONS = {'create': 'create', 'update': 'update', 'partial_update': 'update'}


def action_group(operation: str | None) -> str | None:
    """Name of the operation specific group, if the operation has one."""
    if operation in _CANONICAL_ACTIONS:
        return _CANONICAL_ACTIONS[operation]
    if operation in _STANDARD_ACTIONS:
        return None
    return operation


def viewer_flags(viewer) -> tuple[bool, bool]:
    if viewer is None or not getattr(viewer, 'is_authenticated', False):
        return False, False
    return viewer.is_admin(), viewer.is_process_manager()


def resolve_groups(
    entity_type: str,
    operation: str | None,
    direction: str,
    viewer=None,
    *,
    project=None,
    item: bool = False,
    subject=None,
) -> set[str]:
    """Groups ``viewer`` holds on ``entity_type`` for ``operation``.

    ``project`` is the project the target belongs to (if any), ``item`` marks
    operations on an existing object and ``subject`` is the user being read
    when the entity itself is a user.
    """
    admin, pm = viewer_flags(viewer)
    groups = {f'default:{direction}', f'{entity_type}:{direction}'}

    def add(name: str) -> None:
        groups.add(f'{entity_type}:{name}')
        if admin:
            groups.add(f'{entity_type}:admin-{name}')
        if pm:
            groups.add(f'{entity_type}:pm-{name}')

    add(direction)
    action = action_group(operation)
    if action:
        add(action)

    role = None
    if project is not None and viewer is not None and getattr(viewer, 'is_authenticated', False):
        role = project.user_role(viewer)

    if direction == READ:
        if role in MEMBER_READ_ROLES:
            groups.add(f'{entity_type}:{role}-read')
            groups.add(f'{entity_type}:member-read')
    elif item and role in MEMBER_WRITE_ROLES:
        canonical_update = action == 'update'
        if role == 'coordinator':
            groups.add(f'{entity_type}:coordinator-write')
            if canonical_update:
                groups.add(f'{entity_type}:coordinator-update')
        groups.add(f'{entity_type}:member-write')
        if canonical_update:
            groups.add(f'{entity_type}:member-update')

    if item and action and operation not in _CANONICAL_ACTIONS and operation != 'destroy':
        groups.discard(f'{entity_type}:write')

    # Read only; own roles must not become writable
    if direction == READ and entity_type == 'user' and subject is not None and viewer is not None:
        if getattr(viewer, 'pk', None) == subject.pk:
            groups.add('user:self')
    return groups


def field_groups(*names: str) -> frozenset:
    return frozenset(names)
