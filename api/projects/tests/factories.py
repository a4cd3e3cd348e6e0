from accounts.models import User
from councils.models import Council
from projects.models import STATE_PUBLIC, Project, ProjectMembership


def make_user(username, *roles, **extra):
    extra.setdefault('validated', True)
    return User.objects.create_user(
        username, f'{username}@example.com', 'secret-pass', roles=list(roles), **extra
    )


def make_council(title='Stadtrat Leipzig', **extra):
    return Council.objects.create(title=title, **extra)


def make_project(council, title='Bike lanes', state=STATE_PUBLIC, **extra):
    return Project.objects.create(title=title, topic='Safer cycling', council=council, state=state, **extra)


def add_member(project, user, role):
    return ProjectMembership.objects.create(
        project=project, user=user, role=role, motivation='Motivated to help', skills='Many useful skills'
    )
