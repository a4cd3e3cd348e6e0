from django.core.management.base import BaseCommand

from accounts.models import ROLE_ADMIN, ROLE_PROCESS_MANAGER, User
from councils.models import Council, FederalState
from projects.models import ROLE_COORDINATOR, STATE_PUBLIC, Project, ProjectMembership


class Command(BaseCommand):
    help = 'Seed demo accounts, a council and a sample project for local development'

    def _user(self, username, roles=()):
        user, created = User.objects.get_or_create(
            username=username, defaults={'email': f'{username}@example.com', 'validated': True}
        )
        user.roles = list(roles)
        # Always reset password for convenience in local dev
        user.set_password('demo12345')
        user.save()
        self.stdout.write(f"{'Created' if created else 'Reset'} user '{username}'")
        return user

    def handle(self, *args, **options):
        self._user('admin', [ROLE_ADMIN])
        self._user('manager', [ROLE_PROCESS_MANAGER])
        demo = self._user('demo')

        state, _ = FederalState.objects.get_or_create(name='Sachsen')
        council, _ = Council.objects.get_or_create(
            title='Stadtrat Leipzig', defaults={'federal_state': state, 'active': True}
        )

        if Project.objects.filter(created_by=demo).exists():
            self.stdout.write('Demo user already has a project; skipping creation.')
        else:
            project = Project.objects.create(
                title='More bicycle lanes',
                topic='Safe cycling routes to every school',
                state=STATE_PUBLIC,
                council=council,
                created_by=demo,
            )
            ProjectMembership.objects.create(
                project=project,
                user=demo,
                role=ROLE_COORDINATOR,
                motivation='Started this to make school routes safer.',
                skills='Organizing neighbourhood meetings.',
            )
            self.stdout.write(self.style.SUCCESS("Created a sample project for 'demo'."))

        self.stdout.write(self.style.SUCCESS('Seeding complete.'))
