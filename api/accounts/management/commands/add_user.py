from django.core.management.base import BaseCommand, CommandError

from accounts.models import ROLE_ADMIN, ROLE_PROCESS_MANAGER, User
from accounts.serializers import AddUserSerializer


class Command(BaseCommand):
    help = 'Create a validated user, optionally as administrator or process manager'

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('--admin', action='store_true', help='Grant the administrator role.')
        parser.add_argument('--process-manager', action='store_true', help='Grant the process manager role.')

    def handle(self, *args, **options):
        serializer = AddUserSerializer(
            data={key: options[key] for key in ('username', 'email', 'password')}
        )
        if not serializer.is_valid():
            problems = '; '.join(
                f'{field}: {" ".join(str(m) for m in messages)}' for field, messages in serializer.errors.items()
            )
            raise CommandError(f'Invalid user data: {problems}')

        roles = []
        if options['admin']:
            roles.append(ROLE_ADMIN)
        if options['process_manager']:
            roles.append(ROLE_PROCESS_MANAGER)

        data = serializer.validated_data
        user = User.objects.create_user(
            data['username'], data['email'], data['password'], roles=roles, validated=True
        )
        label = ', '.join(user.roles) or 'user'
        self.stdout.write(self.style.SUCCESS(f"Created user '{user.username}' (id {user.pk}, {label})"))
