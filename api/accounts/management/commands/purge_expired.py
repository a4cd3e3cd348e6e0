from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from accounts.models import ActionLog, Validation
from accounts.tasks import cleanup_action_log, purge_validations


class Command(BaseCommand):
    help = 'Purge expired validations and age out action log rows.'

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Only count, do not delete')

    def handle(self, *args, **options):
        if options.get('dry_run'):
            cutoff = timezone.now() - timedelta(days=7)
            logs = ActionLog.objects.filter(action__in=ActionLog.SHORT_LIVED, timestamp__lt=cutoff).count()
            validations = Validation.objects.expired().count()
            self.stdout.write(self.style.WARNING(f'Would delete: {logs} log rows, {validations} validations'))
            return
        logs = cleanup_action_log()
        validations = purge_validations()
        self.stdout.write(
            self.style.SUCCESS(
                f'Log rows deleted: {logs["deleted"]}; validations purged: {validations["validations"]}'
                f' (users removed: {validations["users"]})'
            )
        )
