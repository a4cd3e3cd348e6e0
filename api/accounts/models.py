import re
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.db import models
from django.db.models import Q
from django.utils import timezone

ROLE_ADMIN = 'ROLE_ADMIN'
ROLE_PROCESS_MANAGER = 'ROLE_PROCESS_MANAGER'
ROLE_USER = 'ROLE_USER'
ROLES = (ROLE_ADMIN, ROLE_PROCESS_MANAGER, ROLE_USER)

USERNAME_RE = re.compile(r'^[a-zA-Z]+[a-zA-Z0-9._-]*[a-zA-Z][a-zA-Z0-9._-]*$')
DELETED_USERNAME_RE = re.compile(r'^deleted_\d+$')


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, username, email, password=None, **extra):
        if not username:
            raise ValueError('username is required')
        user = self.model(username=username, email=self.normalize_email(email), **extra)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def get_by_natural_key(self, username):
        # Logins accept the username or the email address
        return self.get(Q(username=username) | Q(email__iexact=username), deleted_at__isnull=True)

    def non_deleted(self):
        return self.filter(deleted_at__isnull=True)

    def find_non_deleted(self, pk):
        return self.non_deleted().filter(pk=pk).first()

    def find_one_non_deleted_by(self, **criteria):
        return self.non_deleted().filter(**criteria).first()

    def load_process_managers(self):
        return [
            user
            for user in self.non_deleted().filter(validated=True, active=True)
            if user.has_role(ROLE_PROCESS_MANAGER)
        ]


class User(AbstractBaseUser):
    username = models.CharField(max_length=20, unique=True)
    email = models.EmailField(max_length=255, unique=True)
    first_name = models.CharField(max_length=50, null=True, blank=True)
    last_name = models.CharField(max_length=50, null=True, blank=True)
    roles = models.JSONField(default=list, blank=True)
    active = models.BooleanField(default=True)
    validated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'username'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['email']

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:  # pragma: no cover
        return self.username

    @property
    def is_active(self) -> bool:
        return self.active and self.deleted_at is None

    def get_roles(self) -> list:
        roles = list(self.roles or [])
        if ROLE_USER not in roles:
            roles.append(ROLE_USER)
        return roles

    def has_role(self, role: str) -> bool:
        return role in self.get_roles()

    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    def is_process_manager(self) -> bool:
        return self.has_role(ROLE_PROCESS_MANAGER)

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self):
        """Scrub identifying data; memberships are removed by the delete cascade."""
        self.deleted_at = timezone.now()
        self.username = f'deleted_{self.pk}'
        self.email = f'deleted_{self.pk}@hpo.user'
        self.first_name = None
        self.last_name = None
        self.roles = []
        self.set_unusable_password()


VALIDATION_ACCOUNT = 'account'
VALIDATION_RESET_PASSWORD = 'reset-password'
VALIDATION_CHANGE_EMAIL = 'change-email'


def _default_expiry():
    return timezone.now() + timedelta(days=settings.VALIDATION_TTL_DAYS)


def generate_token() -> str:
    return secrets.token_urlsafe(36)[:48]


class ValidationQuerySet(models.QuerySet):
    def expired(self):
        return self.filter(expires_at__lt=timezone.now())


class Validation(models.Model):
    TYPE_CHOICES = (
        (VALIDATION_ACCOUNT, 'Account'),
        (VALIDATION_RESET_PASSWORD, 'Reset password'),
        (VALIDATION_CHANGE_EMAIL, 'Change email'),
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='validations')
    token = models.CharField(max_length=48, default=generate_token)
    content = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=_default_expiry)

    objects = ValidationQuerySet.as_manager()

    def __str__(self) -> str:  # pragma: no cover
        return f'Validation {self.pk} ({self.type})'

    def is_expired(self) -> bool:
        return self.expires_at < timezone.now()

    def build_url(self, template: str) -> str:
        return (
            template.replace('{{token}}', self.token)
            .replace('{{id}}', str(self.pk))
            .replace('{{type}}', self.type)
        )


class ActionLogManager(models.Manager):
    def count_by_ip(self, ip_address, actions, interval) -> int:
        if not ip_address:
            return 0
        since = timezone.now() - interval
        return self.filter(ip_address=ip_address, action__in=actions, timestamp__gte=since).count()

    def count_by_username(self, username, actions, interval) -> int:
        if not username:
            return 0
        since = timezone.now() - interval
        return self.filter(username=username, action__in=actions, timestamp__gte=since).count()


class ActionLog(models.Model):
    FAILED_LOGIN = 'failed_login'
    SUCCESSFUL_LOGIN = 'successful_login'
    REGISTERED_USER = 'registered_user'
    FAILED_VALIDATION = 'failed_validation'
    FAILED_PW_RESET_REQUEST = 'failed_pw_reset_request'
    SUCCESSFUL_PW_RESET_REQUEST = 'successful_pw_reset_request'
    CREATED_PROJECT = 'created_project'
    REPORTED_PROJECT = 'reported_project'

    # Security relevant only; dropped by the cleanup job after a week
    SHORT_LIVED = (
        FAILED_LOGIN,
        SUCCESSFUL_LOGIN,
        FAILED_VALIDATION,
        FAILED_PW_RESET_REQUEST,
        SUCCESSFUL_PW_RESET_REQUEST,
    )

    ip_address = models.CharField(max_length=45, null=True, blank=True)
    username = models.CharField(max_length=255, null=True, blank=True)
    action = models.CharField(max_length=50)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    objects = ActionLogManager()

    class Meta:
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='actionlog_action_ts_idx'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f'{self.action} {self.username or "-"}@{self.ip_address or "-"}'

    @classmethod
    def record(cls, action: str, *, request=None, username=None):
        ip = request.META.get('REMOTE_ADDR') if request is not None else None
        return cls.objects.create(action=action, ip_address=ip, username=username)
