import logging
from datetime import timedelta

from celery import shared_task
from django.db import transaction
from django.utils import timezone

from app.mail import send_templated_mail

from .models import (
    VALIDATION_ACCOUNT,
    VALIDATION_CHANGE_EMAIL,
    VALIDATION_RESET_PASSWORD,
    ActionLog,
    User,
    Validation,
)

logger = logging.getLogger(__name__)


def _load_user(user_id, *, allow_unvalidated=False):
    user = User.objects.find_non_deleted(user_id)
    if user is None:
        logger.info('user %s missing or deleted, skipping', user_id)
        return None
    if not user.active or (not allow_unvalidated and not user.validated):
        logger.info('user %s inactive or unvalidated, skipping', user_id)
        return None
    return user


def _send_validation(user, validation_type, validation_url, mail_key, *, email=None, content=None):
    validation = Validation.objects.create(user=user, type=validation_type, content=content)
    send_templated_mail(
        mail_key,
        [email or user.email],
        username=user.username,
        url=validation.build_url(validation_url),
    )
    return validation.pk


@shared_task
def send_registration_email(user_id: int, validation_url: str):
    user = User.objects.find_non_deleted(user_id)
    if user is None or user.validated:
        logger.info('registration mail for user %s not needed', user_id)
        return None
    return _send_validation(user, VALIDATION_ACCOUNT, validation_url, 'registration')


@shared_task
def send_email_change_email(user_id: int, email: str, validation_url: str):
    user = _load_user(user_id)
    if user is None:
        return None
    return _send_validation(
        user, VALIDATION_CHANGE_EMAIL, validation_url, 'email_change', email=email, content={'email': email}
    )


@shared_task
def send_password_reset_email(user_id: int, validation_url: str):
    user = _load_user(user_id, allow_unvalidated=True)
    if user is None:
        return None
    return _send_validation(user, VALIDATION_RESET_PASSWORD, validation_url, 'password_reset')


@shared_task
def send_welcome_email(user_id: int):
    user = _load_user(user_id)
    if user is None:
        return 0
    return send_templated_mail('welcome', [user.email], username=user.username)


@shared_task
def cleanup_action_log():
    """Drop short-lived security rows and anonymize the rest as they age."""
    now = timezone.now()
    week_ago = now - timedelta(days=7)
    day_ago = now - timedelta(days=1)
    with transaction.atomic():
        deleted, _ = ActionLog.objects.filter(action__in=ActionLog.SHORT_LIVED, timestamp__lt=week_ago).delete()
        ips = ActionLog.objects.filter(timestamp__lt=day_ago, ip_address__isnull=False).update(ip_address=None)
        names = ActionLog.objects.filter(timestamp__lt=week_ago, username__isnull=False).update(username=None)
    logger.info('action log cleanup: %d deleted, %d ips and %d usernames cleared', deleted, ips, names)
    return {'deleted': deleted, 'ips_cleared': ips, 'usernames_cleared': names}


@shared_task
def purge_validations():
    """Delete expired validations; expired account validations take their never validated user along."""
    from projects.cascades import delete_user

    removed = set()
    expired = list(Validation.objects.expired().select_related('user'))
    for validation in expired:
        with transaction.atomic():
            user = validation.user
            if validation.type == VALIDATION_ACCOUNT and user.pk not in removed:
                if not user.validated and not user.is_deleted():
                    delete_user(user)
                    removed.add(user.pk)
            validation.delete()
    logger.info('purged %d expired validations, removed %d users', len(expired), len(removed))
    return {'validations': len(expired), 'users': len(removed)}
