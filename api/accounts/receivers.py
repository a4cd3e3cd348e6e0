import logging

from django.dispatch import receiver
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from app import events
from app.common.keys import t
from app.queue import enqueue

from .models import (
    VALIDATION_ACCOUNT,
    VALIDATION_CHANGE_EMAIL,
    VALIDATION_RESET_PASSWORD,
    ActionLog,
    User,
    Validation,
)

logger = logging.getLogger(__name__)


@receiver(events.user_registered, sender=User)
def on_user_registered(sender, user, request=None, validation_url=None, **kwargs):
    ActionLog.record(ActionLog.REGISTERED_USER, request=request, username=user.username)
    enqueue('send-registration-email', {'user_id': user.pk, 'validation_url': validation_url})


def _confirm_account(validation, viewer):
    if viewer is not None:
        raise PermissionDenied(t('violations.validation.logged_in'))
    user = validation.user
    if user.is_deleted():
        raise NotFound(t('violations.validation.not_found'))
    user.validated = True
    user.save(update_fields=['validated'])
    enqueue('send-welcome-email', {'user_id': user.pk})
    logger.info('account %s validated', user.pk)


def _confirm_password_reset(validation, data):
    password = data.get('password')
    if not password:
        raise ValidationError({'password': [t('violations.validation.password_required')]})
    user = validation.user
    if user.check_password(password):
        raise ValidationError({'password': [t('violations.user.password_unchanged')]})
    user.set_password(password)
    user.save(update_fields=['password'])


def _confirm_email_change(validation):
    email = (validation.content or {}).get('email')
    user = validation.user
    if not email or User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
        raise ValidationError({'email': [t('violations.user.email_taken')]})
    user.email = email
    user.save(update_fields=['email'])


@receiver(events.validation_confirmed, sender=Validation)
def on_validation_confirmed(sender, validation, viewer=None, data=None, **kwargs):
    data = data or {}
    if validation.type == VALIDATION_ACCOUNT:
        _confirm_account(validation, viewer)
    elif validation.type == VALIDATION_RESET_PASSWORD:
        _confirm_password_reset(validation, data)
    elif validation.type == VALIDATION_CHANGE_EMAIL:
        _confirm_email_change(validation)


@receiver(events.validation_expired, sender=Validation)
def on_validation_expired(sender, validation, **kwargs):
    if validation.type != VALIDATION_ACCOUNT:
        return
    user = validation.user
    if user.validated or user.is_deleted():
        return
    from projects.cascades import delete_user

    delete_user(user)
    logger.info('never validated account %s removed', user.pk)
