import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import EmailMessage

from app.common.keys import has, t

logger = logging.getLogger(__name__)


def send_templated_mail(key: str, recipients, *, attachments=(), **context) -> int:
    """Send the ``mail.<key>`` subject/body pair from the message catalogue.

    ``attachments`` are ``(filename, content, mimetype)`` tuples. Transport
    failures are logged and reported as zero messages sent.
    """
    to = [r for r in recipients if r]
    if not to:
        logger.info('mail %s skipped: no recipients', key)
        return 0
    if not has(f'mail.{key}.subject'):
        logger.warning('mail %s skipped: not in the message catalogue', key)
        return 0
    message = EmailMessage(
        subject=t(f'mail.{key}.subject', **context),
        body=t(f'mail.{key}.body', **context),
        from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', None),
        to=to,
    )
    for filename, content, mimetype in attachments:
        message.attach(filename, content, mimetype)
    try:
        return message.send()
    except (SMTPException, OSError):
        logger.exception('mail %s to %d recipient(s) failed', key, len(to))
        return 0
