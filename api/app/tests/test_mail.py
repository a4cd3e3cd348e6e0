from django.core import mail
from django.test import SimpleTestCase

from app.mail import send_templated_mail


class TemplatedMailTests(SimpleTestCase):
    def test_sends_catalogue_subject_and_body(self):
        sent = send_templated_mail('welcome', ['alice@example.com', ''], username='alice')
        self.assertEqual(sent, 1)
        self.assertEqual(mail.outbox[0].to, ['alice@example.com'])
        self.assertEqual(mail.outbox[0].subject, 'Welcome')

    def test_unknown_mail_key_is_skipped(self):
        with self.assertLogs('app.mail', level='WARNING'):
            self.assertEqual(send_templated_mail('no_such_mail', ['alice@example.com']), 0)
        self.assertEqual(mail.outbox, [])

    def test_no_recipients(self):
        self.assertEqual(send_templated_mail('welcome', [None, '']), 0)
        self.assertEqual(mail.outbox, [])
