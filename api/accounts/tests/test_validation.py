from datetime import timedelta

from django.core import mail
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import (
    VALIDATION_ACCOUNT,
    VALIDATION_CHANGE_EMAIL,
    VALIDATION_RESET_PASSWORD,
    ActionLog,
    User,
    Validation,
)


class ValidationConfirmTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user('alice', 'alice@example.com', 'secret-pass')

    def confirm(self, validation, **payload):
        payload.setdefault('token', validation.token)
        with self.captureOnCommitCallbacks(execute=True):
            return self.client.post(f'/api/validations/{validation.pk}/confirm/', payload, format='json')

    def test_account_validation(self):
        validation = Validation.objects.create(user=self.user, type=VALIDATION_ACCOUNT)
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 205, res.content)
        self.user.refresh_from_db()
        self.assertTrue(self.user.validated)
        self.assertFalse(Validation.objects.filter(pk=validation.pk).exists())
        self.assertEqual([m.subject for m in mail.outbox], ['Welcome'])

    def test_wrong_token(self):
        validation = Validation.objects.create(user=self.user, type=VALIDATION_ACCOUNT)
        res = self.confirm(validation, token='nope')
        self.assertEqual(res.status_code, 404)
        self.assertTrue(ActionLog.objects.filter(action=ActionLog.FAILED_VALIDATION).exists())
        self.assertTrue(Validation.objects.filter(pk=validation.pk).exists())

    def test_non_numeric_id_is_not_found(self):
        res = self.client.post('/api/validations/abc/confirm/', {'token': 'x'}, format='json')
        self.assertEqual(res.status_code, 404)
        self.assertEqual(ActionLog.objects.filter(action=ActionLog.FAILED_VALIDATION).count(), 1)

    def test_expired_account_validation_removes_user(self):
        validation = Validation.objects.create(
            user=self.user, type=VALIDATION_ACCOUNT, expires_at=timezone.now() - timedelta(minutes=1)
        )
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 404)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_deleted())
        self.assertEqual(self.user.username, f'deleted_{self.user.pk}')
        self.assertFalse(Validation.objects.filter(pk=validation.pk).exists())

    def test_logged_in_viewer_cannot_validate_account(self):
        validation = Validation.objects.create(user=self.user, type=VALIDATION_ACCOUNT)
        other = User.objects.create_user('bob', 'bob@example.com', 'secret-pass', validated=True)
        self.client.force_authenticate(other)
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 403)
        self.user.refresh_from_db()
        self.assertFalse(self.user.validated)
        self.assertTrue(Validation.objects.filter(pk=validation.pk).exists())

    def test_password_reset(self):
        validation = Validation.objects.create(user=self.user, type=VALIDATION_RESET_PASSWORD)
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 400)
        res = self.confirm(validation, password='secret-pass')
        self.assertEqual(res.status_code, 400)
        res = self.confirm(validation, password='brand-new-pass')
        self.assertEqual(res.status_code, 205, res.content)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('brand-new-pass'))

    def test_email_change(self):
        validation = Validation.objects.create(
            user=self.user, type=VALIDATION_CHANGE_EMAIL, content={'email': 'new@example.com'}
        )
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 205, res.content)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, 'new@example.com')

    def test_email_change_to_taken_address(self):
        User.objects.create_user('bob', 'new@example.com', 'secret-pass')
        validation = Validation.objects.create(
            user=self.user, type=VALIDATION_CHANGE_EMAIL, content={'email': 'new@example.com'}
        )
        res = self.confirm(validation)
        self.assertEqual(res.status_code, 400)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, 'alice@example.com')

    def test_retrieve_is_admin_only(self):
        validation = Validation.objects.create(user=self.user, type=VALIDATION_ACCOUNT)
        self.client.force_authenticate(self.user)
        res = self.client.get(f'/api/validations/{validation.pk}/')
        self.assertEqual(res.status_code, 403)
        admin = User.objects.create_user('admin', 'admin@example.com', 'secret-pass', roles=['ROLE_ADMIN'])
        self.client.force_authenticate(admin)
        res = self.client.get(f'/api/validations/{validation.pk}/')
        self.assertEqual(res.status_code, 200)
        self.assertNotIn('token', res.json())
