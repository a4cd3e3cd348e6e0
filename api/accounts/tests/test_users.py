from django.core import mail
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import ActionLog, User

VALIDATION_URL = 'https://example.org/confirm/{{id}}/{{token}}'


class UserEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = User.objects.create_user('alice', 'alice@example.com', 'secret-pass', validated=True)
        self.bob = User.objects.create_user('bob', 'bob@example.com', 'secret-pass', validated=True)
        self.admin = User.objects.create_user(
            'admin', 'admin@example.com', 'secret-pass', validated=True, roles=['ROLE_ADMIN']
        )
        self.manager = User.objects.create_user(
            'manager', 'pm@example.com', 'secret-pass', validated=True, roles=['ROLE_PROCESS_MANAGER']
        )

    def test_user_reads_only_own_account(self):
        self.client.force_authenticate(self.alice)
        res = self.client.get(f'/api/users/{self.alice.pk}/')
        self.assertEqual(res.status_code, 200)
        self.assertIn('roles', res.json())
        self.assertNotIn('active', res.json())
        res = self.client.get(f'/api/users/{self.bob.pk}/')
        self.assertEqual(res.status_code, 403)

    def test_list_requires_process_manager(self):
        self.client.force_authenticate(self.alice)
        self.assertEqual(self.client.get('/api/users/').status_code, 403)
        self.client.force_authenticate(self.manager)
        res = self.client.get('/api/users/', {'username': 'ali'})
        self.assertEqual(res.status_code, 200)
        self.assertEqual([row['username'] for row in res.json()['results']], ['alice'])

    def test_list_filters_roles(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get('/api/users/', {'roles': 'ROLE_ADMIN'})
        self.assertEqual([row['username'] for row in res.json()['results']], ['admin'])

    def test_only_admin_changes_roles(self):
        self.client.force_authenticate(self.alice)
        res = self.client.patch(f'/api/users/{self.alice.pk}/', {'roles': ['ROLE_ADMIN']}, format='json')
        self.assertEqual(res.status_code, 200)
        self.alice.refresh_from_db()
        self.assertFalse(self.alice.is_admin())
        self.client.force_authenticate(self.admin)
        res = self.client.patch(f'/api/users/{self.alice.pk}/', {'roles': ['ROLE_PROCESS_MANAGER']}, format='json')
        self.assertEqual(res.status_code, 200, res.content)
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.is_process_manager())

    def test_delete_scrubs_account(self):
        self.client.force_authenticate(self.alice)
        res = self.client.delete(f'/api/users/{self.alice.pk}/')
        self.assertEqual(res.status_code, 204)
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.is_deleted())
        self.assertEqual(self.alice.email, f'deleted_{self.alice.pk}@hpo.user')
        self.assertFalse(self.alice.has_usable_password())

    def test_deleted_account_readable_by_admin_only(self):
        self.alice.mark_deleted()
        self.alice.save()
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(f'/api/users/{self.alice.pk}/').status_code, 403)
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(f'/api/users/{self.alice.pk}/').status_code, 200)

    def test_statistics(self):
        User.objects.create_user('carol', 'carol@example.com', 'secret-pass')
        self.client.force_authenticate(self.manager)
        res = self.client.get('/api/users/statistics/')
        self.assertEqual(res.status_code, 200)
        data = res.json()
        self.assertEqual(data['existing'], 5)
        self.assertEqual(data['not_validated'], 1)
        self.assertEqual(data['newly_registered'], 5)
        self.assertEqual(data['deleted'], 0)

    def test_change_password(self):
        self.client.force_authenticate(self.alice)
        url = f'/api/users/{self.alice.pk}/change-password/'
        res = self.client.post(url, {'password': 'other-pass', 'confirmation_password': 'wrong'}, format='json')
        self.assertEqual(res.status_code, 400)
        res = self.client.post(url, {'password': 'other-pass', 'confirmation_password': 'secret-pass'}, format='json')
        self.assertEqual(res.status_code, 200, res.content)
        self.alice.refresh_from_db()
        self.assertTrue(self.alice.check_password('other-pass'))

    def test_change_email_sends_validation_to_new_address(self):
        self.client.force_authenticate(self.alice)
        payload = {
            'email': 'alice@new.example.com',
            'confirmation_password': 'secret-pass',
            'validation_url': VALIDATION_URL,
        }
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(f'/api/users/{self.alice.pk}/change-email/', payload, format='json')
        self.assertEqual(res.status_code, 202, res.content)
        self.assertEqual(mail.outbox[0].to, ['alice@new.example.com'])
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.email, 'alice@example.com')

    def test_change_email_to_taken_address(self):
        self.client.force_authenticate(self.alice)
        payload = {'email': 'bob@example.com', 'confirmation_password': 'secret-pass', 'validation_url': VALIDATION_URL}
        res = self.client.post(f'/api/users/{self.alice.pk}/change-email/', payload, format='json')
        self.assertEqual(res.status_code, 400)

    def test_reset_password_does_not_disclose_accounts(self):
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(
                '/api/users/reset-password/', {'username': 'nobody', 'validation_url': VALIDATION_URL}, format='json'
            )
        self.assertEqual(res.status_code, 202)
        self.assertEqual(len(mail.outbox), 0)
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(
                '/api/users/reset-password/',
                {'username': 'alice@example.com', 'validation_url': VALIDATION_URL},
                format='json',
            )
        self.assertEqual(res.status_code, 202)
        self.assertEqual(mail.outbox[0].subject, 'Reset your password')
        self.assertTrue(ActionLog.objects.filter(action=ActionLog.FAILED_PW_RESET_REQUEST).exists())
        self.assertTrue(ActionLog.objects.filter(action=ActionLog.SUCCESSFUL_PW_RESET_REQUEST).exists())

    def test_reset_password_blocked_after_repeated_requests(self):
        payload = {'username': 'nobody', 'validation_url': VALIDATION_URL}
        for _ in range(3):
            self.assertEqual(self.client.post('/api/users/reset-password/', payload, format='json').status_code, 202)
        res = self.client.post('/api/users/reset-password/', payload, format='json')
        self.assertEqual(res.status_code, 403)

    def test_new_password_by_manager(self):
        self.client.force_authenticate(self.manager)
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(
                f'/api/users/{self.alice.pk}/new-password/', {'validation_url': VALIDATION_URL}, format='json'
            )
        self.assertEqual(res.status_code, 202)
        self.alice.refresh_from_db()
        self.assertFalse(self.alice.has_usable_password())
        self.assertEqual(mail.outbox[0].to, ['alice@example.com'])
