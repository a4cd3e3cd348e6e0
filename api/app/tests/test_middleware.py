from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from accounts.models import User
from app.middleware import clean_value
from councils.models import Council


class CleanValueTests(SimpleTestCase):
    def test_strips_invisible_and_control_characters(self):
        self.assertEqual(clean_value('Bike\u200b lanes\x07'), 'Bike lanes')
        self.assertEqual(clean_value({'a': ['x\r\ny']}), {'a': ['x\ny']})
        self.assertEqual(clean_value(5), 5)


class SanitizeJsonBodyTests(TestCase):
    def test_json_body_is_cleaned_before_validation(self):
        manager = User.objects.create_user(
            'manager', 'pm@example.com', 'secret-pass', validated=True, roles=['ROLE_PROCESS_MANAGER']
        )
        client = APIClient()
        client.force_authenticate(manager)
        res = client.post('/api/councils/', {'title': 'Stadtrat\u200b Halle'}, format='json')
        self.assertEqual(res.status_code, 201, res.content)
        self.assertTrue(Council.objects.filter(title='Stadtrat Halle').exists())

    def test_windows_line_breaks_count_as_line_breaks(self):
        manager = User.objects.create_user(
            'manager', 'pm@example.com', 'secret-pass', validated=True, roles=['ROLE_PROCESS_MANAGER']
        )
        client = APIClient()
        client.force_authenticate(manager)
        res = client.post('/api/councils/', {'title': 'Stadtrat\r\nHalle'}, format='json')
        self.assertEqual(res.status_code, 400)
