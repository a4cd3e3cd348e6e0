from django.test import Client, TestCase


class HealthTests(TestCase):
    def setUp(self):
        self.client = Client()

    def test_healthz(self):
        resp = self.client.get('/healthz')
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'ok', resp.content)

    def test_health_endpoint(self):
        r = self.client.get('/api/health')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json().get('status'), 'ok')

    def test_ready_endpoint(self):
        r = self.client.get('/api/ready')
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertTrue(data['db'])
        # Dummy cache in tests never returns what was set
        self.assertIn(data['cache'], (True, False))
        self.assertEqual(data['status'], 'ok')
