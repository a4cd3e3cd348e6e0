from django.core import mail
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import ActionLog
from councils.models import Fraction
from projects.models import (
    ROLE_COORDINATOR,
    ROLE_OBSERVER,
    ROLE_WRITER,
    STATE_PRIVATE,
    STATE_PUBLIC,
    Project,
)

from .factories import add_member, make_council, make_project, make_user


class ProjectApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.council = make_council()
        self.coordinator = make_user('coord')
        self.writer = make_user('writer')
        self.stranger = make_user('stranger')
        self.manager = make_user('manager', 'ROLE_PROCESS_MANAGER')
        self.project = make_project(self.council)
        add_member(self.project, self.coordinator, ROLE_COORDINATOR)
        add_member(self.project, self.writer, ROLE_WRITER)

    def test_create_makes_creator_coordinator(self):
        self.client.force_authenticate(self.stranger)
        payload = {
            'title': 'Green roofs',
            'topic': 'More green on roofs',
            'council': self.council.pk,
            'motivation': 'I love green roofs',
            'skills': 'Landscape architect',
        }
        res = self.client.post('/api/projects/', payload, format='json')
        self.assertEqual(res.status_code, 201, res.content)
        project = Project.objects.get(pk=res.json()['id'])
        self.assertEqual(project.created_by, self.stranger)
        self.assertEqual(project.state, STATE_PRIVATE)
        self.assertEqual(project.user_role(self.stranger), ROLE_COORDINATOR)
        self.assertEqual(res.json()['council']['id'], self.council.pk)
        self.assertTrue(ActionLog.objects.filter(action=ActionLog.CREATED_PROJECT, username='stranger').exists())

    def test_create_requires_motivation_and_active_council(self):
        self.client.force_authenticate(self.stranger)
        res = self.client.post(
            '/api/projects/', {'title': 'Green roofs', 'topic': 'Roofs', 'council': self.council.pk}, format='json'
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn('motivation', res.json())
        inactive = make_council('Stadtrat Dresden', active=False)
        payload = {
            'title': 'Green roofs',
            'topic': 'Roofs',
            'council': inactive.pk,
            'motivation': 'I love green roofs',
            'skills': 'Landscape architect',
        }
        res = self.client.post('/api/projects/', payload, format='json')
        self.assertEqual(res.status_code, 400)
        self.assertIn('council', res.json())

    def test_anonymous_cannot_create(self):
        res = self.client.post('/api/projects/', {'title': 'Green roofs'}, format='json')
        self.assertEqual(res.status_code, 401)

    def test_public_list(self):
        make_project(self.council, title='Secret', state=STATE_PRIVATE)
        make_project(self.council, title='Frozen', locked=True)
        res = self.client.get('/api/projects/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual([row['title'] for row in res.json()['results']], ['Bike lanes'])

    def test_members_load_private_projects_by_id(self):
        private = make_project(self.council, title='Secret', state=STATE_PRIVATE)
        add_member(private, self.writer, ROLE_OBSERVER)
        self.client.force_authenticate(self.writer)
        res = self.client.get('/api/projects/', {'id': [private.pk, self.project.pk]})
        self.assertEqual({row['id'] for row in res.json()['results']}, {private.pk, self.project.pk})

    def test_anonymous_view_of_public_project(self):
        Fraction.objects.create(council=self.council, name='Alte Liste', active=False)
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        self.assertEqual(res.status_code, 200)
        data = res.json()
        self.assertNotIn('memberships', data)
        self.assertNotIn('locked', data)
        self.assertNotIn('created_by', data)
        self.assertNotIn('motivation', data)
        self.assertEqual([f['name'] for f in data['council']['fractions']], ['Alte Liste'])

    def test_private_project_hidden_from_anonymous(self):
        self.project.state = STATE_PRIVATE
        self.project.save()
        self.assertEqual(self.client.get(f'/api/projects/{self.project.pk}/').status_code, 404)
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(f'/api/projects/{self.project.pk}/').status_code, 404)
        self.client.force_authenticate(self.writer)
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.json()['memberships']), 2)
        self.assertFalse(res.json()['locked'])

    def test_only_coordinator_changes_state(self):
        url = f'/api/projects/{self.project.pk}/'
        self.client.force_authenticate(self.writer)
        res = self.client.patch(url, {'state': STATE_PRIVATE, 'impact': 'Fewer accidents'}, format='json')
        self.assertEqual(res.status_code, 200, res.content)
        self.project.refresh_from_db()
        self.assertEqual(self.project.state, STATE_PUBLIC)
        self.assertEqual(self.project.impact, 'Fewer accidents')

        self.client.force_authenticate(self.coordinator)
        res = self.client.patch(url, {'state': STATE_PRIVATE}, format='json')
        self.assertEqual(res.status_code, 200)
        self.project.refresh_from_db()
        self.assertEqual(self.project.state, STATE_PRIVATE)

    def test_council_change_needs_staff(self):
        other = make_council('Stadtrat Halle')
        url = f'/api/projects/{self.project.pk}/'
        self.client.force_authenticate(self.coordinator)
        self.client.patch(url, {'council': other.pk}, format='json')
        self.project.refresh_from_db()
        self.assertEqual(self.project.council, self.council)
        self.client.force_authenticate(self.manager)
        res = self.client.patch(url, {'council': other.pk}, format='json')
        self.assertEqual(res.status_code, 200, res.content)
        self.project.refresh_from_db()
        self.assertEqual(self.project.council, other)

    def test_strangers_and_locked_projects_are_read_only(self):
        url = f'/api/projects/{self.project.pk}/'
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.patch(url, {'impact': 'x'}, format='json').status_code, 403)
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        self.client.force_authenticate(self.coordinator)
        self.assertEqual(self.client.patch(url, {'impact': 'x'}, format='json').status_code, 403)
        self.client.force_authenticate(self.manager)
        res = self.client.patch(url, {'locked': False}, format='json')
        self.assertEqual(res.status_code, 200)
        self.project.refresh_from_db()
        self.assertFalse(self.project.locked)

    def test_delete_requires_locked_project(self):
        url = f'/api/projects/{self.project.pk}/'
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.delete(url).status_code, 403)
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.project.refresh_from_db()
        self.assertTrue(self.project.is_deleted())
        self.assertFalse(self.project.memberships.exists())
        self.assertEqual(self.client.get('/api/projects/', {'deleted': 'true'}).json()['count'], 1)

    def test_second_delete_is_rejected(self):
        url = f'/api/projects/{self.project.pk}/'
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.project.refresh_from_db()
        deleted_at = self.project.deleted_at
        res = self.client.delete(url)
        self.assertEqual(res.status_code, 400)
        self.assertIn('deleted_at', res.json())
        self.project.refresh_from_db()
        self.assertEqual(self.project.deleted_at, deleted_at)

    def test_statistics_for_staff(self):
        self.client.force_authenticate(self.writer)
        self.assertEqual(self.client.get('/api/projects/statistics/').status_code, 403)
        self.client.force_authenticate(self.manager)
        res = self.client.get('/api/projects/statistics/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['public'], 1)

    def test_report(self):
        payload = {
            'report_message': 'Offensive content',
            'reporter_name': 'Jane Doe',
            'reporter_email': 'jane@example.com',
        }
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(f'/api/projects/{self.project.pk}/report/', payload, format='json')
        self.assertEqual(res.status_code, 202, res.content)
        self.assertTrue(ActionLog.objects.filter(action=ActionLog.REPORTED_PROJECT).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['manager@example.com'])
        self.assertEqual(mail.outbox[0].subject, 'Project Bike lanes was reported')
        self.assertIn('Offensive content', mail.outbox[0].body)

    def test_report_blocked_after_repeated_reports(self):
        payload = {
            'report_message': 'Offensive content',
            'reporter_name': 'Jane Doe',
            'reporter_email': 'jane@example.com',
        }
        url = f'/api/projects/{self.project.pk}/report/'
        for _ in range(3):
            self.assertEqual(self.client.post(url, payload, format='json').status_code, 202)
        self.assertEqual(self.client.post(url, payload, format='json').status_code, 403)

    def test_report_validation(self):
        res = self.client.post(f'/api/projects/{self.project.pk}/report/', {'report_message': 'x'}, format='json')
        self.assertEqual(res.status_code, 400)
        self.assertFalse(ActionLog.objects.filter(action=ActionLog.REPORTED_PROJECT).exists())
