from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from councils.models import Fraction
from projects.models import (
    ROLE_COORDINATOR,
    ROLE_WRITER,
    CounterArgument,
    FractionDetails,
    Partner,
    Problem,
    Project,
)

from .factories import add_member, make_council, make_project, make_user


class ProjectChildTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.council = make_council()
        self.project = make_project(self.council)
        self.coordinator = make_user('coord')
        self.writer = make_user('writer')
        self.stranger = make_user('stranger')
        add_member(self.project, self.coordinator, ROLE_COORDINATOR)
        add_member(self.project, self.writer, ROLE_WRITER)

    def age_project(self):
        old = timezone.now() - timedelta(days=3)
        Project.objects.filter(pk=self.project.pk).update(updated_at=old)
        return old

    def test_writer_creates_problem_and_stamps_project(self):
        old = self.age_project()
        self.client.force_authenticate(self.writer)
        res = self.client.post(
            '/api/problems/', {'project': self.project.pk, 'description': 'Crossings', 'priority': 3}, format='json'
        )
        self.assertEqual(res.status_code, 201, res.content)
        problem = Problem.objects.get(pk=res.json()['id'])
        self.assertEqual(problem.priority, 3)
        self.assertEqual(problem.updated_by, self.writer)
        self.project.refresh_from_db()
        self.assertGreater(self.project.updated_at, old)

    def test_non_members_cannot_write(self):
        self.client.force_authenticate(self.stranger)
        res = self.client.post('/api/problems/', {'project': self.project.pk, 'description': 'x'}, format='json')
        self.assertEqual(res.status_code, 403)
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        self.client.force_authenticate(self.writer)
        res = self.client.post('/api/problems/', {'project': self.project.pk, 'description': 'x'}, format='json')
        self.assertEqual(res.status_code, 403)
        self.assertFalse(Problem.objects.exists())

    def test_priority_is_coordinator_only_on_update(self):
        problem = Problem.objects.create(project=self.project, description='Crossings', priority=1)
        url = f'/api/problems/{problem.pk}/'
        self.client.force_authenticate(self.writer)
        res = self.client.patch(url, {'priority': 9, 'description': 'Dangerous crossings'}, format='json')
        self.assertEqual(res.status_code, 200, res.content)
        problem.refresh_from_db()
        self.assertEqual(problem.priority, 1)
        self.assertEqual(problem.description, 'Dangerous crossings')
        self.client.force_authenticate(self.coordinator)
        self.client.patch(url, {'priority': 9}, format='json')
        problem.refresh_from_db()
        self.assertEqual(problem.priority, 9)

    def test_parent_is_immutable(self):
        other = make_project(self.council, title='Parks')
        add_member(other, self.writer, ROLE_WRITER)
        problem = Problem.objects.create(project=self.project, description='Crossings')
        self.client.force_authenticate(self.writer)
        res = self.client.patch(f'/api/problems/{problem.pk}/', {'project': other.pk}, format='json')
        self.assertEqual(res.status_code, 400)
        self.assertIn('project', res.json())

    def test_single_items_are_read_through_the_project(self):
        problem = Problem.objects.create(project=self.project, description='Crossings', priority=2)
        self.client.force_authenticate(self.writer)
        self.assertEqual(self.client.get(f'/api/problems/{problem.pk}/').status_code, 403)
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        self.assertEqual(res.json()['problems'][0]['priority'], 2)
        self.assertIn('updated_at', res.json()['problems'][0])
        self.client.force_authenticate(None)
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        self.assertEqual(res.json()['problems'][0]['priority'], 2)
        self.assertNotIn('updated_at', res.json()['problems'][0])

    def test_delete_child(self):
        problem = Problem.objects.create(project=self.project, description='Crossings')
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.delete(f'/api/problems/{problem.pk}/').status_code, 403)
        self.client.force_authenticate(self.writer)
        self.assertEqual(self.client.delete(f'/api/problems/{problem.pk}/').status_code, 204)
        self.assertFalse(Problem.objects.exists())

    def test_negation_resolves_project_through_counter_argument(self):
        counter = CounterArgument.objects.create(project=self.project, description='Too expensive')
        old = self.age_project()
        self.client.force_authenticate(self.writer)
        res = self.client.post(
            '/api/negations/', {'counter_argument': counter.pk, 'description': 'Accidents cost more'}, format='json'
        )
        self.assertEqual(res.status_code, 201, res.content)
        self.project.refresh_from_db()
        self.assertGreater(self.project.updated_at, old)
        self.client.force_authenticate(self.stranger)
        res = self.client.post(
            '/api/negations/', {'counter_argument': counter.pk, 'description': 'Nope'}, format='json'
        )
        self.assertEqual(res.status_code, 403)

    def test_contact_details_visible_to_members_only(self):
        Partner.objects.create(
            project=self.project, name='ADFC Leipzig', contact_email='info@adfc.example', team_contact=self.writer
        )
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        partner = res.json()['partners'][0]
        self.assertEqual(partner['name'], 'ADFC Leipzig')
        self.assertNotIn('contact_email', partner)
        self.client.force_authenticate(self.writer)
        partner = self.client.get(f'/api/projects/{self.project.pk}/').json()['partners'][0]
        self.assertEqual(partner['contact_email'], 'info@adfc.example')
        self.assertEqual(partner['team_contact'], self.writer.pk)

    def test_duplicate_partner_name(self):
        Partner.objects.create(project=self.project, name='ADFC Leipzig')
        self.client.force_authenticate(self.writer)
        res = self.client.post('/api/partners/', {'project': self.project.pk, 'name': 'ADFC Leipzig'}, format='json')
        self.assertEqual(res.status_code, 400)

    def test_fraction_details_must_match_project_council(self):
        own = Fraction.objects.create(council=self.council, name='Grüne')
        foreign = Fraction.objects.create(council=make_council('Stadtrat Halle'), name='Grüne')
        self.client.force_authenticate(self.writer)
        res = self.client.post(
            '/api/fraction_details/', {'project': self.project.pk, 'fraction': foreign.pk}, format='json'
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn('fraction', res.json())
        res = self.client.post(
            '/api/fraction_details/',
            {'project': self.project.pk, 'fraction': own.pk, 'possible_partner': True},
            format='json',
        )
        self.assertEqual(res.status_code, 201, res.content)
        details = FractionDetails.objects.get()
        res = self.client.post(
            '/api/fraction_interests/', {'details': details.pk, 'description': 'Wants fewer cars'}, format='json'
        )
        self.assertEqual(res.status_code, 201, res.content)
        self.assertEqual(details.interests.count(), 1)
