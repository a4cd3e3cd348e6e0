from django.core import mail
from django.test import TestCase, override_settings

from projects.models import ROLE_APPLICANT, ROLE_COORDINATOR, ROLE_WRITER, Project
from projects.tasks import notify_all_members_left, notify_new_application, notify_project_reported

from .factories import add_member, make_council, make_project, make_user


@override_settings(PUBLIC_BASE_URL='https://civic.example')
class ProjectTaskTests(TestCase):
    def setUp(self):
        self.project = make_project(make_council())
        self.manager = make_user('manager', 'ROLE_PROCESS_MANAGER')
        self.coordinator = make_user('coord')
        add_member(self.project, self.coordinator, ROLE_COORDINATOR)

    def test_application_notice(self):
        membership = add_member(self.project, make_user('applicant'), ROLE_APPLICANT)
        self.assertEqual(notify_new_application(membership.pk), 1)
        self.assertEqual(mail.outbox[0].to, ['coord@example.com'])
        self.assertIn(f'https://civic.example/projects/{self.project.pk}/bike-lanes', mail.outbox[0].body)

    def test_application_notice_skipped_when_no_longer_applicant(self):
        membership = add_member(self.project, make_user('applicant'), ROLE_WRITER)
        self.assertEqual(notify_new_application(membership.pk), 0)
        self.assertEqual(notify_new_application(999999), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_abandonment_notice_requires_locked_project(self):
        self.assertEqual(notify_all_members_left(self.project.pk), 0)
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        self.assertEqual(notify_all_members_left(self.project.pk), 1)
        self.assertEqual(mail.outbox[0].to, ['manager@example.com'])

    def test_abandonment_notice_skipped_for_deleted_project(self):
        self.project.locked = True
        self.project.mark_deleted()
        self.project.save()
        self.assertEqual(notify_all_members_left(self.project.pk), 0)

    def test_report_notice(self):
        report = {'report_message': 'Spam', 'reporter_name': 'Jane Doe', 'reporter_email': 'jane@example.com'}
        self.assertEqual(notify_project_reported(self.project.pk, report), 1)
        self.assertIn('Jane Doe', mail.outbox[0].body)
        self.assertEqual(notify_project_reported(999999, report), 0)
