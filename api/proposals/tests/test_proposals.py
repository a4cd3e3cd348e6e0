from django.core import mail
from django.core.files.base import ContentFile
from django.test import TestCase
from rest_framework.test import APIClient

from projects.models import ROLE_APPLICANT, ROLE_OBSERVER, ROLE_WRITER, Argument, CounterArgument, Negation, Project
from projects.tests.factories import add_member, make_council, make_project, make_user
from proposals.models import Proposal, UsedArgument
from proposals.tasks import export_proposal
from proposals.utils import DOCX_MIMETYPE, render_proposal_docx


class ProposalApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.council = make_council()
        self.project = make_project(self.council)
        self.writer = make_user('writer')
        self.stranger = make_user('stranger')
        add_member(self.project, self.writer, ROLE_WRITER)

    def test_writer_creates_proposal(self):
        payload = {'project': self.project.pk, 'title': 'Protected bike lanes', 'comment': 'Draft'}
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.post('/api/proposals/', payload, format='json').status_code, 403)
        self.client.force_authenticate(self.writer)
        res = self.client.post('/api/proposals/', payload, format='json')
        self.assertEqual(res.status_code, 201, res.content)
        proposal = Proposal.objects.get(pk=res.json()['id'])
        self.assertEqual(proposal.comment, 'Draft')
        self.assertEqual(proposal.updated_by, self.writer)
        res = self.client.post('/api/proposals/', payload, format='json')
        self.assertEqual(res.status_code, 400)

    def test_comment_hidden_from_public(self):
        Proposal.objects.create(project=self.project, title='Protected bike lanes', comment='Internal note')
        proposal = self.client.get(f'/api/projects/{self.project.pk}/').json()['proposals'][0]
        self.assertEqual(proposal['title'], 'Protected bike lanes')
        self.assertNotIn('comment', proposal)
        self.client.force_authenticate(self.writer)
        proposal = self.client.get(f'/api/projects/{self.project.pk}/').json()['proposals'][0]
        self.assertEqual(proposal['comment'], 'Internal note')

    def test_document_file_not_writable(self):
        proposal = Proposal.objects.create(project=self.project, title='Protected bike lanes')
        self.client.force_authenticate(self.writer)
        res = self.client.patch(f'/api/proposals/{proposal.pk}/', {'document_file': 'x.docx'}, format='json')
        self.assertEqual(res.status_code, 200)
        proposal.refresh_from_db()
        self.assertFalse(proposal.document_file)


class UsedItemTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        council = make_council()
        self.project = make_project(council)
        self.other = make_project(council, title='Parks')
        self.writer = make_user('writer')
        add_member(self.project, self.writer, ROLE_WRITER)
        add_member(self.other, self.writer, ROLE_WRITER)
        self.proposal = Proposal.objects.create(project=self.project, title='Protected bike lanes')
        self.client.force_authenticate(self.writer)

    def test_cite_argument_of_same_project(self):
        argument = Argument.objects.create(project=self.project, description='Fewer accidents')
        res = self.client.post(
            '/api/used_arguments/', {'proposal': self.proposal.pk, 'argument': argument.pk}, format='json'
        )
        self.assertEqual(res.status_code, 201, res.content)
        usage = UsedArgument.objects.get()
        self.assertEqual(usage.created_by, self.writer)
        self.assertEqual(usage.item, argument)
        res = self.client.get(f'/api/projects/{self.project.pk}/')
        self.assertEqual(res.json()['proposals'][0]['used_arguments'][0]['argument'], argument.pk)

    def test_cite_foreign_item(self):
        foreign = Argument.objects.create(project=self.other, description='More parks')
        res = self.client.post(
            '/api/used_arguments/', {'proposal': self.proposal.pk, 'argument': foreign.pk}, format='json'
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn('argument', res.json())

    def test_cite_negation_through_counter_argument(self):
        counter = CounterArgument.objects.create(project=self.project, description='Too expensive')
        negation = Negation.objects.create(counter_argument=counter, description='Accidents cost more')
        res = self.client.post(
            '/api/used_negations/', {'proposal': self.proposal.pk, 'negation': negation.pk}, format='json'
        )
        self.assertEqual(res.status_code, 201, res.content)

    def test_citations_are_append_only(self):
        argument = Argument.objects.create(project=self.project, description='Fewer accidents')
        usage = UsedArgument.objects.create(proposal=self.proposal, argument=argument)
        res = self.client.patch(f'/api/used_arguments/{usage.pk}/', {'argument': argument.pk}, format='json')
        self.assertEqual(res.status_code, 405)
        self.assertEqual(self.client.delete(f'/api/used_arguments/{usage.pk}/').status_code, 204)

    def test_locked_project_rejects_citations(self):
        argument = Argument.objects.create(project=self.project, description='Fewer accidents')
        Project.objects.filter(pk=self.project.pk).update(locked=True)
        res = self.client.post(
            '/api/used_arguments/', {'proposal': self.proposal.pk, 'argument': argument.pk}, format='json'
        )
        self.assertEqual(res.status_code, 403)


class ProposalExportTests(TestCase):
    def setUp(self):
        self.project = make_project(make_council())
        self.writer = make_user('writer')
        add_member(self.project, self.writer, ROLE_WRITER)
        self.proposal = Proposal.objects.create(
            project=self.project,
            title='Protected bike lanes',
            introduction='Cycling is growing.',
            reasoning='Separated lanes prevent accidents.',
            sponsor='Grüne',
        )
        argument = Argument.objects.create(project=self.project, description='Fewer accidents')
        UsedArgument.objects.create(proposal=self.proposal, argument=argument)

    def test_export_endpoint(self):
        client = APIClient()
        client.force_authenticate(self.writer)
        with self.captureOnCommitCallbacks(execute=True):
            res = client.post(f'/api/proposals/{self.proposal.pk}/export/')
        self.assertEqual(res.status_code, 202, res.content)
        self.proposal.refresh_from_db()
        self.assertTrue(self.proposal.document_file.name.startswith('proposals/protected-bike-lanes'))
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['writer@example.com'])
        self.assertEqual(message.subject, 'Export of Protected bike lanes')
        filename, content, mimetype = message.attachments[0]
        self.assertTrue(filename.endswith('.docx'))
        self.assertEqual(mimetype, DOCX_MIMETYPE)
        self.assertTrue(content.startswith(b'PK'))

    def test_export_requires_write_access(self):
        client = APIClient()
        client.force_authenticate(make_user('stranger'))
        res = client.post(f'/api/proposals/{self.proposal.pk}/export/')
        self.assertEqual(res.status_code, 403)

    def test_render_is_deterministic(self):
        self.assertEqual(render_proposal_docx(self.proposal), render_proposal_docx(self.proposal))

    def test_export_skipped_for_deleted_project(self):
        self.project.mark_deleted()
        self.project.save()
        self.assertIsNone(export_proposal(self.proposal.pk, self.writer.pk))
        self.assertEqual(len(mail.outbox), 0)


class DocumentDownloadTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.project = make_project(make_council())
        self.proposal = Proposal.objects.create(project=self.project, title='Protected bike lanes')
        self.url = f'/api/proposals/{self.proposal.pk}/document-download/'

    def _store_document(self):
        self.proposal.document_file.save('protected-bike-lanes.docx', ContentFile(b'PK docx'), save=True)

    def test_member_downloads_document(self):
        self._store_document()
        observer = make_user('observer')
        add_member(self.project, observer, ROLE_OBSERVER)
        self.project.locked = True
        self.project.save()
        self.client.force_authenticate(observer)
        res = self.client.post(self.url)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(b''.join(res.streaming_content), b'PK docx')
        self.assertIn('attachment', res['Content-Disposition'])
        self.assertIn('.docx', res['Content-Disposition'])

    def test_stranger_and_applicant_are_rejected(self):
        self._store_document()
        applicant = make_user('applicant')
        add_member(self.project, applicant, ROLE_APPLICANT)
        self.client.force_authenticate(make_user('stranger'))
        self.assertEqual(self.client.post(self.url).status_code, 403)
        self.client.force_authenticate(applicant)
        self.assertEqual(self.client.post(self.url).status_code, 403)
        self.client.force_authenticate(None)
        self.assertEqual(self.client.post(self.url).status_code, 401)

    def test_missing_document_is_not_found(self):
        writer = make_user('writer')
        add_member(self.project, writer, ROLE_WRITER)
        self.client.force_authenticate(writer)
        self.assertEqual(self.client.post(self.url).status_code, 404)

    def test_staff_downloads_document(self):
        self._store_document()
        self.client.force_authenticate(make_user('manager', 'ROLE_PROCESS_MANAGER'))
        self.assertEqual(self.client.post(self.url).status_code, 200)
