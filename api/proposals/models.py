from django.conf import settings
from django.db import models

from app.common.text import validate_single_line


class Proposal(models.Model):
    """A formal resolution draft submitted to a council on behalf of a project."""

    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='proposals')
    title = models.CharField(max_length=200, validators=[validate_single_line])
    introduction = models.TextField(max_length=6000, blank=True, default='')
    reasoning = models.TextField(max_length=6000, blank=True, default='')
    action_mandate = models.TextField(max_length=6000, blank=True, default='')
    comment = models.TextField(max_length=6000, blank=True, default='')
    sponsor = models.CharField(max_length=200, blank=True, default='')
    url = models.URLField(max_length=200, blank=True, default='')
    # Set by the export task; never written through the API
    document_file = models.FileField(upload_to='proposals/', null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['title', 'project'], name='proposal_title_project_unique'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.title


class UsedItem(models.Model):
    """Citation of an argumentation item in a proposal. Append-only."""

    # Name of the cited item's foreign key on the concrete model
    item_field = ''

    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        abstract = True
        ordering = ['id']

    @property
    def item(self):
        return getattr(self, self.item_field)

    @property
    def project(self):
        return self.proposal.project


class UsedArgument(UsedItem):
    item_field = 'argument'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_arguments')
    argument = models.ForeignKey('projects.Argument', on_delete=models.CASCADE, related_name='usages')

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['argument', 'proposal'], name='used_argument_unique'),
        ]


class UsedProblem(UsedItem):
    item_field = 'problem'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_problems')
    problem = models.ForeignKey('projects.Problem', on_delete=models.CASCADE, related_name='usages')

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['problem', 'proposal'], name='used_problem_unique'),
        ]


class UsedCounterArgument(UsedItem):
    item_field = 'counter_argument'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_counter_arguments')
    counter_argument = models.ForeignKey('projects.CounterArgument', on_delete=models.CASCADE, related_name='usages')

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['counter_argument', 'proposal'], name='used_counter_argument_unique'),
        ]


class UsedNegation(UsedItem):
    item_field = 'negation'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_negations')
    negation = models.ForeignKey('projects.Negation', on_delete=models.CASCADE, related_name='usages')

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['negation', 'proposal'], name='used_negation_unique'),
        ]


class UsedActionMandate(UsedItem):
    item_field = 'action_mandate'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_action_mandates')
    action_mandate = models.ForeignKey('projects.ActionMandate', on_delete=models.CASCADE, related_name='usages')

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['action_mandate', 'proposal'], name='used_action_mandate_unique'),
        ]


class UsedFractionInterest(UsedItem):
    item_field = 'fraction_interest'
    proposal = models.ForeignKey(Proposal, on_delete=models.CASCADE, related_name='used_fraction_interests')
    fraction_interest = models.ForeignKey(
        'projects.FractionInterest', on_delete=models.CASCADE, related_name='usages'
    )

    class Meta(UsedItem.Meta):
        constraints = [
            models.UniqueConstraint(fields=['fraction_interest', 'proposal'], name='used_fraction_interest_unique'),
        ]
