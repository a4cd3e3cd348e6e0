from datetime import timedelta

from django.conf import settings
from django.core.validators import MinLengthValidator
from django.db import models
from django.utils import timezone

from app.common.text import make_slug, validate_contains_letter, validate_single_line

STATE_PUBLIC = 'public'
STATE_PRIVATE = 'private'

ROLE_APPLICANT = 'applicant'
ROLE_WRITER = 'writer'
ROLE_COORDINATOR = 'coordinator'
ROLE_OBSERVER = 'observer'

# Members keeping a project alive; without one the project gets locked
ACTIVE_ROLES = (ROLE_COORDINATOR, ROLE_WRITER)
READER_ROLES = (ROLE_COORDINATOR, ROLE_WRITER, ROLE_OBSERVER)


def _blame_field():
    return models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )


class Category(models.Model):
    name = models.CharField(
        max_length=100,
        unique=True,
        validators=[MinLengthValidator(5), validate_contains_letter, validate_single_line],
    )
    slug = models.SlugField(max_length=150, blank=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def save(self, *args, **kwargs):
        self.slug = make_slug(self.name)
        super().save(*args, **kwargs)


class ProjectQuerySet(models.QuerySet):
    def non_deleted(self):
        return self.filter(deleted_at__isnull=True)

    def find_non_deleted(self, pk):
        return self.non_deleted().filter(pk=pk).first()

    def statistics(self):
        since = timezone.now() - timedelta(days=1)
        live = self.filter(deleted_at__isnull=True, locked=False)
        return {
            'total': self.count(),
            'new': live.filter(created_at__gte=since).count(),
            'public': live.filter(state=STATE_PUBLIC).count(),
            'deleted': self.filter(deleted_at__isnull=False).count(),
        }


class Project(models.Model):
    STATE_CHOICES = (
        (STATE_PUBLIC, 'Public'),
        (STATE_PRIVATE, 'Private'),
    )
    title = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        validators=[MinLengthValidator(3), validate_contains_letter, validate_single_line],
    )
    slug = models.SlugField(max_length=150, blank=True)
    topic = models.TextField(max_length=1000, validators=[MinLengthValidator(2)])
    description = models.TextField(max_length=6000, null=True, blank=True)
    impact = models.TextField(max_length=6000, null=True, blank=True)
    state = models.CharField(max_length=16, choices=STATE_CHOICES, default=STATE_PRIVATE)
    locked = models.BooleanField(default=False)
    council = models.ForeignKey('councils.Council', on_delete=models.PROTECT, related_name='projects')
    categories = models.ManyToManyField(Category, blank=True, related_name='projects')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_projects'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = ProjectQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:  # pragma: no cover
        return self.title or f'Project {self.pk}'

    def save(self, *args, **kwargs):
        self.slug = make_slug(self.title)
        super().save(*args, **kwargs)

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self):
        self.deleted_at = timezone.now()
        self.title = None
        self.description = None

    def membership_of(self, user):
        if user is None or not getattr(user, 'is_authenticated', False):
            return None
        return self.memberships.filter(user_id=user.pk).first()

    def user_role(self, user):
        membership = self.membership_of(user)
        return membership.role if membership else None

    def user_is_member(self, user) -> bool:
        return self.membership_of(user) is not None

    def user_can_read(self, user) -> bool:
        return self.user_role(user) in READER_ROLES

    def user_can_write(self, user) -> bool:
        return self.user_role(user) in ACTIVE_ROLES

    def members_by_role(self, *roles):
        return self.memberships.filter(role__in=roles)

    def stamp(self):
        """Mark the project as changed when one of its children changes."""
        if self.pk is None:
            return
        self.updated_at = timezone.now()
        Project.objects.filter(pk=self.pk).update(updated_at=self.updated_at)


class ProjectMembership(models.Model):
    ROLE_CHOICES = (
        (ROLE_APPLICANT, 'Applicant'),
        (ROLE_WRITER, 'Writer'),
        (ROLE_COORDINATOR, 'Coordinator'),
        (ROLE_OBSERVER, 'Observer'),
    )
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='project_memberships')
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_APPLICANT)
    motivation = models.TextField(
        max_length=1000, validators=[MinLengthValidator(10), validate_single_line]
    )
    skills = models.TextField(max_length=1000, validators=[MinLengthValidator(10), validate_single_line])

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['project', 'user'], name='membership_project_user_unique'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f'{self.user_id}@{self.project_id}:{self.role}'


class Argumentation(models.Model):
    """Free-text item attached to a project with a priority for ordering."""

    description = models.TextField(max_length=1000)
    priority = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = _blame_field()

    class Meta:
        abstract = True
        ordering = ['-priority', 'id']

    def __str__(self) -> str:  # pragma: no cover
        return self.description[:40]


class Problem(Argumentation):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='problems')


class Argument(Argumentation):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='arguments')


class CounterArgument(Argumentation):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='counter_arguments')


class Negation(Argumentation):
    counter_argument = models.ForeignKey(CounterArgument, on_delete=models.CASCADE, related_name='negations')

    @property
    def project(self):
        return self.counter_argument.project


class ActionMandate(Argumentation):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='action_mandates')


class Contact(models.Model):
    contact_email = models.EmailField(max_length=255, blank=True, default='')
    contact_name = models.CharField(max_length=100, blank=True, default='')
    contact_phone = models.CharField(max_length=100, blank=True, default='')
    team_contact = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = _blame_field()

    class Meta:
        abstract = True


class Partner(Contact):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='partners')
    name = models.CharField(max_length=255, validators=[validate_single_line])
    role = models.TextField(max_length=1000, blank=True, default='')
    url = models.URLField(max_length=200, blank=True, default='')

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['name', 'project'], name='partner_name_project_unique'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class FractionDetails(Contact):
    """What a project knows about a council fraction."""

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='fraction_details')
    fraction = models.ForeignKey('councils.Fraction', on_delete=models.CASCADE, related_name='details')
    possible_partner = models.BooleanField(default=False)
    possible_sponsor = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']
        verbose_name_plural = 'fraction details'
        constraints = [
            models.UniqueConstraint(fields=['fraction', 'project'], name='fraction_details_project_unique'),
        ]


class FactionDetails(Contact):
    """What a project knows about a parliament faction."""

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='faction_details')
    faction = models.ForeignKey('councils.Faction', on_delete=models.CASCADE, related_name='details')
    possible_partner = models.BooleanField(default=False)
    possible_proponent = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']
        verbose_name_plural = 'faction details'
        constraints = [
            models.UniqueConstraint(fields=['faction', 'project'], name='faction_details_project_unique'),
        ]


class FractionInterest(models.Model):
    details = models.ForeignKey(FractionDetails, on_delete=models.CASCADE, related_name='interests')
    description = models.TextField(max_length=500)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = _blame_field()

    class Meta:
        ordering = ['id']

    @property
    def project(self):
        return self.details.project


class FactionInterest(models.Model):
    details = models.ForeignKey(FactionDetails, on_delete=models.CASCADE, related_name='interests')
    description = models.TextField(max_length=2000)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = _blame_field()

    class Meta:
        ordering = ['id']

    @property
    def project(self):
        return self.details.project
