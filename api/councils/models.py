from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone

from app.common.text import make_slug, validate_contains_letter, validate_single_line

_zip_area = RegexValidator(r'^\d{0,5}$', 'A zip area has at most five digits.')


class FederalState(models.Model):
    name = models.CharField(
        max_length=100,
        unique=True,
        validators=[MinLengthValidator(5), validate_contains_letter, validate_single_line],
    )
    slug = models.SlugField(max_length=150, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def save(self, *args, **kwargs):
        self.slug = make_slug(self.name)
        super().save(*args, **kwargs)


class PoliticalBody(models.Model):
    """Fields shared by councils (municipal) and parliaments (state/federal)."""

    title = models.CharField(
        max_length=200,
        unique=True,
        null=True,
        blank=True,
        validators=[MinLengthValidator(2), validate_contains_letter, validate_single_line],
    )
    slug = models.SlugField(max_length=250, blank=True)
    head_of_administration = models.CharField(max_length=100, blank=True, default='')
    head_of_administration_title = models.CharField(max_length=50, blank=True, default='')
    location = models.CharField(max_length=80, blank=True, default='')
    url = models.URLField(max_length=200, blank=True, default='')
    wikipedia_url = models.URLField(max_length=200, blank=True, default='')
    zip_area = models.CharField(max_length=5, blank=True, default='', validators=[_zip_area])
    validated_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True
        ordering = ['title']

    def __str__(self) -> str:  # pragma: no cover
        return self.title or f'{type(self).__name__} {self.pk}'

    def save(self, *args, **kwargs):
        self.slug = make_slug(self.title)
        super().save(*args, **kwargs)

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self):
        self.deleted_at = timezone.now()
        self.title = None


class Council(PoliticalBody):
    federal_state = models.ForeignKey(
        FederalState, on_delete=models.SET_NULL, null=True, blank=True, related_name='councils'
    )
    active = models.BooleanField(default=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )


class Parliament(PoliticalBody):
    federal_state = models.ForeignKey(
        FederalState, on_delete=models.SET_NULL, null=True, blank=True, related_name='parliaments'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )


class Fraction(models.Model):
    """A party group in a council."""

    council = models.ForeignKey(Council, on_delete=models.CASCADE, related_name='fractions')
    name = models.CharField(max_length=60, validators=[validate_single_line])
    color = models.CharField(max_length=6, default='000000')
    member_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    active = models.BooleanField(default=True)
    url = models.URLField(max_length=200, blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['council', 'name'], name='fraction_council_name_unique'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Faction(models.Model):
    """A party group in a parliament."""

    parliament = models.ForeignKey(Parliament, on_delete=models.CASCADE, related_name='factions')
    name = models.CharField(max_length=60, validators=[validate_single_line])
    member_count = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    active = models.BooleanField(default=True)
    url = models.URLField(max_length=200, blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['parliament', 'name'], name='faction_parliament_name_unique'),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name
