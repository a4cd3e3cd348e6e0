"""Slug and free-text helpers shared by the models and serializers."""

from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.utils.text import slugify

from .keys import t

_LETTER_RE = re.compile(r'[^\W\d_]')


def make_slug(value: str | None) -> str:
    """``"A better_name, really!"`` -> ``"a-better-name-really"``."""
    if not value:
        return ''
    return slugify(value.replace('_', '-'))


def contains_letter(value: str | None) -> bool:
    return bool(value and _LETTER_RE.search(value))


def validate_contains_letter(value):
    if value and not contains_letter(value):
        raise ValidationError(t('violations.text.letter_required'), code='letter_required')


def validate_single_line(value):
    if value and '\n' in value:
        raise ValidationError(t('violations.text.no_line_breaks'), code='no_line_breaks')
