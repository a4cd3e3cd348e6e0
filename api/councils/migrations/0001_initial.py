from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion

import app.common.text


def _body_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        (
            'title',
            models.CharField(
                blank=True,
                max_length=200,
                null=True,
                unique=True,
                validators=[
                    django.core.validators.MinLengthValidator(2),
                    app.common.text.validate_contains_letter,
                    app.common.text.validate_single_line,
                ],
            ),
        ),
        ('slug', models.SlugField(blank=True, max_length=250)),
        ('head_of_administration', models.CharField(blank=True, default='', max_length=100)),
        ('head_of_administration_title', models.CharField(blank=True, default='', max_length=50)),
        ('location', models.CharField(blank=True, default='', max_length=80)),
        ('url', models.URLField(blank=True, default='')),
        ('wikipedia_url', models.URLField(blank=True, default='')),
        (
            'zip_area',
            models.CharField(
                blank=True,
                default='',
                max_length=5,
                validators=[django.core.validators.RegexValidator('^\\d{0,5}$', 'A zip area has at most five digits.')],
            ),
        ),
        ('validated_at', models.DateTimeField(blank=True, null=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('deleted_at', models.DateTimeField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FederalState',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                (
                    'name',
                    models.CharField(
                        max_length=100,
                        unique=True,
                        validators=[
                            django.core.validators.MinLengthValidator(5),
                            app.common.text.validate_contains_letter,
                            app.common.text.validate_single_line,
                        ],
                    ),
                ),
                ('slug', models.SlugField(blank=True, max_length=150)),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='Council',
            fields=_body_fields()
            + [
                ('active', models.BooleanField(default=True)),
                (
                    'federal_state',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='councils',
                        to='councils.federalstate',
                    ),
                ),
                (
                    'updated_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['title'], 'abstract': False},
        ),
        migrations.CreateModel(
            name='Parliament',
            fields=_body_fields()
            + [
                (
                    'federal_state',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='parliaments',
                        to='councils.federalstate',
                    ),
                ),
                (
                    'updated_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['title'], 'abstract': False},
        ),
        migrations.CreateModel(
            name='Fraction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=60, validators=[app.common.text.validate_single_line])),
                ('color', models.CharField(default='000000', max_length=6)),
                (
                    'member_count',
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ('active', models.BooleanField(default=True)),
                ('url', models.URLField(blank=True, default='')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'council',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='fractions', to='councils.council'
                    ),
                ),
                (
                    'updated_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='Faction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=60, validators=[app.common.text.validate_single_line])),
                (
                    'member_count',
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ('active', models.BooleanField(default=True)),
                ('url', models.URLField(blank=True, default='')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'parliament',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='factions', to='councils.parliament'
                    ),
                ),
                (
                    'updated_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['name']},
        ),
        migrations.AddConstraint(
            model_name='fraction',
            constraint=models.UniqueConstraint(fields=('council', 'name'), name='fraction_council_name_unique'),
        ),
        migrations.AddConstraint(
            model_name='faction',
            constraint=models.UniqueConstraint(fields=('parliament', 'name'), name='faction_parliament_name_unique'),
        ),
    ]
