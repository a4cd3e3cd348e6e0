from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion

import app.common.text


def _blame():
    return models.ForeignKey(
        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL
    )


def _argumentation(parent_name, parent_model, related_name):
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('description', models.TextField(max_length=1000)),
        ('priority', models.IntegerField(default=0)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('updated_by', _blame()),
        (
            parent_name,
            models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name=related_name, to=parent_model),
        ),
    ]


def _contact():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('contact_email', models.EmailField(blank=True, default='', max_length=255)),
        ('contact_name', models.CharField(blank=True, default='', max_length=100)),
        ('contact_phone', models.CharField(blank=True, default='', max_length=100)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        (
            'team_contact',
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name='+',
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        ('updated_by', _blame()),
    ]


_ARGUMENTATION_OPTIONS = {'ordering': ['-priority', 'id'], 'abstract': False}


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('councils', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
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
            options={'ordering': ['name'], 'verbose_name_plural': 'categories'},
        ),
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                (
                    'title',
                    models.CharField(
                        blank=True,
                        max_length=100,
                        null=True,
                        validators=[
                            django.core.validators.MinLengthValidator(3),
                            app.common.text.validate_contains_letter,
                            app.common.text.validate_single_line,
                        ],
                    ),
                ),
                ('slug', models.SlugField(blank=True, max_length=150)),
                (
                    'topic',
                    models.TextField(max_length=1000, validators=[django.core.validators.MinLengthValidator(2)]),
                ),
                ('description', models.TextField(blank=True, max_length=6000, null=True)),
                ('impact', models.TextField(blank=True, max_length=6000, null=True)),
                (
                    'state',
                    models.CharField(choices=[('public', 'Public'), ('private', 'Private')], default='private', max_length=16),
                ),
                ('locked', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('categories', models.ManyToManyField(blank=True, related_name='projects', to='projects.category')),
                (
                    'council',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name='projects', to='councils.council'
                    ),
                ),
                (
                    'created_by',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='created_projects',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['-created_at', '-id']},
        ),
        migrations.CreateModel(
            name='ProjectMembership',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                (
                    'role',
                    models.CharField(
                        choices=[
                            ('applicant', 'Applicant'),
                            ('writer', 'Writer'),
                            ('coordinator', 'Coordinator'),
                            ('observer', 'Observer'),
                        ],
                        default='applicant',
                        max_length=16,
                    ),
                ),
                (
                    'motivation',
                    models.TextField(
                        max_length=1000,
                        validators=[django.core.validators.MinLengthValidator(10), app.common.text.validate_single_line],
                    ),
                ),
                (
                    'skills',
                    models.TextField(
                        max_length=1000,
                        validators=[django.core.validators.MinLengthValidator(10), app.common.text.validate_single_line],
                    ),
                ),
                (
                    'project',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='projects.project'
                    ),
                ),
                (
                    'user',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='project_memberships',
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={'ordering': ['id']},
        ),
        migrations.AddConstraint(
            model_name='projectmembership',
            constraint=models.UniqueConstraint(fields=('project', 'user'), name='membership_project_user_unique'),
        ),
        migrations.CreateModel(
            name='Problem',
            fields=_argumentation('project', 'projects.project', 'problems'),
            options=dict(_ARGUMENTATION_OPTIONS),
        ),
        migrations.CreateModel(
            name='Argument',
            fields=_argumentation('project', 'projects.project', 'arguments'),
            options=dict(_ARGUMENTATION_OPTIONS),
        ),
        migrations.CreateModel(
            name='CounterArgument',
            fields=_argumentation('project', 'projects.project', 'counter_arguments'),
            options=dict(_ARGUMENTATION_OPTIONS),
        ),
        migrations.CreateModel(
            name='Negation',
            fields=_argumentation('counter_argument', 'projects.counterargument', 'negations'),
            options=dict(_ARGUMENTATION_OPTIONS),
        ),
        migrations.CreateModel(
            name='ActionMandate',
            fields=_argumentation('project', 'projects.project', 'action_mandates'),
            options=dict(_ARGUMENTATION_OPTIONS),
        ),
        migrations.CreateModel(
            name='Partner',
            fields=_contact()
            + [
                ('name', models.CharField(max_length=255, validators=[app.common.text.validate_single_line])),
                ('role', models.TextField(blank=True, default='', max_length=1000)),
                ('url', models.URLField(blank=True, default='')),
                (
                    'project',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='partners', to='projects.project'
                    ),
                ),
            ],
            options={'ordering': ['name']},
        ),
        migrations.AddConstraint(
            model_name='partner',
            constraint=models.UniqueConstraint(fields=('name', 'project'), name='partner_name_project_unique'),
        ),
        migrations.CreateModel(
            name='FractionDetails',
            fields=_contact()
            + [
                ('possible_partner', models.BooleanField(default=False)),
                ('possible_sponsor', models.BooleanField(default=False)),
                (
                    'fraction',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='details', to='councils.fraction'
                    ),
                ),
                (
                    'project',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='fraction_details',
                        to='projects.project',
                    ),
                ),
            ],
            options={'ordering': ['id'], 'verbose_name_plural': 'fraction details'},
        ),
        migrations.AddConstraint(
            model_name='fractiondetails',
            constraint=models.UniqueConstraint(fields=('fraction', 'project'), name='fraction_details_project_unique'),
        ),
        migrations.CreateModel(
            name='FactionDetails',
            fields=_contact()
            + [
                ('possible_partner', models.BooleanField(default=False)),
                ('possible_proponent', models.BooleanField(default=False)),
                (
                    'faction',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='details', to='councils.faction'
                    ),
                ),
                (
                    'project',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='faction_details',
                        to='projects.project',
                    ),
                ),
            ],
            options={'ordering': ['id'], 'verbose_name_plural': 'faction details'},
        ),
        migrations.AddConstraint(
            model_name='factiondetails',
            constraint=models.UniqueConstraint(fields=('faction', 'project'), name='faction_details_project_unique'),
        ),
        migrations.CreateModel(
            name='FractionInterest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.TextField(max_length=500)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', _blame()),
                (
                    'details',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='interests',
                        to='projects.fractiondetails',
                    ),
                ),
            ],
            options={'ordering': ['id']},
        ),
        migrations.CreateModel(
            name='FactionInterest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.TextField(max_length=2000)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', _blame()),
                (
                    'details',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='interests',
                        to='projects.factiondetails',
                    ),
                ),
            ],
            options={'ordering': ['id']},
        ),
    ]
