from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import app.common.text


def _used(item_field, item_model, related_name):
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        (
            'created_by',
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name='+',
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        (
            'proposal',
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE, related_name=related_name, to='proposals.proposal'
            ),
        ),
        (
            item_field,
            models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='usages', to=item_model),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Proposal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200, validators=[app.common.text.validate_single_line])),
                ('introduction', models.TextField(blank=True, default='', max_length=6000)),
                ('reasoning', models.TextField(blank=True, default='', max_length=6000)),
                ('action_mandate', models.TextField(blank=True, default='', max_length=6000)),
                ('comment', models.TextField(blank=True, default='', max_length=6000)),
                ('sponsor', models.CharField(blank=True, default='', max_length=200)),
                ('url', models.URLField(blank=True, default='')),
                ('document_file', models.FileField(blank=True, null=True, upload_to='proposals/')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'project',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name='proposals', to='projects.project'
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
            options={'ordering': ['id']},
        ),
        migrations.AddConstraint(
            model_name='proposal',
            constraint=models.UniqueConstraint(fields=('title', 'project'), name='proposal_title_project_unique'),
        ),
        migrations.CreateModel(
            name='UsedArgument',
            fields=_used('argument', 'projects.argument', 'used_arguments'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usedargument',
            constraint=models.UniqueConstraint(fields=('argument', 'proposal'), name='used_argument_unique'),
        ),
        migrations.CreateModel(
            name='UsedProblem',
            fields=_used('problem', 'projects.problem', 'used_problems'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usedproblem',
            constraint=models.UniqueConstraint(fields=('problem', 'proposal'), name='used_problem_unique'),
        ),
        migrations.CreateModel(
            name='UsedCounterArgument',
            fields=_used('counter_argument', 'projects.counterargument', 'used_counter_arguments'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usedcounterargument',
            constraint=models.UniqueConstraint(fields=('counter_argument', 'proposal'), name='used_counter_argument_unique'),
        ),
        migrations.CreateModel(
            name='UsedNegation',
            fields=_used('negation', 'projects.negation', 'used_negations'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usednegation',
            constraint=models.UniqueConstraint(fields=('negation', 'proposal'), name='used_negation_unique'),
        ),
        migrations.CreateModel(
            name='UsedActionMandate',
            fields=_used('action_mandate', 'projects.actionmandate', 'used_action_mandates'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usedactionmandate',
            constraint=models.UniqueConstraint(fields=('action_mandate', 'proposal'), name='used_action_mandate_unique'),
        ),
        migrations.CreateModel(
            name='UsedFractionInterest',
            fields=_used('fraction_interest', 'projects.fractioninterest', 'used_fraction_interests'),
            options={'ordering': ['id'], 'abstract': False},
        ),
        migrations.AddConstraint(
            model_name='usedfractioninterest',
            constraint=models.UniqueConstraint(fields=('fraction_interest', 'proposal'), name='used_fraction_interest_unique'),
        ),
    ]
