import arena.models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('team_id', models.CharField(help_text='Issued team identifier, immutable', max_length=50, unique=True)),
                ('team_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('is_admin', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('total_score', models.IntegerField(default=0)),
                ('last_activity_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['id'],
            },
            managers=[
                ('objects', arena.models.ParticipantManager()),
            ],
        ),
        migrations.CreateModel(
            name='Challenge',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(max_length=50)),
                ('difficulty', models.CharField(choices=[('easy', 'Easy'), ('medium', 'Medium'), ('hard', 'Hard'), ('expert', 'Expert')], default='medium', max_length=10)),
                ('points', models.PositiveIntegerField(default=100, help_text='Points awarded for solving this challenge', validators=[django.core.validators.MinValueValidator(1)])),
                ('flag', models.CharField(help_text='The correct flag, matched exactly', max_length=255, validators=[arena.models.validate_flag_format])),
                ('is_active', models.BooleanField(default=True, help_text='Inactive challenges are hidden and reject submissions')),
                ('hints', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['category', 'points', 'title'],
                'constraints': [models.CheckConstraint(condition=models.Q(('points__gt', 0)), name='challenge_points_positive')],
            },
        ),
        migrations.CreateModel(
            name='EventConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_name', models.CharField(default='CyberArena CTF', max_length=200)),
                ('event_description', models.TextField(blank=True, default='Welcome to CyberArena CTF competition!')),
                ('start_time', models.DateTimeField(blank=True, help_text='When the contest starts', null=True)),
                ('end_time', models.DateTimeField(blank=True, help_text='When the contest ends', null=True)),
                ('is_event_active', models.BooleanField(default=True, help_text='Master switch for accepting submissions')),
                ('max_team_size', models.PositiveIntegerField(default=4, help_text='Maximum members per team', validators=[django.core.validators.MinValueValidator(1)])),
                ('allow_late_registration', models.BooleanField(default=True, help_text='Allow provisioning teams after the start')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Event Configuration',
                'verbose_name_plural': 'Event Configuration',
            },
        ),
        migrations.CreateModel(
            name='Submission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('submitted_text', models.TextField()),
                ('is_correct', models.BooleanField(default=False)),
                ('points_awarded', models.PositiveIntegerField(default=0)),
                ('submitted_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('challenge', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submissions', to='arena.challenge')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submissions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-submitted_at', '-id'],
                'indexes': [models.Index(fields=['participant', 'challenge'], name='submission_pair_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_correct', True)), fields=('participant', 'challenge'), name='one_correct_submission_per_challenge')],
            },
        ),
    ]
