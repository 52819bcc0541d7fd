import re

from django.conf import settings
from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


def validate_flag_format(value):
    """Reject flags that are blank or do not match ARENA_FLAG_PATTERN."""
    if not value or not value.strip():
        raise ValidationError('Flag must not be empty.')
    pattern = getattr(settings, 'ARENA_FLAG_PATTERN', None)
    if pattern and not re.fullmatch(pattern, value):
        raise ValidationError('Flag does not match the expected format %(pattern)s.', params={'pattern': pattern})


class EventConfig(models.Model):
    """Singleton model for contest settings"""
    event_name = models.CharField(max_length=200, default="CyberArena CTF")
    event_description = models.TextField(blank=True, default="Welcome to CyberArena CTF competition!")

    # Contest timing, either bound may be left open
    start_time = models.DateTimeField(null=True, blank=True, help_text="When the contest starts")
    end_time = models.DateTimeField(null=True, blank=True, help_text="When the contest ends")
    is_event_active = models.BooleanField(default=True, help_text="Master switch for accepting submissions")

    # Registration settings
    max_team_size = models.PositiveIntegerField(default=4, validators=[MinValueValidator(1)], help_text="Maximum members per team")
    allow_late_registration = models.BooleanField(default=True, help_text="Allow provisioning teams after the start")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Event Configuration"
        verbose_name_plural = "Event Configuration"

    def save(self, *args, **kwargs):
        # Ensure only one instance exists
        if self._state.adding and EventConfig.objects.exists():
            raise ValidationError('Event configuration already exists. Please edit the existing configuration.')
        return super().save(*args, **kwargs)

    def clean(self):
        if self.start_time and self.end_time:
            if self.start_time >= self.end_time:
                raise ValidationError({'end_time': 'End time must be after start time.'})

    @classmethod
    def get_config(cls):
        """Get or create the event configuration"""
        config = cls.objects.order_by('pk').first()
        if config is None:
            config, _ = cls.objects.get_or_create(pk=1)
        return config

    def is_upcoming(self, now=None):
        return self.start_time is not None and (now or timezone.now()) < self.start_time

    def is_finished(self, now=None):
        return self.end_time is not None and (now or timezone.now()) > self.end_time

    def is_open(self, now=None):
        """True when the event is switched on and ``now`` is inside the window."""
        now = now or timezone.now()
        return self.is_event_active and not self.is_upcoming(now) and not self.is_finished(now)

    def __str__(self):
        return self.event_name


class ParticipantManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, team_id, password=None, team_name='', **extra_fields):
        if not team_id:
            raise ValueError('Participants must have a team ID')
        extra_fields.setdefault('is_admin', False)
        participant = self.model(
            team_id=team_id,
            team_name=team_name or team_id,
            **extra_fields
        )
        participant.set_password(password)
        participant.save(using=self._db)
        return participant

    def create_superuser(self, team_id, password=None, team_name='', **extra_fields):
        extra_fields['is_admin'] = True
        return self.create_user(team_id, password=password, team_name=team_name, **extra_fields)

    def get_by_natural_key(self, team_id):
        return self.get(team_id=team_id)


class Participant(AbstractBaseUser):
    """
    One account per team. The hashed secret token lives in ``password`` so
    Django's hashers and the admin login work unchanged.
    """
    team_id = models.CharField(max_length=50, unique=True, help_text="Issued team identifier, immutable")
    team_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    is_admin = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    # Mutated only by the scoring engine
    total_score = models.IntegerField(default=0)
    last_activity_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ParticipantManager()

    USERNAME_FIELD = 'team_id'
    REQUIRED_FIELDS = ['team_name']

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.team_name or self.team_id

    def save(self, *args, **kwargs):
        if not self._state.adding and self.pk:
            stored = type(self).objects.filter(pk=self.pk).values_list('team_id', flat=True).first()
            if stored is not None and stored != self.team_id:
                raise ValidationError('Team ID can not be changed after creation.')
        return super().save(*args, **kwargs)

    @property
    def is_staff(self):
        return self.is_admin

    def has_perm(self, perm, obj=None):
        return self.is_active and self.is_admin

    def has_module_perms(self, app_label):
        return self.is_active and self.is_admin

    @property
    def challenges_solved(self):
        return self.submissions.filter(is_correct=True).count()


class Challenge(models.Model):
    DIFFICULTY_CHOICES = [
        ('easy', 'Easy'),
        ('medium', 'Medium'),
        ('hard', 'Hard'),
        ('expert', 'Expert'),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=50)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES, default='medium')
    points = models.PositiveIntegerField(default=100, validators=[MinValueValidator(1)], help_text="Points awarded for solving this challenge")
    flag = models.CharField(max_length=255, validators=[validate_flag_format], help_text="The correct flag, matched exactly")
    is_active = models.BooleanField(default=True, help_text="Inactive challenges are hidden and reject submissions")
    hints = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['category', 'points', 'title']
        constraints = [
            models.CheckConstraint(condition=Q(points__gt=0), name='challenge_points_positive'),
        ]

    def __str__(self):
        return self.title

    @property
    def solve_count(self):
        """Return number of correct submissions for this challenge"""
        return self.submissions.filter(is_correct=True).count()

    @property
    def attempt_count(self):
        """Return total number of submissions for this challenge"""
        return self.submissions.count()

    def check_flag(self, submitted_text):
        """Exact match after trimming surrounding whitespace; no case folding."""
        return submitted_text.strip() == self.flag


class Submission(models.Model):
    """Ledger row, one per attempt. Rows are never updated or deleted."""
    participant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='submissions')
    challenge = models.ForeignKey(Challenge, on_delete=models.PROTECT, related_name='submissions')
    submitted_text = models.TextField()
    is_correct = models.BooleanField(default=False)
    points_awarded = models.PositiveIntegerField(default=0)
    submitted_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-submitted_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['participant', 'challenge'],
                condition=Q(is_correct=True),
                name='one_correct_submission_per_challenge',
            ),
        ]
        indexes = [
            models.Index(fields=['participant', 'challenge'], name='submission_pair_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError('Submissions are append-only.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('Submissions are append-only.')

    def __str__(self):
        return f"{self.participant} - {self.challenge.title} - {'correct' if self.is_correct else 'wrong'}"
