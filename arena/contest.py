import logging

from django.conf import settings
from django.utils import timezone

from .credentials import require_admin
from .exceptions import ContestClosed, ValidationError
from .forms import EventConfigForm, bind
from .models import EventConfig

logger = logging.getLogger(__name__)

WINDOW_POLICIES = ('enforce', 'open')


def get_event_config():
    return EventConfig.get_config()


def serialize_event_config(config):
    return {
        'event_name': config.event_name,
        'event_description': config.event_description,
        'start_time': config.start_time.isoformat() if config.start_time else None,
        'end_time': config.end_time.isoformat() if config.end_time else None,
        'is_event_active': config.is_event_active,
        'max_team_size': config.max_team_size,
        'allow_late_registration': config.allow_late_registration,
        'updated_at': config.updated_at.isoformat() if config.updated_at else None,
    }


def update_event_config(actor, payload):
    require_admin(actor)
    config = get_event_config()
    form = bind(EventConfigForm, payload, instance=config)
    if not form.is_valid():
        raise ValidationError.from_form(form, 'Invalid event configuration')
    config = form.save()
    logger.info('Event configuration updated by admin %s', getattr(actor, 'pk', actor))
    return config


def window_policy():
    policy = getattr(settings, 'ARENA_SUBMISSION_WINDOW_POLICY', 'enforce')
    if policy not in WINDOW_POLICIES:
        raise ValueError(f'ARENA_SUBMISSION_WINDOW_POLICY must be one of {WINDOW_POLICIES}, got {policy!r}')
    return policy


def ensure_accepting_submissions(now=None):
    """Raise ContestClosed when the window policy rejects submissions at ``now``."""
    if window_policy() == 'open':
        return
    config = get_event_config()
    now = now or timezone.now()
    if not config.is_open(now):
        if not config.is_event_active:
            raise ContestClosed('The event is not active')
        if config.is_upcoming(now):
            raise ContestClosed('The contest has not started yet')
        raise ContestClosed('The contest has ended')
