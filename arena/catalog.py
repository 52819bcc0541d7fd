"""
Challenge catalog.

Two read shapes exist: ``full_view`` for admins, which carries the flag,
and ``safe_view`` for everyone else, which never does. Participant-facing
functions only ever build the safe shape.
"""
import logging

from django.db.models import Count, Q

from .credentials import get_participant, require_admin
from .exceptions import NotFound, ValidationError
from .forms import ChallengeForm, bind
from .models import Challenge

logger = logging.getLogger(__name__)

SAFE_FIELDS = (
    'id', 'title', 'description', 'category', 'difficulty',
    'points', 'is_active', 'hints',
)


def safe_view(challenge):
    data = {field: getattr(challenge, field) for field in SAFE_FIELDS}
    data['created_at'] = challenge.created_at.isoformat() if challenge.created_at else None
    return data


def full_view(challenge):
    data = safe_view(challenge)
    data['flag'] = challenge.flag
    data['updated_at'] = challenge.updated_at.isoformat() if challenge.updated_at else None
    return data


def _get_challenge(challenge_id):
    try:
        return Challenge.objects.get(pk=challenge_id)
    except (Challenge.DoesNotExist, ValueError, TypeError):
        raise NotFound('Challenge not found')


def _with_progress(queryset, participant_id):
    # Counts only this participant's ledger rows
    mine = Q(submissions__participant_id=participant_id)
    return queryset.annotate(
        attempts=Count('submissions', filter=mine),
        solves=Count('submissions', filter=mine & Q(submissions__is_correct=True)),
    )


def _progress_view(challenge):
    data = safe_view(challenge)
    data['is_solved'] = challenge.solves > 0
    data['attempts'] = challenge.attempts
    return data


def list_for_participant(participant_id):
    """Active challenges with the participant's own solve state and attempt count."""
    get_participant(participant_id)
    challenges = _with_progress(Challenge.objects.filter(is_active=True), participant_id)
    return [_progress_view(c) for c in challenges]


def get_for_participant(participant_id, challenge_id):
    get_participant(participant_id)
    challenge = _with_progress(
        Challenge.objects.filter(pk=challenge_id, is_active=True), participant_id
    ).first()
    if challenge is None:
        raise NotFound('Challenge not found')
    return _progress_view(challenge)


def list_all(actor):
    require_admin(actor)
    return [full_view(c) for c in Challenge.objects.all()]


def create_challenge(actor, payload):
    require_admin(actor)
    form = bind(ChallengeForm, payload, defaults=ChallengeForm.CREATE_DEFAULTS)
    if not form.is_valid():
        raise ValidationError.from_form(form, 'Invalid challenge data')
    challenge = form.save()
    logger.info('Challenge %s (%s) created', challenge.pk, challenge.title)
    return challenge


def update_challenge(actor, challenge_id, payload):
    require_admin(actor)
    challenge = _get_challenge(challenge_id)
    form = bind(ChallengeForm, payload, instance=challenge)
    if not form.is_valid():
        raise ValidationError.from_form(form, 'Invalid challenge data')
    challenge = form.save()
    logger.info('Challenge %s updated', challenge.pk)
    return challenge


def delete_challenge(actor, challenge_id):
    require_admin(actor)
    challenge = _get_challenge(challenge_id)
    if challenge.submissions.exists():
        raise ValidationError(
            'Cannot delete a challenge with submissions; deactivate it instead.',
            field_errors={'id': ['Challenge has submissions.']},
        )
    challenge.delete()
    logger.info('Challenge %s deleted', challenge_id)
