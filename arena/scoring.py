"""
Scoring engine.

``submit_flag`` is the only code path that writes the submission ledger
or changes a participant's score. For one (participant, challenge) pair
the duplicate check, the ledger insert and the score update run inside a
single transaction, serialized three ways:

* an in-process lock striped by pair, acquired with a bounded timeout,
* ``select_for_update`` on the participant row,
* the ``one_correct_submission_per_challenge`` partial unique index,
  which is what holds across worker processes.
"""
import logging
import threading
import time
from contextlib import contextmanager

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from .contest import ensure_accepting_submissions
from .exceptions import AlreadySolved, ConcurrencyConflict, NotFound, ValidationError
from .leaderboard import invalidate_leaderboard
from .models import Challenge, Participant, Submission

logger = logging.getLogger(__name__)

# Fixed pool of striped locks; unrelated pairs may share a stripe
LOCK_STRIPES = 256
_pair_locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

CONTENTION_MARKERS = ('locked', 'deadlock', 'could not serialize', 'lock timeout', 'lock wait timeout')


def _lock_for(key):
    return _pair_locks[hash(key) % LOCK_STRIPES]


@contextmanager
def pair_lock(participant_id, challenge_id, timeout=None):
    if timeout is None:
        timeout = getattr(settings, 'ARENA_SUBMISSION_LOCK_TIMEOUT', 5)
    lock = _lock_for((participant_id, challenge_id))
    if not lock.acquire(timeout=timeout):
        logger.warning('Timed out waiting for submission lock on (%s, %s)', participant_id, challenge_id)
        raise ConcurrencyConflict()
    try:
        yield
    finally:
        lock.release()


def _is_contention(exc):
    message = str(exc).lower()
    return any(marker in message for marker in CONTENTION_MARKERS)


def _as_id(value, label):
    # JSON true and 1.9 would otherwise coerce to a valid id
    if isinstance(value, (bool, float)):
        raise NotFound(f'{label} not found')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFound(f'{label} not found')


def submit_flag(participant_id, challenge_id, submitted_text):
    """
    Judge one flag attempt and record it.

    Returns ``{'is_correct': bool, 'points_awarded': int}``. Raises
    NotFound, ContestClosed, AlreadySolved, ValidationError, or the
    retryable ConcurrencyConflict.
    """
    participant_id = _as_id(participant_id, 'Participant')
    challenge_id = _as_id(challenge_id, 'Challenge')

    if not isinstance(submitted_text, str) or not submitted_text.strip():
        raise ValidationError('Challenge ID and flag are required',
                              field_errors={'submitted_flag': ['This field is required.']})
    max_length = getattr(settings, 'ARENA_MAX_SUBMISSION_LENGTH', 1024)
    if len(submitted_text) > max_length:
        raise ValidationError('Submitted flag is too long',
                              field_errors={'submitted_flag': [f'Ensure this value has at most {max_length} characters.']})

    max_retries = max(1, getattr(settings, 'ARENA_SUBMISSION_MAX_RETRIES', 3))
    backoff = getattr(settings, 'ARENA_SUBMISSION_RETRY_BACKOFF', 0.05)

    with pair_lock(participant_id, challenge_id):
        for attempt in range(1, max_retries + 1):
            try:
                return _record_attempt(participant_id, challenge_id, submitted_text)
            except OperationalError as exc:
                if not _is_contention(exc):
                    raise
                logger.warning('Database contention on submission (%s, %s), attempt %d of %d',
                               participant_id, challenge_id, attempt, max_retries)
                if attempt == max_retries:
                    raise ConcurrencyConflict() from exc
                time.sleep(backoff * attempt)


def has_solved(participant_id, challenge_id):
    return Submission.objects.filter(
        participant_id=participant_id, challenge_id=challenge_id, is_correct=True
    ).exists()


def _record_attempt(participant_id, challenge_id, submitted_text):
    with transaction.atomic():
        participant = Participant.objects.select_for_update().filter(pk=participant_id).first()
        if participant is None:
            raise NotFound('Participant not found')
        challenge = Challenge.objects.filter(pk=challenge_id, is_active=True).first()
        if challenge is None:
            raise NotFound('Challenge not found')

        ensure_accepting_submissions()

        if has_solved(participant_id, challenge_id):
            logger.info('Duplicate attempt by team %s on solved challenge %s', participant.team_id, challenge_id)
            raise AlreadySolved()

        is_correct = challenge.check_flag(submitted_text)
        points = challenge.points if is_correct else 0
        now = timezone.now()

        try:
            with transaction.atomic():
                Submission.objects.create(
                    participant_id=participant_id,
                    challenge_id=challenge_id,
                    submitted_text=submitted_text,
                    is_correct=is_correct,
                    points_awarded=points,
                    submitted_at=now,
                )
        except IntegrityError:
            if not is_correct:
                raise
            # A concurrent solve from another process committed first
            logger.info('Team %s lost a race on challenge %s', participant.team_id, challenge_id)
            raise AlreadySolved()

        if is_correct:
            Participant.objects.filter(pk=participant_id).update(
                total_score=F('total_score') + points,
                last_activity_at=now,
            )
            transaction.on_commit(invalidate_leaderboard)
            logger.info('Team %s solved challenge %s for %d points', participant.team_id, challenge_id, points)

    return {'is_correct': is_correct, 'points_awarded': points}


def participant_submissions(participant_id):
    """The participant's own ledger rows, newest first."""
    return [
        {
            'id': s.id,
            'challenge_id': s.challenge_id,
            'submitted_text': s.submitted_text,
            'is_correct': s.is_correct,
            'points_awarded': s.points_awarded,
            'submitted_at': s.submitted_at.isoformat(),
        }
        for s in Submission.objects.filter(participant_id=participant_id)
    ]
