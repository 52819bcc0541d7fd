"""
Leaderboard projection.

Ranks are derived from participants and the submission ledger on every
rebuild and are never stored. Order: total score descending, then the
time the team reached that score (its last correct submission, earlier
first), then participant id. Rebuilt rankings are cached for
``ARENA_LEADERBOARD_CACHE_SECONDS``; scored submissions drop the cache as
soon as they commit, so the TTL only bounds staleness for reads that
race a commit.
"""
import copy

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Max, Q

from .exceptions import NotFound
from .models import Challenge, Participant

CACHE_KEY = 'arena:leaderboard'


def _cache_seconds():
    return getattr(settings, 'ARENA_LEADERBOARD_CACHE_SECONDS', 5)


def _sort_key(row):
    reached_at = row['last_correct_at']
    # Teams without a correct submission go after those with one
    return (
        -row['total_score'],
        reached_at is None,
        reached_at.timestamp() if reached_at is not None else 0,
        row['id'],
    )


def compute_leaderboard():
    """Build the full ranking from the database, bypassing the cache."""
    correct = Q(submissions__is_correct=True)
    rows = list(
        Participant.objects.filter(is_active=True)
        .annotate(
            challenges_solved=Count('submissions', filter=correct),
            last_correct_at=Max('submissions__submitted_at', filter=correct),
        )
        .values('id', 'team_id', 'team_name', 'total_score', 'challenges_solved', 'last_correct_at')
    )
    rows.sort(key=_sort_key)

    return [
        {
            'rank': position,
            'participant_id': row['id'],
            'team_id': row['team_id'],
            'team_name': row['team_name'],
            'total_score': row['total_score'],
            'challenges_solved': row['challenges_solved'],
            'last_submission_at': row['last_correct_at'].isoformat() if row['last_correct_at'] else None,
        }
        for position, row in enumerate(rows, start=1)
    ]


def get_leaderboard(current_participant_id=None):
    """
    Cached ranking. The requester's row gets ``is_current_user`` on a copy
    so the flag never leaks into the shared cached value.
    """
    entries = cache.get(CACHE_KEY)
    if entries is None:
        entries = compute_leaderboard()
        cache.set(CACHE_KEY, entries, _cache_seconds())

    entries = copy.deepcopy(entries)
    for entry in entries:
        entry['is_current_user'] = entry['participant_id'] == current_participant_id
    return entries


def invalidate_leaderboard():
    cache.delete(CACHE_KEY)


def rank_of(participant_id):
    for entry in get_leaderboard():
        if entry['participant_id'] == participant_id:
            return entry['rank']
    return None


def participant_stats(participant_id):
    try:
        participant = Participant.objects.get(pk=participant_id)
    except Participant.DoesNotExist:
        raise NotFound('Participant not found')

    return {
        'total_score': participant.total_score,
        'challenges_solved': participant.challenges_solved,
        'total_challenges': Challenge.objects.filter(is_active=True).count(),
        'current_rank': rank_of(participant.pk),
        'last_activity_at': participant.last_activity_at.isoformat() if participant.last_activity_at else None,
    }
