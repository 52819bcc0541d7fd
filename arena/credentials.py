"""
Credential store and access checks.

Participants log in with their issued team ID and secret token. A valid
login returns a signed bearer token; the scoring and leaderboard code
trust the participant resolved from it and never re-check credentials.
"""
import logging
import secrets

from django.conf import settings
from django.core import signing
from django.db import transaction
from django.utils import timezone

from .exceptions import AuthFailure, NotFound, PermissionDenied, ValidationError
from .forms import ParticipantForm, bind
from .models import Participant

logger = logging.getLogger(__name__)

TOKEN_SALT = 'arena.credentials'


def generate_secret_token(suffix=''):
    """Secret tokens look like flags: CTF{<random>_<suffix>}"""
    body = secrets.token_urlsafe(12)
    return f'CTF{{{body}_{suffix}}}' if suffix else f'CTF{{{body}}}'


def validate(team_id, secret_token):
    """Return the participant for a team ID and token, or raise AuthFailure."""
    if not team_id or not secret_token:
        raise AuthFailure('Team ID and access token are required')
    try:
        participant = Participant.objects.get(team_id=team_id)
    except Participant.DoesNotExist:
        # Hash anyway so unknown IDs cost the same as wrong tokens
        Participant().set_password(secret_token)
        logger.warning('Login failed for unknown team %s', team_id)
        raise AuthFailure()
    if not participant.is_active or not participant.check_password(secret_token):
        logger.warning('Login failed for team %s', team_id)
        raise AuthFailure()

    now = timezone.now()
    Participant.objects.filter(pk=participant.pk).update(last_activity_at=now)
    participant.last_activity_at = now
    return participant


def issue_token(participant):
    signer = signing.TimestampSigner(salt=TOKEN_SALT)
    return signer.sign_object({'id': participant.pk, 'team_id': participant.team_id})


def resolve_token(token):
    """Map a bearer token back to an active participant."""
    max_age = getattr(settings, 'ARENA_TOKEN_MAX_AGE', 24 * 60 * 60)
    signer = signing.TimestampSigner(salt=TOKEN_SALT)
    try:
        payload = signer.unsign_object(token, max_age=max_age)
    except signing.SignatureExpired:
        raise AuthFailure('Token expired')
    except signing.BadSignature:
        raise AuthFailure('Invalid token')
    participant = Participant.objects.filter(
        pk=payload.get('id'), team_id=payload.get('team_id'), is_active=True
    ).first()
    if participant is None:
        raise AuthFailure('Invalid token')
    return participant


def get_participant(participant_id):
    try:
        return Participant.objects.get(pk=participant_id)
    except Participant.DoesNotExist:
        raise NotFound('Participant not found')


def is_admin(participant_id):
    return Participant.objects.filter(pk=participant_id, is_admin=True, is_active=True).exists()


def require_admin(actor):
    """Raise PermissionDenied unless ``actor`` (participant or id) is an admin."""
    participant_id = getattr(actor, 'pk', actor)
    if participant_id is None or not is_admin(participant_id):
        raise PermissionDenied()


def serialize_participant(participant):
    return {
        'id': participant.pk,
        'team_id': participant.team_id,
        'team_name': participant.team_name,
        'email': participant.email,
        'is_admin': participant.is_admin,
        'is_active': participant.is_active,
        'total_score': participant.total_score,
        'last_activity_at': participant.last_activity_at.isoformat() if participant.last_activity_at else None,
        'created_at': participant.created_at.isoformat() if participant.created_at else None,
    }


def list_participants(actor):
    require_admin(actor)
    return [serialize_participant(p) for p in Participant.objects.all()]


def create_participant(actor, payload):
    """
    Admin-only account creation. Returns ``(participant, secret_token)``;
    the plain token is only ever available here.
    """
    require_admin(actor)
    payload = dict(payload or {})
    secret_token = payload.pop('secret_token', None) or payload.pop('access_token', None)
    form = bind(ParticipantForm, payload, defaults=ParticipantForm.CREATE_DEFAULTS)
    if not form.is_valid():
        raise ValidationError.from_form(form, 'Invalid user data')

    secret_token = secret_token or generate_secret_token()
    with transaction.atomic():
        participant = form.save(commit=False)
        participant.set_password(secret_token)
        participant.save()
    logger.info('Participant %s created by admin %s', participant.team_id, getattr(actor, 'pk', actor))
    return participant, secret_token


def provision_teams(count, prefix='TEAM', first_admin=False, start=1):
    """
    Bulk-create ``count`` teams named ``<prefix>_001`` and up.

    Existing team IDs are skipped. Returns a list of
    ``(participant, secret_token)`` for the accounts actually created.
    """
    created = []
    with transaction.atomic():
        for i in range(start, start + count):
            team_id = f'{prefix}_{i:03d}'
            if Participant.objects.filter(team_id=team_id).exists():
                continue
            token = generate_secret_token(str(i))
            participant = Participant.objects.create_user(
                team_id,
                password=token,
                team_name=f'Team {i}',
                email=f'team{i}@ctf.local',
                is_admin=first_admin and i == start,
            )
            created.append((participant, token))
    logger.info('Provisioned %d teams with prefix %s', len(created), prefix)
    return created
