import json
import logging
from functools import wraps

from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from . import catalog, contest, credentials, leaderboard, scoring
from .exceptions import ArenaError, AuthFailure, ValidationError

logger = logging.getLogger(__name__)


def api_view(*methods, auth=True):
    """
    JSON endpoint decorator: method check, bearer-token auth, and mapping
    of ArenaError subclasses to their status codes. Storage failures are
    answered with an opaque 500.
    """
    def decorator(view):
        @csrf_exempt
        @require_http_methods(list(methods))
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                if auth:
                    request.participant = _authenticate(request)
                return view(request, *args, **kwargs)
            except ArenaError as exc:
                return JsonResponse(exc.as_dict(), status=exc.status_code)
            except DatabaseError:
                logger.exception('Database error in %s', view.__name__)
                return JsonResponse({'message': 'Internal server error'}, status=500)
        return wrapper
    return decorator


def _authenticate(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        raise AuthFailure('Access token required')
    return credentials.resolve_token(token.strip())


def _json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _me(participant):
    return {
        'id': participant.pk,
        'team_id': participant.team_id,
        'team_name': participant.team_name,
        'is_admin': participant.is_admin,
        'total_score': participant.total_score,
        'current_rank': leaderboard.rank_of(participant.pk),
    }


# Authentication

@api_view('POST', auth=False)
def login(request):
    data = _json_body(request)
    participant = credentials.validate(data.get('team_id'), data.get('access_token'))
    return JsonResponse({'token': credentials.issue_token(participant), 'user': _me(participant)})


@api_view('GET')
def me(request):
    return JsonResponse(_me(request.participant))


# Scoreboard and stats

@api_view('GET')
def leaderboard_view(request):
    entries = leaderboard.get_leaderboard(current_participant_id=request.participant.pk)
    return JsonResponse(entries, safe=False)


@api_view('GET')
def user_stats(request):
    return JsonResponse(leaderboard.participant_stats(request.participant.pk))


@api_view('GET')
def user_submissions(request):
    return JsonResponse(scoring.participant_submissions(request.participant.pk), safe=False)


# Challenges

@api_view('GET')
def challenge_list(request):
    return JsonResponse(catalog.list_for_participant(request.participant.pk), safe=False)


@api_view('GET')
def challenge_detail(request, pk):
    return JsonResponse(catalog.get_for_participant(request.participant.pk, pk))


@api_view('POST')
def submit_flag(request):
    data = _json_body(request)
    if data.get('challenge_id') is None:
        raise ValidationError('Challenge ID and flag are required',
                              field_errors={'challenge_id': ['This field is required.']})
    result = scoring.submit_flag(request.participant.pk, data['challenge_id'], data.get('submitted_flag'))
    result['message'] = 'Correct flag! Points awarded.' if result['is_correct'] else 'Incorrect flag. Try again.'
    return JsonResponse(result)


# Admin

@api_view('GET', 'POST')
def admin_challenges(request):
    if request.method == 'POST':
        challenge = catalog.create_challenge(request.participant, _json_body(request))
        return JsonResponse(catalog.full_view(challenge), status=201)
    return JsonResponse(catalog.list_all(request.participant), safe=False)


@api_view('PUT', 'DELETE')
def admin_challenge_detail(request, pk):
    if request.method == 'DELETE':
        catalog.delete_challenge(request.participant, pk)
        return HttpResponse(status=204)
    challenge = catalog.update_challenge(request.participant, pk, _json_body(request))
    return JsonResponse(catalog.full_view(challenge))


@api_view('GET', 'POST')
def admin_users(request):
    if request.method == 'POST':
        participant, token = credentials.create_participant(request.participant, _json_body(request))
        data = credentials.serialize_participant(participant)
        data['access_token'] = token
        return JsonResponse(data, status=201)
    return JsonResponse(credentials.list_participants(request.participant), safe=False)


@api_view('GET', 'PUT')
def event_config(request):
    if request.method == 'PUT':
        config = contest.update_event_config(request.participant, _json_body(request))
    else:
        config = contest.get_event_config()
    return JsonResponse(contest.serialize_event_config(config))
