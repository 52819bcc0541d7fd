import json

import pytest
from django.urls import reverse

from arena import credentials
from arena.models import Challenge, EventConfig, Participant


@pytest.fixture
def admin_user(db):
    return Participant.objects.create_superuser("ADMIN_001", password="CTF{admin_token}", team_name="Organizers")


@pytest.fixture
def player(db):
    return Participant.objects.create_user("TEAM_001", password="CTF{player_token}", team_name="Players")


def bearer(participant):
    return {"HTTP_AUTHORIZATION": f"Bearer {credentials.issue_token(participant)}"}


def send(client, method, url, participant, payload=None):
    kwargs = bearer(participant)
    if payload is not None:
        kwargs.update(data=json.dumps(payload), content_type="application/json")
    return getattr(client, method)(url, **kwargs)


CHALLENGE = {
    "title": "Memory Forensics",
    "description": "Analyze the memory dump to find the flag.",
    "category": "Forensics",
    "difficulty": "hard",
    "points": 350,
    "flag": "CTF{m3m0ry_f0r3ns1cs_pr0}",
    "hints": ["Use Volatility framework"],
}


def test_admin_challenge_crud(client, admin_user):
    url = reverse("arena:admin_challenges")
    # Create
    resp = send(client, "post", url, admin_user, CHALLENGE)
    assert resp.status_code == 201
    created = resp.json()
    assert created["flag"] == CHALLENGE["flag"]
    # List carries flags
    resp = send(client, "get", url, admin_user)
    assert resp.status_code == 200
    assert [c["flag"] for c in resp.json()] == [CHALLENGE["flag"]]
    # Partial update
    detail = reverse("arena:admin_challenge_detail", args=[created["id"]])
    resp = send(client, "put", detail, admin_user, {"points": 375})
    assert resp.status_code == 200
    assert resp.json()["points"] == 375
    assert resp.json()["title"] == CHALLENGE["title"]
    # Delete
    resp = send(client, "delete", detail, admin_user)
    assert resp.status_code == 204
    assert not Challenge.objects.filter(pk=created["id"]).exists()


def test_admin_challenge_validation_errors(client, admin_user):
    url = reverse("arena:admin_challenges")
    resp = send(client, "post", url, admin_user, dict(CHALLENGE, points=0, flag="missing_prefix"))
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "validation_error"
    assert set(body["errors"]) >= {"points", "flag"}
    assert Challenge.objects.count() == 0


def test_delete_challenge_with_submissions_refused(client, admin_user, player):
    challenge = Challenge.objects.create(**CHALLENGE)
    resp = send(client, "post", reverse("arena:submit_flag"), player,
                {"challenge_id": challenge.pk, "submitted_flag": "CTF{wrong}"})
    assert resp.status_code == 200
    resp = send(client, "delete", reverse("arena:admin_challenge_detail", args=[challenge.pk]), admin_user)
    assert resp.status_code == 400
    assert Challenge.objects.filter(pk=challenge.pk).exists()


@pytest.mark.parametrize(
    "method,name,args",
    [
        ("get", "arena:admin_challenges", []),
        ("post", "arena:admin_challenges", []),
        ("put", "arena:admin_challenge_detail", [1]),
        ("delete", "arena:admin_challenge_detail", [1]),
        ("get", "arena:admin_users", []),
        ("post", "arena:admin_users", []),
        ("put", "arena:event_config", []),
    ],
)
def test_admin_endpoints_reject_players(client, player, method, name, args):
    Challenge.objects.create(**CHALLENGE)
    payload = {"points": 1, "team_id": "TEAM_X", "team_name": "X", "event_name": "Hijacked"} if method in ("post", "put") else None
    resp = send(client, method, reverse(name, args=args), player, payload)
    assert resp.status_code == 403
    assert resp.json()["code"] == "permission_denied"
    assert Challenge.objects.get().points == CHALLENGE["points"]
    assert not Participant.objects.filter(team_id="TEAM_X").exists()
    assert EventConfig.objects.filter(event_name="Hijacked").count() == 0


def test_admin_users_create_and_list(client, admin_user):
    url = reverse("arena:admin_users")
    resp = send(client, "post", url, admin_user, {"team_id": "TEAM_NEW", "team_name": "New Team"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["access_token"].startswith("CTF{")
    assert "password" not in body
    # The issued token works for login
    resp = client.post(reverse("arena:login"),
                       data=json.dumps({"team_id": "TEAM_NEW", "access_token": body["access_token"]}),
                       content_type="application/json")
    assert resp.status_code == 200
    # List
    resp = send(client, "get", url, admin_user)
    assert {u["team_id"] for u in resp.json()} == {"ADMIN_001", "TEAM_NEW"}
    assert all("access_token" not in u for u in resp.json())


def test_admin_users_duplicate(client, admin_user, player):
    resp = send(client, "post", reverse("arena:admin_users"), admin_user,
                {"team_id": "TEAM_001", "team_name": "Copycat"})
    assert resp.status_code == 400
    assert "team_id" in resp.json()["errors"]


def test_event_config_read_and_update(client, admin_user, player):
    url = reverse("arena:event_config")
    resp = send(client, "get", url, player)
    assert resp.status_code == 200
    assert resp.json()["event_name"] == "CyberArena CTF"

    resp = send(client, "put", url, admin_user, {
        "event_name": "Finals",
        "start_time": "2026-01-01T10:00:00+00:00",
        "end_time": "2026-01-02T10:00:00+00:00",
    })
    assert resp.status_code == 200
    config = EventConfig.get_config()
    assert config.event_name == "Finals"
    assert config.end_time > config.start_time


def test_event_config_rejects_inverted_window(client, admin_user):
    resp = send(client, "put", reverse("arena:event_config"), admin_user, {
        "start_time": "2026-01-02T10:00:00+00:00",
        "end_time": "2026-01-01T10:00:00+00:00",
    })
    assert resp.status_code == 400
    assert "end_time" in resp.json()["errors"]
