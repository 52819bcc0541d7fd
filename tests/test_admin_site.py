import pytest
from django.core.cache import cache
from django.urls import reverse

from arena.leaderboard import CACHE_KEY, get_leaderboard
from arena.models import Challenge, Participant, Submission


@pytest.fixture
def staff_user(db):
    return Participant.objects.create_superuser("ADMIN_001", password="CTF{admin_token}", team_name="Organizers")


@pytest.fixture
def client_staff(client, staff_user):
    client.force_login(staff_user)
    return client


@pytest.fixture
def challenge(db):
    return Challenge.objects.create(
        title="Hidden in Plain Sight",
        description="The flag is hidden in this image using steganography.",
        category="Steganography",
        points=150,
        flag="CTF{st3g0_m4st3r_2024}",
    )


def test_admin_index(client_staff):
    resp = client_staff.get(reverse("admin:index"))
    assert resp.status_code == 200
    assert "CyberArena CTF Administration" in resp.content.decode()


def test_player_can_not_reach_admin(client, db):
    player = Participant.objects.create_user("TEAM_001", password="CTF{t}", team_name="Players")
    client.force_login(player)
    resp = client.get(reverse("admin:index"))
    assert resp.status_code == 302


@pytest.mark.parametrize("model", ["participant", "challenge", "submission", "eventconfig"])
def test_changelists_load(client_staff, challenge, model):
    resp = client_staff.get(reverse(f"admin:arena_{model}_changelist"))
    assert resp.status_code == 200


def test_challenge_actions(client_staff, challenge):
    url = reverse("admin:arena_challenge_changelist")
    client_staff.post(url, {"action": "deactivate_challenges", "_selected_action": [challenge.pk]}, follow=True)
    challenge.refresh_from_db()
    assert challenge.is_active is False
    client_staff.post(url, {"action": "activate_challenges", "_selected_action": [challenge.pk]}, follow=True)
    challenge.refresh_from_db()
    assert challenge.is_active is True


def test_deactivating_participant_refreshes_leaderboard(client_staff, db):
    team = Participant.objects.create_user("TEAM_002", password="CTF{t}", team_name="Two")
    get_leaderboard()
    assert cache.get(CACHE_KEY) is not None
    url = reverse("admin:arena_participant_changelist")
    client_staff.post(url, {"action": "deactivate_participants", "_selected_action": [team.pk]}, follow=True)
    team.refresh_from_db()
    assert team.is_active is False
    assert "TEAM_002" not in [e["team_id"] for e in get_leaderboard()]


def test_editing_participant_refreshes_leaderboard(client_staff, db):
    team = Participant.objects.create_user("TEAM_003", password="CTF{t}", team_name="Three")
    get_leaderboard()
    assert cache.get(CACHE_KEY) is not None
    url = reverse("admin:arena_participant_change", args=[team.pk])
    # Unchecked is_active is omitted from the form post
    resp = client_staff.post(url, {"team_name": "Three Renamed", "email": ""})
    assert resp.status_code == 302
    team.refresh_from_db()
    assert team.is_active is False
    assert cache.get(CACHE_KEY) is None
    assert "TEAM_003" not in [e["team_id"] for e in get_leaderboard()]


def test_ledger_is_read_only_in_admin(client_staff, staff_user, challenge):
    record = Submission.objects.create(
        participant=staff_user, challenge=challenge, submitted_text="CTF{x}", is_correct=False, points_awarded=0,
    )
    resp = client_staff.get(reverse("admin:arena_submission_change", args=[record.pk]))
    assert resp.status_code == 200
    resp = client_staff.get(reverse("admin:arena_submission_add"))
    assert resp.status_code == 403
    resp = client_staff.post(reverse("admin:arena_submission_delete", args=[record.pk]), {"post": "yes"})
    assert resp.status_code == 403
    assert Submission.objects.filter(pk=record.pk).exists()
