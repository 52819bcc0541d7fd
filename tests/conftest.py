import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def fast_password_hashing(settings):
    # Secret tokens are hashed like passwords; the default hasher is slow on purpose
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture(autouse=True)
def clear_leaderboard_cache():
    cache.clear()
    yield
    cache.clear()
