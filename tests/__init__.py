"""
Tests package for the CyberArena scoreboard

- test_models.py: model constraints (append-only ledger, singleton config, immutable team IDs)
- test_scoring.py: flag judging, at-most-one award, retries and timeouts
- test_leaderboard.py: ranking order, density, caching and stats
- test_catalog.py: flag confidentiality, per-participant progress, admin CRUD
- test_credentials.py: login, bearer tokens, provisioning
- test_views.py: JSON API end to end
- test_admin_api.py: admin-only endpoints (pytest style)
- test_admin_site.py: Django admin screens and actions
- test_commands.py: the seed_contest management command
- test_utils.py: test data factory and scenarios

Usage:
    pip install -e .[test]
    pytest
"""

from .test_utils import TestDataFactory, ScenarioBuilder

__all__ = [
    'TestDataFactory',
    'ScenarioBuilder',
]
