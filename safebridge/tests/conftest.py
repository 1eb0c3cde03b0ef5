# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timezone

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from safebridge.app import create_app
from safebridge.models.entities import HelpRequest, User
from safebridge.models.enums import Role
from safebridge.services.persistence import MemorySnapshotBackend
from safebridge.services.seed import seed_state
from safebridge.services.store import StateStore


@pytest.fixture
def fixed_now():
    """Deterministic timestamp for lifecycle operations."""
    return datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def seeded_state():
    """Demo snapshot: three users, four resources, three legal entries."""
    return seed_state()


@pytest.fixture
def memory_backend():
    """Empty in-memory snapshot backend."""
    return MemorySnapshotBackend()


@pytest.fixture
def store(memory_backend):
    """State store seeded with demo data."""
    return StateStore(memory_backend)


@pytest.fixture
def sample_cases(fixed_now):
    """Three cases in different lifecycle states, newest first."""
    return (
        HelpRequest(id="case-3", created_at=fixed_now, status="New", region="Pune"),
        HelpRequest(id="case-2", created_at=fixed_now, status="In progress", region="Delhi",
                    assigned_to="u-c2"),
        HelpRequest(id="case-1", created_at=fixed_now, status="Assigned", region="Jaipur",
                    assigned_to="u-c1"),
    )


@pytest.fixture
def staff_users():
    """Users including a second counsellor."""
    return (
        User(id="u-admin", name="Admin", role=Role.ADMIN),
        User(id="u-c1", name="Counsellor A", role=Role.COUNSELLOR),
        User(id="u-c2", name="Counsellor B", role=Role.COUNSELLOR),
        User(id="u-l1", name="Legal Advisor A", role=Role.LEGAL_ADVISOR),
    )


@pytest.fixture
def app(store):
    """Flask application backed by the in-memory store."""
    app = create_app(
        config={
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'BASE_URL': 'https://api.example.com'
        },
        store=store
    )
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


def role_headers(role, user_id=None):
    """Role selector headers for API calls."""
    headers = {'X-Role': role}
    if user_id:
        headers['X-User-Id'] = user_id
    return headers


@pytest.fixture
def headers():
    """Factory for role selector headers."""
    return role_headers
