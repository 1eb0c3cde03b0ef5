# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Acceptance test fixtures: a full application over a file-backed store.
"""

import os
import pytest

os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from safebridge.app import create_app


@pytest.fixture
def snapshot_path(tmp_path):
    """Location of the persisted snapshot file."""
    return str(tmp_path / "safebridge-state.json")


@pytest.fixture
def make_app(snapshot_path):
    """Build applications sharing one snapshot file, like process restarts."""
    def factory():
        app = create_app(config={
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'SNAPSHOT_BACKEND': 'file',
            'SNAPSHOT_PATH': snapshot_path,
            'BASE_URL': 'https://safebridge.test'
        })
        app.config['TESTING'] = True
        return app
    return factory


@pytest.fixture
def test_client(make_app):
    """Test client for a freshly started application."""
    return make_app().test_client()
