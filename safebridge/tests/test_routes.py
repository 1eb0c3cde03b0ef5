# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the HTTP endpoints.
"""

import pytest

from safebridge.tests.conftest import role_headers

ADMIN = role_headers("Admin", "u-admin")
COUNSELLOR = role_headers("Counsellor", "u-c1")
OTHER_COUNSELLOR = role_headers("Counsellor", "u-c2")
ADVISOR = role_headers("Legal Advisor", "u-l1")
SURVIVOR = role_headers("Survivor")


def create_case(client, **body):
    response = client.post('/api/cases', json=body, headers=SURVIVOR)
    assert response.status_code == 201
    return response.get_json()


class TestHealthEndpoint:
    """Test the health check."""

    def test_healthz(self, client):
        """Health needs no role and reports the backend."""
        response = client.get('/api/healthz')

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["snapshot"]["backend"] == "memory"
        assert data["_links"]["self"]["href"] == "https://api.example.com/api/healthz"


class TestSession:
    """Test the session and overview endpoints."""

    def test_missing_role_rejected(self, client):
        """Requests need a role selection."""
        response = client.get('/api/session')

        assert response.status_code == 400
        assert response.get_json()["type"].endswith("/validation-error")

    def test_unknown_role_rejected(self, client):
        """Unknown roles are validation errors."""
        response = client.get('/api/session', headers={'X-Role': 'Superuser'})

        assert response.status_code == 400
        assert response.get_json()["validation_errors"]

    def test_session_for_counsellor(self, client):
        """The session lists views, capabilities and the selected user."""
        data = client.get('/api/session', headers=COUNSELLOR).get_json()

        assert data["role"] == "Counsellor"
        assert data["user"] == {"id": "u-c1", "name": "Counsellor A"}
        assert data["views"] == ["Overview", "Assigned Cases", "Progress Notes", "Resources"]
        assert "case:read_mine" in data["capabilities"]
        assert data["quickExitUrl"] == "https://www.google.com/"
        assert "cases" in data["_links"]
        assert "users" not in data["_links"]

    def test_session_legacy_survivor_label(self, client):
        """The original survivor label is accepted."""
        data = client.get('/api/session', headers={'X-Role': 'Victim/Survivor'}).get_json()

        assert data["role"] == "Survivor"
        assert data["user"] is None
        assert "request_help" in data["_links"]

    def test_survivor_overview(self, client):
        """Survivors get featured resources and safety guidance."""
        data = client.get('/api/overview', headers=SURVIVOR).get_json()

        assert len(data["featuredResources"]) == 3
        assert data["quickContacts"][0] == {"label": "Emergency", "contact": "112"}
        assert data["safetyPlan"]
        assert "cases" not in data

    def test_admin_overview(self, client):
        """Admins get directory counts."""
        data = client.get('/api/overview', headers=ADMIN).get_json()

        assert data["counts"] == {"users": 3, "resources": 4, "legal": 3, "cases": 0}

    def test_counsellor_overview_scoped(self, client):
        """Counsellor statistics cover their own cases only."""
        mine = create_case(client, region="Jaipur")
        create_case(client, region="Pune")
        client.post(f'/api/cases/{mine["id"]}/assign', json={"counsellorId": "u-c1"}, headers=ADVISOR)

        data = client.get('/api/overview', headers=COUNSELLOR).get_json()

        assert data["cases"]["total"] == 1
        assert data["cases"]["assigned"] == 1
        assert data["recent"][0]["assignedName"] == "Counsellor A"

        advisor = client.get('/api/overview', headers=ADVISOR).get_json()
        assert advisor["cases"]["total"] == 2
        assert advisor["cases"]["unassigned"] == 1


class TestDirectoryEndpoints:
    """Test resources, legal and users endpoints."""

    def test_list_resources(self, client):
        """Every role may read resources; only admins see edit links."""
        survivor = client.get('/api/resources', headers=SURVIVOR).get_json()
        admin = client.get('/api/resources', headers=ADMIN).get_json()

        assert survivor["total"] == 4
        assert "create" not in survivor["_links"]
        assert "edit" not in survivor["_embedded"]["resources"][0]["_links"]
        assert "create" in admin["_links"]
        assert admin["_embedded"]["resources"][0]["_links"]["delete"]["method"] == "DELETE"

    def test_admin_adds_resource_first(self, client):
        """Added resources appear first."""
        response = client.post(
            '/api/resources',
            json={"type": "Shelter", "title": "City Shelter"},
            headers=ADMIN
        )

        assert response.status_code == 201
        listing = client.get('/api/resources', headers=SURVIVOR).get_json()
        assert listing["_embedded"]["resources"][0]["title"] == "City Shelter"

    def test_counsellor_cannot_add_resource(self, client):
        """Directory mutations are forbidden to counsellors."""
        response = client.post(
            '/api/resources',
            json={"type": "Shelter", "title": "City Shelter"},
            headers=COUNSELLOR
        )

        assert response.status_code == 403
        data = response.get_json()
        assert data["type"].endswith("/insufficient-permissions")
        assert "session" in data["_links"]

    def test_blank_title_rejected(self, client):
        """Blank titles are validation errors."""
        response = client.post('/api/resources', json={"type": "NGO", "title": ""}, headers=ADMIN)

        assert response.status_code == 400

    def test_missing_resource_type_rejected(self, client):
        """Resource type is required."""
        response = client.post('/api/resources', json={"title": "X"}, headers=ADMIN)

        assert response.status_code == 400
        assert any("type" in error for error in response.get_json()["validation_errors"])

    def test_non_object_body_rejected(self, client):
        """Bodies must be JSON objects."""
        response = client.post('/api/legal', json=["title"], headers=ADVISOR)

        assert response.status_code == 400

    def test_update_and_delete_legal(self, client):
        """Legal advisors edit and remove legal entries."""
        entry = client.get('/api/legal', headers=ADVISOR).get_json()["_embedded"]["legal"][0]

        updated = client.patch(f'/api/legal/{entry["id"]}', json={"link": "https://indiacode.nic.in"},
                               headers=ADVISOR)
        assert updated.status_code == 200
        assert updated.get_json()["link"] == "https://indiacode.nic.in"
        assert updated.get_json()["title"] == entry["title"]

        deleted = client.delete(f'/api/legal/{entry["id"]}', headers=ADVISOR)
        assert deleted.status_code == 204
        again = client.delete(f'/api/legal/{entry["id"]}', headers=ADVISOR)
        assert again.status_code == 204

        assert client.get('/api/legal', headers=ADVISOR).get_json()["total"] == 2

    def test_update_unknown_entry(self, client):
        """Updating an unknown entry is not found."""
        response = client.patch('/api/resources/missing', json={"title": "X"}, headers=ADMIN)

        assert response.status_code == 404

    def test_users_listing_admin_only(self, client):
        """Only user managers list the user directory."""
        assert client.get('/api/users', headers=ADMIN).status_code == 200
        assert client.get('/api/users', headers=COUNSELLOR).status_code == 403

    def test_user_entries_have_no_edit_link(self, client):
        """Users cannot be edited in place."""
        users = client.get('/api/users', headers=ADMIN).get_json()["_embedded"]["users"]

        assert "edit" not in users[0]["_links"]
        assert "delete" in users[0]["_links"]

    def test_add_counsellor_listed(self, client):
        """New counsellors show up in the picker."""
        response = client.post('/api/users', json={"name": "Counsellor B"}, headers=ADMIN)
        assert response.status_code == 201
        assert response.get_json()["role"] == "Counsellor"

        picker = client.get('/api/users/counsellors', headers=SURVIVOR).get_json()
        assert [c["name"] for c in picker["counsellors"]] == ["Counsellor B", "Counsellor A"]


class TestCaseEndpoints:
    """Test the case lifecycle endpoints."""

    def test_survivor_creates_case(self, client):
        """New cases start as New with no updates."""
        case = create_case(client, region="Jaipur", contactPref="SMS")

        assert case["status"] == "New"
        assert case["updates"] == []
        assert case["contactPref"] == "SMS"
        assert "assign" not in case["_links"]

    def test_counsellor_cannot_create_case(self, client):
        """Only survivors submit help requests."""
        response = client.post('/api/cases', json={}, headers=COUNSELLOR)

        assert response.status_code == 403

    def test_survivor_cannot_list_cases(self, client):
        """Survivors have no case reads."""
        assert client.get('/api/cases', headers=SURVIVOR).status_code == 403

    def test_counsellor_sees_only_own_cases(self, client):
        """Listing is scoped to the counsellor's assignments."""
        mine = create_case(client)
        create_case(client)
        client.post(f'/api/cases/{mine["id"]}/assign', json={"counsellorId": "u-c1"}, headers=ADVISOR)

        listing = client.get('/api/cases', headers=COUNSELLOR).get_json()

        assert [c["id"] for c in listing["_embedded"]["cases"]] == [mine["id"]]
        assert "status" in listing["_embedded"]["cases"][0]["_links"]

    def test_counsellor_cannot_act_on_other_case(self, client):
        """Another counsellor's case is off limits."""
        case = create_case(client)
        client.post(f'/api/cases/{case["id"]}/assign', json={"counsellorId": "u-c1"}, headers=ADVISOR)

        status = client.post(
            f'/api/cases/{case["id"]}/status',
            json={"status": "Closed", "note": "x"},
            headers=OTHER_COUNSELLOR
        )
        view = client.get(f'/api/cases/{case["id"]}', headers=OTHER_COUNSELLOR)

        assert status.status_code == 403
        assert view.status_code == 403

        unchanged = client.get(f'/api/cases/{case["id"]}', headers=ADVISOR).get_json()
        assert unchanged["status"] == "Assigned"
        assert unchanged["updates"] == []

    def test_status_filter_and_limit(self, client):
        """Legal advisors can filter by status and limit the listing."""
        first = create_case(client)
        create_case(client)
        create_case(client)
        client.post(f'/api/cases/{first["id"]}/status', json={"status": "Closed"}, headers=ADVISOR)

        closed = client.get('/api/cases?status=Closed', headers=ADVISOR).get_json()
        limited = client.get('/api/cases?limit=2', headers=ADVISOR).get_json()

        assert closed["total"] == 1
        assert limited["total"] == 2

    def test_unknown_status_filter(self, client):
        """Unknown status filters are validation errors."""
        assert client.get('/api/cases?status=Archived', headers=ADVISOR).status_code == 400

    def test_unknown_status_update(self, client):
        """Unknown statuses are rejected without logging an update."""
        case = create_case(client)

        response = client.post(
            f'/api/cases/{case["id"]}/status', json={"status": "Escalated"}, headers=ADVISOR
        )

        assert response.status_code == 400
        assert client.get(f'/api/cases/{case["id"]}', headers=ADVISOR).get_json()["updates"] == []

    def test_missing_status_field(self, client):
        """The status field is required."""
        case = create_case(client)

        response = client.post(f'/api/cases/{case["id"]}/status', json={"note": "x"}, headers=ADVISOR)

        assert response.status_code == 400

    def test_unknown_case(self, client):
        """Unknown cases are not found."""
        assert client.get('/api/cases/missing', headers=ADVISOR).status_code == 404
        response = client.post('/api/cases/missing/assign', json={"counsellorId": "u-c1"}, headers=ADVISOR)
        assert response.status_code == 404

    def test_assign_empty_clears(self, client):
        """Assigning nobody clears the assignee and keeps Assigned."""
        case = create_case(client, assignedTo="u-c1")

        data = client.post(f'/api/cases/{case["id"]}/assign', json={"counsellorId": ""},
                           headers=ADVISOR).get_json()

        assert data["assignedTo"] == ""
        assert data["status"] == "Assigned"


class TestQuickExit:
    """Test the data wipe endpoint."""

    @pytest.mark.parametrize("headers", [ADMIN, COUNSELLOR, ADVISOR, SURVIVOR])
    def test_every_role_can_clear(self, client, headers):
        """Quick exit works for every role and returns the exit URL."""
        response = client.post('/api/data/clear', headers=headers)

        assert response.status_code == 200
        assert response.get_json() == {"cleared": True, "redirect": "https://www.google.com/"}

    def test_clear_resets_data(self, client, store):
        """Cases and directory edits are gone after a clear."""
        create_case(client)
        client.post('/api/resources', json={"type": "Shelter", "title": "City Shelter"}, headers=ADMIN)

        client.post('/api/data/clear', headers=SURVIVOR)

        assert store.snapshot.help_requests == ()
        titles = [r.title for r in store.snapshot.resources]
        assert "City Shelter" not in titles


class TestErrorHandling:
    """Test generic error responses."""

    def test_unknown_route(self, client):
        """Unknown routes produce problem documents."""
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json()["status"] == 404

    def test_wrong_method(self, client):
        """Unsupported methods produce problem documents."""
        response = client.put('/api/resources', headers=ADMIN)

        assert response.status_code == 405
