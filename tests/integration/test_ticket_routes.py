"""Integration tests for support ticket routes."""

from collections.abc import Callable

from fastapi.testclient import TestClient

Headers = Callable[[int], dict[str, str]]

TICKET = {
    "title": "Payment not received",
    "description": "The client marked the milestone complete but no payment arrived.",
    "type": "complaint",
    "priority": "high",
}


class TestTickets:
    """Tests for POST and GET /api/tickets."""

    def test_file_ticket(self, client: TestClient, auth_headers: Headers) -> None:
        response = client.post("/api/tickets", json=TICKET, headers=auth_headers(2))
        data = response.json()

        assert response.status_code == 201
        assert data["user_id"] == 2
        assert data["status"] == "new"
        assert data["type"] == "complaint"
        assert data["priority"] == "high"

    def test_defaults(self, client: TestClient, auth_headers: Headers) -> None:
        body = {"title": "Cannot upload", "description": "Avatar upload keeps failing."}

        data = client.post("/api/tickets", json=body, headers=auth_headers(1)).json()

        assert data["type"] == "support"
        assert data["priority"] == "medium"

    def test_invalid_priority(self, client: TestClient, auth_headers: Headers) -> None:
        response = client.post("/api/tickets", json={**TICKET, "priority": "urgent"}, headers=auth_headers(1))

        assert response.status_code == 422

    def test_members_see_own_tickets_staff_see_all(self, client: TestClient, auth_headers: Headers) -> None:
        client.post("/api/tickets", json=TICKET, headers=auth_headers(1))
        client.post("/api/tickets", json=TICKET, headers=auth_headers(2))

        own = client.get("/api/tickets", headers=auth_headers(1)).json()
        staff = client.get("/api/tickets", headers=auth_headers(4)).json()

        assert [t["user_id"] for t in own] == [1]
        assert [t["user_id"] for t in staff] == [2, 1]

    def test_status_filter(self, client: TestClient, auth_headers: Headers) -> None:
        client.post("/api/tickets", json=TICKET, headers=auth_headers(1))

        new = client.get("/api/tickets", params={"status": "new"}, headers=auth_headers(1)).json()
        resolved = client.get("/api/tickets", params={"status": "resolved"}, headers=auth_headers(1)).json()

        assert len(new) == 1
        assert resolved == []

    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.post("/api/tickets", json=TICKET).status_code == 401


class TestUpdateTicket:
    """Tests for PATCH /api/tickets/{id}."""

    def test_support_assigns_and_resolves(self, client: TestClient, auth_headers: Headers) -> None:
        ticket = client.post("/api/tickets", json=TICKET, headers=auth_headers(2)).json()

        assigned = client.patch(
            f"/api/tickets/{ticket['id']}",
            json={"status": "in_progress", "assigned_to_id": 4},
            headers=auth_headers(4),
        ).json()
        resolved = client.patch(
            f"/api/tickets/{ticket['id']}", json={"status": "resolved"}, headers=auth_headers(4)
        ).json()

        assert assigned["status"] == "in_progress"
        assert assigned["assigned_to_id"] == 4
        assert assigned["resolved_at"] is None
        assert resolved["status"] == "resolved"
        assert resolved["assigned_to_id"] == 4
        assert resolved["resolved_at"] is not None

    def test_members_cannot_update(self, client: TestClient, auth_headers: Headers) -> None:
        ticket = client.post("/api/tickets", json=TICKET, headers=auth_headers(2)).json()

        response = client.patch(f"/api/tickets/{ticket['id']}", json={"status": "closed"}, headers=auth_headers(2))

        assert response.status_code == 403

    def test_assignee_must_be_staff(self, client: TestClient, auth_headers: Headers) -> None:
        ticket = client.post("/api/tickets", json=TICKET, headers=auth_headers(2)).json()

        response = client.patch(
            f"/api/tickets/{ticket['id']}", json={"assigned_to_id": 1}, headers=auth_headers(4)
        )

        assert response.status_code == 400

    def test_missing_ticket(self, client: TestClient, auth_headers: Headers) -> None:
        response = client.patch("/api/tickets/999", json={"status": "closed"}, headers=auth_headers(4))

        assert response.status_code == 404
