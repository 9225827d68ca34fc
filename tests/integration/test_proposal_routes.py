"""Integration tests for proposal routes."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeSupabase

Headers = Callable[[int], dict[str, str]]

CLIENT, FREELANCER, ADMIN, SUPPORT, SECOND_FREELANCER = 1, 2, 3, 4, 5


@pytest.fixture
def job(seeded_db: FakeSupabase) -> dict:
    """An open job posted by the demo client."""
    return seeded_db.add(
        "jobs",
        {
            "client_id": CLIENT,
            "title": "Data pipeline cleanup",
            "description": "Refactor a set of nightly ETL jobs into something maintainable.",
            "category": "data",
            "skills": ["python", "sql"],
            "budget": 1200.0,
            "hourly_rate": None,
            "status": "open",
            "deadline_date": None,
        },
    )


def proposal_body(job_id: int) -> dict:
    return {
        "job_id": job_id,
        "bid_amount": 1100,
        "estimated_duration": "3 weeks",
        "cover_letter": "I maintain several Airflow deployments and can help.",
    }


def submit(client: TestClient, headers: dict[str, str], job_id: int):
    return client.post("/api/proposals", json=proposal_body(job_id), headers=headers)


class TestSubmitProposal:
    """Tests for POST /api/proposals."""

    def test_freelancer_submits(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        response = submit(client, auth_headers(FREELANCER), job["id"])
        data = response.json()

        assert response.status_code == 201
        assert data["status"] == "pending"
        assert data["freelancer_id"] == FREELANCER

    def test_client_cannot_submit(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        response = submit(client, auth_headers(CLIENT), job["id"])

        assert response.status_code == 403
        assert response.json()["message"] == "Only freelancers can submit proposals"

    def test_duplicate_rejected(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        submit(client, auth_headers(FREELANCER), job["id"])

        response = submit(client, auth_headers(FREELANCER), job["id"])

        assert response.status_code == 400

    def test_closed_job_rejected(
        self, client: TestClient, auth_headers: Headers, job: dict, seeded_db: FakeSupabase
    ) -> None:
        seeded_db.tables["jobs"][0]["status"] = "completed"

        response = submit(client, auth_headers(FREELANCER), job["id"])

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot submit proposal for a closed job"

    def test_missing_job(self, client: TestClient, auth_headers: Headers) -> None:
        response = submit(client, auth_headers(FREELANCER), 999)

        assert response.status_code == 404


class TestListProposals:
    """Tests for role-scoped GET /api/proposals."""

    def test_visibility_by_role(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        submit(client, auth_headers(FREELANCER), job["id"])
        submit(client, auth_headers(SECOND_FREELANCER), job["id"])

        as_freelancer = client.get("/api/proposals", headers=auth_headers(FREELANCER)).json()
        as_client = client.get("/api/proposals", params={"jobId": job["id"]}, headers=auth_headers(CLIENT)).json()
        as_admin = client.get("/api/proposals", headers=auth_headers(ADMIN)).json()

        assert [p["freelancer_id"] for p in as_freelancer] == [FREELANCER]
        assert [p["freelancer_id"] for p in as_client] == [SECOND_FREELANCER, FREELANCER]
        assert len(as_admin) == 2

    def test_client_cannot_view_foreign_job(
        self, client: TestClient, auth_headers: Headers, job: dict, seeded_db: FakeSupabase
    ) -> None:
        seeded_db.tables["jobs"][0]["client_id"] = ADMIN

        response = client.get("/api/proposals", params={"jobId": job["id"]}, headers=auth_headers(CLIENT))

        assert response.status_code == 403


class TestReviewProposal:
    """Tests for PATCH /api/proposals/{id}."""

    def test_accept_moves_job_in_progress(
        self, client: TestClient, auth_headers: Headers, job: dict, seeded_db: FakeSupabase
    ) -> None:
        proposal = submit(client, auth_headers(FREELANCER), job["id"]).json()

        response = client.patch(
            f"/api/proposals/{proposal['id']}", json={"status": "accepted"}, headers=auth_headers(CLIENT)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        assert client.get(f"/api/jobs/{job['id']}").json()["status"] == "in_progress"

    def test_freelancer_cannot_review(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        proposal = submit(client, auth_headers(FREELANCER), job["id"]).json()

        response = client.patch(
            f"/api/proposals/{proposal['id']}", json={"status": "accepted"}, headers=auth_headers(FREELANCER)
        )

        assert response.status_code == 403

    def test_support_cannot_review(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        proposal = submit(client, auth_headers(FREELANCER), job["id"]).json()

        response = client.patch(
            f"/api/proposals/{proposal['id']}", json={"status": "rejected"}, headers=auth_headers(SUPPORT)
        )

        assert response.status_code == 403

    def test_invalid_status(self, client: TestClient, auth_headers: Headers, job: dict) -> None:
        proposal = submit(client, auth_headers(FREELANCER), job["id"]).json()

        response = client.patch(
            f"/api/proposals/{proposal['id']}", json={"status": "maybe"}, headers=auth_headers(CLIENT)
        )

        assert response.status_code == 422
