"""
Tests for the /api/interviews endpoints.
"""

from datetime import timedelta

import pytest

from job_tracker.database.db import utc_now


def iso(dt):
    return dt.isoformat()


@pytest.fixture
def schedule(client, auth_headers, application):
    def _schedule(**fields):
        payload = {"applicationId": application.id, "type": "phone", **fields}
        response = client.post("/api/interviews", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.json()
        return response.json()["interview"]
    return _schedule


# ============================================================
# Create / update
# ============================================================


class TestCreateInterview:
    def test_form_type_is_stored_underscored(self, schedule):
        interview = schedule(type="in-person", title="Onsite loop")
        assert interview["type"] == "in_person"
        assert interview["status"] == "scheduled"
        assert interview["application"]["company"]["name"] == "Acme Corp"

    def test_foreign_application_rejected(self, client, other_headers, application):
        response = client.post(
            "/api/interviews", json={"applicationId": application.id, "type": "video"}, headers=other_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "applicationId"

    def test_invalid_interviewer_email(self, client, auth_headers, application):
        response = client.post(
            "/api/interviews",
            json={"applicationId": application.id, "type": "video", "interviewerEmail": "nope"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_update(self, client, auth_headers, schedule):
        interview = schedule()
        response = client.put(
            f"/api/interviews/{interview['id']}",
            json={"outcome": "positive", "feedback": "Strong system design"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()["interview"]
        assert body["outcome"] == "positive"
        assert body["feedback"] == "Strong system design"
        assert body["type"] == "phone"

    def test_foreign_interview_not_found(self, client, other_headers, schedule):
        interview = schedule()
        response = client.get(f"/api/interviews/{interview['id']}", headers=other_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Interview not found"

    def test_delete(self, client, auth_headers, schedule):
        interview = schedule()
        assert client.delete(f"/api/interviews/{interview['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/interviews/{interview['id']}", headers=auth_headers).status_code == 404


# ============================================================
# Listing and stats
# ============================================================


class TestListInterviews:
    def test_filter_by_type(self, client, auth_headers, schedule):
        schedule(type="phone")
        schedule(type="technical")

        body = client.get("/api/interviews?type=technical", headers=auth_headers).json()
        assert [i["type"] for i in body["interviews"]] == ["technical"]
        assert body["pagination"]["total"] == 1

    def test_upcoming(self, client, auth_headers, schedule):
        soon = schedule(title="Soon", scheduledDate=iso(utc_now() + timedelta(days=1)))
        schedule(title="Later", scheduledDate=iso(utc_now() + timedelta(days=5)))
        schedule(title="Past", scheduledDate=iso(utc_now() - timedelta(days=2)))

        body = client.get("/api/interviews/upcoming?limit=5", headers=auth_headers).json()
        assert [i["title"] for i in body["interviews"]] == ["Soon", "Later"]
        assert body["interviews"][0]["id"] == soon["id"]

    def test_stats(self, client, auth_headers, schedule):
        schedule(type="phone", outcome="positive", scheduledDate=iso(utc_now() - timedelta(days=3)))
        schedule(type="phone", outcome="negative", scheduledDate=iso(utc_now() - timedelta(days=1)))
        schedule(type="video", scheduledDate=iso(utc_now() + timedelta(days=2)))

        body = client.get("/api/interviews/stats", headers=auth_headers).json()
        assert body["total"] == 3
        assert body["upcoming"] == 1
        assert body["past"] == 2
        assert body["successRate"] == 50
        assert body["typeBreakdown"] == {"phone": 2, "video": 1}

    def test_other_users_interviews_hidden(self, client, other_headers, schedule):
        schedule()
        body = client.get("/api/interviews", headers=other_headers).json()
        assert body["interviews"] == []
