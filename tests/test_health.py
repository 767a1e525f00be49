"""
Tests for the app-level endpoints and error rendering (job_tracker/api/main.py).
"""


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "OK"

    def test_health_needs_no_token(self, client):
        assert "Authorization" not in client.headers
        assert client.get("/health").status_code == 200


class TestErrorRendering:
    def test_validation_errors_list_fields(self, client, auth_headers):
        response = client.post("/api/companies", json={"website": "ftp:/nope"}, headers=auth_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["errors"]}
        assert {"name", "website"} <= fields

    def test_bad_path_parameter(self, client, auth_headers):
        response = client.get("/api/applications/not-a-number", headers=auth_headers)
        assert response.status_code == 400
