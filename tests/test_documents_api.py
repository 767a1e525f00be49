"""
Tests for the /api/documents endpoints.

Files are written to the per-test upload directory from conftest.
"""

import pytest

from job_tracker.config import config
from job_tracker.services.documents import parse_tags

PDF_BYTES = b"%PDF-1.4\n% test document\n"


def upload(client, headers, filename="resume.pdf", content=PDF_BYTES, mime="application/pdf", **fields):
    data = {"name": "My Resume", "type": "resume", **fields}
    return client.post(
        "/api/documents",
        files={"file": (filename, content, mime)},
        data=data,
        headers=headers,
    )


# ============================================================
# Upload
# ============================================================


class TestUploadDocument:
    def test_upload_stores_file_and_metadata(self, client, auth_headers, upload_dir):
        response = upload(client, auth_headers, tags="backend, python, ")
        assert response.status_code == 201

        document = response.json()["document"]
        assert document["name"] == "My Resume"
        assert document["originalFilename"] == "resume.pdf"
        assert document["mimeType"] == "application/pdf"
        assert document["size"] == len(PDF_BYTES)
        assert document["fileExtension"] == "pdf"
        assert document["tags"] == ["backend", "python"]
        assert document["url"].startswith("/uploads/")

        stored = upload_dir / document["url"].rsplit("/", 1)[1]
        assert stored.read_bytes() == PDF_BYTES

    def test_name_defaults_to_filename(self, client, auth_headers):
        response = client.post(
            "/api/documents",
            files={"file": ("cover.txt", b"Dear hiring manager", "text/plain")},
            data={"type": "cover_letter"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["document"]["name"] == "cover.txt"

    def test_linked_to_own_application(self, client, auth_headers, application):
        response = upload(client, auth_headers, applicationId=str(application.id))
        assert response.status_code == 201
        document = response.json()["document"]
        assert document["applicationId"] == application.id
        assert document["application"]["positionTitle"] == "Software Engineer"

    def test_foreign_application_rejected(self, client, other_headers, application, upload_dir):
        response = upload(client, other_headers, applicationId=str(application.id))
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "applicationId"
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_disallowed_type(self, client, auth_headers):
        response = upload(client, auth_headers, filename="setup.exe", mime="application/x-msdownload")
        assert response.status_code == 400
        assert response.json()["message"] == "File type not allowed"

    def test_oversize(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(config.uploads, "max_upload_mb", 0)
        response = upload(client, auth_headers)
        assert response.status_code == 400

    def test_invalid_document_type(self, client, auth_headers):
        response = upload(client, auth_headers, type="selfie")
        assert response.status_code == 400


# ============================================================
# Read / update / delete
# ============================================================


class TestManageDocuments:
    @pytest.fixture
    def document(self, client, auth_headers):
        return upload(client, auth_headers).json()["document"]

    def test_list_and_search(self, client, auth_headers, document):
        upload(client, auth_headers, filename="portfolio.pdf", name="Portfolio", type="portfolio")

        body = client.get("/api/documents", headers=auth_headers).json()
        assert body["pagination"]["total"] == 2

        body = client.get("/api/documents?type=portfolio", headers=auth_headers).json()
        assert [d["name"] for d in body["documents"]] == ["Portfolio"]

        body = client.get("/api/documents?search=resume", headers=auth_headers).json()
        assert [d["name"] for d in body["documents"]] == ["My Resume"]

    def test_patch_metadata(self, client, auth_headers, document):
        response = client.patch(
            f"/api/documents/{document['id']}",
            json={"name": "Resume 2024", "tags": "senior, remote", "category": "engineering"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()["document"]
        assert body["name"] == "Resume 2024"
        assert body["tags"] == ["senior", "remote"]
        assert body["category"] == "engineering"
        assert body["type"] == "resume"

    def test_patch_relink_to_foreign_application(self, client, auth_headers, document, other_user, make_application, make_company):
        foreign = make_application(other_user, make_company(other_user, name="Foreign Co"))
        response = client.patch(
            f"/api/documents/{document['id']}", json={"applicationId": foreign.id}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_foreign_document_not_found(self, client, other_headers, document):
        response = client.get(f"/api/documents/{document['id']}", headers=other_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Document not found"

    def test_delete_removes_file(self, client, auth_headers, document, upload_dir):
        stored = upload_dir / document["url"].rsplit("/", 1)[1]
        assert stored.exists()

        response = client.delete(f"/api/documents/{document['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert not stored.exists()

    def test_delete_with_missing_file(self, client, auth_headers, document, upload_dir, log_messages):
        (upload_dir / document["url"].rsplit("/", 1)[1]).unlink()

        response = client.delete(f"/api/documents/{document['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert any("already missing" in message for message in log_messages)


class TestParseTags:
    def test_blank(self):
        assert parse_tags(None) == []
        assert parse_tags("  ,  ") == []

    def test_trims(self):
        assert parse_tags(" a ,b,, c") == ["a", "b", "c"]
