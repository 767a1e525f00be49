"""
Tests for the /api/companies endpoints.
"""

from job_tracker.services import companies as company_service


# ============================================================
# Create / update
# ============================================================


class TestCreateCompany:
    def test_create(self, client, auth_headers):
        response = client.post(
            "/api/companies",
            json={"name": "Globex", "industry": "Energy", "website": "https://globex.example.com"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        body = response.json()["company"]
        assert body["name"] == "Globex"
        assert body["industry"] == "Energy"
        assert body["applicationCount"] == 0

    def test_duplicate_name_conflicts(self, client, auth_headers, company):
        response = client.post("/api/companies", json={"name": company.name}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Company with this name already exists"

    def test_duplicate_that_slips_past_the_lookup_conflicts(self, client, auth_headers, company, monkeypatch):
        # A concurrent create can pass the lookup; the unique constraint still decides
        monkeypatch.setattr(company_service, "_ensure_unique_name", lambda *args, **kwargs: None)
        response = client.post("/api/companies", json={"name": company.name}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Company with this name already exists"

    def test_rename_that_slips_past_the_lookup_conflicts(self, client, auth_headers, user, company, make_company, monkeypatch):
        other = make_company(user, name="Hooli")
        monkeypatch.setattr(company_service, "_ensure_unique_name", lambda *args, **kwargs: None)
        response = client.put(f"/api/companies/{other.id}", json={"name": company.name}, headers=auth_headers)
        assert response.status_code == 409

    def test_same_name_for_different_users(self, client, other_headers, company):
        response = client.post("/api/companies", json={"name": company.name}, headers=other_headers)
        assert response.status_code == 201

    def test_invalid_website(self, client, auth_headers):
        response = client.post("/api/companies", json={"name": "Initech", "website": "initech"}, headers=auth_headers)
        assert response.status_code == 400

    def test_empty_name(self, client, auth_headers):
        response = client.post("/api/companies", json={"name": ""}, headers=auth_headers)
        assert response.status_code == 400


class TestUpdateCompany:
    def test_partial_update(self, client, auth_headers, user, make_company):
        company = make_company(user, name="Umbrella", industry="Pharma", location="Raccoon City")
        response = client.put(
            f"/api/companies/{company.id}", json={"location": "Berlin"}, headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()["company"]
        assert body["location"] == "Berlin"
        assert body["industry"] == "Pharma"

    def test_rename_to_existing_conflicts(self, client, auth_headers, user, make_company):
        make_company(user, name="Initech")
        other = make_company(user, name="Hooli")
        response = client.put(f"/api/companies/{other.id}", json={"name": "Initech"}, headers=auth_headers)
        assert response.status_code == 409

    def test_foreign_company_not_found(self, client, other_headers, company):
        response = client.put(f"/api/companies/{company.id}", json={"notes": "x"}, headers=other_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Company not found"


# ============================================================
# Read
# ============================================================


class TestReadCompanies:
    def test_list_with_application_counts(self, client, auth_headers, user, company, make_company, make_application):
        make_company(user, name="Zeta Labs")
        make_application(user, company, position_title="Engineer")
        make_application(user, company, position_title="Manager")

        body = client.get("/api/companies", headers=auth_headers).json()
        counts = {c["name"]: c["applicationCount"] for c in body["companies"]}
        assert counts == {"Acme Corp": 2, "Zeta Labs": 0}

    def test_list_search_and_industry(self, client, auth_headers, user, make_company):
        make_company(user, name="Acme Corp", industry="Retail")
        make_company(user, name="Globex", industry="Energy")

        searched = client.get("/api/companies?search=glob", headers=auth_headers).json()["companies"]
        assert [c["name"] for c in searched] == ["Globex"]

        filtered = client.get("/api/companies?industry=Retail", headers=auth_headers).json()["companies"]
        assert [c["name"] for c in filtered] == ["Acme Corp"]

    def test_detail_lists_recent_applications(self, client, auth_headers, user, company, make_application):
        make_application(user, company, position_title="Engineer")
        body = client.get(f"/api/companies/{company.id}", headers=auth_headers).json()["company"]
        assert body["applicationCount"] == 1
        assert body["applications"][0]["positionTitle"] == "Engineer"

    def test_stats_overview(self, client, auth_headers, user, make_company):
        make_company(user, name="A", industry="Tech")
        make_company(user, name="B", industry="Tech")
        make_company(user, name="C", industry="Finance")
        make_company(user, name="D")

        body = client.get("/api/companies/stats/overview", headers=auth_headers).json()
        assert body["totalCompanies"] == 4
        assert body["totalIndustries"] == 2
        assert body["topIndustries"][0] == {"industry": "Tech", "count": 2}


# ============================================================
# Delete
# ============================================================


class TestDeleteCompany:
    def test_delete_unused_company(self, client, auth_headers, company):
        response = client.delete(f"/api/companies/{company.id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/companies/{company.id}", headers=auth_headers).status_code == 404

    def test_delete_with_applications_conflicts(self, client, auth_headers, company, application):
        response = client.delete(f"/api/companies/{company.id}", headers=auth_headers)
        assert response.status_code == 409
        assert "1 application(s)" in response.json()["message"]
