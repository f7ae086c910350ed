"""Integration tests for CV and cover letter CRUD, analysis and generation."""

import pytest

from cvbooster_core.exceptions import AIServiceError


@pytest.mark.integration
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["data"]["database"] == "ok"


@pytest.mark.integration
def test_cv_crud(client, auth_headers, fake_db):
    created = client.post(
        "/api/cvs",
        json={"title": "Mon CV", "content": "Python", "sector": "IT"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    cv = created.json()["data"]
    assert cv["status"] == "draft"
    assert fake_db.users["user-1"].email == "alice@example.com"

    listed = client.get("/api/cvs", headers=auth_headers).json()["data"]
    assert [c["id"] for c in listed] == [cv["id"]]

    updated = client.put(
        f"/api/cvs/{cv['id']}",
        json={"title": None, "sector": None, "position": "Lead"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["title"] == "Mon CV"
    assert data["sector"] is None
    assert data["position"] == "Lead"

    assert client.delete(f"/api/cvs/{cv['id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"/api/cvs/{cv['id']}", headers=auth_headers).status_code == 404
    assert client.get(f"/api/cvs/{cv['id']}", headers=auth_headers).status_code == 404


@pytest.mark.integration
def test_cv_is_scoped_to_owner(client, stored_cv):
    other = {"X-User-Id": "user-2"}
    assert client.get(f"/api/cvs/{stored_cv.id}", headers=other).status_code == 404
    assert client.put(f"/api/cvs/{stored_cv.id}", json={"title": "x"}, headers=other).status_code == 404
    assert client.delete(f"/api/cvs/{stored_cv.id}", headers=other).status_code == 404
    assert client.get("/api/cvs", headers=other).json()["data"] == []


@pytest.mark.integration
def test_create_cv_validates_body(client, auth_headers):
    assert client.post("/api/cvs", json={"content": "x"}, headers=auth_headers).status_code == 422
    response = client.put("/api/cvs/any", json={"score": 140}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.integration
def test_analyze_cv_stores_score(client, auth_headers, stored_cv, fake_provider, fake_db):
    fake_provider.queue({"score": 91, "suggestions": [{"title": "Quantifier"}], "strengths": ["Clair"]})

    response = client.post(f"/api/cvs/{stored_cv.id}/analyze", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["analysis"]["score"] == 91
    assert data["cv"]["status"] == "optimized"
    assert fake_db.cvs[stored_cv.id].score == 91
    assert fake_db.cvs[stored_cv.id].suggestions == [{"title": "Quantifier"}]


@pytest.mark.integration
def test_analyze_cv_rate_limited(client, auth_headers, stored_cv, fake_provider):
    fake_provider.queue(AIServiceError("slow down", code="rate_limit"))
    response = client.post(f"/api/cvs/{stored_cv.id}/analyze", headers=auth_headers)
    assert response.status_code == 429
    assert response.json()["detail"]["code"] == "rate_limit"


@pytest.mark.integration
def test_list_cvs_storage_failure(client, auth_headers, fake_db):
    fake_db.fail_with = ConnectionError("db down")
    response = client.get("/api/cvs", headers=auth_headers)
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch CVs"}


@pytest.mark.integration
def test_generate_cover_letter_from_cv(client, auth_headers, stored_cv, fake_provider, fake_db):
    fake_provider.queue("Madame, Monsieur,\nJe souhaite rejoindre ACME.")

    response = client.post(
        "/api/cover-letters/generate-from-cv",
        json={"cvId": stored_cv.id, "companyName": "ACME", "position": "Chercheuse"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    letter = response.json()["data"]
    assert letter["title"] == "Lettre - ACME"
    assert letter["company_name"] == "ACME"
    assert letter["content"].startswith("Madame, Monsieur")
    assert letter["id"] in fake_db.cover_letters


@pytest.mark.integration
def test_generate_cover_letter_from_foreign_cv(client, stored_cv):
    response = client.post(
        "/api/cover-letters/generate-from-cv",
        json={"cv_id": stored_cv.id, "company_name": "ACME", "position": "Dev"},
        headers={"X-User-Id": "user-2"},
    )
    assert response.status_code == 404


@pytest.mark.integration
def test_cover_letter_crud_and_analysis(client, auth_headers, fake_provider):
    created = client.post(
        "/api/cover-letters",
        json={"title": "Lettre ACME", "content": "Bonjour", "companyName": "ACME"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    letter_id = created.json()["data"]["id"]

    fake_provider.queue({"score": 64, "personalisation": 70, "relevance": 55})
    analyzed = client.post(f"/api/cover-letters/{letter_id}/analyze", headers=auth_headers)
    assert analyzed.status_code == 200
    assert analyzed.json()["data"]["letter"]["score"] == 64
    assert "ACME" in fake_provider.calls[0]["messages"][0]["content"]

    updated = client.put(f"/api/cover-letters/{letter_id}", json={"content": "Madame"}, headers=auth_headers)
    assert updated.json()["data"]["content"] == "Madame"

    assert len(client.get("/api/cover-letters", headers=auth_headers).json()["data"]) == 1
    assert client.delete(f"/api/cover-letters/{letter_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/cover-letters/{letter_id}", headers=auth_headers).status_code == 404
