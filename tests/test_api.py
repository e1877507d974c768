"""
Integration Tests: FastAPI Endpoints
Uses TestClient against an in-memory SQLite database.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from api.dependencies import get_db_engine, get_grade_table
from api.main import app
from config.settings import Settings, settings


# ── Helpers ────────────────────────────────────────────────────────────────────
@pytest.fixture()
def client(engine):
    app.dependency_overrides[get_db_engine] = lambda: engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client, username: str = "alice", password: str = "secret123") -> dict:
    resp = client.post("/api/auth/register", json={
        "username": username,
        "email":    f"{username}@example.com",
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture()
def token(client):
    return register(client)["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def calculate(client, token: str, semester_number, subjects):
    return client.post(
        "/api/cgpa/calculate",
        json={"semesterNumber": semester_number, "subjects": subjects},
        headers=auth_headers(token),
    )


MATH_AND_LAB = [
    {"name": "Math", "credits": 4, "grade": "A"},
    {"name": "Lab",  "credits": 0, "grade": "SC"},
]


# ── Auth Tests ─────────────────────────────────────────────────────────────────
class TestAuth:
    def test_health_no_auth(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_register_returns_token(self, client):
        data = register(client)
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "alice"
        assert data["user"]["email"] == "alice@example.com"

    def test_register_duplicate(self, client):
        register(client)
        resp = client.post("/api/auth/register", json={
            "username": "alice", "email": "alice@example.com", "password": "secret123",
        })
        assert resp.status_code == 400
        assert resp.json()["message"] == "User already exists"

    def test_register_short_password(self, client):
        resp = client.post("/api/auth/register", json={
            "username": "alice", "email": "alice@example.com", "password": "123",
        })
        assert resp.status_code == 422

    def test_login_with_username_and_email(self, client):
        register(client)
        for login in ("alice", "alice@example.com"):
            resp = client.post("/api/auth/login", data={"username": login, "password": "secret123"})
            assert resp.status_code == 200
            assert "access_token" in resp.json()

    def test_login_wrong_password(self, client):
        register(client)
        resp = client.post("/api/auth/login", data={"username": "alice", "password": "wrongpass"})
        assert resp.status_code == 401

    def test_login_unknown_user(self, client):
        resp = client.post("/api/auth/login", data={"username": "ghost", "password": "x"})
        assert resp.status_code == 401

    def test_get_me(self, client, token):
        resp = client.get("/api/auth/me", headers=auth_headers(token))
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"

    def test_protected_route_no_token(self, client):
        assert client.get("/api/cgpa").status_code == 401

    def test_protected_route_bad_token(self, client):
        resp = client.get("/api/cgpa", headers={"Authorization": "Bearer invalid.token.here"})
        assert resp.status_code == 401

    def test_expired_token(self, client, token):
        expired = jwt.encode(
            {"sub": "1", "exp": 1},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        resp = client.get("/api/cgpa", headers=auth_headers(expired))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired. Please login again."

    def test_token_for_deleted_user(self, client):
        orphan = jwt.encode(
            {"sub": "424242"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        resp = client.get("/api/cgpa", headers=auth_headers(orphan))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "User not found. Token is not valid."


# ── CGPA Endpoint Tests ────────────────────────────────────────────────────────
class TestCGPAEndpoints:
    def test_get_creates_empty_record(self, client, token):
        resp = client.get("/api/cgpa", headers=auth_headers(token))
        assert resp.status_code == 200
        data = resp.json()
        assert data["semesters"] == []
        assert data["overallCGPA"] == 0
        assert data["totalCredits"] == 0
        assert "lastUpdated" in data

    def test_grade_listing(self, client, token):
        resp = client.get("/api/cgpa/grades", headers=auth_headers(token))
        assert resp.status_code == 200
        grades = {g["grade"]: g for g in resp.json()}
        assert grades["O"]["point"] == 10
        assert grades["U"]["countable"] is True
        assert grades["SC"]["countable"] is False

    def test_grade_listing_requires_token(self, client):
        assert client.get("/api/cgpa/grades").status_code == 401

    @pytest.mark.parametrize("credits", [31, 2**63, 10**400])
    def test_oversized_credits_rejected(self, client, token, credits):
        resp = calculate(client, token, 1, [{"name": "Math", "credits": credits, "grade": "A"}])
        assert resp.status_code == 400
        assert resp.json()["message"] == "invalid credits"
        record = client.get("/api/cgpa", headers=auth_headers(token)).json()
        assert record["semesters"] == []

    def test_lowercase_grade_rejected(self, client, token):
        resp = calculate(client, token, 1, [{"name": "Math", "credits": 4, "grade": "a+"}])
        assert resp.status_code == 400
        assert resp.json()["message"] == "invalid grade"

    def test_calculate(self, client, token):
        resp = calculate(client, token, 1, MATH_AND_LAB)
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "GPA calculated and saved successfully"
        assert data["semesterGPA"] == pytest.approx(8.0)
        assert data["overallCGPA"] == pytest.approx(8.0)
        semester = data["cgpaData"]["semesters"][0]
        assert semester["semesterNumber"] == 1
        assert semester["totalCredits"] == 4
        lab = semester["subjects"][1]
        assert lab == {"name": "Lab", "credits": 0, "grade": "SC", "gradePoint": 0}

    def test_client_grade_point_ignored(self, client, token):
        resp = calculate(client, token, 1, [{"name": "Math", "credits": 4, "grade": "B", "gradePoint": 10}])
        assert resp.json()["semesterGPA"] == pytest.approx(6.0)

    def test_overall_cgpa_across_semesters(self, client, token):
        calculate(client, token, 1, MATH_AND_LAB)
        resp = calculate(client, token, 2, [{"name": "Bio", "credits": 3, "grade": "B"}])
        data = resp.json()
        assert data["overallCGPA"] == pytest.approx(50 / 7)
        assert data["cgpaData"]["totalCredits"] == 7

    def test_semesters_returned_in_order(self, client, token):
        calculate(client, token, 2, [{"name": "Bio", "credits": 3, "grade": "B"}])
        calculate(client, token, 1, MATH_AND_LAB)
        resp = client.get("/api/cgpa", headers=auth_headers(token))
        assert [s["semesterNumber"] for s in resp.json()["semesters"]] == [1, 2]

    def test_failing_grade_accepted(self, client, token):
        resp = calculate(client, token, 1, [
            {"name": "Math", "credits": 3, "grade": "O"},
            {"name": "Physics", "credits": 3, "grade": "U"},
        ])
        assert resp.status_code == 200
        assert resp.json()["semesterGPA"] == pytest.approx(5.0)

    @pytest.mark.parametrize("subjects,reason", [
        ([{"name": "Math", "credits": 4, "grade": "Z"}], "invalid grade"),
        ([{"name": "", "credits": 4, "grade": "A"}],     "missing name or grade"),
        ([{"name": "Math", "credits": 0, "grade": "A"}], "invalid credits"),
        ([],                                             "no subjects provided"),
    ])
    def test_invalid_subjects_rejected(self, client, token, subjects, reason):
        calculate(client, token, 1, MATH_AND_LAB)
        resp = calculate(client, token, 2, subjects)
        assert resp.status_code == 400
        assert resp.json()["message"] == reason
        record = client.get("/api/cgpa", headers=auth_headers(token)).json()
        assert [s["semesterNumber"] for s in record["semesters"]] == [1]

    @pytest.mark.parametrize("number", [0, -3, "abc", None])
    def test_invalid_semester_number(self, client, token, number):
        resp = calculate(client, token, number, MATH_AND_LAB)
        assert resp.status_code == 400
        assert resp.json()["message"] == "invalid semester number"

    def test_update_semester(self, client, token):
        calculate(client, token, 1, MATH_AND_LAB)
        resp = client.put(
            "/api/cgpa/semester/1",
            json={"subjects": [{"name": "Math", "credits": 4, "grade": "O"}]},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Semester updated successfully"
        assert data["semesterGPA"] == pytest.approx(10.0)
        assert data["overallCGPA"] == pytest.approx(10.0)

    @pytest.mark.parametrize("subjects,reason", [
        ([{"name": "Math", "credits": 4, "grade": "Z"}], "invalid grade"),
        ([{"name": "Math", "credits": 0, "grade": "A"}], "invalid credits"),
        ([],                                             "no subjects provided"),
    ])
    def test_update_with_invalid_subjects_keeps_semester(self, client, token, subjects, reason):
        calculate(client, token, 1, MATH_AND_LAB)
        before = client.get("/api/cgpa", headers=auth_headers(token)).json()
        resp = client.put(
            "/api/cgpa/semester/1",
            json={"subjects": subjects},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == reason
        after = client.get("/api/cgpa", headers=auth_headers(token)).json()
        assert after == before

    def test_update_without_record(self, client, token):
        resp = client.put(
            "/api/cgpa/semester/1",
            json={"subjects": MATH_AND_LAB},
            headers=auth_headers(token),
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "CGPA data not found"

    def test_update_missing_semester(self, client, token):
        calculate(client, token, 1, MATH_AND_LAB)
        resp = client.put(
            "/api/cgpa/semester/3",
            json={"subjects": MATH_AND_LAB},
            headers=auth_headers(token),
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "semester not found"

    def test_delete_semester(self, client, token):
        calculate(client, token, 1, MATH_AND_LAB)
        calculate(client, token, 2, [{"name": "Bio", "credits": 3, "grade": "B"}])
        resp = client.delete("/api/cgpa/semester/1", headers=auth_headers(token))
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Semester deleted successfully"
        assert data["overallCGPA"] == pytest.approx(6.0)
        assert [s["semesterNumber"] for s in data["cgpaData"]["semesters"]] == [2]

    def test_delete_absent_semester_is_idempotent(self, client, token):
        calculate(client, token, 1, MATH_AND_LAB)
        before = client.get("/api/cgpa", headers=auth_headers(token)).json()
        resp = client.delete("/api/cgpa/semester/9", headers=auth_headers(token))
        assert resp.status_code == 200
        after = resp.json()["cgpaData"]
        assert after["semesters"] == before["semesters"]
        assert after["overallCGPA"] == before["overallCGPA"]
        assert after["totalCredits"] == before["totalCredits"]

    def test_delete_without_record(self, client, token):
        resp = client.delete("/api/cgpa/semester/1", headers=auth_headers(token))
        assert resp.status_code == 404

    def test_records_are_per_user(self, client, token):
        other = register(client, "bob")["access_token"]
        calculate(client, token, 1, MATH_AND_LAB)
        resp = client.get("/api/cgpa", headers=auth_headers(other))
        assert resp.json()["semesters"] == []


# ── Configuration Tests ────────────────────────────────────────────────────────
class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("MAX_SUBJECT_CREDITS", "LOG_JSON", "LOG_RETENTION"):
            monkeypatch.delenv(name, raising=False)
        cfg = Settings(_env_file=None)
        assert cfg.max_subject_credits == 30
        assert cfg.log_json is False
        assert cfg.log_retention == "30 days"

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("MAX_SUBJECT_CREDITS", "12")
        monkeypatch.setenv("LOG_JSON", "true")
        monkeypatch.setenv("LOG_RETENTION", "7 days")
        cfg = Settings(_env_file=None)
        assert cfg.max_subject_credits == 12
        assert cfg.log_json is True
        assert cfg.log_retention == "7 days"

    @pytest.mark.parametrize("value", ["0", "101", "many"])
    def test_credit_cap_out_of_range(self, monkeypatch, value):
        monkeypatch.setenv("MAX_SUBJECT_CREDITS", value)
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_grade_table_uses_configured_cap(self, monkeypatch):
        monkeypatch.setattr(settings, "max_subject_credits", 6)
        get_grade_table.cache_clear()
        try:
            assert get_grade_table().max_credits == 6
        finally:
            get_grade_table.cache_clear()

    def test_configured_cap_applies_to_requests(self, client, token, monkeypatch):
        monkeypatch.setattr(settings, "max_subject_credits", 6)
        get_grade_table.cache_clear()
        try:
            ok = calculate(client, token, 1, [{"name": "Math", "credits": 6, "grade": "A"}])
            assert ok.status_code == 200
            resp = calculate(client, token, 2, [{"name": "Bio", "credits": 7, "grade": "A"}])
            assert resp.status_code == 400
            assert resp.json()["message"] == "invalid credits"
        finally:
            get_grade_table.cache_clear()
