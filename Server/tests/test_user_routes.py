"""HTTP tests for the /api/users blueprint."""

import re

import pytest

from conftest import registration

UNKNOWN_ID = "64b7f0c2a1b2c3d4e5f60718"


def create(client, **overrides):
    resp = client.post("/api/users/create", json=registration(**overrides))
    assert resp.status_code == 201
    return resp.get_json()["user"]["id"]


def post_progress(client, user_id, **overrides):
    body = {
        "userId": user_id,
        "wpm": 50,
        "cpm": 250,
        "accuracy": 96,
        "textUsed": "pack my box with five dozen liquor jugs",
        "difficulty": "medium",
        "challengeType": "time",
        "category": "quotes",
    }
    body.update(overrides)
    return client.post("/api/users/progress", json=body)


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Server is up and running!" in resp.data


class TestCreate:
    def test_create_user(self, client):
        resp = client.post("/api/users/create", json=registration())
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["message"] == "User created successfully"
        assert data["user"]["username"] == "typist"
        assert "password" not in data["user"]

    def test_duplicate_email(self, client):
        create(client)
        resp = client.post("/api/users/create", json=registration(username="other"))
        assert resp.status_code == 400
        assert resp.get_json() == {"success": False, "error": "Email already in use"}

    def test_missing_body(self, client):
        resp = client.post("/api/users/create")
        assert resp.status_code == 400


class TestLogin:
    def test_login(self, client):
        user_id = create(client)
        resp = client.post("/api/users/login", json={"email": "typist@example.com", "password": "Secret123"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["token"]
        assert data["user"]["id"] == user_id

    def test_unknown_email(self, client):
        resp = client.post("/api/users/login", json={"email": "nobody@example.com", "password": "x"})
        assert resp.status_code == 404

    def test_bad_password(self, client):
        create(client)
        resp = client.post("/api/users/login", json={"email": "typist@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_locked(self, app, client):
        create(client)
        for _ in range(app.config["MAX_FAILED_LOGINS"]):
            client.post("/api/users/login", json={"email": "typist@example.com", "password": "nope"})
        resp = client.post("/api/users/login", json={"email": "typist@example.com", "password": "Secret123"})
        assert resp.status_code == 423


class TestProgress:
    def test_add_progress(self, client):
        user_id = create(client)
        resp = post_progress(client, user_id, wpm=40)
        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["totalTests"] == 1
        assert user["totalWordsTyped"] == 8
        assert user["progress"][0]["testDuration"] == pytest.approx(12.0)
        assert user["typingStats"]["testsCompleted"] == 1
        assert "password" not in user

    def test_scenario_flip_to_hard(self, client):
        user_id = create(client)
        post_progress(client, user_id, wpm=50)
        user = post_progress(client, user_id, wpm=80).get_json()["user"]
        assert user["typingStats"]["avgWpm"] == pytest.approx(65)
        assert user["typingStats"]["difficulty"] == "hard"
        assert user["leaderboards"] == {"global": pytest.approx(65), "regional": pytest.approx(65)}

    def test_unknown_user(self, client):
        assert post_progress(client, UNKNOWN_ID).status_code == 404

    @pytest.mark.parametrize("overrides", [
        {"wpm": -1},
        {"accuracy": 101},
        {"textUsed": "   "},
        {"difficulty": "insane"},
        {"category": "poetry"},
        {"cpm": "fast"},
        {"wpm": float("inf")},
        {"accuracy": float("nan")},
    ])
    def test_invalid_submission(self, client, overrides):
        user_id = create(client)
        assert post_progress(client, user_id, **overrides).status_code == 400


class TestUserData:
    def test_get_user_excludes_secrets(self, client, account_service, mail_outbox):
        user_id = create(client)
        account_service.request_password_reset("typist@example.com")

        resp = client.get(f"/api/users/{user_id}")
        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["id"] == user_id
        assert "password" not in user
        assert "resetPasswordToken" not in user
        assert user["progress"] == []

    def test_get_unknown_user(self, client):
        assert client.get(f"/api/users/{UNKNOWN_ID}").status_code == 404
        assert client.get("/api/users/garbage").status_code == 404

    def test_update_profile(self, client):
        user_id = create(client)
        resp = client.put(f"/api/users/{user_id}", json={"country": "Kenya", "firstName": ""})
        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["country"] == "Kenya"
        assert user["firstName"] == "Tina"

    def test_update_username_conflict(self, client):
        user_id = create(client)
        create(client, username="taken", email="taken@example.com")
        resp = client.put(f"/api/users/{user_id}", json={"username": "taken"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Username already in use"

    def test_update_rejects_operator_username(self, client):
        user_id = create(client)
        resp = client.put(f"/api/users/{user_id}", json={"username": {"$ne": None}})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "'username' must be a string"
        assert client.get(f"/api/users/{user_id}").get_json()["user"]["username"] == "typist"


class TestHistory:
    def test_no_tests(self, client):
        user_id = create(client)
        assert client.get(f"/api/users/{user_id}/bestTest").status_code == 404
        assert client.get(f"/api/users/{user_id}/allTests").status_code == 404

    def test_best_and_all(self, client):
        user_id = create(client)
        for wpm in [30, 88, 61]:
            post_progress(client, user_id, wpm=wpm)

        best = client.get(f"/api/users/{user_id}/bestTest").get_json()["test"]
        assert best["wpm"] == 88

        tests = client.get(f"/api/users/{user_id}/allTests").get_json()["tests"]
        assert [test["wpm"] for test in tests] == [30, 88, 61]


class TestPasswordRecovery:
    def test_forgot_unknown_email(self, client, mail_outbox):
        resp = client.post("/api/users/forgot-password", json={"email": "nobody@example.com"})
        assert resp.status_code == 404
        assert mail_outbox == []

    def test_full_flow(self, client, mail_outbox):
        create(client)
        resp = client.post("/api/users/forgot-password", json={"email": "typist@example.com"})
        assert resp.status_code == 200

        token = re.search(r"/reset-password/([0-9a-f]{40})", mail_outbox[0].html).group(1)

        resp = client.post(f"/api/users/reset-password/{token}",
                           json={"password": "Brand9New", "confirmPassword": "Mismatch"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Passwords do not match"

        resp = client.post(f"/api/users/reset-password/{token}",
                           json={"password": "Brand9New", "confirmPassword": "Brand9New"})
        assert resp.status_code == 200

        resp = client.post(f"/api/users/reset-password/{token}",
                           json={"password": "Brand9New", "confirmPassword": "Brand9New"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid or expired token"

        resp = client.post("/api/users/login", json={"email": "typist@example.com", "password": "Brand9New"})
        assert resp.status_code == 200
