from pathlib import Path

from fastapi.testclient import TestClient

from usher.server.config import Settings
from usher.server.server import create_app


USER_PAYLOAD = {"name": "Test User", "username": "testUsername", "password": "testPassword"}
CREDENTIALS = {"username": "testUsername", "password": "testPassword"}


def _login(client: TestClient) -> dict:
    response = client.post("/login", json=CREDENTIALS)
    assert response.status_code == 202
    return response.json()


def test_root_reports_running(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert "Usher is running" in response.text


def test_create_user_returns_201_with_public_fields(client: TestClient) -> None:
    response = client.post("/users", json=USER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["username"] == "testUsername"
    assert body["name"] == "Test User"
    assert body["status"] == "OFFLINE"
    assert body["birthday"] is None
    assert "creationDate" in body
    assert "password" not in body
    assert "token" not in body


def test_create_user_duplicate_username_returns_409(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)

    response = client.post("/users", json={"name": "Other", "username": "testUsername", "password": "x"})

    assert response.status_code == 409
    assert response.json()["detail"] == (
        "The username provided is not unique. Therefore, the user could not be created!"
    )


def test_create_user_rejects_malformed_body(client: TestClient) -> None:
    response = client.post("/users", json={"username": "missingFields"})
    assert response.status_code == 422


def test_list_users(client: TestClient) -> None:
    assert client.get("/users").json() == []

    client.post("/users", json=USER_PAYLOAD)
    client.post("/users", json={"name": "Test User", "username": "second", "password": "pw"})

    response = client.get("/users")
    assert response.status_code == 200
    assert [user["username"] for user in response.json()] == ["testUsername", "second"]


def test_login_returns_202_with_token(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)

    session = _login(client)

    assert session["id"] == 1
    assert session["token"]
    assert client.get("/users").json()[0]["status"] == "ONLINE"


def test_login_with_wrong_password_returns_401(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)

    wrong_password = client.post("/login", json={"username": "testUsername", "password": "nope"})
    unknown_user = client.post("/login", json={"username": "nobody", "password": "testPassword"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json()["detail"] == unknown_user.json()["detail"]


def test_logout_returns_true_and_goes_offline(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    session = _login(client)

    response = client.put("/logout", json={"token": session["token"]})

    assert response.status_code == 200
    assert response.json() is True
    assert client.get("/users").json()[0]["status"] == "OFFLINE"


def test_logout_unknown_token_still_returns_true(client: TestClient) -> None:
    response = client.put("/logout", json={"token": "never-issued"})

    assert response.status_code == 200
    assert response.json() is True


def test_get_user_requires_live_token(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    session = _login(client)

    response = client.get("/users/1", headers={"Authorization": f"Bearer {session['token']}"})
    assert response.status_code == 200
    assert response.json()["username"] == "testUsername"
    assert response.json()["status"] == "ONLINE"

    missing = client.get("/users/1")
    wrong = client.get("/users/1", headers={"Authorization": "Bearer wrong"})
    not_bearer = client.get("/users/1", headers={"Authorization": f"Basic {session['token']}"})
    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert not_bearer.status_code == 401
    assert wrong.json()["detail"] == "Authorization failed"


def test_get_user_accepts_bare_token(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    session = _login(client)

    response = client.get("/users/1", headers={"Authorization": session["token"]})

    assert response.status_code == 200
    assert response.json()["username"] == "testUsername"


def test_get_user_with_stale_token_returns_401(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    old = _login(client)
    client.put("/logout", json={"token": old["token"]})

    response = client.get("/users/1", headers={"Authorization": f"Bearer {old['token']}"})
    assert response.status_code == 401

    fresh = _login(client)
    assert fresh["token"] != old["token"]
    response = client.get("/users/1", headers={"Authorization": f"Bearer {fresh['token']}"})
    assert response.status_code == 200


def test_get_unknown_user_returns_404(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    session = _login(client)

    response = client.get("/users/999", headers={"Authorization": f"Bearer {session['token']}"})

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_user_returns_204_and_applies_edit(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)

    response = client.put("/users/1", json={"username": "newUsername", "birthday": "02.02.1992"})

    assert response.status_code == 204
    assert response.content == b""
    user = client.get("/users").json()[0]
    assert user["username"] == "newUsername"
    assert user["birthday"] == "02.02.1992"

    client.put("/users/1", json={"birthday": "03.03.1993"})
    user = client.get("/users").json()[0]
    assert user["username"] == "newUsername"
    assert user["birthday"] == "03.03.1993"


def test_update_unknown_user_returns_404(client: TestClient) -> None:
    response = client.put("/users/999", json={"username": "newUsername", "birthday": "01.01.2000"})

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_to_taken_username_returns_409(client: TestClient) -> None:
    client.post("/users", json=USER_PAYLOAD)
    client.post("/users", json={"name": "Other", "username": "other", "password": "pw"})

    response = client.put("/users/2", json={"username": "testUsername"})

    assert response.status_code == 409


def test_sqlite_backend_round_trip(tmp_path: Path) -> None:
    settings = Settings(store_backend="sqlite", sqlite_path=str(tmp_path / "usher.sqlite3"))
    app = create_app(settings)

    with TestClient(app) as client:
        created = client.post("/users", json=USER_PAYLOAD)
        assert created.status_code == 201

        duplicate = client.post("/users", json=USER_PAYLOAD)
        assert duplicate.status_code == 409

        session = _login(client)
        response = client.get(
            f"/users/{session['id']}",
            headers={"Authorization": f"Bearer {session['token']}"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ONLINE"

        assert client.put("/logout", json={"token": session["token"]}).json() is True
        assert client.get("/users").json()[0]["status"] == "OFFLINE"

    assert (tmp_path / "usher.sqlite3").exists()
