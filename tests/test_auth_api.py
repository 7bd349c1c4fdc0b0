import jwt
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from models import RefreshToken
from utils import security, tokens

from conftest import JWT_SECRET, PASSWORD


@pytest.fixture(autouse=True)
def alice(make_user):
    return make_user("alice")


def test_login_returns_jwt_and_refresh_token(login):
    response = login("alice", PASSWORD)

    assert response.status_code == 200
    body = response.get_json()
    assert set(body) == {"jwt", "refreshToken"}
    assert len(body["jwt"].split(".")) == 3
    assert len(body["refreshToken"]) == 86


def test_login_jwt_embeds_profile_without_hash(login, alice):
    body = login().get_json()

    payload = jwt.decode(body["jwt"], JWT_SECRET, algorithms=["HS256"])
    assert payload["user"] == {"id": alice, "username": "alice", "firstName": "Alice", "lastName": "Liddell"}
    assert "exp" in payload


def test_login_persists_refresh_token(login, count_rows):
    login()
    login()

    assert count_rows(RefreshToken) == 2


@pytest.mark.parametrize(
    "username, password",
    [
        ("alice", "wrongpass"),
        ("mallory", PASSWORD),
        ("mallory", "wrongpass"),
    ],
)
def test_bad_credentials_are_indistinguishable(login, count_rows, username, password):
    response = login(username, password)

    assert response.status_code == 403
    assert response.get_json() == {}
    assert count_rows(RefreshToken) == 0


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"username": "alice"},
        {"password": PASSWORD},
        {"username": 42, "password": PASSWORD},
    ],
)
def test_login_rejects_malformed_body(client, body):
    response = client.post("/auth/login", json=body)

    assert response.status_code == 400
    assert response.get_json()["errorStatus"] == 400


def test_login_rejects_non_json_body(client):
    response = client.post("/auth/login", data="username=alice", content_type="text/plain")

    assert response.status_code == 400


def test_login_without_signing_secret_is_opaque_500(app, login, count_rows):
    app.config["JWT_SECRET"] = None

    response = login()

    assert response.status_code == 500
    assert response.get_json() == {}
    assert count_rows(RefreshToken) == 0


def test_login_entropy_failure_is_500(login, monkeypatch):
    def no_entropy(nbytes=None):
        raise OSError("getrandom unavailable")

    monkeypatch.setattr(security.secrets, "token_urlsafe", no_entropy)

    response = login()

    assert response.status_code == 500
    assert response.get_json() == {}


def test_login_store_failure_after_password_check_is_500(login, monkeypatch, count_rows):
    def broken_save(s):
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(tokens, "save", broken_save)

    response = login()

    assert response.status_code == 500
    assert response.get_json() == {}
    assert count_rows(RefreshToken) == 0


def test_login_store_failure_on_lookup_is_opaque_500(login, monkeypatch):
    def broken_first(self):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(Query, "first", broken_first)

    response = login()

    assert response.status_code == 500
    assert response.get_json() == {}


def test_login_strips_username_like_create(login):
    response = login("  alice ", PASSWORD)

    assert response.status_code == 200
    assert set(response.get_json()) == {"jwt", "refreshToken"}


def test_refresh_issues_jwt_for_same_user(client, login, alice):
    refresh_token = login().get_json()["refreshToken"]

    response = client.post("/auth/refresh", json={"refreshToken": refresh_token})

    assert response.status_code == 200
    body = response.get_json()
    assert set(body) == {"jwt"}
    payload = jwt.decode(body["jwt"], JWT_SECRET, algorithms=["HS256"])
    assert payload["user"]["username"] == "alice"
    assert payload["user"]["id"] == alice


def test_refresh_can_be_repeated(client, login, count_rows):
    refresh_token = login().get_json()["refreshToken"]

    first = client.post("/auth/refresh", json={"refreshToken": refresh_token})
    second = client.post("/auth/refresh", json={"refreshToken": refresh_token})

    assert first.status_code == second.status_code == 200
    assert count_rows(RefreshToken) == 1


def test_refresh_unknown_token_is_404(client):
    response = client.post("/auth/refresh", json={"refreshToken": "definitely-not-issued"})

    assert response.status_code == 404
    assert response.get_json() == {}


def test_refresh_requires_token_field(client):
    response = client.post("/auth/refresh", json={})

    assert response.status_code == 400


def test_logout_revokes_refresh_token(client, login, count_rows):
    refresh_token = login().get_json()["refreshToken"]

    response = client.post("/auth/logout", json={"refreshToken": refresh_token})

    assert response.status_code == 200
    assert response.data == b""
    assert count_rows(RefreshToken) == 0

    again = client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert again.status_code == 404


def test_logout_only_revokes_presented_token(client, login):
    first = login().get_json()["refreshToken"]
    second = login().get_json()["refreshToken"]

    client.post("/auth/logout", json={"refreshToken": first})

    assert client.post("/auth/refresh", json={"refreshToken": second}).status_code == 200


def test_logout_unknown_token_is_404_with_body(client):
    response = client.post("/auth/logout", json={"refreshToken": "never-issued"})

    assert response.status_code == 404
    assert response.get_json() == {
        "errorStatus": 404,
        "errorMessage": "Unable to find and remove refresh token",
    }


def test_logout_store_failure_is_500_with_body(client, login, monkeypatch):
    refresh_token = login().get_json()["refreshToken"]

    def broken_save(s):
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(tokens, "save", broken_save)

    response = client.post("/auth/logout", json={"refreshToken": refresh_token})

    assert response.status_code == 500
    assert response.get_json() == {"errorStatus": 500, "errorMessage": "Unable to remove refresh token"}
