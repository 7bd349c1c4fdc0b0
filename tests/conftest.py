import pytest

from models import User
from pickem import create_app
from pickem.db import get_session
from utils.security import hash_password

PASSWORD = "longpw12"
JWT_SECRET = "test-client-secret"


@pytest.fixture
def app():
    # Every app gets its own in-memory SQLite engine, so tests never share rows
    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.app_context():
        yield get_session()


@pytest.fixture
def make_user(app):
    """Insert a user straight into the store, bypassing the bearer-protected route."""
    def _make(username="alice", password=PASSWORD, first_name="Alice", last_name="Liddell"):
        with app.app_context():
            s = get_session()
            user = User(
                username=username,
                first_name=first_name,
                last_name=last_name,
                password_hash=hash_password(password),
            )
            s.add(user)
            s.commit()
            return user.id

    return _make


@pytest.fixture
def login(client):
    def _login(username="alice", password=PASSWORD):
        return client.post("/auth/login", json={"username": username, "password": password})

    return _login


@pytest.fixture
def bearer(login):
    """Authorization header for a freshly logged-in user."""
    def _bearer(username="alice", password=PASSWORD):
        response = login(username, password)
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.get_json()['jwt']}"}

    return _bearer


@pytest.fixture
def count_rows(app):
    def _count(model) -> int:
        with app.app_context():
            return get_session().query(model).count()

    return _count
