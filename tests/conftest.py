import pytest
from fastapi.testclient import TestClient

from newhope_portal.config import Settings
from newhope_portal.main import create_app

ADMIN_EMAIL = "admin@newhope.com"
ADMIN_PASSWORD = "admin123"


def make_settings(**overrides) -> Settings:
    values = dict(
        secret_key="test-secret",
        database_url="sqlite://",
        session_expire_minutes=30,
        session_cookie_name="session",
        admin_name="Site Administrator",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(scope="function")
def app():
    """A fresh portal: new in-memory database, new session store."""
    application = create_app(make_settings())
    yield application
    application.state.engine.dispose()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture(scope="function")
def other_client(app):
    """Second browser against the same portal."""
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture(scope="function")
def db_factory(app):
    return app.state.session_factory


@pytest.fixture(scope="function")
def db(db_factory):
    session = db_factory()
    yield session
    session.close()


@pytest.fixture
def register():
    def _register(client, name="Ann", email="ann@x.com", password="pw",
                  phone="555-0100", address="1 Main St", reason="Chest pain"):
        return client.post(
            "/register",
            data={"name": name, "email": email, "password": password,
                  "phone": phone, "address": address, "reason": reason},
        )
    return _register


@pytest.fixture
def login():
    def _login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
        return client.post("/login", data={"email": email, "password": password})
    return _login
