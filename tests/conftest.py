"""Shared fixtures: an app on a private in-memory database, seeded with the
default admin and user accounts, and bearer headers for both of them."""
import pytest
from fastapi.testclient import TestClient

from order_api.config import Settings
from order_api.database import Base, make_engine, make_session_factory
from order_api.main import create_app
from order_api.users import UserStore, make_password_context

SECRET = "test_secret_test_secret_test_secret"
ISSUER = "test_issuer"
AUDIENCE = "test_audience"

ADMIN_LOGIN = {"LoginName": "admin", "Password": "!Administrator123"}
USER_LOGIN = {"LoginName": "user", "Password": "!User123"}


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret=SECRET,
        jwt_issuer=ISSUER,
        jwt_audience=AUDIENCE,
        password_hash_rounds=4,
        log_level="DEBUG",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(app, client):
    """A session on the app's database, for looking behind the API."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def _bearer(client, login):
    res = client.post("/api/authentication/login", json=login)
    assert res.status_code == 200, res.text
    return {"Authorization": "Bearer " + res.json()["Token"]}


@pytest.fixture
def admin_headers(client):
    return _bearer(client, ADMIN_LOGIN)


@pytest.fixture
def user_headers(client):
    return _bearer(client, USER_LOGIN)


@pytest.fixture
def customer(client, admin_headers):
    res = client.post(
        "/api/customers/add",
        json={"Name": "ACME", "Description": "Road runner equipment"},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
def order(client, admin_headers, customer):
    res = client.post(
        "/api/orders/create",
        json={"Name": "First order", "Description": "Rockets", "CustomerId": customer["Id"]},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
def order_item(client, admin_headers, order):
    res = client.post(
        "/api/orderitems/create",
        json={"Name": "Rocket skates", "Stock": "Low", "OrderId": order["Id"]},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
def store_session():
    """A bare user store on its own in-memory database, no app involved."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(store_session):
    return UserStore(store_session, make_password_context(4))
