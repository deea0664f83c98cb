import pytest

from api import create_app

PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["storage"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def auth_service(app):
    return app.extensions["auth_service"]


@pytest.fixture
def user(auth_service):
    return auth_service.register("alice@example.com", PASSWORD, "Alice")


@pytest.fixture
def tokens(auth_service, user):
    return auth_service.login("alice@example.com", PASSWORD)


@pytest.fixture
def api_key(app):
    return app.config["SECRET_API_KEY"]
