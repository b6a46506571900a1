import pytest
from fastapi.testclient import TestClient

import database
from config import Settings
from main import create_app


TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key="test-secret",
        port=8000,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def db(app):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def register(client, name="Ada", email="ada@example.com", password=TEST_PASSWORD, confirm=None):
    return client.post(
        "/register",
        data={
            "name": name,
            "email": email,
            "password": password,
            "confirmPassword": password if confirm is None else confirm,
        },
        follow_redirects=False,
    )


@pytest.fixture
def auth_client(client):
    response = register(client)
    assert response.status_code == 303
    return client
