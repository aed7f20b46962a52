"""Shared fixtures: an in-memory application, a test client and auth headers."""

from typing import Callable, Dict, Iterator

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token

from savekar import create_app
from savekar.extensions import db
from savekar.services.metadata_service import MetadataService
from savekar.services.redis_service import RedisService

OWNER = "a@x.com"
OTHER_OWNER = "b@y.com"


@pytest.fixture
def app() -> Iterator[Flask]:
    """Application bound to a fresh in-memory database for each test."""
    RedisService.reset()
    app = create_app("testing")

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def auth_headers(app: Flask) -> Callable[..., Dict[str, str]]:
    """Factory for Authorization headers carrying an owner's access token."""

    def _make(email: str = OWNER, is_guest: bool = False) -> Dict[str, str]:
        token = create_access_token(
            identity=email,
            additional_claims={"name": email.split("@")[0], "is_guest": is_guest},
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture(autouse=True)
def offline_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep website enrichment off the network; defaults fill the gaps."""
    monkeypatch.setattr(MetadataService, "fetch_website_metadata", staticmethod(lambda url: {}))
