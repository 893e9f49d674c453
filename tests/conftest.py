import pytest

from garden_api.auth import InMemoryIdentityResolver, RequestAuthenticator
from garden_api.config import APIConfig

from helpers import NOW, SECRET


@pytest.fixture
def config(tmp_path):
    return APIConfig(
        secret=SECRET,
        expiration=300,
        allow_cors=False,
        upload_dir=str(tmp_path / "uploads"),
        path_prefix="/",
    )


@pytest.fixture
def resolver():
    resolver = InMemoryIdentityResolver()
    resolver.add_user(42, username="alice", email="alice@example.com")
    resolver.add_user(7, username="bob", email="bob@example.com")
    return resolver


@pytest.fixture
def authenticator(resolver, config):
    return RequestAuthenticator(resolver, config, clock=lambda: NOW)
