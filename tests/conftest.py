"""Shared pytest fixtures for Courtly tests."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402

from helpers import (  # noqa: E402
    AUDIENCE,
    ISSUER,
    JWKS_URL,
    _create_jwks,
    _create_token,
    _generate_rsa_keypair,
)


@pytest.fixture(autouse=True)
def _reset_oidc_jwks_cache():
    """Reset the module-level JWKS cache so keys never leak between tests."""
    import courtly.api.auth as auth_module

    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0
    yield
    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0


@pytest.fixture(scope="session")
def rsa_keypair():
    return _generate_rsa_keypair()


@pytest.fixture
def jwks(rsa_keypair):
    _, public_key = rsa_keypair
    return _create_jwks(public_key)


@pytest.fixture
def oidc_env():
    return {
        "OIDC_ISSUER": ISSUER,
        "OIDC_AUDIENCE": AUDIENCE,
        "OIDC_JWKS_URL": JWKS_URL,
    }


@pytest.fixture
def mock_jwks_fetch(jwks):
    """Serve the test JWKS instead of fetching it over HTTP."""
    with patch("courtly.api.auth._fetch_jwks") as mock:
        mock.return_value = jwks
        yield mock


@pytest.fixture
def make_token(rsa_keypair):
    """Factory for signed tokens: make_token(sub="...")."""
    private_key, _ = rsa_keypair

    def _make(**kwargs) -> str:
        return _create_token(private_key, **kwargs)

    return _make
