"""Builders shared by conftest.py and the test modules.

Plain functions, not fixtures: route tests call them at module level.
"""

from __future__ import annotations

import json
import time
from dataclasses import replace

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from courtly.api.auth import CurrentUser
from courtly.domain.models import Venue

ISSUER = "https://auth.example.com"
AUDIENCE = "courtly-api"
JWKS_URL = "https://auth.example.com/.well-known/jwks.json"
TEST_KID = "test-key-1"

_BASE_VENUE = Venue(
    id="venue-1",
    owner_id="owner-1",
    name="Court 1",
    price_per_hour=10000,
    is_active=True,
    timezone="UTC",
)


def make_venue(**overrides) -> Venue:
    """Active venue-1 owned by owner-1 at 100.00/hour unless overridden."""
    return replace(_BASE_VENUE, **overrides)


def make_user(user_id: str = "owner-1", subject: str = "owner") -> CurrentUser:
    return CurrentUser(id=user_id, external_subject=subject, email=None, name=None)


def _generate_rsa_keypair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


def _create_jwks(public_key, kid: str = TEST_KID) -> dict:
    """Single-key JWKS document as an identity provider would serve it."""
    jwk = json.loads(RSAAlgorithm.to_jwk(public_key))
    jwk.update({"kid": kid, "use": "sig", "alg": "RS256"})
    return {"keys": [jwk]}


def _create_token(
    private_key,
    kid: str = TEST_KID,
    sub: str = "user-123",
    iss: str = ISSUER,
    aud: str = AUDIENCE,
    exp: int | None = None,
) -> str:
    now = int(time.time())
    claims = {
        "sub": sub,
        "iss": iss,
        "aud": aud,
        "iat": now,
        "exp": now + 3600 if exp is None else exp,
    }
    return jwt.encode(claims, private_key, algorithm="RS256", headers={"kid": kid})
