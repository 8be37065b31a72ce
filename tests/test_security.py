from datetime import timedelta

import pytest
from jose import jwt

from app.core.exceptions import Unauthorized
from app.core.security import ROLE_DELIVERY, AccessPolicy, Identity, hash_password, verify_password

from conftest import make_settings


@pytest.fixture
def policy():
    return AccessPolicy(make_settings())


def test_password_hashing():
    hashed = hash_password("launder-me")
    assert hashed != "launder-me"
    assert verify_password("launder-me", hashed)
    assert not verify_password("wrong", hashed)


def test_token_resolves_to_identity(policy):
    token = policy.create_access_token(42, ROLE_DELIVERY)
    assert policy.resolve(token) == Identity(identity_id=42, role=ROLE_DELIVERY)


def test_expired_token(policy):
    token = policy.create_access_token(42, ROLE_DELIVERY, expires_delta=timedelta(minutes=-1))
    assert policy.decode_token(token) is None
    with pytest.raises(Unauthorized):
        policy.resolve(token)


def test_token_signed_with_other_secret(policy):
    other = AccessPolicy(make_settings().model_copy(update={"JWT_SECRET_KEY": "another-secret"}))
    with pytest.raises(Unauthorized):
        policy.resolve(other.create_access_token(1, ROLE_DELIVERY))


@pytest.mark.parametrize("claims", [
    {"sub": "1", "role": "janitor"},
    {"sub": "one", "role": "user"},
    {"role": "user"},
])
def test_bad_payload(policy, claims):
    token = jwt.encode(claims, "test-secret", algorithm="HS256")
    with pytest.raises(Unauthorized):
        policy.resolve(token)
