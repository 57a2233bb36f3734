import jwt
import pytest

from hackmate.domain.common.errors import ErrorKind, Unauthenticated
from hackmate.infra.auth import verify_access_jwt
from hackmate.infra.jwt import decode_access, encode_access
from hackmate.settings import settings


def test_round_trip_carries_subject_and_handle():
    token = encode_access({"sub": "alice", "handle": "alice", "name": "Alice Chen"})
    user = verify_access_jwt(token)
    assert user.id == "alice"
    assert user.handle == "alice"
    assert user.display_name == "Alice Chen"


def test_expired_token_rejected():
    token = encode_access({"sub": "alice"}, ttl_seconds=-60)
    with pytest.raises(Unauthenticated) as excinfo:
        verify_access_jwt(token)
    assert excinfo.value.kind is ErrorKind.UNAUTHENTICATED
    assert excinfo.value.reason == "invalid_token"


def test_wrong_secret_rejected():
    token = jwt.encode(
        {"sub": "alice", "iss": settings.jwt_issuer, "aud": settings.jwt_audience, "iat": 0, "exp": 4102444800},
        "someone-else",
        algorithm="HS256",
    )
    with pytest.raises(Unauthenticated):
        verify_access_jwt(token)


def test_blank_subject_rejected():
    token = encode_access({"sub": "  "})
    with pytest.raises(jwt.InvalidTokenError):
        decode_access(token)
    with pytest.raises(Unauthenticated):
        verify_access_jwt(token)


def test_garbage_rejected():
    with pytest.raises(Unauthenticated):
        verify_access_jwt("not-a-jwt")
