import jwt
import pytest

from nogod.core.credentials import CredentialService
from nogod.core.errors import InvalidToken


def test_hash_is_salted_and_verifies(credentials):
    h1 = credentials.hash_secret("1234")
    h2 = credentials.hash_secret("1234")
    assert h1 != h2
    assert credentials.verify_secret("1234", h1)
    assert credentials.verify_secret("1234", h2)
    assert not credentials.verify_secret("4321", h1)


def test_verify_secret_tolerates_garbage_hash(credentials):
    assert credentials.verify_secret("1234", "not-a-bcrypt-hash") is False
    assert credentials.verify_secret("1234", "") is False


def test_token_round_trip(credentials):
    token = credentials.issue_token("a" * 24, "agent")
    claims = credentials.verify_token(token)
    assert claims.accountId == "a" * 24
    assert claims.role == "agent"
    assert "exp" not in jwt.decode(token, options={"verify_signature": False})


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_verify_token_rejects_malformed(credentials, token):
    with pytest.raises(InvalidToken):
        credentials.verify_token(token)


def test_verify_token_rejects_foreign_signature(credentials):
    other = CredentialService("another-signing-secret-0123456789abcdef", rounds=4)
    with pytest.raises(InvalidToken):
        credentials.verify_token(other.issue_token("a" * 24, "user"))


def test_verify_token_rejects_missing_claims(credentials):
    token = jwt.encode({"accountId": "a" * 24}, "test-signing-secret-0123456789abcdef", algorithm="HS256")
    with pytest.raises(InvalidToken):
        credentials.verify_token(token)


def test_empty_secret_refused():
    with pytest.raises(ValueError):
        CredentialService("")
