"""
Credential Service
------------------
PIN hashing (bcrypt) and bearer session tokens (HS256 JWT).

A single CredentialService is built at startup from settings and injected
wherever hashing or token checks are needed. The signing secret lives on the
instance and is never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import bcrypt
import jwt

from nogod.core.errors import InvalidToken

TOKEN_ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    accountId: str
    role: str

    def as_dict(self) -> dict:
        return {"accountId": self.accountId, "role": self.role}


class CredentialService:
    def __init__(self, secret: str, rounds: int = 10):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._rounds = int(rounds)

    def hash_secret(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify_secret(self, plaintext: str, hashed: str) -> bool:
        if not plaintext or not hashed:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def issue_token(self, account_id: str, role: str) -> str:
        # No "exp" claim: tokens stay valid until the secret changes.
        return jwt.encode({"accountId": account_id, "role": role}, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify_token(self, token: Optional[str]) -> TokenClaims:
        if not token:
            raise InvalidToken("Missing token")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.PyJWTError as exc:
            raise InvalidToken() from exc

        account_id = claims.get("accountId")
        role = claims.get("role")
        if not isinstance(account_id, str) or not isinstance(role, str):
            raise InvalidToken("Malformed token claims")
        return TokenClaims(accountId=account_id, role=role)
