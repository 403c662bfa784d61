"""
Session gate.

Two layers that compose:
- require_token: signature check only. Cheap, never touches storage, so it
  cannot see blocks or role changes made after the token was issued.
- require_fresh_account: require_token plus a re-read of the account, for
  anything sensitive to current role or block status.
"""
from typing import Optional

from fastapi import Depends, Header, Request

from nogod.api.deps import get_account_store, get_credentials
from nogod.core import state_machine as sm
from nogod.core.accounts import is_valid_account_id
from nogod.core.credentials import CredentialService, TokenClaims
from nogod.core.errors import Forbidden, InvalidToken, Unauthorized
from nogod.settings import settings
from nogod.store.account_repo import AccountStore
from nogod.store.models import Account


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_token(
    request: Request,
    authorization: str = Header(default="", alias="authorization"),
    credentials: CredentialService = Depends(get_credentials),
) -> TokenClaims:
    token = bearer_token(authorization)
    if not token:
        raise Unauthorized()
    try:
        claims = credentials.verify_token(token)
    except InvalidToken:
        raise Forbidden()
    request.state.account = claims
    return claims


def require_fresh_account(
    claims: TokenClaims = Depends(require_token),
    accounts: AccountStore = Depends(get_account_store),
) -> Account:
    account = accounts.get(claims.accountId) if is_valid_account_id(claims.accountId) else None
    if account is None or account.isBlocked or account.accountType != claims.role:
        raise Forbidden("Session is no longer valid")
    return account


def require_admin(account: Account = Depends(require_fresh_account)) -> Account:
    if account.accountType != sm.ADMIN:
        raise Forbidden("Admin access required")
    return account


def require_admin_if_enabled(
    request: Request,
    authorization: str = Header(default="", alias="authorization"),
    credentials: CredentialService = Depends(get_credentials),
    accounts: AccountStore = Depends(get_account_store),
) -> Optional[Account]:
    """Admin gate for lifecycle transitions; open unless ADMIN_RBAC_ENABLED is set."""
    if not settings.ADMIN_RBAC_ENABLED:
        return None
    claims = require_token(request, authorization, credentials)
    return require_admin(require_fresh_account(claims, accounts))
