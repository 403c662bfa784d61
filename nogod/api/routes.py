from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nogod.api.auth import require_fresh_account, require_token
from nogod.api.deps import get_account_service
from nogod.api.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenClaimsResponse,
)
from nogod.core.accounts import AccountService
from nogod.core.credentials import TokenClaims
from nogod.core.errors import AccountNotFound
from nogod.store.models import Account

router = APIRouter()


@router.post("/register", status_code=201, response_model=MessageResponse)
def register(body: RegisterRequest, service: AccountService = Depends(get_account_service)):
    service.register(
        name=body.name,
        mobile=body.mobile,
        email=body.email,
        pin=body.pin,
        account_type=body.accountType,
        nid=body.nid,
    )
    return {"message": "success"}


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, service: AccountService = Depends(get_account_service)):
    try:
        token, account = service.authenticate(body.identifier, body.pin)
    except AccountNotFound as exc:
        # Login reports unknown identities as a client error, not a missing resource
        return JSONResponse(status_code=400, content={"message": exc.message})
    return {"token": token, "user": account.public_dict(), "message": "Login successful"}


# Both paths return the claims carried by the caller's bearer token.
@router.get("/user", response_model=TokenClaimsResponse)
@router.get("/token", response_model=TokenClaimsResponse)
def token_claims(claims: TokenClaims = Depends(require_token)):
    return claims.as_dict()


@router.get("/me")
def current_account(account: Account = Depends(require_fresh_account)):
    """Current state of the caller's account, re-read from storage."""
    return account.public_dict()


@router.get("/user/{account_id}")
def get_user(account_id: str, service: AccountService = Depends(get_account_service)):
    return service.get_account(account_id).public_dict()
