from typing import Any, Dict, List, Optional
from pydantic import BaseModel, field_validator

class RegisterRequest(BaseModel):
    name: str
    mobile: str
    email: str
    pin: str
    accountType: Optional[str] = "user"
    nid: str

    # An explicit null means the same as leaving the field out
    @field_validator("accountType", mode="before")
    @classmethod
    def _default_account_type(cls, v):
        return "user" if v is None else v

    # Mobile apps sometimes send numeric fields as JSON numbers
    @field_validator("mobile", "pin", "nid", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

class LoginRequest(BaseModel):
    identifier: str
    pin: str

    @field_validator("identifier", "pin", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

class MessageResponse(BaseModel):
    message: str

class LoginResponse(BaseModel):
    token: str
    user: Dict[str, Any]
    message: str

class TokenClaimsResponse(BaseModel):
    accountId: str
    role: str

class BlockResponse(BaseModel):
    message: str
    isBlocked: bool

class AgentDetailResponse(BaseModel):
    agent: Dict[str, Any]
    transactions: List[Dict[str, Any]]
