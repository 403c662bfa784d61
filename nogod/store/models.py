from dataclasses import dataclass, field, fields as dc_fields
from typing import Optional

@dataclass
class Account:
    # Identity
    id: str = ""
    name: str = ""
    mobile: str = ""
    email: str = ""
    nid: str = ""

    # bcrypt hash; plaintext PIN is never stored
    pinHash: str = ""

    # user/agent/pending/admin (see nogod.core.state_machine)
    accountType: str = "user"
    balance: int = 0
    isBlocked: bool = False

    createdAt: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        """Drop unknown fields so Account(**kwargs) never explodes on legacy documents."""
        allowed = {f.name for f in dc_fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in allowed}
        # Older documents may lack the flag or store null
        kwargs["isBlocked"] = bool(kwargs.get("isBlocked") or False)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return dict(self.__dict__)

    def public_dict(self) -> dict:
        """Client-facing view without the credential hash."""
        data = self.to_dict()
        data.pop("pinHash", None)
        return data

@dataclass
class Transaction:
    id: str = ""
    accountId: str = ""
    type: str = ""
    amount: int = 0
    counterparty: Optional[str] = None
    createdAt: int = 0
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        allowed = {f.name for f in dc_fields(cls)} - {"extra"}
        known = {k: v for k, v in data.items() if k in allowed}
        extra = {k: v for k, v in data.items() if k not in allowed}
        return cls(extra=extra, **known)

    def to_dict(self) -> dict:
        data = {k: v for k, v in self.__dict__.items() if k != "extra"}
        data.update(self.extra)
        return data
