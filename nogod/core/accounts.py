"""
Account lifecycle: registration, login, agent approval and block/unblock.

The service is transport-agnostic. Routes call it with plain values and turn
raised AccountError subclasses into HTTP responses.
"""
from __future__ import annotations

import re
import secrets
from typing import List, Tuple

from nogod.core import state_machine as sm
from nogod.core.credentials import CredentialService
from nogod.core.errors import (
    AccountBlocked,
    AccountNotFound,
    BadFormat,
    BadId,
    DuplicateIdentity,
    InvalidCredentials,
    NotEligible,
)
from nogod.observability.logging import log
from nogod.settings import settings
from nogod.store.account_repo import MISSING, AccountStore
from nogod.store.models import Account, Transaction
from nogod.store.transaction_repo import TransactionLookup
from nogod.utils.time import now_ms

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_RE = re.compile(r"^[0-9]{11}$")
ACCOUNT_ID_RE = re.compile(r"^[0-9a-f]{24}$")

# bcrypt only looks at the first 72 bytes of a secret
MAX_PIN_BYTES = 72


def new_account_id() -> str:
    return secrets.token_hex(12)


def is_valid_account_id(account_id) -> bool:
    return isinstance(account_id, str) and bool(ACCOUNT_ID_RE.match(account_id))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _require_id(account_id) -> str:
    if not is_valid_account_id(account_id):
        raise BadId()
    return account_id


class AccountService:
    def __init__(
        self,
        accounts: AccountStore,
        transactions: TransactionLookup,
        credentials: CredentialService,
    ) -> None:
        self.accounts = accounts
        self.transactions = transactions
        self.credentials = credentials

    # ------------------------------------------------------------------
    # Registration & login
    # ------------------------------------------------------------------
    def register(self, name: str, mobile: str, email: str, pin: str, account_type: str, nid: str) -> Account:
        name = (name or "").strip()
        mobile = (mobile or "").strip()
        email = normalize_email(email)
        nid = (nid or "").strip()

        if not name or not pin or not nid:
            raise BadFormat("Name, PIN and NID are required")
        if len(pin.encode("utf-8")) > MAX_PIN_BYTES:
            raise BadFormat("PIN is too long")
        if not MOBILE_RE.match(mobile):
            raise BadFormat("Mobile number must be 11 digits")
        if not EMAIL_RE.match(email):
            raise BadFormat("Invalid email format")

        stored_type = sm.resolve_registration_type(account_type)
        account = Account(
            id=new_account_id(),
            name=name,
            mobile=mobile,
            email=email,
            nid=nid,
            pinHash=self.credentials.hash_secret(pin),
            accountType=stored_type,
            balance=sm.opening_balance(stored_type),
            isBlocked=False,
            createdAt=now_ms(),
        )

        if not self.accounts.insert_unique(account):
            log(event="register_conflict")
            raise DuplicateIdentity()

        log(
            event="account_registered",
            accountId=account.id,
            requestedType=account_type,
            accountType=stored_type,
            balance=account.balance,
        )
        return account

    def authenticate(self, identifier: str, pin: str) -> Tuple[str, Account]:
        identifier = (identifier or "").strip()
        if EMAIL_RE.match(identifier):
            account = self.accounts.find_by_email(normalize_email(identifier))
        elif MOBILE_RE.match(identifier):
            account = self.accounts.find_by_mobile(identifier)
        else:
            raise BadFormat()

        if account is None:
            log(event="login_failed", reason="not_found")
            raise AccountNotFound()

        # Blocked accounts are refused before the PIN is ever checked
        if account.isBlocked:
            log(event="login_failed", reason="blocked", accountId=account.id)
            raise AccountBlocked()

        if not self.credentials.verify_secret(pin or "", account.pinHash):
            log(event="login_failed", reason="bad_credentials", accountId=account.id)
            raise InvalidCredentials()

        token = self.credentials.issue_token(account.id, account.accountType)
        log(event="login_ok", accountId=account.id, accountType=account.accountType)
        return token, account

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_account(self, account_id: str) -> Account:
        account = self.accounts.get(_require_id(account_id))
        if account is None:
            raise AccountNotFound()
        return account

    def list_agents(self) -> List[Account]:
        return self.accounts.list_by_types(sm.AGENT_LISTING_TYPES)

    def agent_detail(self, account_id: str) -> Tuple[Account, List[Transaction]]:
        agent = self.accounts.get(_require_id(account_id))
        if agent is None or agent.accountType not in sm.AGENT_LISTING_TYPES:
            raise AccountNotFound("Agent not found")
        recent = self.transactions.recent_for_account(agent.id, settings.RECENT_TRANSACTIONS_LIMIT)
        return agent, recent

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------
    def approve_agent(self, account_id: str) -> Account:
        """pending -> agent, seeding the agent float. Never re-seeds an approved agent."""
        result = self.accounts.transition_type(
            _require_id(account_id),
            expected=sm.PENDING,
            target=sm.AGENT,
            balance=sm.opening_balance(sm.AGENT),
        )
        if not result.applied:
            log(event="approve_rejected", accountId=account_id, status=result.status)
            raise NotEligible()

        log(event="agent_approved", accountId=account_id, balance=result.account.balance)
        return result.account

    def toggle_block(self, account_id: str) -> bool:
        """Flip isBlocked on an agent. Returns the new state."""
        result = self.accounts.toggle_block(_require_id(account_id), required_type=sm.AGENT)
        if result.status == MISSING:
            raise AccountNotFound("Agent not found")
        if not result.applied:
            log(event="block_rejected", accountId=account_id, status=result.status)
            raise NotEligible("Only agent accounts can be blocked")

        blocked = bool(result.account.isBlocked)
        log(event="agent_blocked" if blocked else "agent_unblocked", accountId=account_id)
        return blocked
