import threading

import pytest
from fastapi.testclient import TestClient

from nogod.api.deps import get_account_store, get_credentials, get_transaction_lookup
from nogod.core.accounts import AccountService
from nogod.core.credentials import CredentialService
from nogod.main import app
from nogod.store.account_repo import APPLIED, MISMATCH, MISSING, UpdateResult
from nogod.store.models import Account

TEST_SECRET = "test-signing-secret-0123456789abcdef"


class InMemoryAccountStore:
    """Lock-guarded stand-in for RedisAccountStore with the same atomic contract."""

    def __init__(self):
        self._lock = threading.Lock()
        self.docs = {}
        self.order = []
        self.index = {}

    def insert_unique(self, account: Account) -> bool:
        keys = [("mobile", account.mobile), ("email", account.email), ("nid", account.nid)]
        with self._lock:
            if any(k in self.index for k in keys):
                return False
            self.docs[account.id] = account.to_dict()
            for k in keys:
                self.index[k] = account.id
            self.order.append(account.id)
            return True

    def get(self, account_id):
        doc = self.docs.get(account_id)
        return Account.from_dict(dict(doc)) if doc else None

    def find_by_email(self, email):
        return self.get(self.index.get(("email", email)))

    def find_by_mobile(self, mobile):
        return self.get(self.index.get(("mobile", mobile)))

    def list_by_types(self, account_types):
        wanted = set(account_types)
        return [self.get(i) for i in self.order if self.docs[i]["accountType"] in wanted]

    def transition_type(self, account_id, expected, target, balance):
        with self._lock:
            doc = self.docs.get(account_id)
            if doc is None:
                return UpdateResult(MISSING)
            if doc["accountType"] != expected:
                return UpdateResult(MISMATCH)
            doc["accountType"] = target
            doc["balance"] = balance
            return UpdateResult(APPLIED, Account.from_dict(dict(doc)))

    def toggle_block(self, account_id, required_type):
        with self._lock:
            doc = self.docs.get(account_id)
            if doc is None:
                return UpdateResult(MISSING)
            if doc["accountType"] != required_type:
                return UpdateResult(MISMATCH)
            doc["isBlocked"] = not doc.get("isBlocked", False)
            return UpdateResult(APPLIED, Account.from_dict(dict(doc)))


class FakeTransactionLookup:
    def __init__(self):
        self.rows = {}

    def recent_for_account(self, account_id, limit):
        rows = sorted(self.rows.get(account_id, []), key=lambda t: t.createdAt, reverse=True)
        return rows[:limit]


@pytest.fixture
def credentials():
    # Minimum bcrypt cost keeps the suite fast
    return CredentialService(TEST_SECRET, rounds=4)


@pytest.fixture
def store():
    return InMemoryAccountStore()


@pytest.fixture
def transactions():
    return FakeTransactionLookup()


@pytest.fixture
def service(store, transactions, credentials):
    return AccountService(store, transactions, credentials)


@pytest.fixture
def client(store, transactions, credentials):
    app.dependency_overrides[get_account_store] = lambda: store
    app.dependency_overrides[get_transaction_lookup] = lambda: transactions
    app.dependency_overrides[get_credentials] = lambda: credentials
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides = {}
