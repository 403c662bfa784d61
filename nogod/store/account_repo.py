"""
Identity Store
--------------
Accounts live in Redis as one JSON document per account, plus three
unique-index keys (mobile, email, nid) and an insertion-ordered id list.

Every write that depends on current state runs as a single Lua script so the
check and the write are atomic on the server:
- registration checks all three indexes and writes the document in one step
- approval is a compare-and-set on accountType
- block/unblock flips isBlocked only if the account is still an agent
"""
from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from redis import Redis, RedisError

from nogod.core.errors import StorageUnavailable
from nogod.observability.logging import log
from nogod.store.models import Account
from nogod.store.redis_conn import get_redis

PREFIX = "account:"
INDEX_KEY = "account:index"

# Conditional update outcomes
APPLIED = "applied"
MISSING = "missing"
MISMATCH = "mismatch"

_MGET_CHUNK = 200

_REGISTER_SCRIPT = """
if redis.call("exists", KEYS[2], KEYS[3], KEYS[4]) > 0 then
    return 0
end
redis.call("set", KEYS[1], ARGV[2])
redis.call("set", KEYS[2], ARGV[1])
redis.call("set", KEYS[3], ARGV[1])
redis.call("set", KEYS[4], ARGV[1])
redis.call("rpush", KEYS[5], ARGV[1])
return 1
"""

_TRANSITION_SCRIPT = """
local raw = redis.call("get", KEYS[1])
if not raw then
    return {-1}
end
local doc = cjson.decode(raw)
if doc["accountType"] ~= ARGV[1] then
    return {0}
end
doc["accountType"] = ARGV[2]
doc["balance"] = tonumber(ARGV[3])
local out = cjson.encode(doc)
redis.call("set", KEYS[1], out)
return {1, out}
"""

_TOGGLE_BLOCK_SCRIPT = """
local raw = redis.call("get", KEYS[1])
if not raw then
    return {-1}
end
local doc = cjson.decode(raw)
if doc["accountType"] ~= ARGV[1] then
    return {0}
end
doc["isBlocked"] = not (doc["isBlocked"] == true)
local out = cjson.encode(doc)
redis.call("set", KEYS[1], out)
return {1, out}
"""

_CODES = {-1: MISSING, 0: MISMATCH, 1: APPLIED}


@dataclass
class UpdateResult:
    status: str
    account: Optional[Account] = None

    @property
    def applied(self) -> bool:
        return self.status == APPLIED


class AccountStore(Protocol):
    """
    Persistence contract for accounts.

    Conditional updates must be atomic with respect to concurrent callers:
    implementations may never split the state check and the write into two
    round trips.
    """

    def insert_unique(self, account: Account) -> bool:
        """Persist `account` unless its mobile, email or nid is taken. Returns False on conflict."""
        ...

    def get(self, account_id: str) -> Optional[Account]:
        ...

    def find_by_email(self, email: str) -> Optional[Account]:
        ...

    def find_by_mobile(self, mobile: str) -> Optional[Account]:
        ...

    def list_by_types(self, account_types: Iterable[str]) -> List[Account]:
        """Accounts whose type is in `account_types`, in registration order."""
        ...

    def transition_type(self, account_id: str, expected: str, target: str, balance: int) -> UpdateResult:
        """Set accountType=target and balance only if the current type equals `expected`."""
        ...

    def toggle_block(self, account_id: str, required_type: str) -> UpdateResult:
        """Flip isBlocked only if the current type equals `required_type`."""
        ...


def _key(account_id: str) -> str:
    return f"{PREFIX}{account_id}"


def _mobile_key(mobile: str) -> str:
    return f"{PREFIX}mobile:{mobile}"


def _email_key(email: str) -> str:
    return f"{PREFIX}email:{email}"


def _nid_key(nid: str) -> str:
    return f"{PREFIX}nid:{nid}"


def _decode(raw) -> Optional[Account]:
    if not raw:
        return None
    return Account.from_dict(json.loads(raw))


@contextmanager
def _storage_errors(op: str):
    try:
        yield
    except RedisError as exc:
        log(event="storage_error", op=op, error=str(exc))
        raise StorageUnavailable() from exc


class RedisAccountStore:
    def __init__(self, redis: Optional[Redis] = None) -> None:
        self._redis = redis if redis is not None else get_redis()

    def insert_unique(self, account: Account) -> bool:
        keys = [
            _key(account.id),
            _mobile_key(account.mobile),
            _email_key(account.email),
            _nid_key(account.nid),
            INDEX_KEY,
        ]
        with _storage_errors("insert_unique"):
            created = self._redis.eval(_REGISTER_SCRIPT, len(keys), *keys, account.id, json.dumps(account.to_dict()))
        return int(created or 0) == 1

    def get(self, account_id: str) -> Optional[Account]:
        with _storage_errors("get"):
            raw = self._redis.get(_key(account_id))
        return _decode(raw)

    def _get_by_index(self, index_key: str, op: str) -> Optional[Account]:
        with _storage_errors(op):
            account_id = self._redis.get(index_key)
            if not account_id:
                return None
            raw = self._redis.get(_key(account_id))
        return _decode(raw)

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._get_by_index(_email_key(email), "find_by_email")

    def find_by_mobile(self, mobile: str) -> Optional[Account]:
        return self._get_by_index(_mobile_key(mobile), "find_by_mobile")

    def list_by_types(self, account_types: Iterable[str]) -> List[Account]:
        wanted = set(account_types)
        out: List[Account] = []
        with _storage_errors("list_by_types"):
            ids = self._redis.lrange(INDEX_KEY, 0, -1) or []
            for start in range(0, len(ids), _MGET_CHUNK):
                chunk = ids[start:start + _MGET_CHUNK]
                for raw in self._redis.mget([_key(i) for i in chunk]):
                    acc = _decode(raw)
                    if acc is not None and acc.accountType in wanted:
                        out.append(acc)
        return out

    def _run_update(self, script: str, account_id: str, *args, op: str) -> UpdateResult:
        with _storage_errors(op):
            reply = self._redis.eval(script, 1, _key(account_id), *args)
        code = int(reply[0])
        account = _decode(reply[1]) if code == 1 and len(reply) > 1 else None
        return UpdateResult(status=_CODES.get(code, MISMATCH), account=account)

    def transition_type(self, account_id: str, expected: str, target: str, balance: int) -> UpdateResult:
        return self._run_update(_TRANSITION_SCRIPT, account_id, expected, target, int(balance), op="transition_type")

    def toggle_block(self, account_id: str, required_type: str) -> UpdateResult:
        return self._run_update(_TOGGLE_BLOCK_SCRIPT, account_id, required_type, op="toggle_block")
