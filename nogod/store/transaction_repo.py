"""
Read-only view over the transaction store.

Transactions for an account are kept in a sorted set keyed by account id and
scored by creation time (epoch ms), so the most recent entries come back with a
single ZREVRANGE.
"""
from __future__ import annotations

import json
from typing import List, Optional, Protocol

from redis import Redis, RedisError

from nogod.core.errors import StorageUnavailable
from nogod.observability.logging import log
from nogod.store.models import Transaction
from nogod.store.redis_conn import get_redis
from nogod.utils.time import parse_timestamp_ms

PREFIX = "transactions:"


class TransactionLookup(Protocol):
    def recent_for_account(self, account_id: str, limit: int) -> List[Transaction]:
        """Up to `limit` transactions for the account, newest first."""
        ...


def _key(account_id: str) -> str:
    return f"{PREFIX}{account_id}"


def _decode(raw: str) -> Optional[Transaction]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    data["createdAt"] = parse_timestamp_ms(data.get("createdAt"))
    return Transaction.from_dict(data)


class RedisTransactionLookup:
    def __init__(self, redis: Optional[Redis] = None) -> None:
        self._redis = redis if redis is not None else get_redis()

    def recent_for_account(self, account_id: str, limit: int) -> List[Transaction]:
        if limit <= 0:
            return []
        try:
            rows = self._redis.zrevrange(_key(account_id), 0, limit - 1) or []
        except RedisError as exc:
            log(event="storage_error", op="recent_for_account", error=str(exc))
            raise StorageUnavailable() from exc

        out = [t for t in (_decode(r) for r in rows) if t is not None]
        # Members sharing a score come back in reverse-lexical order; settle ties by time
        out.sort(key=lambda t: t.createdAt, reverse=True)
        return out
