import json
from unittest.mock import MagicMock

import pytest
from redis import ConnectionError as RedisConnectionError

from nogod.core.errors import StorageUnavailable
from nogod.store.account_repo import APPLIED, INDEX_KEY, MISMATCH, MISSING, RedisAccountStore
from nogod.store.models import Account

AID = "a" * 24


def _doc(**overrides):
    acc = Account(id=AID, name="Alice", mobile="01711111111", email="a@x.com", nid="NID1",
                  pinHash="$2b$04$hash", accountType="pending", balance=0)
    data = acc.to_dict()
    data.update(overrides)
    return data


def test_insert_unique_runs_single_script_over_all_indexes():
    r = MagicMock()
    r.eval.return_value = 1
    store = RedisAccountStore(r)

    assert store.insert_unique(Account.from_dict(_doc())) is True

    r.eval.assert_called_once()
    args = r.eval.call_args.args
    assert args[1] == 5
    assert list(args[2:7]) == [
        f"account:{AID}",
        "account:mobile:01711111111",
        "account:email:a@x.com",
        "account:nid:NID1",
        INDEX_KEY,
    ]
    assert args[7] == AID
    assert json.loads(args[8])["pinHash"] == "$2b$04$hash"


def test_insert_unique_conflict():
    r = MagicMock()
    r.eval.return_value = 0
    assert RedisAccountStore(r).insert_unique(Account.from_dict(_doc())) is False


def test_get_decodes_and_ignores_unknown_fields():
    r = MagicMock()
    r.get.return_value = json.dumps(_doc(legacy_field="x", isBlocked=None))
    acc = RedisAccountStore(r).get(AID)
    assert acc.id == AID
    assert acc.isBlocked is False
    r.get.assert_called_with(f"account:{AID}")


def test_find_by_email_follows_index():
    r = MagicMock()
    r.get.side_effect = [AID, json.dumps(_doc())]
    acc = RedisAccountStore(r).find_by_email("a@x.com")
    assert acc.email == "a@x.com"
    assert r.get.call_args_list[0].args == ("account:email:a@x.com",)


def test_find_by_mobile_missing_index_stops_early():
    r = MagicMock()
    r.get.return_value = None
    assert RedisAccountStore(r).find_by_mobile("01711111111") is None
    assert r.get.call_count == 1


def test_list_by_types_keeps_registration_order():
    r = MagicMock()
    r.lrange.return_value = ["1" * 24, "2" * 24, "3" * 24]
    r.mget.return_value = [
        json.dumps(_doc(id="1" * 24, accountType="agent")),
        json.dumps(_doc(id="2" * 24, accountType="user")),
        json.dumps(_doc(id="3" * 24, accountType="pending")),
    ]
    out = RedisAccountStore(r).list_by_types(("agent", "pending"))
    assert [a.id for a in out] == ["1" * 24, "3" * 24]


def test_transition_type_applied():
    r = MagicMock()
    r.eval.return_value = [1, json.dumps(_doc(accountType="agent", balance=100000))]
    result = RedisAccountStore(r).transition_type(AID, "pending", "agent", 100000)
    assert result.status == APPLIED
    assert result.account.balance == 100000
    assert r.eval.call_args.args[1:] == (1, f"account:{AID}", "pending", "agent", 100000)


@pytest.mark.parametrize("reply,status", [([-1], MISSING), ([0], MISMATCH)])
def test_conditional_updates_report_why_they_did_not_apply(reply, status):
    r = MagicMock()
    r.eval.return_value = reply
    store = RedisAccountStore(r)
    assert store.transition_type(AID, "pending", "agent", 100000).status == status
    result = store.toggle_block(AID, "agent")
    assert result.status == status
    assert result.account is None


def test_toggle_block_returns_updated_document():
    r = MagicMock()
    r.eval.return_value = [1, json.dumps(_doc(accountType="agent", isBlocked=True))]
    result = RedisAccountStore(r).toggle_block(AID, "agent")
    assert result.applied
    assert result.account.isBlocked is True


def test_redis_errors_become_storage_unavailable():
    r = MagicMock()
    r.lrange.side_effect = RedisConnectionError("down")
    with pytest.raises(StorageUnavailable):
        RedisAccountStore(r).list_by_types(("agent",))
