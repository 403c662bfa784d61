"""
Create the back-office admin account. Public registration can never produce an
admin, so this is the only way one comes into existence.
Idempotent: re-running with the same identity is a no-op.
"""
import os
import sys

from nogod.core import state_machine as sm
from nogod.core.accounts import new_account_id, normalize_email
from nogod.core.credentials import CredentialService
from nogod.settings import settings
from nogod.store.account_repo import RedisAccountStore
from nogod.store.models import Account
from nogod.store.redis_conn import get_redis
from nogod.utils.time import now_ms

ADMIN_SET_KEY = os.getenv("ADMIN_SET_KEY", "admin:accounts")


def build_admin(credentials: CredentialService) -> Account:
    pin = os.getenv("ADMIN_PIN", "")
    if not pin:
        raise SystemExit("ADMIN_PIN must be set")
    return Account(
        id=new_account_id(),
        name=os.getenv("ADMIN_NAME", "Administrator"),
        mobile=os.getenv("ADMIN_MOBILE", "00000000000"),
        email=normalize_email(os.getenv("ADMIN_EMAIL", "admin@nogod.local")),
        nid=os.getenv("ADMIN_NID", "ADMIN"),
        pinHash=credentials.hash_secret(pin),
        accountType=sm.ADMIN,
        balance=0,
        createdAt=now_ms(),
    )


def main():
    r = get_redis()
    store = RedisAccountStore(r)
    credentials = CredentialService(settings.ACCESS_TOKEN_SECRET, rounds=settings.BCRYPT_ROUNDS)

    admin = build_admin(credentials)
    if not store.insert_unique(admin):
        existing = store.find_by_email(admin.email) or store.find_by_mobile(admin.mobile)
        print(f"OK: admin already present ({existing.id if existing else 'identity taken'})")
        return 0

    r.sadd(ADMIN_SET_KEY, admin.id)
    print(f"OK: created admin {admin.id} in {settings.REDIS_URL}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
