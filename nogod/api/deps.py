from functools import lru_cache

from fastapi import Depends

from nogod.core.accounts import AccountService
from nogod.core.credentials import CredentialService
from nogod.settings import settings
from nogod.store.account_repo import AccountStore, RedisAccountStore
from nogod.store.transaction_repo import RedisTransactionLookup, TransactionLookup


@lru_cache(maxsize=1)
def get_credentials() -> CredentialService:
    """Process-wide credential service; raises if the signing secret is not configured."""
    return CredentialService(settings.ACCESS_TOKEN_SECRET, rounds=settings.BCRYPT_ROUNDS)


@lru_cache(maxsize=1)
def get_account_store() -> AccountStore:
    return RedisAccountStore()


@lru_cache(maxsize=1)
def get_transaction_lookup() -> TransactionLookup:
    return RedisTransactionLookup()


def get_account_service(
    accounts: AccountStore = Depends(get_account_store),
    transactions: TransactionLookup = Depends(get_transaction_lookup),
    credentials: CredentialService = Depends(get_credentials),
) -> AccountService:
    return AccountService(accounts, transactions, credentials)
