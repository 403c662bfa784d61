# Account types and the balance each one starts with

from typing import Optional

from nogod.settings import settings

# End-user wallet. Seeded with a small welcome balance.
USER = "user"

# Active cash agent. Seeded with float on creation or on approval.
AGENT = "agent"

# Agent application awaiting administrative approval. Zero balance.
PENDING = "pending"

# Back-office operator. Only created by scripts/seed_admin.py.
ADMIN = "admin"

# Roles surfaced by the agent review listing
AGENT_LISTING_TYPES = (AGENT, PENDING)


def resolve_registration_type(requested: Optional[str]) -> str:
    """
    Map a self-service registration request onto a stored account type.
    Anything other than user/agent becomes an application pending approval,
    including attempts to self-register as admin.
    """
    requested = (requested or "").strip().lower()
    if requested in (USER, AGENT):
        return requested
    return PENDING


def opening_balance(account_type: str) -> int:
    if account_type == USER:
        return settings.USER_OPENING_BALANCE
    if account_type == AGENT:
        return settings.AGENT_OPENING_BALANCE
    return 0
