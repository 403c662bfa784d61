from fastapi import APIRouter, Depends

from nogod.api.auth import require_admin_if_enabled
from nogod.api.deps import get_account_service
from nogod.api.schemas import AgentDetailResponse, BlockResponse, MessageResponse
from nogod.core.accounts import AccountService

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("")
def list_agents(service: AccountService = Depends(get_account_service)):
    """Agents and pending agent applications, in registration order."""
    return [a.public_dict() for a in service.list_agents()]


@router.get("/{account_id}", response_model=AgentDetailResponse)
def get_agent(account_id: str, service: AccountService = Depends(get_account_service)):
    agent, transactions = service.agent_detail(account_id)
    return {
        "agent": agent.public_dict(),
        "transactions": [t.to_dict() for t in transactions],
    }


@router.patch("/{account_id}/approve", response_model=MessageResponse)
def approve_agent(
    account_id: str,
    service: AccountService = Depends(get_account_service),
    _=Depends(require_admin_if_enabled),
):
    service.approve_agent(account_id)
    return {"message": "Agent approved successfully"}


@router.patch("/{account_id}/block", response_model=BlockResponse)
def toggle_block(
    account_id: str,
    service: AccountService = Depends(get_account_service),
    _=Depends(require_admin_if_enabled),
):
    blocked = service.toggle_block(account_id)
    return {
        "message": "Agent blocked successfully" if blocked else "Agent unblocked successfully",
        "isBlocked": blocked,
    }
