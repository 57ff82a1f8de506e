from typing import List
from fastapi import APIRouter, Depends, HTTPException
from settlegraph.core.auth import CurrentUser, get_current_user
from settlegraph.schemas.settlement import (
    NotificationsResponse,
    OptimizationResult,
    PersonalSettlementResponse,
    SettleByInfoRequest,
)
from settlegraph.services.settlement_service import SettlementService

router = APIRouter()

@router.get("/optimize", response_model=OptimizationResult)
async def optimize(current_user: CurrentUser = Depends(get_current_user)):
    """Netted payments and instructions for the transactions visible to the user"""
    return await SettlementService.optimize_for_viewer(current_user)

@router.get("/instructions/me", response_model=List[str])
async def my_instructions(current_user: CurrentUser = Depends(get_current_user)):
    """Netted payments involving the current user, phrased for them"""
    return await SettlementService.instructions_for_user(current_user.username)

@router.get("/notifications", response_model=NotificationsResponse)
async def notifications(current_user: CurrentUser = Depends(get_current_user)):
    """Payments the user should make or receive, with their settled status"""
    return await SettlementService.notifications(current_user.username)

@router.post("/settle", response_model=PersonalSettlementResponse)
async def settle_by_info(
    request: SettleByInfoRequest,
    current_user: CurrentUser = Depends(get_current_user)
):
    """Mark a payment identified by from/to/amount as paid"""
    if not current_user.is_admin and current_user.username not in (request.from_user, request.to_user):
        raise HTTPException(status_code=403, detail="Only a party of the payment may settle it")
    entry = await SettlementService.mark_paid_by_info(
        request.from_user, request.to_user, request.amount, current_user.username
    )
    return PersonalSettlementResponse.model_validate(entry)

@router.post("/{settlement_id}/settle", response_model=PersonalSettlementResponse)
async def settle(
    settlement_id: str,
    current_user: CurrentUser = Depends(get_current_user)
):
    """Mark a stored payment as paid"""
    entry = await SettlementService.mark_paid(settlement_id, current_user.username)
    if entry is None:
        raise HTTPException(status_code=404, detail="Settlement not found or unauthorized")
    return PersonalSettlementResponse.model_validate(entry)
