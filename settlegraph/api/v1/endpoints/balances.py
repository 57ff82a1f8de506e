from typing import List
from fastapi import APIRouter, Depends
from settlegraph.core.auth import CurrentUser, get_current_user
from settlegraph.schemas.balance import BalanceEntry
from settlegraph.services.balance_service import BalanceService

router = APIRouter()

@router.get("/", response_model=List[BalanceEntry])
async def get_balances(current_user: CurrentUser = Depends(get_current_user)):
    """Net balance per participant over the transactions visible to the user"""
    return await BalanceService.for_viewer(current_user)
