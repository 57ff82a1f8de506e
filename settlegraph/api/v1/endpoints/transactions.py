from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from settlegraph.core.auth import CurrentUser, get_current_user
from settlegraph.schemas.transaction import (
    TransactionCreate,
    TransactionHistoryResponse,
    TransactionResponse,
)
from settlegraph.services.network_service import NetworkService, get_network_service
from settlegraph.services.transaction_service import TransactionPermissionError, TransactionService
from settlegraph.utils.validation import TransactionValidationError

router = APIRouter()

@router.get("/", response_model=List[TransactionResponse])
async def list_transactions(current_user: CurrentUser = Depends(get_current_user)):
    """List the transactions visible to the current user"""
    transactions = await TransactionService.list_for_viewer(current_user)
    return [TransactionResponse.model_validate(t) for t in transactions]

@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_in: TransactionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    networks: NetworkService = Depends(get_network_service)
):
    """Record a new transfer"""
    try:
        transaction = await TransactionService.create(transaction_in, current_user)
    except TransactionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    networks.reset_view_modes()
    return TransactionResponse.model_validate(transaction)

@router.get("/history", response_model=List[TransactionHistoryResponse])
async def transaction_history(current_user: CurrentUser = Depends(get_current_user)):
    """Deletion history (admin only)"""
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    entries = await TransactionService.history()
    return [TransactionHistoryResponse.model_validate(e) for e in entries]

@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    networks: NetworkService = Depends(get_network_service)
):
    """Delete a transaction"""
    try:
        deleted = await TransactionService.delete(transaction_id, current_user)
    except TransactionPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    networks.reset_view_modes()
    return {"message": "Transaction deleted successfully"}
