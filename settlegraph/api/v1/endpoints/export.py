from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from settlegraph.core.auth import CurrentUser, get_current_user
from settlegraph.schemas.export import ExportResponse
from settlegraph.schemas.transaction import TransactionResponse
from settlegraph.services.balance_service import BalanceService
from settlegraph.services.settlement_service import SettlementService
from settlegraph.services.transaction_service import TransactionService

router = APIRouter()

@router.get("/", response_model=ExportResponse)
async def export_data(current_user: CurrentUser = Depends(get_current_user)):
    """Transactions, balances and netted payments visible to the user, as one JSON document"""
    transactions = await TransactionService.list_for_viewer(current_user)
    result = SettlementService.optimize(transactions)
    return ExportResponse(
        exported_at=datetime.now(timezone.utc),
        exported_by=current_user.username,
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        balances=BalanceService.compute(transactions),
        settlements=result.edges,
        instructions=result.instructions,
    )
