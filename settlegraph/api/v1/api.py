from fastapi import APIRouter
from settlegraph.api.v1.endpoints import transactions, balances, settlements, network, export

api_router = APIRouter()

api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(balances.router, prefix="/balances", tags=["balances"])
api_router.include_router(settlements.router, prefix="/settlements", tags=["settlements"])
api_router.include_router(network.router, prefix="/network", tags=["network"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
