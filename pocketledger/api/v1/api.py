from fastapi import APIRouter

from pocketledger.api.v1.routes import auth, wallets, categories, transactions, debts, goals, dashboard

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(wallets.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(debts.router)
api_router.include_router(goals.router)
api_router.include_router(dashboard.router)
