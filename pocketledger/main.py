# pocketledger/main.py
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from pocketledger.api.v1.api import api_router
from pocketledger.core.config import settings
from pocketledger.core.database import Base, engine
from pocketledger.core.exceptions import LedgerError
from pocketledger.utils.timeutils import utcnow

# Register every table on Base.metadata
from pocketledger.models import user, wallet, category, transaction, debt, goal  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def create_missing_tables():
    """Development convenience; deployed databases are migrated with Alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await create_missing_tables()
    except Exception as e:
        logger.error(f"Startup error: {e}")
        raise
    logger.info(f"{settings.APP_NAME} {settings.VERSION} started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and the current user"},
        {"name": "wallets", "description": "Wallets, transfers and balance reconciliation"},
        {"name": "transactions", "description": "Income and expense records that move wallet balances"},
        {"name": "debts", "description": "Money lent and borrowed, and its repayments"},
        {"name": "goals", "description": "Savings goals funded from wallets"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted({settings.FRONTEND_URL, "http://localhost:3000"}),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.info(f"{request.method} {request.url.path} rejected with {exc.code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    return {"message": f"{settings.APP_NAME} is running", "version": settings.VERSION}


@app.get("/health", tags=["Health"])
async def health_check():
    """Reports unhealthy (503) when the database cannot be reached."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail=f"Service unhealthy: {e}")
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("pocketledger.main:app", host="0.0.0.0", port=port, reload=False)
