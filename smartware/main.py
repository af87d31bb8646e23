# Main application file



import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from smartware.database import SessionLocal, init_db
from smartware.core.rate_limiter import limiter
from smartware.core.config import settings
from smartware.core.ledger import Ledger
from smartware.core.store import LedgerPersister, SqlBlobStore, load_products
from smartware.routers import (
    products,
    transactions,
    reports,
    exports,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("smartware")


# LEDGER STARTUP

def build_ledger(session_factory=SessionLocal):
    store = SqlBlobStore(session_factory)
    persister = LedgerPersister(store, settings.STORE_KEY, settings.SYNC_INDICATOR_SECONDS)

    ledger = Ledger(
        load_products(store, settings.STORE_KEY),
        on_change=persister,
        min_stock=settings.DEFAULT_MIN_STOCK,
        max_stock=settings.DEFAULT_MAX_STOCK,
    )
    return ledger, persister


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.ledger, app.state.persister = build_ledger()
    logger.info(f"Ledger loaded with {len(app.state.ledger)} products")
    yield


# APP INIT

app = FastAPI(
    title="SmartWare Inventory API",
    description="Stock ledger for small warehouses: inventory, transactions, reports and document import",
    version="1.0.0",
    lifespan=lifespan,
)



# CORS

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "X-Role"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(products.router)
app.include_router(transactions.router)
app.include_router(reports.router)
app.include_router(exports.router)



# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "SmartWare Inventory API is running"}


@app.get("/status")
def sync_status(request: Request):
    return {
        "products": len(request.app.state.ledger),
        "syncing": request.app.state.persister.is_syncing(),
    }
