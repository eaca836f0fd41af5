"""
Delivery Desk backend — FastAPI application entry‑point.

Two independent backends:
  customers — customer lookup + spreadsheet bulk import
  receipts  — 簽收單 form with OCR and a printable summary
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.customers.database import Base as CustomersBase, engine as customers_engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import app.customers.models  # noqa: F401
    CustomersBase.metadata.create_all(bind=customers_engine)
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Delivery Desk",
    description="Customer lookup / bulk import and delivery receipt forms",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"service": "Delivery Desk", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from app.customers.routers.customers import router as customers_router  # noqa: E402
from app.receipts.routers.receipts import router as receipts_router  # noqa: E402

app.include_router(customers_router, prefix="/api", tags=["Customers"])
app.include_router(receipts_router, prefix="/api", tags=["Receipt Forms"])
