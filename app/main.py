from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import uvicorn
import sys
from dotenv import load_dotenv
from contextlib import asynccontextmanager
from loguru import logger

from pathlib import Path

# Find .env even in frozen or packaged mode
POSSIBLE_ENV_PATHS = [
    Path(__file__).resolve().parent.parent / ".env",        # normal
    Path(sys.executable).resolve().parent / ".env",         # frozen exe
    Path.cwd() / ".env",                                   # runtime cwd
]

for env_path in POSSIBLE_ENV_PATHS:
    if env_path.exists():
        load_dotenv(env_path, override=True)
        break
else:
    logger.warning(".env file not found, using defaults")

from app.config import settings
from app.database import engine, Base
from app.events import bus
from app.analytics.live import LiveDashboard
from app.warehouses.router import router as warehouse_router
from app.stock.inventory.router import router as inventory_router
from app.stock.transactions.router import router as transaction_router
from app.analytics.router import router as analytics_router
from app.assistant.router import router as assistant_router


logger.add(settings.LOG_FILE, rotation="500 MB", level=settings.LOG_LEVEL)


# Database startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    Base.metadata.create_all(bind=engine)

    bus.subscribe(bus.log_event)
    app.state.live_dashboard = LiveDashboard().start()
    yield
    app.state.live_dashboard.stop()
    bus.unsubscribe(bus.log_event)
    logger.info("Application shutdown")

# Create app
app = FastAPI(
    title="STOCKMASTER",
    description="Multi-warehouse inventory: stock ledger, transaction log and dashboard analytics.",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For production, change to specific domains
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Routers
app.include_router(warehouse_router, prefix="/warehouses", tags=["Warehouses"])
app.include_router(inventory_router, prefix="/stock/inventory", tags=["Stock - Inventory"])
app.include_router(transaction_router, prefix="/stock/transactions", tags=["Stock - Transactions"])
app.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
app.include_router(assistant_router, prefix="/assistant", tags=["Assistant"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000)
