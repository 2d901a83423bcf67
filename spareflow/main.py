from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spareflow.core.database import prisma
from spareflow.core.logging import configure_logging
from spareflow.core.settings import settings
from spareflow.domains.auth.routes import router as auth_router
from spareflow.domains.boxes.routes import router as boxes_router
from spareflow.domains.courier.routes import router as courier_router
from spareflow.domains.inventory.routes import router as inventory_router
from spareflow.domains.labels.routes import router as labels_router
from spareflow.domains.network.routes import router as network_router
from spareflow.domains.notifications.routes import router as notifications_router
from spareflow.domains.parts.routes import router as parts_router
from spareflow.domains.pricing.routes import router as pricing_router
from spareflow.domains.shipments.routes import router as shipments_router
from spareflow.domains.wallet.routes import router as wallet_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    configure_logging()
    await prisma.connect()
    yield
    # Shutdown
    await prisma.disconnect()


app = FastAPI(
    title="SpareFlow API",
    description="API for spare parts shipping between brands and their network",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(parts_router, prefix="/api/v1")
app.include_router(inventory_router, prefix="/api/v1")
app.include_router(boxes_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(shipments_router, prefix="/api/v1")
app.include_router(network_router, prefix="/api/v1")
app.include_router(courier_router, prefix="/api/v1")
app.include_router(labels_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "SpareFlow API is running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
