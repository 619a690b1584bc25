import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routers import zones


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    yield


app = FastAPI(
    title="StayZone API",
    description=(
        "Geographic clustering for trip planning – "
        "robust hotel zones from favourited POIs and "
        "compass-labelled day-trip clusters."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(zones.router, prefix="/api/v1", tags=["Zones"])


@app.get("/", tags=["Root"])
async def root():
    return {"name": "StayZone", "version": "1.0.0", "docs": "/docs"}


@app.get("/health", tags=["Root"])
async def health_check():
    return {"status": "healthy", "service": "stayzone", "env": settings.app_env}
