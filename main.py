from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, Optional

import aiohttp

from core.cache import AiocacheStore
from core.config import settings
from core.logging_config import setup_logging
from core.scheduler import Scheduler

# Feature routes
from features.conditions.routes.conditions_routes import router as conditions_router
from features.distribution.routes.distribution_routes import router as distribution_router

# Services and clients
from features.common.services.rate_limiter import RateLimiter
from features.conditions.services.conditions_service import ConditionsService
from features.distribution.models.distribution_types import Cohort
from features.distribution.services.collaborators import (
    JsonUserRepository,
    OpenAINarrativeGenerator,
    SendGridEmailSender
)
from features.distribution.services.distribution_coordinator import DistributionCoordinator
from features.distribution.services.lock_store import FileLockStore
from features.distribution.services.report_service import ReportService
from features.forecast.services.open_meteo_client import OpenMeteoClient
from features.scoring.services.spot_scorer import SpotScorer
from features.spots.services.spot_service import SpotService
from features.stations.services.station_resolver import StationResolver
from features.stations.services.station_service import StationService
from features.tides.services.tide_providers import (
    BuoyTideProvider,
    CoopsPredictionProvider,
    WorldTidesProvider
)
from features.tides.services.tide_service import CoopsClient, WorldTidesClient
from features.waves.services.ndbc_buoy_client import NDBCBuoyClient

setup_logging()
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, session: Optional[aiohttp.ClientSession] = None) -> Dict[Cohort, DistributionCoordinator]:
    """Wire every service onto app.state and return the cohort coordinators."""
    store = AiocacheStore()

    station_service = StationService()
    spot_service = SpotService()
    buoy_client = NDBCBuoyClient(store=store, session=session)
    world_tides = WorldTidesClient(session=session)
    coops = CoopsClient(session=session)

    # Order matters: first provider with a height wins
    station_resolver = StationResolver(
        station_service=station_service,
        buoy_client=buoy_client,
        tide_providers=[
            BuoyTideProvider(),
            WorldTidesProvider(world_tides),
            CoopsPredictionProvider(coops)
        ],
        history_source=world_tides
    )
    conditions_service = ConditionsService(
        forecast_client=OpenMeteoClient(session=session),
        station_resolver=station_resolver,
        store=store
    )
    report_service = ReportService(
        spot_service=spot_service,
        conditions_service=conditions_service,
        scorer=SpotScorer(),
        narrative=OpenAINarrativeGenerator(session=session),
        email_sender=SendGridEmailSender(session=session),
        rate_limiter=RateLimiter(
            store,
            key="email_rate:sendgrid",
            requests_per_minute=settings.emails_per_minute,
            batch_size=settings.email_batch_size,
            batch_pause=settings.email_batch_pause
        )
    )
    users = JsonUserRepository()
    lock_store = FileLockStore()

    # One coordinator per cohort; each owns its own lock key
    coordinators = {
        cohort: DistributionCoordinator(
            cohort=cohort,
            lock_store=lock_store,
            users=users,
            report_service=report_service
        )
        for cohort in Cohort
    }

    app.state.station_service = station_service
    app.state.spot_service = spot_service
    app.state.conditions_service = conditions_service
    app.state.report_service = report_service
    app.state.coordinators = coordinators
    return coordinators


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    session = aiohttp.ClientSession()
    scheduler = None
    try:
        logger.info(f"🚀 Starting {settings.app_name}...")
        coordinators = build_services(app, session)

        scheduler = Scheduler(coordinators)
        scheduler.start()
        app.state.scheduler = scheduler

        logger.info("\n✨ API startup complete - ready to serve requests")
        yield

    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise
    finally:
        logger.info("\n🔄 Shutting down API...")
        if scheduler:
            scheduler.shutdown()
        await session.close()
        logger.info("👋 API shutdown complete")

app = FastAPI(
    title=settings.app_name,
    description="Daily surf conditions aggregation, ranking and distribution",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include feature routers
app.include_router(conditions_router)
app.include_router(distribution_router)

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "time": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5010))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info",
        workers=1
    )
