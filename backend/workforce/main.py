import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workforce.core.config import settings
from workforce.core.database import create_tables
from workforce.core.exceptions import register_exception_handlers
from workforce.core.redis import close_redis, redis_available
from workforce.api.v1.auth import router as auth_router
from workforce.api.v1.users import router as users_router
from workforce.api.v1.schedules import router as schedules_router
from workforce.api.v1.shifts import router as shifts_router
from workforce.api.v1.time_off import router as time_off_router
from workforce.api.v1.documents import router as documents_router
from workforce.api.v1.notifications import router as notifications_router
from workforce.api.v1.messages import router as messages_router
from workforce.api.v1.realtime import router as realtime_router
from workforce.services.realtime import hub

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (SQLite / local development)
    await create_tables()
    hub.start()
    logger.info("Workforce API started (redis pub/sub: %s)", hub.use_pubsub)
    yield
    await hub.stop()
    await close_redis()


app = FastAPI(
    title="Workforce API",
    description="Staff scheduling, time-off and internal communication",
    version="1.0.0",
    lifespan=lifespan,
    # Swagger UI only in development – set DEBUG=false in production
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(schedules_router, prefix=API_PREFIX)
app.include_router(shifts_router, prefix=API_PREFIX)
app.include_router(time_off_router, prefix=API_PREFIX)
app.include_router(documents_router, prefix=API_PREFIX)
app.include_router(notifications_router, prefix=API_PREFIX)
app.include_router(messages_router, prefix=API_PREFIX)
app.include_router(realtime_router)  # websocket, token in the query string


@app.get("/health")
async def health_check():
    realtime = "local"
    if hub.use_pubsub:
        realtime = "redis" if await redis_available() else "redis-unavailable"
    return {"status": "ok", "service": "Workforce API", "version": "1.0.0", "realtime": realtime}
