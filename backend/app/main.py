import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from config import settings
from core.websocket import make_publisher, redis_to_ws_bridge, router as ws_router
from schedule.gate import AccessGate
from schedule.router import router as schedule_router
from schedule.store import EventStore
from services.event_refresher import EventRefresher
from services.row_store import build_row_store

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("schedule.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Maintenance schedule starting... DEBUG=%s", settings.DEBUG)

    # Redis
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
    app.state.redis = redis
    logger.info("Redis connected: %s", settings.REDIS_URL)

    # Row store + event store
    row_store = await build_row_store()
    store = EventStore(row_store)
    store.add_listener(make_publisher(redis))
    app.state.event_store = store

    # Access gate (deterrent only)
    app.state.access_gate = AccessGate(settings.ACCESS_PASSCODE)

    # Initial load; a failure leaves an empty list and an error banner
    if not await store.fetch_all():
        logger.warning("Initial schedule load failed: %s", store.state.error_message)

    # Redis → WebSocket bridge
    ws_bridge_task = asyncio.create_task(redis_to_ws_bridge(redis))

    # Periodic refresh
    refresher = EventRefresher(store, settings.SCHEDULE_REFRESH_INTERVAL)
    app.state.event_refresher = refresher
    refresher_task = asyncio.create_task(refresher.start())

    yield

    # Shutdown
    logger.info("Maintenance schedule shutting down...")
    await refresher.stop()

    all_tasks = [ws_bridge_task, refresher_task]
    for t in all_tasks:
        t.cancel()
    for t in all_tasks:
        try:
            await t
        except asyncio.CancelledError:
            pass

    await row_store.close()
    await redis.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Maintenance Schedule API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedule_router)
app.include_router(ws_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
