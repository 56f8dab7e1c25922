"""
Backend entry point.

Architecture:
- Single process; HTTP handlers and reminder jobs share one asyncio loop
- FastAPI serves the HTTP API, APScheduler fires the reminders

The lifespan starts the scheduler, builds the single PostEventReminderScheduler
and stores it on app.state for the routes; on shutdown it stops the scheduler,
drains queued emails and closes the database engine.

Run with: python main.py [--port PORT]
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# .env.local (gitignored, local overrides) wins over .env
load_dotenv(project_root / ".env.local")
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventhub.config import check_required_env_vars, get_api_port, get_log_level
from eventhub.database import close_engine
from eventhub.notifications import (
    PostEventReminderScheduler,
    init_scheduler,
    shutdown_scheduler,
    wait_for_pending_deliveries,
)
from web_api.routes.events import router as events_router

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """The reminder scheduler lives exactly as long as the app."""
    for name in check_required_env_vars():
        logger.warning(f"{name} is not set")

    scheduler = init_scheduler()
    app.state.reminder_scheduler = PostEventReminderScheduler(scheduler)
    settings = app.state.reminder_scheduler.settings
    logger.info(
        f"Post-event reminders: first after {settings.initial_delay}, "
        f"then every {settings.follow_up_interval}, max {settings.max_attempts}"
    )

    yield

    logger.info("Shutting down...")
    shutdown_scheduler(scheduler)
    await wait_for_pending_deliveries()
    await close_engine()


app = FastAPI(
    title="Event Platform API",
    lifespan=lifespan,
)

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events_router)


@app.get("/health")
async def health():
    """Health check endpoint with scheduler status."""
    reminders = getattr(app.state, "reminder_scheduler", None)
    return {
        "status": "healthy",
        "pending_reminders": len(reminders.list_active_reminders()) if reminders else None,
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Event Platform API Server")
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8000)",
    )
    args = parser.parse_args()

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
