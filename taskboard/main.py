"""Taskboard FastAPI Backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard import config
from taskboard.db import connection, migrations
from taskboard.db.factory import get_project_repository, get_task_repository
from taskboard.db.persistence import PersistenceMediator
from taskboard.observability import initialize as initialize_observability, shutdown as shutdown_observability
from taskboard.routers.board import board_router
from taskboard.store import TreeStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("taskboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Taskboard backend starting up")
    initialize_observability(app)

    # 1. Initialize DB connection
    db = await connection.get_connection()

    # 2. Run migrations
    await migrations.run_migrations(db)

    # 3. Store with the record store mirror attached
    mediator = PersistenceMediator(
        get_project_repository(db),
        get_task_repository(db),
        user_id=config.USER_ID,
    )
    store = TreeStore(effects=[mediator])
    app.state.mediator = mediator
    app.state.store = store

    # 4. One-shot load; later remote changes are not picked up until restart
    if not await mediator.load_into(store):
        logger.warning("Starting with an empty tree: initial load failed")

    yield

    logger.info("Taskboard backend shutting down")
    await mediator.drain(timeout=config.SHUTDOWN_DRAIN_SECONDS)
    shutdown_observability(app)
    await connection.close_connection()


app = FastAPI(
    title="Taskboard API",
    description="Backend API for the project / task / subtask progress board",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(board_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    mediator = getattr(app.state, "mediator", None)
    return {
        "status": "ok",
        "db": "connected" if connection.is_connected() else "disconnected",
        "pendingWrites": mediator.pending if mediator else 0,
    }
