"""
Game Progress API — FastAPI Application Entry Point.

Provides the backend for a single-player progression game:
  - Anonymous players with recovery passphrases, optional username login
  - Stateless signed session tokens
  - Monotonic score merging with atomic upserts
  - A ranked leaderboard recomputed on every read
  - One cloud save slot per player
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from config import settings
from database import engine, init_db
from errors import register_error_handlers
from limiter import limiter
from routes import router as api_router

# ── Logging ──────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)


# ── App Lifecycle ────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(application: FastAPI):
    """Startup / shutdown lifecycle handler."""
    # Startup
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✓ Database connected successfully")
    except Exception as e:
        logger.error("✗ Database connection failed: %s", e)
        raise

    init_db(engine)

    yield  # ← app is running

    # Shutdown
    engine.dispose()
    logger.info("Database connections closed")


# ── FastAPI App ──────────────────────────────────────────────────

app = FastAPI(
    title="Game Progress API",
    description="Player identity, monotonic score merging, leaderboard and cloud saves",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)
app.include_router(api_router)


# ── Health Check ─────────────────────────────────────────────────

@app.get("/health", tags=["Health"])
def health_check():
    """Simple liveness probe."""
    return {"status": "ok", "service": "game-progress"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host=settings.LISTEN_HOST, port=settings.LISTEN_PORT)
