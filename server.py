"""
BidHub Server - Main FastAPI Application

This module contains the main FastAPI application for the BidHub server.
It wires authentication, the admin session idle timeout, and the admin
REST endpoints used by the marketplace frontend.
"""

import asyncio
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from managers.database_manager import DatabaseManager, DEFAULT_ADMIN_EMAIL
from admin_sessions import ConfigureSessionStore, GetSessionStore, CleanupExpiredSessions, ClearSessionCookie
from session_store import DatabaseSessionStore
from exceptions import AdminSessionExpiredError

logger = logging.getLogger(__name__)

# Sessions past their absolute lifetime are pruned on this interval
SESSION_PRUNE_INTERVAL_SECONDS = 15 * 60

# Import database module for shared db_manager instance
import database


# ==================== Logging ====================

def ConfigureLogging(logs_dir: Path = Path("logs")) -> None:
    """
    Configure logging to write to both console and a rotating file

    Args:
        logs_dir: Directory for log files (created if missing)
    """
    logs_dir.mkdir(exist_ok=True)

    # Create log filename with timestamp
    log_filename = logs_dir / f"bidhub-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )


# ==================== Background Tasks ====================

async def PruneExpiredSessions(interval_seconds: float = SESSION_PRUNE_INTERVAL_SECONDS) -> None:
    """
    Periodically remove sessions past their absolute lifetime
    Runs until cancelled at shutdown.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(CleanupExpiredSessions, GetSessionStore())
        except Exception as e:
            logger.error(f"Error pruning expired sessions: {str(e)}")


# ==================== Lifespan Events ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    Manages database initialization, the session store and session pruning
    """
    ConfigureLogging()

    # Startup
    logger.info("BidHub Server starting up...")

    # Initialize database manager in database module
    database.db_manager = DatabaseManager()

    # Initialize database (creates tables if needed, but won't recreate admin if exists)
    admin_password = database.db_manager.InitializeDatabase()
    if admin_password:
        logger.warning("=" * 60)
        logger.warning("NEW SUPER ADMIN CREATED")
        logger.warning(f"Email: {DEFAULT_ADMIN_EMAIL}")
        logger.warning(f"Password: {admin_password}")
        logger.warning("SAVE THIS PASSWORD - IT WILL NOT BE SHOWN AGAIN!")
        logger.warning("=" * 60)

    logger.info("Database initialized successfully")

    # Sessions are persisted so they survive a restart when BIDHUB_SESSION_SECRET is set
    ConfigureSessionStore(DatabaseSessionStore(database.db_manager))
    CleanupExpiredSessions(GetSessionStore())

    prune_task = asyncio.create_task(PruneExpiredSessions())

    logger.info("Server startup complete")

    yield

    # Shutdown
    logger.info("BidHub Server shutting down...")
    prune_task.cancel()
    try:
        await prune_task
    except asyncio.CancelledError:
        pass
    logger.info("Shutdown complete")


# ==================== FastAPI Application ====================

app = FastAPI(
    title="BidHub Server",
    description="Authentication and admin session service for the BidHub services marketplace",
    version="1.0.0",
    lifespan=lifespan
)

# ==================== CORS Middleware ====================

# The SPA is served from its own origin during development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Exception Handlers ====================

@app.exception_handler(AdminSessionExpiredError)
async def admin_session_expired_handler(request: Request, exc: AdminSessionExpiredError):
    """
    Turn an idle-timeout expiry into a 401 with a stable error code
    The frontend uses the code to redirect to the admin login page.
    """
    response = JSONResponse(status_code=401, content=exc.ToResponseBody())
    ClearSessionCookie(response)
    return response


# ==================== Import Routers ====================

from routes import status, auth
from routes.admin import auth as admin_auth, settings as admin_settings


# ==================== Include Routers ====================

app.include_router(status.router)
app.include_router(auth.router)

# Include admin route modules
app.include_router(admin_auth.router)
app.include_router(admin_settings.router)


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    """
    Run the server using uvicorn
    """
    ConfigureLogging()
    logger.info("Starting BidHub Server...")

    # host="0.0.0.0" allows connections from other machines on the network
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level="info"
    )
