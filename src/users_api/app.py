"""
Users API Server
Core functionality: user CRUD over tbl_users with bcrypt password hashing
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from users_api import __version__
from users_api.config.settings import ALLOWED_ORIGINS
from users_api.database.connection import init_database, close_database
from users_api.api.routes import health, users
from users_api.utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool once per process and hand it to handlers via app.state"""
    app.state.database = await init_database()
    yield
    await close_database(app.state.database)

def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title="Users API",
        description="CRUD API for user records with hashed passwords",
        version=__version__,
        lifespan=lifespan
    )

    # Centralized error handling (registers the request context middleware)
    setup_error_handling(app)

    # CORS middleware, outermost so preflight requests never reach the handlers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Trace-ID"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app

# FastAPI app instance is exported for use by uvicorn
app = create_app()
