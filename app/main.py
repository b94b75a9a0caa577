from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from app import config
from app.database import Database
from app.middleware.security import SecurityHeadersMiddleware
from app.routes import admin, auth, catalog, history, likes, movies, series, watchlist
from app.services.background_jobs import BackgroundJobService

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# CORS - Whitelist allowed origins
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]
if config.FRONTEND_URL:
    allowed_origins.append(config.FRONTEND_URL)


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events

    Startup:
    - Connect the database
    - Start background jobs (session purge, reset token cleanup)

    Shutdown:
    - Stop background jobs gracefully
    - Dispose the database engine
    """
    database: Database = app.state.database
    jobs: BackgroundJobService = app.state.background_jobs

    logger.info(f"Streaming catalog API starting (environment: {config.ENVIRONMENT})")
    database.connect()

    try:
        jobs.start()
    except Exception as e:
        logger.error(f"Failed to start background jobs: {str(e)}", exc_info=True)

    yield

    logger.info("Streaming catalog API shutting down")
    jobs.shutdown()
    database.disconnect()


def _with_cors(request: Request, response: JSONResponse) -> JSONResponse:
    """Error responses keep CORS headers so browsers can read them"""
    origin = request.headers.get("origin")
    if origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application around an explicit Database.

    The database is connected by the lifespan; callers that drive the app
    without a lifespan (tests) connect it themselves.
    """
    database = database or Database.from_config()

    app = FastAPI(
        title="Streaming Catalog API",
        description="Movies, series and episodes catalog with accounts, sessions and an admin back office",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.database = database
    app.state.background_jobs = BackgroundJobService(database)

    # ============================================
    # Security Configuration
    # ============================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # Trusted Hosts - Production only
    if config.IS_PRODUCTION and config.TRUSTED_HOSTS:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=config.TRUSTED_HOSTS)

    # ============================================
    # Exception Handlers
    # ============================================

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        response = JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )
        return _with_cors(request, response)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
        response = JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )
        return _with_cors(request, response)

    # ============================================
    # Routes
    # ============================================

    @app.get("/", tags=["Health"])
    async def root():
        """Basic health check"""
        return {
            "message": "Streaming Catalog API",
            "version": API_VERSION,
            "status": "healthy",
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check for monitoring"""
        return {
            "status": "healthy",
            "api_version": API_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if database.is_connected else "disconnected",
            "background_jobs": app.state.background_jobs.scheduler.running,
        }

    app.include_router(auth.router)
    app.include_router(movies.router)
    app.include_router(series.router)
    app.include_router(catalog.router)
    app.include_router(likes.router)
    app.include_router(watchlist.router)
    app.include_router(history.router)
    app.include_router(admin.router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
