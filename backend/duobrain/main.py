# duobrain/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from duobrain.api.routes import auth, charges, goals, health, insights, jars, onboarding, transactions, user
from duobrain.core.config import SimpleSettings
from duobrain.core.errors import DomainError
from duobrain.db import models  # noqa: F401  (registers tables on Base.metadata)
from duobrain.db.base import Base
from duobrain.db.session import build_engine, build_session_factory
from duobrain.services.cache import ResponseCache

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # drop the "body"/"query"/"path" prefix FastAPI puts in front
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts) or "request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [{"field": _field_name(err.get("loc", ())), "message": err.get("msg", "")} for err in exc.errors()]
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[SimpleSettings] = None, redis_client: Optional[redis.Redis] = None) -> FastAPI:
    """
    Build the API. Nothing connects until startup: the lifespan handler creates
    the engine, session factory and cache client, keeps them on app.state and
    releases them on shutdown.
    """
    settings = settings or SimpleSettings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings.DATABASE_URL)
        if settings.AUTO_CREATE_TABLES:
            logger.info("Creating tables in the database (if not exist)...")
            Base.metadata.create_all(bind=engine)
        client = redis_client if redis_client is not None else redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)

        app.state.settings = settings
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        app.state.cache = ResponseCache(client)
        logger.info("duobrain API started")
        try:
            yield
        finally:
            app.state.cache.close()
            engine.dispose()
            logger.info("duobrain API stopped")

    app = FastAPI(title="duobrain API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(user.router, prefix="/api/user", tags=["user"])
    app.include_router(transactions.router, prefix="/api/transactions", tags=["transactions"])
    app.include_router(goals.router, prefix="/api/goals", tags=["goals"])
    app.include_router(jars.router, prefix="/api/jars", tags=["jars"])
    app.include_router(charges.router, prefix="/api/charges", tags=["charges"])
    app.include_router(onboarding.router, prefix="/api/onboarding", tags=["onboarding"])
    app.include_router(insights.router, prefix="/api/insights", tags=["insights"])

    @app.get("/")
    def root():
        return {"message": "duobrain API - visit /api/health"}

    return app


app = create_app()
