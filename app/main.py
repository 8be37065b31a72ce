# app/main.py
"""
Kapdewala - laundry marketplace backend
Application factory

Run with: uvicorn app.main:create_app --factory
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from app.api.v1.api import api_router
from app.core.config import Settings, get_settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.exceptions import AppError, Internal, ValidationFailed
from app.core.security import AccessPolicy
from app.utils.responses import error_body

logger = logging.getLogger(__name__)


# ========================================
# LIFESPAN EVENT
# ========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    routes_api = []
    for route in app.routes:
        if hasattr(route, 'methods') and hasattr(route, 'path') and route.path.startswith('/api/'):
            methods = ', '.join(sorted(route.methods - {'HEAD', 'OPTIONS'}))
            routes_api.append(f"  {methods:12} {route.path}")

    logger.info("%s started with %d API routes", app.title, len(routes_api))
    for line in sorted(set(routes_api)):
        logger.debug(line)

    yield

    app.state.engine.dispose()
    logger.info("Server stopped")


# ========================================
# EXCEPTION HANDLERS
# ========================================
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.message, exc.context)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message, exc.context.get("errors")))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationFailed.status_code,
        content=error_body(ValidationFailed.code, "Please provide valid request data.", errors),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=Internal.status_code,
        content=error_body(Internal.code, Internal.default_message),
    )


# ========================================
# APP FACTORY
# ========================================
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        load_dotenv()
        settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    engine = build_engine(settings)
    init_db(engine)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.access_policy = AccessPolicy(settings)

    # MIDDLEWARE - CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ROUTERS API (prefix /api/v1)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def index():
        return {"message": f"Welcome to {settings.APP_NAME} API"}

    @app.get("/health")
    def health():
        return {"status": "healthy", "app": settings.APP_NAME.lower()}

    return app
