"""
FastAPI entrypoint for SplitBill backend application.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from splitbill.api.router import api_router
from splitbill.core.config import Settings, settings
from splitbill.core.errors import SplitAppError, ValidationFailed
from splitbill.core.network import get_network_config
from splitbill.core.utils import format_error
from splitbill.db.session import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


async def split_app_error_handler(request: Request, exc: SplitAppError):
    content = format_error(exc.message)
    if isinstance(exc, ValidationFailed):
        content["violations"] = [v.to_dict() for v in exc.violations]
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content=format_error(message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=format_error(str(exc.detail)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=format_error("Internal server error"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the application; the network configuration is resolved once here."""
    app = FastAPI(
        title=f"{app_settings.APP_NAME} API",
        description="Backend API for splitting bills among wallet addresses",
        version="1.0.0",
        debug=app_settings.DEBUG,
        lifespan=lifespan
    )
    app.state.network = get_network_config(app_settings.NETWORK)
    logger.info(f"Using network {app.state.network.name} (chain {app.state.network.chain_id})")

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SplitAppError, split_app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"message": f"{app_settings.APP_NAME} API is running"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
