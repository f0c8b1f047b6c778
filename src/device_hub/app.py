"""FastAPI application factory for Device Hub."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from device_hub.common.config import get_settings
from device_hub.common.exceptions import DeviceHubError, InternalError
from device_hub.common.logging import get_logger, setup_logging
from device_hub.common.schemas import ErrorResponse, HealthResponse

logger = get_logger("app")


def _error_response(exc: DeviceHubError, detail: str = "") -> JSONResponse:
    body = ErrorResponse(error=exc.message, code=exc.code, detail=detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def _request_context(request: Request, exc: DeviceHubError) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "code": exc.code,
        **exc.context,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Translate errors into ErrorResponse bodies, logging each one once."""

    @app.exception_handler(DeviceHubError)
    async def handle_device_hub_error(request: Request, exc: DeviceHubError):
        context = _request_context(request, exc)
        if exc.status_code >= 500:
            logger.error(exc.message, extra={"context": context})
            return _error_response(InternalError())
        logger.info(exc.message, extra={"context": context})
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0]["loc"][1:]) if errors else "body"
        logger.info(
            "Request validation failed",
            extra={"context": {"method": request.method, "path": request.url.path, "field": field}},
        )
        body = ErrorResponse(
            error=f"Invalid {field}", code="VALIDATION_ERROR", detail=field,
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Storage error",
            exc_info=exc,
            extra={"context": {"method": request.method, "path": request.url.path}},
        )
        return _error_response(InternalError())

    # Last resort for anything unhandled; logged here and not re-raised.
    @app.middleware("http")
    async def catch_unexpected(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error",
                exc_info=exc,
                extra={"context": {"method": request.method, "path": request.url.path}},
            )
            return _error_response(InternalError())


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: schema is provisioned by `device-hub migrate`, not here.
        from device_hub.deps import get_db
        db = get_db()
        await db.init()
        try:
            await db.ping()
        except Exception:
            logger.critical(
                "Cannot connect to database",
                exc_info=True,
                extra={"context": {"dialect": db.dialect}},
            )
            await db.close()
            raise
        logger.info("Device Hub started", extra={"context": {"environment": settings.environment}})
        yield
        # Shutdown
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from device_hub.identity.router import router as identity_router
    from device_hub.devices.router import router as device_router
    from device_hub.admin.router import router as admin_router

    prefix = settings.api_prefix
    app.include_router(identity_router, prefix=prefix, tags=["users"])
    app.include_router(device_router, prefix=prefix, tags=["devices"])
    app.include_router(admin_router, prefix=prefix, tags=["admin"])

    return app
