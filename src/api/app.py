from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError, to_http_error
from src.app.services.scheduler import SecurityScheduler
from src.depends import build_services
from src.domain.errors import SecurityServiceError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_service_error(request: Request, exc: SecurityServiceError):
    http_error = to_http_error(exc)
    if isinstance(http_error, ClientError):
        return await handle_client_error(request, http_error)
    return await handle_server_error(request, http_error)


def create_app(ApplicationConfig, services=None) -> FastAPI:
    services = services if services is not None else build_services(ApplicationConfig)
    scheduler = SecurityScheduler(services.jobs().scheduled_jobs())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services.monitoring_settings.scheduler_enabled:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            await services.store.close()

    app = FastAPI(title="Security Service API", version="0.1.0", lifespan=lifespan)
    app.state.config = ApplicationConfig
    app.state.services = services
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import alerts, audit, health_check, keys, monitoring

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(audit.router, tags=["Audit"])
    app.include_router(alerts.router, tags=["Alerts"])
    app.include_router(keys.router, tags=["API Keys"])
    app.include_router(monitoring.router, tags=["Monitoring"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(SecurityServiceError, handle_service_error)

    return app
