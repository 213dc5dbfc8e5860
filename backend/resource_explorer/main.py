import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resource_explorer.api.v1 import resources as resources_routes
from resource_explorer.config import Settings, get_settings
from resource_explorer.models.schemas import ResourceResponse
from resource_explorer.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request body: " + "; ".join(parts)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = _describe_validation_error(exc)
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    envelope = ResourceResponse(success=False, error=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=envelope.to_body())


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # basicConfig is a no-op when the server already installed handlers
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())


def create_app(settings: Optional[Settings] = None, dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    app = FastAPI(title="Resource Explorer API")
    app.state.dispatcher = dispatcher or Dispatcher(settings)

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # CORS configuration for the portal frontend
    allowed_origins = list(settings.CORS_ORIGINS)
    if settings.ENV == "development":
        allowed_origins.append("*")  # Allow all in dev only

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Security headers middleware
    @app.middleware("http")
    async def add_security_headers(request, call_next):
        response = await call_next(request)
        # Strict-Transport-Security: Force HTTPS in production
        if settings.ENV != "development":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.include_router(resources_routes.router, prefix=settings.API_PREFIX)
    logger.info("Resource explorer configured successfully")
    return app


app = create_app()

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.APP_HOST, port=int(settings.APP_PORT))
