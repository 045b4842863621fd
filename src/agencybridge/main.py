"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agencybridge.api import brands_router, events_router, product_events_router, routing_rules_router
from agencybridge.core.errors import AgencyBridgeError, MissingRequiredFieldsError, ProductEventNotFoundError
from agencybridge.settings import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the service format."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    debug=settings.debug,
)

app.include_router(brands_router)
app.include_router(events_router)
app.include_router(product_events_router)
app.include_router(routing_rules_router)


@app.exception_handler(AgencyBridgeError)
async def agencybridge_error_handler(request: Request, exc: AgencyBridgeError) -> JSONResponse:
    """Map the error taxonomy to HTTP status codes."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body: dict = {"detail": exc.message, "error": type(exc).__name__}
    if isinstance(exc, MissingRequiredFieldsError):
        body["missing"] = exc.missing
    if isinstance(exc, ProductEventNotFoundError):
        body["availableEventCodes"] = exc.available
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "AgencyBridge API", "status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
