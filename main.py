from __future__ import annotations

import logging
import os
import socket
from datetime import datetime, timezone
from typing import Optional, Sequence

from fastapi import FastAPI, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from models.health import Health
from routers import shipping_methods
from config.settings import Settings, settings
from services.registry import ShippingMethodRegistry, default_registry, load_registry
from services.shipping_methods import AdditionalField, ResponseFilter, check_additional_fields
from utils.errors import RestError, rest_error_handler
from utils.logging import configure_logging

port = int(os.environ.get("FASTAPIPORT", 8000))

logger = logging.getLogger(__name__)


def build_registry(app_settings: Settings) -> ShippingMethodRegistry:
    if app_settings.SHIPPING_METHODS_FILE:
        return load_registry(app_settings.SHIPPING_METHODS_FILE)
    logger.info("SHIPPING_METHODS_FILE not set, using built-in shipping methods")
    return default_registry()


def create_app(
    registry: Optional[ShippingMethodRegistry] = None,
    additional_fields: Sequence[AdditionalField] = (),
    response_filters: Sequence[ResponseFilter] = (),
    app_settings: Settings = settings,
) -> FastAPI:
    """
    Build the API application.

    The registry is created once here and shared read-only by every request.
    Extension fields and response filters are applied to every shipping
    method response.
    """
    configure_logging(app_settings.LOG_LEVEL)
    check_additional_fields(additional_fields)

    app = FastAPI(
        title="Shipping Methods API",
        description="Read-only REST API exposing the registered shipping methods.",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.settings = app_settings
    app.state.registry = registry if registry is not None else build_registry(app_settings)
    app.state.additional_fields = tuple(additional_fields)
    app.state.response_filters = tuple(response_filters)

    app.add_exception_handler(RestError, rest_error_handler)

    # -------------------------------------------------------------------------
    # Health endpoints
    # -------------------------------------------------------------------------
    def make_health(request: Request, echo: Optional[str], path_echo: Optional[str]=None) -> Health:
        return Health(
            status=200,
            status_message="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            ip_address=socket.gethostbyname(socket.gethostname()),
            echo=echo,
            path_echo=path_echo,
            shipping_methods=len(request.app.state.registry),
        )

    @app.get("/health", response_model=Health)
    def get_health_no_path(request: Request, echo: str | None = Query(None, description="Optional echo string")):
        return make_health(request, echo=echo, path_echo=None)

    @app.get("/health/{path_echo}", response_model=Health)
    def get_health_with_path(
        request: Request,
        path_echo: str = Path(..., description="Required echo in the URL path"),
        echo: str | None = Query(None, description="Optional echo string"),
    ):
        return make_health(request, echo=echo, path_echo=path_echo)

    # -------------------------------------------------------------------------
    # Routers to public RESTful resources
    # -------------------------------------------------------------------------
    app.include_router(router=shipping_methods.router, prefix=f"/{app_settings.API_NAMESPACE.strip('/')}")

    # -------------------------------------------------------------------------
    # Root
    # -------------------------------------------------------------------------
    @app.get("/")
    def root():
        return {"message": "Welcome to the Shipping Methods API. See /docs for OpenAPI UI."}

    return app


app = create_app()

# -----------------------------------------------------------------------------
# Entrypoint for `python main.py`
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
