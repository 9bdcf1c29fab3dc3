"""Storefront FastAPI application.

Usage:
    uvicorn app:create_app --factory --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bootstrap import Services, build_services
from inventory.api import inventory_router
from ordering.api import cart_router, order_router, voucher_router
from payments.api.routes import payment_router
from shared.config import load_settings
from shared.errors import (
    ConflictError,
    NotFoundError,
    SignatureError,
    TransientError,
    ValidationError,
)
from shared.logging import configure_logging

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "validation_error", "messages": exc.messages})


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.setdefault(field or "body", []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": "validation_error", "messages": messages})


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "messages": exc.messages})


async def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content=exc.to_dict())


async def _signature_error(request: Request, exc: SignatureError) -> JSONResponse:
    logger.warning("Callback signature invalid", path=request.url.path)
    return JSONResponse(status_code=400, content={"error": "invalid_request"})


async def _transient_error(request: Request, exc: TransientError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": "unavailable", "message": "Please try again"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ConflictError, _conflict)
    app.add_exception_handler(SignatureError, _signature_error)
    app.add_exception_handler(TransientError, _transient_error)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
def create_app(services: Services | None = None) -> FastAPI:
    if services is None:
        settings = load_settings()
        configure_logging(settings.log_level, json=settings.log_json)
        services = build_services(settings)

    app = FastAPI(
        title="Storefront API",
        description="Order fulfillment: inventory, vouchers, orders and VNPay payments",
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[services.settings.client_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(order_router)
    app.include_router(cart_router)
    app.include_router(voucher_router)
    app.include_router(inventory_router)
    app.include_router(payment_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "env": services.settings.env}

    return app
