"""FastAPI routes for the Payments domain — VNPay redirect and return."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from bootstrap import Services, get_services
from ordering.cart.snapshot import RequestedLine
from payments.api.schemas import (
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    PaymentUrlRequest,
    PaymentUrlResponse,
)
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.payment.callback import PaymentAccepted
from payments.payment.initiation import InitiatePayment
from shared.errors import ConflictError, SignatureError

logger = structlog.get_logger(__name__)

payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "127.0.0.1"


@payment_router.post("/vnpay/url", response_model=PaymentUrlResponse)
def create_payment_url(
    body: PaymentUrlRequest, request: Request, services: Services = Depends(get_services)
) -> PaymentUrlResponse:
    """Price the order and return the signed gateway redirect."""
    command = InitiatePayment(
        user_id=body.user_id,
        delivery_address=body.delivery_address,
        voucher_code=body.voucher_code,
        payment_method=body.payment_method,
        items=[
            RequestedLine(product_id=line.product_id, variant_id=line.variant_id, quantity=line.quantity)
            for line in body.items
        ],
        client_ip=_client_ip(request),
    )
    payment = services.payments.handle(command)
    return PaymentUrlResponse(payment_url=payment.url, txn_ref=payment.txn_ref, amount=payment.amount)


@payment_router.get("/vnpay/return")
def payment_return(request: Request, services: Services = Depends(get_services)) -> RedirectResponse:
    """Gateway return URL: place the order, then send the browser back to the shop."""
    client_url = services.settings.client_url.rstrip("/")
    failed = RedirectResponse(f"{client_url}/payment-failed", status_code=302)
    try:
        outcome = services.callbacks.handle(dict(request.query_params))
    except SignatureError:
        logger.warning("Rejected payment callback", client_ip=_client_ip(request))
        return failed
    except ConflictError as e:
        logger.error("Paid order could not be placed", error=e.message, details=e.details)
        return failed

    if isinstance(outcome, PaymentAccepted):
        return RedirectResponse(f"{client_url}/user/orders/{outcome.order.order_code}", status_code=302)
    return failed


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
def configure_gateway(body: ConfigureGatewayRequest, services: Services = Depends(get_services)) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if services.settings.env == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, response_code=body.response_code)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        response_code=gateway.response_code,
    )
