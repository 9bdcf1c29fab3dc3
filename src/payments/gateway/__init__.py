"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- VnpayGateway when a merchant secret is configured

Production never falls back to FakeGateway: a missing secret there is a
startup error.
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.vnpay_adapter import VnpayGateway
from shared.config import Settings

_current_gateway: PaymentGateway | None = None


def gateway_from_settings(settings: Settings) -> PaymentGateway:
    """VnpayGateway when credentials are configured, FakeGateway otherwise."""
    if not settings.vnp_hash_secret:
        if settings.env == "production":
            raise ValueError("VNP_HASHSECRET must be set in production")
        return FakeGateway()
    return VnpayGateway(
        tmn_code=settings.vnp_tmn_code,
        hash_secret=settings.vnp_hash_secret,
        payment_url=settings.vnp_url,
        return_url=settings.vnp_return_url,
        locale=settings.vnp_locale,
        currency=settings.vnp_currency,
        timezone=settings.vnp_timezone,
    )


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
