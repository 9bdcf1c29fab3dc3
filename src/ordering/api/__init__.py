from ordering.api.routes import cart_router, order_router, voucher_router

__all__ = ["cart_router", "order_router", "voucher_router"]
