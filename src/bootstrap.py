"""Composition root: builds every repository and service exactly once.

Nothing in the contexts reaches for a global database handle; whatever needs
persistence is handed the ``Database`` and the repositories built here.
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine

from catalogue.listing import CatalogPort, SqlCatalog
from inventory.stock.ledger import InventoryLedger
from notifications.notification.dispatch import OrderNotifier
from ordering.cart.items import ManageCartItemsHandler
from ordering.cart.repository import CartRepository
from ordering.cart.snapshot import CartSnapshotBuilder
from ordering.order.repository import OrderRepository
from ordering.order.workflow import OrderWorkflow
from ordering.voucher.redemption import VoucherRepository
from payments.gateway import gateway_from_settings, set_gateway
from payments.payment.callback import PaymentCallbackHandler
from payments.payment.initiation import InitiatePaymentHandler
from shared.config import Settings
from shared.db import Database, create_db_engine


@dataclass
class Services:
    settings: Settings
    engine: Engine
    database: Database
    catalog: CatalogPort
    inventory: InventoryLedger
    vouchers: VoucherRepository
    carts: CartRepository
    orders: OrderRepository
    snapshots: CartSnapshotBuilder
    notifier: OrderNotifier
    workflow: OrderWorkflow
    cart_items: ManageCartItemsHandler
    payments: InitiatePaymentHandler
    callbacks: PaymentCallbackHandler


def build_services(
    settings: Settings,
    engine: Engine | None = None,
    catalog: CatalogPort | None = None,
    notifier: OrderNotifier | None = None,
) -> Services:
    gateway = gateway_from_settings(settings)
    engine = engine or create_db_engine(settings.database_url)
    database = Database(engine)
    catalog = catalog or SqlCatalog(engine)
    notifier = notifier or OrderNotifier()

    inventory = InventoryLedger()
    vouchers = VoucherRepository()
    carts = CartRepository()
    orders = OrderRepository()
    snapshots = CartSnapshotBuilder(database, catalog, inventory, vouchers, carts)
    workflow = OrderWorkflow(database, orders, inventory, vouchers, carts, snapshots, notifier)

    set_gateway(gateway)

    return Services(
        settings=settings,
        engine=engine,
        database=database,
        catalog=catalog,
        inventory=inventory,
        vouchers=vouchers,
        carts=carts,
        orders=orders,
        snapshots=snapshots,
        notifier=notifier,
        workflow=workflow,
        cart_items=ManageCartItemsHandler(database, catalog, carts),
        payments=InitiatePaymentHandler(snapshots),
        callbacks=PaymentCallbackHandler(workflow),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the services the app was built with."""
    return request.app.state.services
