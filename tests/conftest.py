import os
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    os.environ["STOREFRONT_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Reset process-wide adapter singletons after every test."""
    yield

    from notifications.channel import reset_channels
    from payments.gateway import reset_gateway

    reset_channels()
    reset_gateway()


@pytest.fixture()
def settings():
    from shared.config import Settings

    return Settings(
        env="test",
        vnp_tmn_code="TESTTMN1",
        vnp_hash_secret="TESTSECRETKEY0123456789ABCDEFGH",
        vnp_return_url="http://testserver/payments/vnpay/return",
        client_url="http://shop.test",
    )


@pytest.fixture()
def engine(tmp_path):
    """A file-backed SQLite database so threads get separate connections."""
    from shared.db import create_db_engine, setup_db

    engine = create_db_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    setup_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def catalog():
    from catalogue.listing import InMemoryCatalog

    catalog = InMemoryCatalog()
    catalog.add(1, 10, price="100.00", product_name="Linen Shirt", variant_name="M")
    catalog.add(1, 11, price="100.00", product_name="Linen Shirt", variant_name="L")
    catalog.add(2, 20, price="59.99", discount=10, product_name="Canvas Tote", variant_name="One size")
    return catalog


@pytest.fixture()
def services(settings, engine, catalog):
    from bootstrap import build_services

    return build_services(settings, engine=engine, catalog=catalog)


@pytest.fixture()
def emails():
    from notifications.channel import get_channel

    return get_channel("Email")


@pytest.fixture()
def stock(services):
    """Register inventory: ``stock(product_id, variant_id, quantity)``."""

    def _register(product_id, variant_id, quantity):
        with services.database.unit_of_work() as tx:
            return services.inventory.register(tx, product_id, variant_id, quantity)

    return _register


@pytest.fixture()
def stock_of(services):
    def _get(product_id, variant_id):
        with services.database.unit_of_work() as tx:
            return services.inventory.get(tx, product_id, variant_id)

    return _get


@pytest.fixture()
def voucher(services):
    """Create a voucher valid from yesterday to tomorrow unless told otherwise."""
    from shared.db import utcnow

    def _create(code="SAVE10", discount_amount="10.00", quantity=5, starts_at=None, ends_at=None):
        now = utcnow()
        with services.database.unit_of_work() as tx:
            return services.vouchers.create(
                tx,
                code=code,
                discount_amount=Decimal(discount_amount),
                quantity=quantity,
                starts_at=starts_at or now - timedelta(days=1),
                ends_at=ends_at or now + timedelta(days=1),
            )

    return _create


@pytest.fixture()
def voucher_quantity(services):
    def _get(voucher_id):
        with services.database.unit_of_work() as tx:
            return services.vouchers.get(tx, voucher_id).quantity

    return _get


@pytest.fixture()
def place(services):
    """Place an order through the workflow with sensible defaults."""
    from ordering.cart.snapshot import RequestedLine
    from ordering.order.creation import PlaceOrder

    def _place(*lines, user_id=7, voucher_code=None, order_code=None, expected_amount=None):
        lines = lines or ((1, 10, 1),)
        return services.workflow.process(
            PlaceOrder(
                user_id=user_id,
                payment_method="COD",
                delivery_address="12 Nguyen Hue, District 1",
                voucher_code=voucher_code,
                order_code=order_code,
                expected_amount=expected_amount,
                items=[RequestedLine(product_id=p, variant_id=v, quantity=q) for p, v, q in lines],
            )
        )

    return _place


@pytest.fixture()
def client(services):
    from app import create_app
    from fastapi.testclient import TestClient

    return TestClient(create_app(services), follow_redirects=False)
