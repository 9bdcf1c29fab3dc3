"""Storefront database management CLI.

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py seed-db             # Demo catalogue, stock and a voucher
    python src/manage.py setup-db --env test # Use the [test] overlay
"""

import argparse
import random
import sys
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import insert

from inventory.stock.ledger import InventoryLedger
from ordering.voucher.redemption import VoucherRepository
from shared.config import load_settings
from shared.db import Database, create_db_engine, drop_db, setup_db, utcnow
from shared.errors import NotFoundError
from shared.logging import configure_logging
from shared.schema import product_variants, products

BRANDS = ["Yonex", "Victor", "Lining", "Mizuno", "Apacs"]
MODELS = ["Astrox", "Nanoflare", "Arcsaber", "Thruster", "Jetspeed", "Aeronaut"]
WEIGHTS = ["3U", "4U", "5U"]


def setup_database(env=None):
    """Create every table in the configured database."""
    settings = load_settings(env)
    configure_logging(settings.log_level)
    print(f"Creating schema in {settings.env} database...")
    engine = create_db_engine(settings.database_url)
    try:
        setup_db(engine)
    finally:
        engine.dispose()
    print("Done.")


def drop_database(env=None):
    """Drop every table in the configured database."""
    settings = load_settings(env)
    configure_logging(settings.log_level)
    print(f"Dropping schema in {settings.env} database...")
    engine = create_db_engine(settings.database_url)
    try:
        drop_db(engine)
    finally:
        engine.dispose()
    print("Done.")


def seed_demo_data(database: Database, count: int = 20, stock: int = 50, seed: int | None = None) -> int:
    """Insert ``count`` racket products with variants, stock for each variant
    and a WELCOME voucher. Returns the number of variants created."""
    rng = random.Random(seed)
    ledger = InventoryLedger()
    vouchers = VoucherRepository()
    now = utcnow()

    variants = 0
    with database.unit_of_work() as tx:
        for _ in range(count):
            product_id = tx.execute(
                insert(products).values(
                    name=f"{rng.choice(BRANDS)} {rng.choice(MODELS)} {rng.randint(10, 99)}",
                    price=Decimal(rng.randrange(500_000, 5_000_000, 10_000)),
                    discount=Decimal(rng.choice([0, 0, 5, 10, 15])),
                    image=f"https://picsum.photos/seed/{rng.randint(1, 10_000)}/600/600",
                )
            ).inserted_primary_key[0]
            for weight in rng.sample(WEIGHTS, k=rng.randint(1, len(WEIGHTS))):
                variant_id = tx.execute(
                    insert(product_variants).values(product_id=product_id, name=weight)
                ).inserted_primary_key[0]
                ledger.register(tx, product_id, variant_id, stock)
                variants += 1

        try:
            vouchers.find_by_code(tx, "WELCOME")
        except NotFoundError:
            vouchers.create(
                tx,
                code="WELCOME",
                discount_amount=Decimal("50000"),
                quantity=100,
                starts_at=now,
                ends_at=now + timedelta(days=30),
            )
    return variants


def seed_database(env=None, count=20):
    settings = load_settings(env)
    configure_logging(settings.log_level)
    print(f"Seeding {settings.env} database with {count} products...")
    engine = create_db_engine(settings.database_url)
    try:
        variants = seed_demo_data(Database(engine), count=count)
    finally:
        engine.dispose()
    print(f"Done. {variants} variants in stock.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("setup-db", "Create all database tables"),
        ("drop-db", "Drop all database tables"),
        ("seed-db", "Insert demo products, stock and a voucher"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--env",
            choices=["development", "test", "production"],
            help="Configuration overlay to use (default: STOREFRONT_ENV or development)",
        )
        if name == "seed-db":
            sub.add_argument("--count", type=int, default=20, help="Number of products (default: 20)")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.env)
    elif args.command == "drop-db":
        drop_database(args.env)
    elif args.command == "seed-db":
        seed_database(args.env, args.count)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
