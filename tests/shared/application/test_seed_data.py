"""Application tests for the demo-data seeding command."""

from catalogue.listing import SqlCatalog
from manage import seed_demo_data
from shared.db import Database
from shared.schema import product_variants
from sqlalchemy import select


class TestSeedDemoData:
    def test_seeded_variants_are_priced_and_stocked(self, engine, services):
        variants = seed_demo_data(Database(engine), count=3, stock=7, seed=42)

        with engine.connect() as conn:
            rows = conn.execute(select(product_variants)).all()
        assert len(rows) == variants

        catalog = SqlCatalog(engine)
        with services.database.unit_of_work() as tx:
            for row in rows:
                assert catalog.lookup(row.product_id, row.id) is not None
                assert services.inventory.get(tx, row.product_id, row.id).available_quantity == 7

    def test_welcome_voucher_created_once(self, engine, services):
        seed_demo_data(Database(engine), count=1, seed=1)
        seed_demo_data(Database(engine), count=1, seed=2)

        with services.database.unit_of_work() as tx:
            voucher = services.vouchers.find_by_code(tx, "WELCOME")
        assert voucher.quantity == 100
