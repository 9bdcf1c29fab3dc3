"""Catalogue adapter reading the ``products`` / ``product_variants`` tables."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.engine import Engine

from catalogue.listing.port import CatalogEntry, CatalogPort
from shared.schema import product_variants, products


class SqlCatalog(CatalogPort):
    """Read-only view over the catalogue tables.

    Lookups use their own short-lived connection: pricing is a read that
    happens before the order transaction opens.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def lookup(self, product_id: int, variant_id: int) -> CatalogEntry | None:
        stmt = (
            select(
                products.c.id,
                products.c.name,
                products.c.price,
                products.c.discount,
                products.c.image,
                product_variants.c.id.label("variant_id"),
                product_variants.c.name.label("variant_name"),
            )
            .join(product_variants, product_variants.c.product_id == products.c.id)
            .where(products.c.id == product_id, product_variants.c.id == variant_id)
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        if row is None:
            return None
        return CatalogEntry(
            product_id=row.id,
            variant_id=row.variant_id,
            product_name=row.name,
            variant_name=row.variant_name,
            price=Decimal(row.price),
            discount=Decimal(row.discount or 0),
            image=row.image or "",
        )
