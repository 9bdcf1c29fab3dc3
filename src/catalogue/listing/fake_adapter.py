"""In-memory catalogue for development and testing."""

from decimal import Decimal

from catalogue.listing.port import CatalogEntry, CatalogPort


class InMemoryCatalog(CatalogPort):
    """Catalogue backed by a dict, editable at runtime."""

    def __init__(self) -> None:
        self.entries: dict[tuple[int, int], CatalogEntry] = {}

    def add(
        self,
        product_id: int,
        variant_id: int,
        price,
        discount=0,
        product_name: str | None = None,
        variant_name: str | None = None,
        image: str = "",
    ) -> CatalogEntry:
        entry = CatalogEntry(
            product_id=product_id,
            variant_id=variant_id,
            product_name=product_name or f"Product {product_id}",
            variant_name=variant_name or f"Variant {variant_id}",
            price=Decimal(str(price)),
            discount=Decimal(str(discount)),
            image=image,
        )
        self.entries[(product_id, variant_id)] = entry
        return entry

    def remove(self, product_id: int, variant_id: int) -> None:
        self.entries.pop((product_id, variant_id), None)

    def lookup(self, product_id: int, variant_id: int) -> CatalogEntry | None:
        return self.entries.get((product_id, variant_id))
