"""Catalogue listing adapters.

``InMemoryCatalog`` for development and tests, ``SqlCatalog`` when the
catalogue tables live in the same database.
"""

from catalogue.listing.fake_adapter import InMemoryCatalog
from catalogue.listing.port import CatalogEntry, CatalogPort
from catalogue.listing.sql_adapter import SqlCatalog

__all__ = ["CatalogEntry", "CatalogPort", "InMemoryCatalog", "SqlCatalog"]
