"""
Catalog — The app request list and name mapping tables.
"""

from .loader import load_catalog
from .models import Catalog, CatalogFile

__all__ = ["Catalog", "CatalogFile", "load_catalog"]
