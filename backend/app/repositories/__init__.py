"""数据访问层"""

from app.repositories.catalog import CatalogRepository, CatalogSnapshot

__all__ = [
    "CatalogRepository",
    "CatalogSnapshot",
]
