"""Catalog storage services."""

from .catalog_service import SQLiteCatalog

__all__ = ["SQLiteCatalog"]
