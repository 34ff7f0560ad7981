"""
Catalog Schema - Loading and validating card catalogs.

Catalogs are authored as JSON, shape-checked with pydantic models,
then reference-checked before an InMemoryCatalog is built.
"""

from .models import CatalogFile, CardModel, AbilityModel, PowerModel, parse_catalog, read_catalog_file
from .validation import (
    CatalogValidationError,
    ValidationResult,
    validate_catalog,
    build_catalog,
    load_catalog,
)

__all__ = [
    "CatalogFile",
    "CardModel",
    "AbilityModel",
    "PowerModel",
    "parse_catalog",
    "read_catalog_file",
    "CatalogValidationError",
    "ValidationResult",
    "validate_catalog",
    "build_catalog",
    "load_catalog",
]
