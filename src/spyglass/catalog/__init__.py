"""Declarative operation catalogs."""

from spyglass.catalog.loader import (
    BUILTIN_CATALOG,
    load_builtin_catalog,
    load_catalog,
    load_catalog_data,
)
from spyglass.catalog.models import (
    ArgumentDef,
    CatalogFile,
    EnumDef,
    EnumValueDef,
    ObjectDef,
    OperationDef,
)

__all__ = [
    "BUILTIN_CATALOG",
    "ArgumentDef",
    "CatalogFile",
    "EnumDef",
    "EnumValueDef",
    "ObjectDef",
    "OperationDef",
    "load_builtin_catalog",
    "load_catalog",
    "load_catalog_data",
]
