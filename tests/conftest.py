"""Shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spyglass.catalog import load_builtin_catalog
from spyglass.core import (
    EnumClass,
    EnumValue,
    FlagsClass,
    ObjectClass,
    TypeSystem,
    clear_settings_cache,
    create_type_system,
    reset_global_registry,
)
from spyglass.observability import clear_context, reset_logging, reset_tracing

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Reset process-wide state before and after each test."""
    clear_settings_cache()
    reset_global_registry()
    reset_logging()
    clear_context()
    reset_tracing()
    yield
    clear_settings_cache()
    reset_global_registry()
    reset_logging()
    clear_context()
    reset_tracing()


@pytest.fixture
def types() -> TypeSystem:
    """A fresh type system with a few enums, flags and object types."""
    types = create_type_system()
    types.register(
        "VipsKernel",
        "GEnum",
        type_class=EnumClass(
            (
                EnumValue(0, "nearest", "VIPS_KERNEL_NEAREST"),
                EnumValue(1, "linear", "VIPS_KERNEL_LINEAR"),
                EnumValue(5, "lanczos3", "VIPS_KERNEL_LANCZOS3"),
            )
        ),
    )
    types.register(
        "VipsForeignKeep",
        "GFlags",
        type_class=FlagsClass(
            (
                EnumValue(0, "none", "VIPS_FOREIGN_KEEP_NONE"),
                EnumValue(1, "exif", "VIPS_FOREIGN_KEEP_EXIF"),
                EnumValue(2, "xmp", "VIPS_FOREIGN_KEEP_XMP"),
            )
        ),
    )
    types.register(
        "VipsInterpolate",
        "VipsObject",
        abstract=True,
        type_class=ObjectClass("interpolate", "VIPS interpolators"),
    )
    return types


@pytest.fixture
def builtin_types() -> TypeSystem:
    """A fresh type system with the builtin catalog loaded."""
    types = create_type_system()
    load_builtin_catalog(types)
    return types
