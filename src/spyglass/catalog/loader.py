"""Catalog loading.

Turns catalog definitions into registered types.
"""

from __future__ import annotations

import tomllib
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from spyglass.catalog.models import ArgumentDef, CatalogFile, EnumDef, OperationDef
from spyglass.core.errors import CatalogError, TypeSystemError
from spyglass.core.operation import Argument, ArgumentFlags, OperationFlags, define_operation
from spyglass.core.params import (
    DOUBLE_MAX,
    INT64_MAX,
    INT64_MIN,
    UINT64_MAX,
    BooleanParamSpec,
    BoxedParamSpec,
    DoubleParamSpec,
    EnumParamSpec,
    FlagsParamSpec,
    IntParamSpec,
    ObjectParamSpec,
    ParamSpec,
    StringParamSpec,
    UInt64ParamSpec,
)
from spyglass.core.types import EnumClass, EnumValue, FlagsClass, ObjectClass
from spyglass.observability import get_logger, traced

if TYPE_CHECKING:
    from spyglass.core.types import TypeHandle, TypeSystem

logger = get_logger(__name__)

BUILTIN_CATALOG = "vips.toml"

_ROLE_FLAGS: dict[str, ArgumentFlags] = {
    "required-input": ArgumentFlags.REQUIRED | ArgumentFlags.INPUT,
    "optional-input": ArgumentFlags.INPUT,
    "required-output": ArgumentFlags.REQUIRED | ArgumentFlags.OUTPUT,
    "optional-output": ArgumentFlags.OUTPUT,
}

_DEFAULT_VALUE_TYPES: dict[str, str] = {
    "image": "VipsImage",
    "bool": "gboolean",
    "int": "gint",
    "uint64": "guint64",
    "double": "gdouble",
    "string": "gchararray",
}

# Kinds whose value type must be named explicitly.
_TYPED_KINDS = frozenset({"object", "enum", "flags", "boxed", "value"})


def _argument_flags(arg: ArgumentDef) -> ArgumentFlags:
    flags = _ROLE_FLAGS[arg.role]
    if arg.construction:
        flags |= ArgumentFlags.CONSTRUCT | ArgumentFlags.SET_ONCE
    if arg.deprecated:
        flags |= ArgumentFlags.DEPRECATED
    return flags


def _as_int(arg: ArgumentDef, field: str, value: Any, fallback: int) -> int:
    if value is None:
        return fallback
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise CatalogError(f"{arg.name}: {field} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise CatalogError(f"{arg.name}: {field} must be an integer, got {value}")
    return int(value)


def _as_float(arg: ArgumentDef, field: str, value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise CatalogError(f"{arg.name}: {field} must be a number")
    return float(value)


def _build_spec(arg: ArgumentDef, types: TypeSystem) -> ParamSpec:
    if arg.kind in _TYPED_KINDS and arg.type is None:
        raise CatalogError(f"{arg.name}: kind '{arg.kind}' needs a type")

    type_name = arg.type or _DEFAULT_VALUE_TYPES[arg.kind]
    value_type = types.from_name(type_name)
    common: dict[str, Any] = {
        "name": arg.name,
        "nick": arg.nick or arg.name,
        "blurb": arg.blurb,
        "value_type": value_type,
    }

    if arg.kind in ("image", "object"):
        return ObjectParamSpec(**common)
    if arg.kind == "bool":
        if arg.default is not None and not isinstance(arg.default, bool):
            raise CatalogError(f"{arg.name}: default must be a boolean")
        return BooleanParamSpec(**common, default=bool(arg.default))
    if arg.kind == "int":
        return IntParamSpec(
            **common,
            minimum=_as_int(arg, "minimum", arg.minimum, INT64_MIN),
            maximum=_as_int(arg, "maximum", arg.maximum, INT64_MAX),
            default=_as_int(arg, "default", arg.default, 0),
        )
    if arg.kind == "uint64":
        return UInt64ParamSpec(
            **common,
            minimum=_as_int(arg, "minimum", arg.minimum, 0),
            maximum=_as_int(arg, "maximum", arg.maximum, UINT64_MAX),
            default=_as_int(arg, "default", arg.default, 0),
        )
    if arg.kind == "double":
        return DoubleParamSpec(
            **common,
            minimum=_as_float(arg, "minimum", arg.minimum, -DOUBLE_MAX),
            maximum=_as_float(arg, "maximum", arg.maximum, DOUBLE_MAX),
            default=_as_float(arg, "default", arg.default, 0.0),
        )
    if arg.kind == "enum":
        default = _as_int(arg, "default", arg.default, _first_value(value_type))
        return EnumParamSpec(**common, default=default)
    if arg.kind == "flags":
        return FlagsParamSpec(**common, default=_as_int(arg, "default", arg.default, 0))
    if arg.kind == "boxed":
        return BoxedParamSpec(**common)
    if arg.kind == "string":
        if arg.default is not None and not isinstance(arg.default, str):
            raise CatalogError(f"{arg.name}: default must be a string")
        return StringParamSpec(**common, default=arg.default)
    return ParamSpec(**common)


def _first_value(value_type: TypeHandle) -> int:
    klass = value_type.type_class
    if isinstance(klass, EnumClass):
        return klass.values[0].value
    return 0


def _value_table(definition: EnumDef) -> tuple[EnumValue, ...]:
    return tuple(EnumValue(v.value, v.nick, v.name) for v in definition.values)


def _register_operation(definition: OperationDef, types: TypeSystem) -> None:
    flags = OperationFlags.NONE
    for name in definition.flags:
        flags |= OperationFlags[name.upper()]

    arguments = [
        Argument(spec=_build_spec(arg, types), flags=_argument_flags(arg), priority=arg.priority)
        for arg in definition.arguments
    ]
    define_operation(
        types,
        definition.name,
        definition.parent,
        nickname=definition.nickname,
        description=definition.description,
        abstract=definition.abstract,
        flags=flags,
        arguments=arguments,
    )


def load_catalog_data(data: dict[str, Any], types: TypeSystem, *, source: str = "<data>") -> int:
    """Register every type declared in parsed catalog data.

    Args:
        data: Parsed catalog (e.g., from ``tomllib``).
        types: Type system to register into.
        source: Name used in error messages.

    Returns:
        Number of types registered.

    Raises:
        CatalogError: If the catalog is invalid or conflicts with the type system.
    """
    try:
        catalog = CatalogFile.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"{source}: {e}") from e

    current = "<catalog>"
    try:
        for definition in catalog.enums:
            current = definition.name
            types.register(definition.name, "GEnum", type_class=EnumClass(_value_table(definition)))
        for definition in catalog.flags:
            current = definition.name
            types.register(
                definition.name, "GFlags", type_class=FlagsClass(_value_table(definition))
            )
        for obj in catalog.objects:
            current = obj.name
            types.register(
                obj.name,
                obj.parent,
                abstract=obj.abstract,
                type_class=ObjectClass(nickname=obj.nickname, description=obj.description),
            )
        for operation in catalog.operations:
            current = operation.name
            _register_operation(operation, types)
    except CatalogError as e:
        raise CatalogError(f"{source}: {current}: {e}") from e
    except TypeSystemError as e:
        raise CatalogError(f"{source}: {current}: {e}") from e

    count = (
        len(catalog.enums) + len(catalog.flags) + len(catalog.objects) + len(catalog.operations)
    )
    logger.debug("catalog.loaded", source=source, types=count)
    return count


@traced("catalog.load")
def load_catalog(path: Path | str, types: TypeSystem) -> int:
    """Load a TOML catalog file into ``types``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CatalogError: If the file is not valid TOML or not a valid catalog.
    """
    path = Path(path)
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise CatalogError(f"{path}: {e}") from e
    return load_catalog_data(data, types, source=str(path))


def load_builtin_catalog(types: TypeSystem) -> int:
    """Load the catalog shipped with Spyglass."""
    resource = resources.files("spyglass.catalog").joinpath("data", BUILTIN_CATALOG)
    data = tomllib.loads(resource.read_text(encoding="utf-8"))
    return load_catalog_data(data, types, source=f"builtin:{BUILTIN_CATALOG}")
