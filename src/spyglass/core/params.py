"""Parameter descriptors.

A ``ParamSpec`` describes one named parameter of an operation: its labels,
its declared value type and the operation type that installed it. Subclasses
carry the payload of their kind (bounds, defaults, value tables). Descriptors
are immutable; installing one on an operation class returns a copy with
``owner_type`` set.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Self

from spyglass.core.errors import TypeSystemError
from spyglass.core.types import EnumClass, FlagsClass

if TYPE_CHECKING:
    from spyglass.core.types import TypeHandle

DOUBLE_MAX = sys.float_info.max
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1


@dataclass(frozen=True, slots=True, kw_only=True)
class ParamSpec:
    """Base parameter descriptor.

    A bare ``ParamSpec`` stands for a value type with no specialised payload
    (pointers, floats, 64-bit signed ints).

    Attributes:
        name: Parameter name, unique within its operation.
        nick: Short human label.
        blurb: Human description.
        value_type: Declared value type.
        owner_type: Type of the operation class that installed the parameter.
    """

    name: str
    nick: str
    blurb: str
    value_type: TypeHandle
    owner_type: TypeHandle | None = None

    def with_owner(self, owner: TypeHandle) -> Self:
        """Return a copy installed on ``owner``."""
        return replace(self, owner_type=owner)


@dataclass(frozen=True, slots=True, kw_only=True)
class BooleanParamSpec(ParamSpec):
    default: bool = False


def _check_range(spec: ParamSpec, minimum: float, maximum: float, default: float) -> None:
    if minimum > maximum:
        raise TypeSystemError(f"{spec.name}: minimum {minimum} exceeds maximum {maximum}")
    if not minimum <= default <= maximum:
        raise TypeSystemError(
            f"{spec.name}: default {default} outside [{minimum}, {maximum}]"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class IntParamSpec(ParamSpec):
    """Signed integer parameter with 64-bit bounds."""

    minimum: int = INT64_MIN
    maximum: int = INT64_MAX
    default: int = 0

    def __post_init__(self) -> None:
        if self.minimum < INT64_MIN or self.maximum > INT64_MAX:
            raise TypeSystemError(f"{self.name}: bounds exceed 64-bit signed range")
        _check_range(self, self.minimum, self.maximum, self.default)


@dataclass(frozen=True, slots=True, kw_only=True)
class UInt64ParamSpec(ParamSpec):
    """Unsigned 64-bit integer parameter."""

    minimum: int = 0
    maximum: int = UINT64_MAX
    default: int = 0

    def __post_init__(self) -> None:
        if self.minimum < 0 or self.maximum > UINT64_MAX:
            raise TypeSystemError(f"{self.name}: bounds exceed unsigned 64-bit range")
        _check_range(self, self.minimum, self.maximum, self.default)


@dataclass(frozen=True, slots=True, kw_only=True)
class DoubleParamSpec(ParamSpec):
    """Double precision parameter."""

    minimum: float = -DOUBLE_MAX
    maximum: float = DOUBLE_MAX
    default: float = 0.0

    def __post_init__(self) -> None:
        _check_range(self, self.minimum, self.maximum, self.default)


@dataclass(frozen=True, slots=True, kw_only=True)
class EnumParamSpec(ParamSpec):
    """Exclusive choice from an enum type."""

    default: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.value_type.type_class, EnumClass):
            raise TypeSystemError(f"{self.name}: {self.value_type.name} is not an enum type")
        if not self.enum_class.accepts(self.default):
            raise TypeSystemError(
                f"{self.name}: default {self.default} is not a value of {self.value_type.name}"
            )

    @property
    def enum_class(self) -> EnumClass:
        return self.value_type.type_class  # type: ignore[no-any-return]


@dataclass(frozen=True, slots=True, kw_only=True)
class FlagsParamSpec(ParamSpec):
    """Bitwise combination of a flags type."""

    default: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.value_type.type_class, FlagsClass):
            raise TypeSystemError(f"{self.name}: {self.value_type.name} is not a flags type")
        if not self.flags_class.accepts(self.default):
            raise TypeSystemError(
                f"{self.name}: default {self.default} has bits outside {self.value_type.name}"
            )

    @property
    def flags_class(self) -> FlagsClass:
        return self.value_type.type_class  # type: ignore[no-any-return]


@dataclass(frozen=True, slots=True, kw_only=True)
class BoxedParamSpec(ParamSpec):
    """Composite value (arrays, blobs)."""


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectParamSpec(ParamSpec):
    """Reference to an object instance."""


@dataclass(frozen=True, slots=True, kw_only=True)
class StringParamSpec(ParamSpec):
    default: str | None = None
