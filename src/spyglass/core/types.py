"""Host type system.

A small, single-inheritance dynamic type system modelled on GObject. Types are
registered by name under a parent, may be abstract, and may carry class data
(an object class with a nickname and description, or an enum/flags value
table). Handles are compared by identity and are unique per ``TypeSystem``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from spyglass.core.errors import (
    TypeAlreadyRegisteredError,
    TypeNotFoundError,
    TypeSystemError,
)

# Fundamental type ids follow GLib numbering: index << G_TYPE_FUNDAMENTAL_SHIFT.
_FUNDAMENTAL_SHIFT = 2
FUNDAMENTAL_IDS: dict[str, int] = {
    "void": 1 << _FUNDAMENTAL_SHIFT,
    "GInterface": 2 << _FUNDAMENTAL_SHIFT,
    "gchar": 3 << _FUNDAMENTAL_SHIFT,
    "guchar": 4 << _FUNDAMENTAL_SHIFT,
    "gboolean": 5 << _FUNDAMENTAL_SHIFT,
    "gint": 6 << _FUNDAMENTAL_SHIFT,
    "guint": 7 << _FUNDAMENTAL_SHIFT,
    "glong": 8 << _FUNDAMENTAL_SHIFT,
    "gulong": 9 << _FUNDAMENTAL_SHIFT,
    "gint64": 10 << _FUNDAMENTAL_SHIFT,
    "guint64": 11 << _FUNDAMENTAL_SHIFT,
    "GEnum": 12 << _FUNDAMENTAL_SHIFT,
    "GFlags": 13 << _FUNDAMENTAL_SHIFT,
    "gfloat": 14 << _FUNDAMENTAL_SHIFT,
    "gdouble": 15 << _FUNDAMENTAL_SHIFT,
    "gchararray": 16 << _FUNDAMENTAL_SHIFT,
    "gpointer": 17 << _FUNDAMENTAL_SHIFT,
    "GBoxed": 18 << _FUNDAMENTAL_SHIFT,
    "GParam": 19 << _FUNDAMENTAL_SHIFT,
    "GObject": 20 << _FUNDAMENTAL_SHIFT,
}

# Types derived from the fundamentals start above the reserved range.
_FIRST_DERIVED_ID = 1 << 8

STRING_TYPE_ID = FUNDAMENTAL_IDS["gchararray"]


@dataclass(frozen=True, slots=True)
class EnumValue:
    """One row of an enum or flags value table.

    Attributes:
        value: Integer value.
        nick: Short nickname (e.g., "nearest").
        name: Full symbolic name (e.g., "VIPS_KERNEL_NEAREST").
    """

    value: int
    nick: str
    name: str


@dataclass(frozen=True, slots=True)
class ObjectClass:
    """Class data for an object type."""

    nickname: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class EnumClass:
    """Value table of an enum type, in declared order."""

    values: tuple[EnumValue, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise TypeSystemError("Enum class needs at least one value")

    def get_value(self, value: int) -> EnumValue | None:
        """Look up a table row by integer value."""
        for row in self.values:
            if row.value == value:
                return row
        return None

    def accepts(self, value: int) -> bool:
        """Whether ``value`` is a legal value of this enum."""
        return self.get_value(value) is not None


@dataclass(frozen=True, slots=True)
class FlagsClass:
    """Value table of a flags (bitmask) type, in declared order."""

    values: tuple[EnumValue, ...]

    @property
    def mask(self) -> int:
        """Union of every declared bit."""
        mask = 0
        for row in self.values:
            mask |= row.value
        return mask

    def accepts(self, value: int) -> bool:
        """Whether ``value`` is a combination of declared bits."""
        return value & ~self.mask == 0


class TypeHandle:
    """Handle to one registered type.

    Handles are created by ``TypeSystem.register`` only. Equality is identity.
    """

    __slots__ = ("_children", "abstract", "name", "parent", "type_class", "type_id")

    def __init__(
        self,
        name: str,
        type_id: int,
        parent: TypeHandle | None,
        *,
        abstract: bool = False,
        type_class: Any = None,
    ) -> None:
        self.name = name
        self.type_id = type_id
        self.parent = parent
        self.abstract = abstract
        self.type_class = type_class
        self._children: list[TypeHandle] = []

    def __repr__(self) -> str:
        return f"TypeHandle({self.name!r}, id={self.type_id})"

    def is_a(self, other: TypeHandle) -> bool:
        """Whether this type is ``other`` or derives from it."""
        current: TypeHandle | None = self
        while current is not None:
            if current is other:
                return True
            current = current.parent
        return False

    def fundamental(self) -> TypeHandle:
        """The root of this type's hierarchy."""
        current = self
        while current.parent is not None:
            current = current.parent
        return current

    def class_name(self) -> str:
        """The registered type name."""
        return self.name

    def class_description(self) -> str:
        """Human description from the class data, or an empty string."""
        return getattr(self.type_class, "description", "") or ""

    def ancestors(self) -> Iterator[TypeHandle]:
        """Yield the parent chain, nearest first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    @property
    def children(self) -> tuple[TypeHandle, ...]:
        """Direct subtypes in registration order."""
        return tuple(self._children)


@dataclass
class TypeSystem:
    """Registry of types.

    Example:
        types = create_type_system()
        kernel = types.register(
            "VipsKernel",
            "GEnum",
            type_class=EnumClass((EnumValue(0, "nearest", "VIPS_KERNEL_NEAREST"),)),
        )
        assert kernel.is_a(types.from_name("GEnum"))
    """

    _types: dict[str, TypeHandle] = field(default_factory=dict)
    _next_id: int = _FIRST_DERIVED_ID

    def register(
        self,
        name: str,
        parent: TypeHandle | str | None = None,
        *,
        abstract: bool = False,
        type_class: Any = None,
    ) -> TypeHandle:
        """Register a new type.

        Args:
            name: Unique type name.
            parent: Parent handle or name. ``None`` registers a fundamental type.
            abstract: Whether the type can be instantiated.
            type_class: Optional class data.

        Returns:
            The new handle.

        Raises:
            TypeAlreadyRegisteredError: If the name is taken.
            TypeNotFoundError: If the parent name is unknown.
            TypeSystemError: If a fundamental name has no reserved id.
        """
        if name in self._types:
            raise TypeAlreadyRegisteredError(name)

        parent_handle = self.from_name(parent) if isinstance(parent, str) else parent

        if parent_handle is None:
            if name not in FUNDAMENTAL_IDS:
                raise TypeSystemError(f"'{name}' is not a fundamental type name")
            type_id = FUNDAMENTAL_IDS[name]
        else:
            if self._types.get(parent_handle.name) is not parent_handle:
                raise TypeSystemError(f"Parent {parent_handle.name} belongs to another type system")
            type_id = self._next_id
            self._next_id += 1

        handle = TypeHandle(
            name,
            type_id,
            parent_handle,
            abstract=abstract,
            type_class=type_class,
        )
        self._types[name] = handle
        if parent_handle is not None:
            parent_handle._children.append(handle)
        return handle

    def from_name(self, name: str) -> TypeHandle:
        """Get a type by name.

        Raises:
            TypeNotFoundError: If no such type is registered.
        """
        handle = self._types.get(name)
        if handle is None:
            raise TypeNotFoundError(name)
        return handle

    def find(self, name: str) -> TypeHandle | None:
        """Get a type by name, or None."""
        return self._types.get(name)

    def class_ref(self, handle: TypeHandle) -> Any:
        """Class data of a type, or None when it has none."""
        return handle.type_class

    def walk(self, root: TypeHandle) -> Iterator[TypeHandle]:
        """Yield ``root`` and every descendant, depth-first pre-order.

        Siblings are visited in registration order.
        """
        stack = [root]
        while stack:
            handle = stack.pop()
            yield handle
            stack.extend(reversed(handle._children))

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    # Frequently used builtins

    @property
    def image_type(self) -> TypeHandle:
        return self.from_name("VipsImage")

    @property
    def object_type(self) -> TypeHandle:
        return self.from_name("VipsObject")

    @property
    def operation_type(self) -> TypeHandle:
        return self.from_name("VipsOperation")

    @property
    def string_type(self) -> TypeHandle:
        return self.from_name("gchararray")

    @property
    def boxed_type(self) -> TypeHandle:
        return self.from_name("GBoxed")


_SCALAR_FUNDAMENTALS = (
    "gboolean",
    "gint",
    "guint",
    "gint64",
    "guint64",
    "gfloat",
    "gdouble",
    "gchararray",
    "gpointer",
)


def create_type_system() -> TypeSystem:
    """Create a type system seeded with the fundamentals and image builtins."""
    types = TypeSystem()

    for name in _SCALAR_FUNDAMENTALS:
        types.register(name)
    types.register("GEnum", abstract=True)
    types.register("GFlags", abstract=True)
    types.register("GBoxed", abstract=True)
    types.register("GObject")

    types.register(
        "VipsObject",
        "GObject",
        abstract=True,
        type_class=ObjectClass("object", "base class"),
    )
    types.register(
        "VipsImage",
        "VipsObject",
        type_class=ObjectClass("image", "image class"),
    )
    types.register(
        "VipsOperation",
        "VipsObject",
        abstract=True,
        type_class=ObjectClass("operation", "operations"),
    )

    types.register("VipsArea", "GBoxed")
    types.register("VipsArrayInt", "GBoxed")
    types.register("VipsArrayDouble", "GBoxed")
    types.register("VipsArrayImage", "GBoxed")
    types.register("VipsBlob", "VipsArea")
    types.register("VipsRefString", "VipsArea")

    return types
