"""Operation classes and instances.

An operation type is a ``TypeHandle`` below ``VipsOperation`` whose class data
is an ``OperationClass``. The class declares arguments (a descriptor plus
``ArgumentFlags``); arguments are inherited down the class chain. Instances
are created by the registry, queried for flags and arguments, then released.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Flag
from typing import TYPE_CHECKING

from spyglass.core.errors import TypeSystemError
from spyglass.core.types import ObjectClass

if TYPE_CHECKING:
    from spyglass.core.params import ParamSpec
    from spyglass.core.types import TypeHandle, TypeSystem


class ArgumentFlags(Flag):
    """Per-argument flags."""

    NONE = 0
    REQUIRED = 1
    CONSTRUCT = 2
    SET_ONCE = 4
    SET_ALWAYS = 8
    INPUT = 16
    OUTPUT = 32
    DEPRECATED = 64
    MODIFY = 128

    # Common combinations
    REQUIRED_INPUT = REQUIRED | CONSTRUCT | INPUT | SET_ONCE
    OPTIONAL_INPUT = CONSTRUCT | INPUT | SET_ONCE
    REQUIRED_OUTPUT = REQUIRED | CONSTRUCT | OUTPUT | SET_ONCE
    OPTIONAL_OUTPUT = CONSTRUCT | OUTPUT | SET_ONCE


class OperationFlags(Flag):
    """Per-operation flags."""

    NONE = 0
    SEQUENTIAL = 1
    NOCACHE = 4
    DEPRECATED = 8
    UNTRUSTED = 16
    BLOCKED = 32


@dataclass(frozen=True, slots=True)
class Argument:
    """One declared argument of an operation class.

    Attributes:
        spec: The parameter descriptor, with ``owner_type`` set.
        flags: Argument flags.
        priority: Sort key for declared order; ties keep declaration order.
    """

    spec: ParamSpec
    flags: ArgumentFlags
    priority: int = 0


@dataclass(frozen=True, slots=True)
class ParameterRole:
    """Role of one parameter within one operation."""

    is_deprecated: bool
    is_construction_parameter: bool
    is_required: bool
    is_input: bool

    @classmethod
    def from_flags(cls, flags: ArgumentFlags) -> ParameterRole:
        return cls(
            is_deprecated=bool(flags & ArgumentFlags.DEPRECATED),
            is_construction_parameter=bool(flags & ArgumentFlags.CONSTRUCT),
            is_required=bool(flags & ArgumentFlags.REQUIRED),
            is_input=bool(flags & ArgumentFlags.INPUT),
        )


# Called with the new instance; raising refuses construction.
OperationInit = Callable[["Operation"], None]


@dataclass(frozen=True, slots=True)
class OperationClass(ObjectClass):
    """Class data of an operation type.

    Attributes:
        flags: Class-level operation flags.
        arguments: Arguments declared by this class only, not its ancestors.
        init: Optional instance initialiser.
    """

    flags: OperationFlags = OperationFlags.NONE
    arguments: tuple[Argument, ...] = ()
    init: OperationInit | None = None


def collect_arguments(operation_type: TypeHandle) -> list[Argument]:
    """Every argument of an operation type, ancestors first, in declared order.

    Declared order is ascending priority; arguments with equal priority keep
    the order in which their classes declared them.
    """
    chain = [operation_type, *operation_type.ancestors()]
    chain.reverse()

    arguments: list[Argument] = []
    seen: set[str] = set()
    for handle in chain:
        klass = handle.type_class
        if not isinstance(klass, OperationClass):
            continue
        for argument in klass.arguments:
            # A subclass redeclaring a name replaces the inherited argument.
            if argument.spec.name in seen:
                arguments = [a for a in arguments if a.spec.name != argument.spec.name]
            seen.add(argument.spec.name)
            arguments.append(argument)

    return sorted(arguments, key=lambda a: a.priority)


@dataclass
class Operation:
    """A live operation instance.

    Attributes:
        type: The operation type.
        flags: Instance flags, initialised from the class and adjustable by
            the class ``init`` hook.
        released: Set once the registry releases the instance.
    """

    type: TypeHandle
    flags: OperationFlags = OperationFlags.NONE
    released: bool = False
    _arguments: list[Argument] = field(default_factory=list, repr=False)

    @classmethod
    def create(cls, operation_type: TypeHandle) -> Operation:
        """Construct an instance, running the class ``init`` hooks root first."""
        klass = operation_type.type_class
        flags = klass.flags if isinstance(klass, OperationClass) else OperationFlags.NONE
        operation = cls(
            type=operation_type,
            flags=flags,
            _arguments=collect_arguments(operation_type),
        )

        chain = [operation_type, *operation_type.ancestors()]
        for handle in reversed(chain):
            hook = getattr(handle.type_class, "init", None)
            if hook is not None:
                hook(operation)

        return operation

    def arguments(self) -> list[Argument]:
        """Declared arguments in declared order."""
        return list(self._arguments)

    def release(self) -> None:
        self.released = True
        self._arguments.clear()


def define_operation(
    types: TypeSystem,
    name: str,
    parent: TypeHandle | str = "VipsOperation",
    *,
    nickname: str,
    description: str,
    abstract: bool = False,
    flags: OperationFlags = OperationFlags.NONE,
    arguments: Iterable[Argument] = (),
    init: OperationInit | None = None,
) -> TypeHandle:
    """Register an operation type and install its arguments.

    Each argument's descriptor is copied with ``owner_type`` set to the new
    type.

    Raises:
        TypeSystemError: If the parent is not an operation type, or two
            arguments share a name.
    """
    parent_handle = types.from_name(parent) if isinstance(parent, str) else parent
    if not parent_handle.is_a(types.operation_type):
        raise TypeSystemError(f"{name}: parent {parent_handle.name} is not an operation type")

    handle = types.register(name, parent_handle, abstract=abstract)

    installed: list[Argument] = []
    names: set[str] = set()
    for argument in arguments:
        if argument.spec.name in names:
            raise TypeSystemError(f"{name}: duplicate argument '{argument.spec.name}'")
        names.add(argument.spec.name)
        installed.append(replace(argument, spec=argument.spec.with_owner(handle)))

    handle.type_class = OperationClass(
        nickname=nickname,
        description=description,
        flags=flags,
        arguments=tuple(installed),
        init=init,
    )
    return handle
