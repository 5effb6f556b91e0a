"""Operation registry.

The registry is the introspector's view of the host: it enumerates operation
types, instantiates and releases them, and answers flag and argument queries.
``TypeSystemRegistry`` implements it over a ``TypeSystem``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

from spyglass.core.errors import InstantiationError, RegistryInitError
from spyglass.core.operation import Argument, Operation, OperationClass, OperationFlags

if TYPE_CHECKING:
    from types import TracebackType

    from spyglass.core.types import TypeHandle, TypeSystem

DEFAULT_ROOT_TYPE = "VipsOperation"

_SUMMARY_FLAGS = (
    (OperationFlags.SEQUENTIAL, "sequential"),
    (OperationFlags.NOCACHE, "nocache"),
    (OperationFlags.DEPRECATED, "deprecated"),
)


@runtime_checkable
class OperationRegistry(Protocol):
    """Protocol for operation registries.

    ``open`` and ``close`` bracket a walk; every other method requires an
    open registry. ``types`` is the type system its descriptors come from.
    """

    types: TypeSystem

    def open(self) -> None:
        """Prepare the registry for use.

        Raises:
            RegistryInitError: If the registry cannot be initialised.
        """
        ...

    def close(self) -> None:
        """Release registry resources."""
        ...

    def enumerate_types(self, root_name: str) -> Iterator[TypeHandle]:
        """Yield ``root_name`` and every type below it, in traversal order."""
        ...

    def is_abstract(self, type_handle: TypeHandle) -> bool:
        ...

    def instantiate(self, type_handle: TypeHandle) -> Operation:
        """Create an operation instance.

        Raises:
            InstantiationError: If the operation cannot be constructed.
        """
        ...

    def release(self, operation: Operation) -> None:
        ...

    def get_flags(self, operation: Operation) -> OperationFlags:
        ...

    def declared_parameters(self, operation: Operation) -> list[Argument]:
        """Arguments of an instance in declared order."""
        ...

    def class_summary(self, type_handle: TypeHandle) -> str:
        """One or more lines describing the class."""
        ...


class TypeSystemRegistry:
    """Operation registry backed by a ``TypeSystem``.

    Example:
        with TypeSystemRegistry(types) as registry:
            for handle in registry.enumerate_types("VipsOperation"):
                ...
    """

    def __init__(self, types: TypeSystem) -> None:
        self.types = types
        self._open = False
        self._live: set[int] = set()

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def live_instances(self) -> int:
        """Number of instances created and not yet released."""
        return len(self._live)

    def open(self) -> None:
        if DEFAULT_ROOT_TYPE not in self.types:
            raise RegistryInitError(f"Type system has no {DEFAULT_ROOT_TYPE} base type")
        self._open = True

    def close(self) -> None:
        self._open = False

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._open:
            raise RegistryInitError("Registry is not open")

    def enumerate_types(self, root_name: str) -> Iterator[TypeHandle]:
        self._require_open()
        root = self.types.find(root_name)
        if root is None:
            raise RegistryInitError(f"Unknown root type: {root_name}")
        if not root.is_a(self.types.operation_type):
            raise RegistryInitError(f"Root type {root_name} is not an operation type")
        return self.types.walk(root)

    def is_abstract(self, type_handle: TypeHandle) -> bool:
        return type_handle.abstract

    def instantiate(self, type_handle: TypeHandle) -> Operation:
        self._require_open()
        if type_handle.abstract:
            raise InstantiationError(type_handle.name, "type is abstract")
        if not isinstance(type_handle.type_class, OperationClass):
            raise InstantiationError(type_handle.name, "not an operation type")

        try:
            operation = Operation.create(type_handle)
        except Exception as e:
            raise InstantiationError(type_handle.name, str(e) or type(e).__name__) from e

        self._live.add(id(operation))
        return operation

    def release(self, operation: Operation) -> None:
        self._live.discard(id(operation))
        operation.release()

    def get_flags(self, operation: Operation) -> OperationFlags:
        return operation.flags

    def declared_parameters(self, operation: Operation) -> list[Argument]:
        return operation.arguments()

    def class_summary(self, type_handle: TypeHandle) -> str:
        """Summarise a class as ``TypeName (nickname), description[, flag]...``."""
        klass = type_handle.type_class
        summary = type_handle.name
        nickname = getattr(klass, "nickname", "")
        if nickname:
            summary += f" ({nickname})"
        description = type_handle.class_description()
        if description:
            summary += f", {description}"
        if isinstance(klass, OperationClass):
            for flag, label in _SUMMARY_FLAGS:
                if flag in klass.flags:
                    summary += f", {label}"
        return summary


# Global registry instance
_global_registry: TypeSystemRegistry | None = None


def get_global_registry() -> TypeSystemRegistry:
    """Get the process-wide registry, creating it with the builtin catalog if needed."""
    global _global_registry  # noqa: PLW0603
    if _global_registry is None:
        from spyglass.catalog import load_builtin_catalog
        from spyglass.core.types import create_type_system

        types = create_type_system()
        load_builtin_catalog(types)
        _global_registry = TypeSystemRegistry(types)
    return _global_registry


def reset_global_registry() -> None:
    """Drop the process-wide registry. Useful for testing."""
    global _global_registry  # noqa: PLW0603
    _global_registry = None
