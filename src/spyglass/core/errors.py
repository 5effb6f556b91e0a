"""Error hierarchy for Spyglass.

Every failure is fatal to a report run. Library code raises these; only the
CLI turns them into an exit status.
"""

from __future__ import annotations


class SpyglassError(Exception):
    """Base exception for all Spyglass errors."""


class TypeSystemError(SpyglassError):
    """Raised when the host type system is used incorrectly."""


class TypeNotFoundError(TypeSystemError):
    """Raised when a type name is not registered."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Type not found: {type_name}")


class TypeAlreadyRegisteredError(TypeSystemError):
    """Raised when registering a type name twice."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Type already registered: {type_name}")


class ClassificationError(SpyglassError):
    """Raised when a parameter cannot be mapped to any category."""

    def __init__(self, message: str, *, parameter: str, type_name: str) -> None:
        self.parameter = parameter
        self.type_name = type_name
        super().__init__(message)


class UnsupportedBoxedTypeError(ClassificationError):
    """Raised for a boxed value type with no known category."""

    def __init__(self, parameter: str, type_name: str) -> None:
        super().__init__(
            f"unsupported boxed type {type_name} (parameter '{parameter}')",
            parameter=parameter,
            type_name=type_name,
        )


class UnsupportedValueTypeError(ClassificationError):
    """Raised when every category predicate rejected the parameter."""

    def __init__(self, parameter: str, type_name: str) -> None:
        super().__init__(
            f"unsupported type {type_name} (parameter '{parameter}')",
            parameter=parameter,
            type_name=type_name,
        )


class InstantiationError(SpyglassError):
    """Raised when the registry cannot construct an operation."""

    def __init__(self, type_name: str, reason: str) -> None:
        self.type_name = type_name
        self.reason = reason
        super().__init__(f"Cannot instantiate {type_name}: {reason}")


class RegistryInitError(SpyglassError):
    """Raised when the operation registry cannot be opened."""


class CatalogError(SpyglassError):
    """Raised when an operation catalog is invalid."""


class ReportParseError(SpyglassError):
    """Raised when a report does not follow the report grammar."""

    def __init__(self, message: str, *, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")
