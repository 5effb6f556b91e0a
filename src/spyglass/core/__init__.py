"""Host type system, operation registry, configuration and errors."""

from spyglass.core.config import (
    GeneralSettings,
    ReportSettings,
    Settings,
    TracingSettings,
    clear_settings_cache,
    get_settings,
)
from spyglass.core.errors import (
    CatalogError,
    ClassificationError,
    InstantiationError,
    RegistryInitError,
    ReportParseError,
    SpyglassError,
    TypeAlreadyRegisteredError,
    TypeNotFoundError,
    TypeSystemError,
    UnsupportedBoxedTypeError,
    UnsupportedValueTypeError,
)
from spyglass.core.operation import (
    Argument,
    ArgumentFlags,
    Operation,
    OperationClass,
    OperationFlags,
    ParameterRole,
    define_operation,
)
from spyglass.core.params import (
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
from spyglass.core.registry import (
    DEFAULT_ROOT_TYPE,
    OperationRegistry,
    TypeSystemRegistry,
    get_global_registry,
    reset_global_registry,
)
from spyglass.core.types import (
    EnumClass,
    EnumValue,
    FlagsClass,
    ObjectClass,
    TypeHandle,
    TypeSystem,
    create_type_system,
)

__all__ = [
    "DEFAULT_ROOT_TYPE",
    "Argument",
    "ArgumentFlags",
    "BooleanParamSpec",
    "BoxedParamSpec",
    "CatalogError",
    "ClassificationError",
    "DoubleParamSpec",
    "EnumClass",
    "EnumParamSpec",
    "EnumValue",
    "FlagsClass",
    "FlagsParamSpec",
    "GeneralSettings",
    "InstantiationError",
    "IntParamSpec",
    "ObjectClass",
    "ObjectParamSpec",
    "Operation",
    "OperationClass",
    "OperationFlags",
    "OperationRegistry",
    "ParamSpec",
    "ParameterRole",
    "RegistryInitError",
    "ReportParseError",
    "ReportSettings",
    "Settings",
    "SpyglassError",
    "StringParamSpec",
    "TracingSettings",
    "TypeAlreadyRegisteredError",
    "TypeHandle",
    "TypeNotFoundError",
    "TypeSystem",
    "TypeSystemError",
    "TypeSystemRegistry",
    "UInt64ParamSpec",
    "UnsupportedBoxedTypeError",
    "UnsupportedValueTypeError",
    "clear_settings_cache",
    "create_type_system",
    "define_operation",
    "get_global_registry",
    "get_settings",
    "reset_global_registry",
]
