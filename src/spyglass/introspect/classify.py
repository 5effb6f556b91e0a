"""Parameter classification.

Maps a parameter descriptor onto exactly one ``TypeCategory``. The category
predicates overlap (an image is also an object, a blob is also boxed), so
classification is an ordered rule list where the first match wins and the
list ends in a failure. Categories are plain data; see ``render`` for the
text form.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import ClassVar

from spyglass.core.errors import UnsupportedBoxedTypeError, UnsupportedValueTypeError
from spyglass.core.params import (
    BooleanParamSpec,
    BoxedParamSpec,
    DoubleParamSpec,
    EnumParamSpec,
    FlagsParamSpec,
    IntParamSpec,
    ParamSpec,
    UInt64ParamSpec,
)
from spyglass.core.types import STRING_TYPE_ID, EnumValue, TypeSystem

# Operation types matching this pattern hand out their blob as a colour
# profile handle rather than raw bytes. Only the owning type can tell.
PROFILE_LOAD_PATTERN = "*ProfileLoad*"


@dataclass(frozen=True, slots=True)
class ImageCategory:
    kind: ClassVar[str] = "image"


@dataclass(frozen=True, slots=True)
class ObjectCategory:
    kind: ClassVar[str] = "object"

    type_name: str
    description: str


@dataclass(frozen=True, slots=True)
class BooleanCategory:
    kind: ClassVar[str] = "bool"

    default: bool


@dataclass(frozen=True, slots=True)
class IntCategory:
    kind: ClassVar[str] = "int"

    minimum: int
    maximum: int
    default: int


@dataclass(frozen=True, slots=True)
class UInt64Category:
    kind: ClassVar[str] = "uint64"

    minimum: int
    maximum: int
    default: int


@dataclass(frozen=True, slots=True)
class DoubleCategory:
    kind: ClassVar[str] = "double"

    minimum: float
    maximum: float
    default: float


@dataclass(frozen=True, slots=True)
class EnumCategory:
    """Exclusive choice; ``values`` is the full table in declared order."""

    kind: ClassVar[str] = "enum"

    type_name: str
    values: tuple[EnumValue, ...]
    default: int


@dataclass(frozen=True, slots=True)
class ArrayIntCategory:
    kind: ClassVar[str] = "array-int"


@dataclass(frozen=True, slots=True)
class ArrayDoubleCategory:
    kind: ClassVar[str] = "array-double"


@dataclass(frozen=True, slots=True)
class ArrayImageCategory:
    kind: ClassVar[str] = "array-image"


@dataclass(frozen=True, slots=True)
class ProfileBlobCategory:
    kind: ClassVar[str] = "profile-blob"


@dataclass(frozen=True, slots=True)
class ByteDataCategory:
    kind: ClassVar[str] = "byte-data"


@dataclass(frozen=True, slots=True)
class StringCategory:
    kind: ClassVar[str] = "string"


@dataclass(frozen=True, slots=True)
class FlagsCategory:
    """Bitwise-combinable choice; ``values`` is the full table in declared order."""

    kind: ClassVar[str] = "flags"

    type_name: str
    values: tuple[EnumValue, ...]
    default: int


TypeCategory = (
    ImageCategory
    | ObjectCategory
    | BooleanCategory
    | IntCategory
    | UInt64Category
    | DoubleCategory
    | EnumCategory
    | ArrayIntCategory
    | ArrayDoubleCategory
    | ArrayImageCategory
    | ProfileBlobCategory
    | ByteDataCategory
    | StringCategory
    | FlagsCategory
)

Predicate = Callable[[ParamSpec, TypeSystem], bool]
Extractor = Callable[[ParamSpec, TypeSystem], TypeCategory]


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """One ``(predicate, extractor)`` pair of the ordered rule list."""

    name: str
    matches: Predicate
    extract: Extractor


def _owner_name(spec: ParamSpec) -> str:
    return spec.owner_type.name if spec.owner_type is not None else ""


def _is_profile_blob(spec: ParamSpec, types: TypeSystem) -> bool:
    return spec.value_type.is_a(types.from_name("VipsBlob")) and fnmatchcase(
        _owner_name(spec), PROFILE_LOAD_PATTERN
    )


def _is_blob(spec: ParamSpec, types: TypeSystem) -> bool:
    return spec.value_type.is_a(types.from_name("VipsBlob"))


def _is_boxed_a(type_name: str) -> Predicate:
    def matches(spec: ParamSpec, types: TypeSystem) -> bool:
        return spec.value_type.is_a(types.from_name(type_name))

    return matches


BOXED_RULES: tuple[tuple[str, Predicate, TypeCategory], ...] = (
    ("array of int", _is_boxed_a("VipsArrayInt"), ArrayIntCategory()),
    ("array of double", _is_boxed_a("VipsArrayDouble"), ArrayDoubleCategory()),
    ("array of images", _is_boxed_a("VipsArrayImage"), ArrayImageCategory()),
    # Must precede the generic blob rule.
    ("profile blob", _is_profile_blob, ProfileBlobCategory()),
    ("byte data", _is_blob, ByteDataCategory()),
)


def _classify_boxed(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    for _name, matches, category in BOXED_RULES:
        if matches(spec, types):
            return category
    raise UnsupportedBoxedTypeError(spec.name, spec.value_type.name)


def _extract_object(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    return ObjectCategory(
        type_name=spec.value_type.class_name(),
        description=spec.value_type.class_description(),
    )


def _extract_enum(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    if not isinstance(spec, EnumParamSpec):
        raise UnsupportedValueTypeError(spec.name, spec.value_type.name)
    return EnumCategory(
        type_name=spec.value_type.name,
        values=spec.enum_class.values,
        default=spec.default,
    )


def _extract_flags(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    if not isinstance(spec, FlagsParamSpec):
        raise UnsupportedValueTypeError(spec.name, spec.value_type.name)
    return FlagsCategory(
        type_name=spec.value_type.name,
        values=spec.flags_class.values,
        default=spec.default,
    )


def _extract_bounds(category: type[IntCategory | UInt64Category]) -> Extractor:
    def extract(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
        if not isinstance(spec, IntParamSpec | UInt64ParamSpec):
            raise UnsupportedValueTypeError(spec.name, spec.value_type.name)
        return category(minimum=spec.minimum, maximum=spec.maximum, default=spec.default)

    return extract


def _extract_double(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    if not isinstance(spec, DoubleParamSpec):
        raise UnsupportedValueTypeError(spec.name, spec.value_type.name)
    return DoubleCategory(
        minimum=float(spec.minimum),
        maximum=float(spec.maximum),
        default=float(spec.default),
    )


def _extract_boolean(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    if not isinstance(spec, BooleanParamSpec):
        raise UnsupportedValueTypeError(spec.name, spec.value_type.name)
    return BooleanCategory(default=spec.default)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        "image",
        lambda spec, types: spec.value_type.is_a(types.image_type),
        lambda spec, types: ImageCategory(),
    ),
    ClassificationRule(
        "object",
        lambda spec, types: (
            spec.value_type.is_a(types.object_type)
            and types.class_ref(spec.value_type) is not None
        ),
        _extract_object,
    ),
    ClassificationRule(
        "bool",
        lambda spec, types: isinstance(spec, BooleanParamSpec),
        _extract_boolean,
    ),
    ClassificationRule(
        "int",
        lambda spec, types: isinstance(spec, IntParamSpec),
        _extract_bounds(IntCategory),
    ),
    ClassificationRule(
        "uint64",
        lambda spec, types: isinstance(spec, UInt64ParamSpec),
        _extract_bounds(UInt64Category),
    ),
    ClassificationRule(
        "double",
        lambda spec, types: isinstance(spec, DoubleParamSpec),
        _extract_double,
    ),
    ClassificationRule(
        "enum",
        lambda spec, types: isinstance(spec, EnumParamSpec),
        _extract_enum,
    ),
    ClassificationRule(
        "boxed",
        lambda spec, types: isinstance(spec, BoxedParamSpec),
        _classify_boxed,
    ),
    ClassificationRule(
        "string",
        lambda spec, types: spec.value_type.type_id == STRING_TYPE_ID,
        lambda spec, types: StringCategory(),
    ),
    ClassificationRule(
        "flags",
        lambda spec, types: isinstance(spec, FlagsParamSpec),
        _extract_flags,
    ),
)


class Classifier:
    """Applies the ordered rule list against one type system."""

    def __init__(
        self,
        types: TypeSystem,
        rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
    ) -> None:
        self.types = types
        self.rules = rules

    def classify(self, spec: ParamSpec) -> TypeCategory:
        """Classify one descriptor.

        Raises:
            UnsupportedBoxedTypeError: For a boxed type with no category.
            UnsupportedValueTypeError: When no rule matches.
        """
        for rule in self.rules:
            if rule.matches(spec, self.types):
                return rule.extract(spec, self.types)
        raise UnsupportedValueTypeError(spec.name, spec.value_type.name)


def classify(spec: ParamSpec, types: TypeSystem) -> TypeCategory:
    """Classify one descriptor with the default rules."""
    return Classifier(types).classify(spec)
