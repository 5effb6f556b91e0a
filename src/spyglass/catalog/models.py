"""Catalog file models.

A catalog declares enums, flags, object types and operation types in TOML.
Entries are registered in file order, so a parent must appear before its
children (or come from an earlier catalog).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class EnumValueDef(_Model):
    value: int
    nick: str
    name: str


class EnumDef(_Model):
    """An enum or flags type and its value table, in declared order."""

    name: str
    values: list[EnumValueDef] = Field(min_length=1)


class ObjectDef(_Model):
    name: str
    parent: str = "VipsObject"
    abstract: bool = False
    nickname: str = ""
    description: str = ""


ArgumentKind = Literal[
    "image",
    "object",
    "bool",
    "int",
    "uint64",
    "double",
    "enum",
    "flags",
    "boxed",
    "string",
    "value",
]

ArgumentRole = Literal[
    "required-input",
    "optional-input",
    "required-output",
    "optional-output",
]


class ArgumentDef(_Model):
    """One operation argument.

    Attributes:
        kind: Descriptor kind; decides the default value type.
        type: Value type name. Required for object, enum, flags, boxed and
            value kinds.
        role: Required/optional and input/output.
        construction: Whether the argument is set at construction time.
            Written ``construct`` in catalog files.
        deprecated: Whether the argument is deprecated.
        priority: Declared-order sort key.
    """

    name: str
    nick: str = ""
    blurb: str = ""
    kind: ArgumentKind
    type: str | None = None
    role: ArgumentRole = "required-input"
    construction: bool = Field(default=True, alias="construct")
    deprecated: bool = False
    priority: int = 0
    minimum: int | float | None = None
    maximum: int | float | None = None
    default: bool | int | float | str | None = None


OperationFlagName = Literal["sequential", "nocache", "deprecated", "untrusted", "blocked"]


class OperationDef(_Model):
    name: str
    parent: str = "VipsOperation"
    abstract: bool = False
    nickname: str = ""
    description: str = ""
    flags: list[OperationFlagName] = Field(default_factory=list)
    arguments: list[ArgumentDef] = Field(default_factory=list)


class CatalogFile(_Model):
    """Top level of a catalog file."""

    enums: list[EnumDef] = Field(default_factory=list)
    flags: list[EnumDef] = Field(default_factory=list)
    objects: list[ObjectDef] = Field(default_factory=list)
    operations: list[OperationDef] = Field(default_factory=list)
