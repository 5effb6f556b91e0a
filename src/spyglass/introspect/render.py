"""Text rendering of type categories.

This is the only place that decides how a category looks in a report.
"""

from __future__ import annotations

from spyglass.core.types import EnumValue
from spyglass.introspect.classify import (
    ArrayDoubleCategory,
    ArrayImageCategory,
    ArrayIntCategory,
    BooleanCategory,
    ByteDataCategory,
    DoubleCategory,
    EnumCategory,
    FlagsCategory,
    ImageCategory,
    IntCategory,
    ObjectCategory,
    ProfileBlobCategory,
    StringCategory,
    TypeCategory,
    UInt64Category,
)

# Categories rendered as one fixed keyword line.
KEYWORDS: dict[type, str] = {
    ImageCategory: "VipsImage",
    ArrayIntCategory: "array of int",
    ArrayDoubleCategory: "array of double",
    ArrayImageCategory: "array of images",
    ProfileBlobCategory: "VipsBlob",
    ByteDataCategory: "byte-data",
    StringCategory: "string",
}


def format_double(value: float) -> str:
    """Shortest round-trippable form, without a trailing ``.0``.

    >>> format_double(-1.0), format_double(0.5), format_double(1e300)
    ('-1', '0.5', '1e+300')
    """
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _value_table(values: tuple[EnumValue, ...]) -> list[str]:
    return [f"{row.value}:{row.nick}:{row.name}" for row in values]


def render_category(category: TypeCategory) -> list[str]:
    """Render a category as report lines."""
    keyword = KEYWORDS.get(type(category))
    if keyword is not None:
        return [keyword]

    if isinstance(category, ObjectCategory):
        return [f"{category.type_name}-{category.description}"]
    if isinstance(category, BooleanCategory):
        return [f"bool:{int(category.default)}"]
    if isinstance(category, IntCategory):
        return [f"int:{category.minimum}:{category.maximum}:{category.default}"]
    if isinstance(category, UInt64Category):
        return [f"uint64:{category.minimum}:{category.maximum}:{category.default}"]
    if isinstance(category, DoubleCategory):
        bounds = (category.minimum, category.maximum, category.default)
        return ["double:" + ":".join(format_double(v) for v in bounds)]
    if isinstance(category, EnumCategory):
        return [
            f"enum-{category.type_name}",
            *_value_table(category.values),
            str(category.default),
        ]
    if isinstance(category, FlagsCategory):
        return [
            f"flags-{category.type_name}",
            *_value_table(category.values),
            str(category.default),
        ]

    raise TypeError(f"Not a type category: {category!r}")
