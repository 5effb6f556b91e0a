"""Report parser.

Reads a report back into structured records, for tools that consume the
report (binding generators, documentation builders). Categories are rebuilt
as the same ``TypeCategory`` values the classifier produces, so rendering a
parsed report reproduces its text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

from spyglass.core.errors import ReportParseError
from spyglass.core.types import EnumValue
from spyglass.introspect.classify import (
    BooleanCategory,
    DoubleCategory,
    EnumCategory,
    FlagsCategory,
    IntCategory,
    ObjectCategory,
    TypeCategory,
    UInt64Category,
)
from spyglass.introspect.render import KEYWORDS, render_category

_KEYWORD_CATEGORIES: dict[str, TypeCategory] = {
    keyword: category_type() for category_type, keyword in KEYWORDS.items()
}
_VALUE_ROW = re.compile(r"^(-?\d+):([^:]*):(.*)$")
_BOUNDED = {"int": IntCategory, "uint64": UInt64Category}


def category_to_dict(category: TypeCategory) -> dict[str, Any]:
    """JSON-ready view of a category, tagged with its kind."""
    return {"kind": category.kind, **asdict(category)}


@dataclass
class ParsedParameter:
    name: str
    nick: str
    description: str
    category: TypeCategory
    is_output: bool = False

    def lines(self) -> list[str]:
        head = ["PARAM:", "OUTPUT:"] if self.is_output else ["PARAM:"]
        return [*head, self.name, self.nick, self.description, *render_category(self.category)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "nick": self.nick,
            "description": self.description,
            "output": self.is_output,
            "type": category_to_dict(self.category),
        }


@dataclass
class ParsedOperation:
    nickname: str
    type_name: str
    summary: list[str] = field(default_factory=list)
    required: list[ParsedParameter] = field(default_factory=list)
    optional: list[ParsedParameter] = field(default_factory=list)

    def lines(self) -> list[str]:
        lines = ["OPERATION:", f"{self.nickname}:{self.type_name}", *self.summary, "REQUIRED:"]
        for param in self.required:
            lines.extend(param.lines())
        lines.append("OPTIONAL:")
        for param in self.optional:
            lines.extend(param.lines())
        return lines

    def to_dict(self) -> dict[str, Any]:
        return {
            "nickname": self.nickname,
            "type_name": self.type_name,
            "summary": list(self.summary),
            "required": [p.to_dict() for p in self.required],
            "optional": [p.to_dict() for p in self.optional],
        }


class _Cursor:
    """Line cursor with 1-based line numbers for error messages."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.index = 0

    @property
    def line_number(self) -> int:
        return self.index + 1

    def at_end(self) -> bool:
        return self.index >= len(self.lines)

    def peek(self) -> str | None:
        return None if self.at_end() else self.lines[self.index]

    def take(self, what: str) -> str:
        if self.at_end():
            raise ReportParseError(
                f"unexpected end of report, expected {what}", line_number=self.line_number
            )
        line = self.lines[self.index]
        self.index += 1
        return line

    def expect(self, keyword: str) -> None:
        line_number = self.line_number
        line = self.take(keyword)
        if line != keyword:
            raise ReportParseError(f"expected {keyword!r}, got {line!r}", line_number=line_number)

    def error(self, message: str) -> ReportParseError:
        # Points at the line just consumed.
        return ReportParseError(message, line_number=self.index)


def _parse_ints(cursor: _Cursor, fields: list[str]) -> list[int]:
    try:
        return [int(v) for v in fields]
    except ValueError:
        raise cursor.error(f"expected integers, got {':'.join(fields)!r}") from None


def _parse_value_table(cursor: _Cursor, type_name: str, *, flags: bool) -> TypeCategory:
    rows: list[EnumValue] = []
    while True:
        line = cursor.peek()
        match = _VALUE_ROW.match(line) if line is not None else None
        if match is None:
            break
        cursor.index += 1
        rows.append(EnumValue(int(match.group(1)), match.group(2), match.group(3)))

    line = cursor.take(f"default value of {type_name}")
    (default,) = _parse_ints(cursor, [line])
    if flags:
        return FlagsCategory(type_name=type_name, values=tuple(rows), default=default)
    return EnumCategory(type_name=type_name, values=tuple(rows), default=default)


def _parse_category(cursor: _Cursor) -> TypeCategory:
    line = cursor.take("a type line")

    keyword = _KEYWORD_CATEGORIES.get(line)
    if keyword is not None:
        return keyword

    head, _, rest = line.partition(":")
    if head == "bool" and rest in ("0", "1"):
        return BooleanCategory(default=rest == "1")
    if head in _BOUNDED:
        fields = rest.split(":")
        if len(fields) != 3:
            raise cursor.error(f"expected {head}:<min>:<max>:<default>, got {line!r}")
        minimum, maximum, default = _parse_ints(cursor, fields)
        return _BOUNDED[head](minimum=minimum, maximum=maximum, default=default)
    if head == "double":
        fields = rest.split(":")
        try:
            minimum, maximum, default = (float(v) for v in fields)
        except ValueError:
            raise cursor.error(f"expected double:<min>:<max>:<default>, got {line!r}") from None
        return DoubleCategory(minimum=minimum, maximum=maximum, default=default)

    if line.startswith("enum-"):
        return _parse_value_table(cursor, line.removeprefix("enum-"), flags=False)
    if line.startswith("flags-"):
        return _parse_value_table(cursor, line.removeprefix("flags-"), flags=True)

    type_name, dash, description = line.partition("-")
    if dash and type_name:
        return ObjectCategory(type_name=type_name, description=description)

    raise cursor.error(f"unknown type line {line!r}")


def _parse_parameter(cursor: _Cursor) -> ParsedParameter:
    cursor.expect("PARAM:")
    is_output = cursor.peek() == "OUTPUT:"
    if is_output:
        cursor.index += 1
    name = cursor.take("parameter name")
    nick = cursor.take("parameter nickname")
    description = cursor.take("parameter description")
    return ParsedParameter(
        name=name,
        nick=nick,
        description=description,
        category=_parse_category(cursor),
        is_output=is_output,
    )


def _parse_operation(cursor: _Cursor) -> ParsedOperation:
    cursor.expect("OPERATION:")
    header = cursor.take("nickname:typeName")
    nickname, colon, type_name = header.partition(":")
    if not colon or not type_name:
        raise cursor.error(f"expected nickname:typeName, got {header!r}")

    operation = ParsedOperation(nickname=nickname, type_name=type_name)
    while cursor.peek() != "REQUIRED:":
        operation.summary.append(cursor.take("REQUIRED:"))
    cursor.expect("REQUIRED:")

    while cursor.peek() != "OPTIONAL:":
        operation.required.append(_parse_parameter(cursor))
    cursor.expect("OPTIONAL:")

    while not cursor.at_end() and cursor.peek() != "OPERATION:":
        operation.optional.append(_parse_parameter(cursor))

    return operation


def parse_report(report: str | Iterable[str]) -> list[ParsedOperation]:
    """Parse report text (or its lines) into operation records.

    Raises:
        ReportParseError: If the input does not follow the report grammar.
    """
    lines = report.splitlines() if isinstance(report, str) else [
        line.rstrip("\n") for line in report
    ]
    while lines and not lines[-1]:
        lines.pop()

    cursor = _Cursor(lines)
    operations: list[ParsedOperation] = []
    while not cursor.at_end():
        operations.append(_parse_operation(cursor))
    return operations
