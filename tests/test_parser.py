"""Tests for the report parser."""

from __future__ import annotations

import pytest

from spyglass.core import ReportParseError, TypeSystem, TypeSystemRegistry
from spyglass.introspect import (
    BooleanCategory,
    DoubleCategory,
    EnumCategory,
    FlagsCategory,
    ImageCategory,
    IntCategory,
    ObjectCategory,
    ProfileBlobCategory,
    StringCategory,
    UInt64Category,
    generate_report,
    parse_report,
)

REPORT = """\
OPERATION:
embed:VipsEmbed
VipsEmbed (embed), embed an image in a larger image, sequential
REQUIRED:
PARAM:
in
Input
Input image
VipsImage
PARAM:
OUTPUT:
out
Output
Output image
VipsImage
PARAM:
x
x
Left edge of input in output
int:-1000000000:1000000000:0
OPTIONAL:
PARAM:
extend
Extend
How to generate the extra pixels
enum-VipsExtend
0:black:VIPS_EXTEND_BLACK
1:copy:VIPS_EXTEND_COPY
0
PARAM:
interpolate
Interpolate
Interpolate pixels with this
VipsInterpolate-VIPS interpolators
OPERATION:
profile_load:VipsProfileLoad
VipsProfileLoad (profile_load), load named ICC profile
REQUIRED:
PARAM:
name
Name
Profile name
string
PARAM:
OUTPUT:
profile
Profile
Loaded profile
VipsBlob
OPTIONAL:
PARAM:
scale
Scale
Scale factor
double:-1:1:0.5
PARAM:
ceil
Ceil
Round up
bool:1
PARAM:
max_memory
Max memory
Bytes to cache
uint64:0:18446744073709551615:104857600
PARAM:
keep
Keep
Which metadata to retain
flags-VipsForeignKeep
0:none:VIPS_FOREIGN_KEEP_NONE
1:exif:VIPS_FOREIGN_KEEP_EXIF
1
"""


class TestParseReport:
    """Tests for parse_report."""

    def test_operations(self) -> None:
        operations = parse_report(REPORT)

        assert [(op.nickname, op.type_name) for op in operations] == [
            ("embed", "VipsEmbed"),
            ("profile_load", "VipsProfileLoad"),
        ]
        assert operations[0].summary == [
            "VipsEmbed (embed), embed an image in a larger image, sequential"
        ]

    def test_parameters(self) -> None:
        embed, profile = parse_report(REPORT)

        assert [p.name for p in embed.required] == ["in", "out", "x"]
        assert [p.is_output for p in embed.required] == [False, True, False]
        assert [p.name for p in embed.optional] == ["extend", "interpolate"]
        assert embed.required[0].description == "Input image"

        assert profile.required[1].category == ProfileBlobCategory()
        assert profile.required[0].category == StringCategory()

    def test_categories(self) -> None:
        embed, profile = parse_report(REPORT)

        assert embed.required[0].category == ImageCategory()
        assert embed.required[2].category == IntCategory(
            minimum=-1000000000, maximum=1000000000, default=0
        )
        extend = embed.optional[0].category
        assert isinstance(extend, EnumCategory)
        assert [v.nick for v in extend.values] == ["black", "copy"]
        assert extend.default == 0
        assert embed.optional[1].category == ObjectCategory(
            type_name="VipsInterpolate", description="VIPS interpolators"
        )

        scale, ceil, max_memory, keep = (p.category for p in profile.optional)
        assert scale == DoubleCategory(minimum=-1.0, maximum=1.0, default=0.5)
        assert ceil == BooleanCategory(default=True)
        assert max_memory == UInt64Category(minimum=0, maximum=2**64 - 1, default=104857600)
        assert isinstance(keep, FlagsCategory)
        assert keep.default == 1

    def test_lines_reproduce_text(self) -> None:
        """Rendering parsed records gives back the original text."""
        lines = [line for op in parse_report(REPORT) for line in op.lines()]

        assert "\n".join(lines) + "\n" == REPORT

    def test_accepts_line_iterable(self) -> None:
        operations = parse_report(REPORT.splitlines(keepends=True))

        assert len(operations) == 2

    def test_empty(self) -> None:
        assert parse_report("") == []

    def test_to_dict(self) -> None:
        embed = parse_report(REPORT)[0]

        data = embed.to_dict()

        assert data["type_name"] == "VipsEmbed"
        assert data["required"][1]["output"] is True
        assert data["optional"][0]["type"]["kind"] == "enum"
        assert data["optional"][0]["type"]["values"][1]["nick"] == "copy"

    def test_parses_generated_report(self, builtin_types: TypeSystem) -> None:
        """The builtin report parses and re-renders byte for byte."""
        text = generate_report(TypeSystemRegistry(builtin_types)).text()

        operations = parse_report(text)

        assert "".join(f"{line}\n" for op in operations for line in op.lines()) == text


class TestParseErrors:
    """Malformed reports raise ReportParseError with a line number."""

    def test_missing_operation_keyword(self) -> None:
        with pytest.raises(ReportParseError) as exc_info:
            parse_report("embed:VipsEmbed\n")
        assert exc_info.value.line_number == 1

    def test_bad_header(self) -> None:
        with pytest.raises(ReportParseError, match="nickname:typeName"):
            parse_report("OPERATION:\nembed\nREQUIRED:\nOPTIONAL:\n")

    def test_truncated(self) -> None:
        with pytest.raises(ReportParseError, match="unexpected end"):
            parse_report("OPERATION:\nembed:VipsEmbed\nREQUIRED:\nPARAM:\nin\n")

    def test_bad_int_line(self) -> None:
        text = "OPERATION:\na:VipsA\nREQUIRED:\nPARAM:\nn\nn\n\nint:0:x:1\nOPTIONAL:\n"

        with pytest.raises(ReportParseError) as exc_info:
            parse_report(text)
        assert exc_info.value.line_number == 8

    def test_unknown_type_line(self) -> None:
        text = "OPERATION:\na:VipsA\nREQUIRED:\nPARAM:\nn\nn\n\nmystery\nOPTIONAL:\n"

        with pytest.raises(ReportParseError, match="unknown type line"):
            parse_report(text)
