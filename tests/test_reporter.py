"""Tests for report generation."""

from __future__ import annotations

import pytest

from spyglass.core import (
    Argument,
    ArgumentFlags,
    BooleanParamSpec,
    BoxedParamSpec,
    InstantiationError,
    IntParamSpec,
    ObjectParamSpec,
    Operation,
    OperationFlags,
    ParameterRole,
    ParamSpec,
    RegistryInitError,
    StringParamSpec,
    TypeSystem,
    TypeSystemRegistry,
    UnsupportedBoxedTypeError,
    UnsupportedValueTypeError,
    define_operation,
)
from spyglass.introspect import (
    Classifier,
    OperationRecord,
    ParameterReporter,
    RegistryWalker,
    generate_report,
)


def _image(types: TypeSystem, name: str, blurb: str = "") -> ObjectParamSpec:
    return ObjectParamSpec(name=name, nick=name.title(), blurb=blurb, value_type=types.image_type)


def _int(types: TypeSystem, name: str) -> IntParamSpec:
    return IntParamSpec(
        name=name,
        nick=name,
        blurb=f"{name} value",
        value_type=types.from_name("gint"),
        minimum=0,
        maximum=100,
        default=10,
    )


def _define_partition_op(types: TypeSystem) -> None:
    """a required input, b optional input, c required output, d optional output."""
    define_operation(
        types,
        "VipsPartition",
        nickname="partition",
        description="partition test",
        arguments=[
            Argument(_image(types, "a"), ArgumentFlags.REQUIRED_INPUT, priority=0),
            Argument(_int(types, "b"), ArgumentFlags.OPTIONAL_INPUT, priority=1),
            Argument(_image(types, "c"), ArgumentFlags.REQUIRED_OUTPUT, priority=2),
            Argument(_int(types, "d"), ArgumentFlags.OPTIONAL_OUTPUT, priority=3),
        ],
    )


@pytest.fixture
def registry(types: TypeSystem) -> TypeSystemRegistry:
    _define_partition_op(types)
    return TypeSystemRegistry(types)


class TestParameterReporter:
    """Tests for ParameterReporter."""

    def test_input_block(self, types: TypeSystem) -> None:
        reporter = ParameterReporter(Classifier(types))
        role = ParameterRole.from_flags(ArgumentFlags.REQUIRED_INPUT)

        lines = reporter.render(_int(types, "width"), role)

        assert lines == ["PARAM:", "width", "width", "width value", "int:0:100:10"]

    def test_output_marker(self, types: TypeSystem) -> None:
        """Outputs carry OUTPUT: on its own line after PARAM:."""
        reporter = ParameterReporter(Classifier(types))
        role = ParameterRole.from_flags(ArgumentFlags.REQUIRED_OUTPUT)

        lines = reporter.render(_image(types, "out", "Output image"), role)

        assert lines == ["PARAM:", "OUTPUT:", "out", "Out", "Output image", "VipsImage"]

    def test_deprecated_skipped(self, types: TypeSystem) -> None:
        reporter = ParameterReporter(Classifier(types))
        role = ParameterRole.from_flags(ArgumentFlags.OPTIONAL_INPUT | ArgumentFlags.DEPRECATED)

        assert reporter.render(_int(types, "old"), role) is None

    def test_non_construction_skipped(self, types: TypeSystem) -> None:
        reporter = ParameterReporter(Classifier(types))
        role = ParameterRole.from_flags(ArgumentFlags.REQUIRED | ArgumentFlags.INPUT)

        assert reporter.render(_int(types, "runtime"), role) is None

    def test_skipped_parameter_is_not_classified(self, types: TypeSystem) -> None:
        """A skipped parameter never reaches the classifier, so it cannot fail."""
        reporter = ParameterReporter(Classifier(types))
        role = ParameterRole.from_flags(ArgumentFlags.OPTIONAL_INPUT | ArgumentFlags.DEPRECATED)
        spec = ParamSpec(name="p", nick="p", blurb="", value_type=types.from_name("gpointer"))

        assert reporter.render(spec, role) is None

    def test_report_groups(self, types: TypeSystem) -> None:
        """report appends to the group matching the required bit."""
        reporter = ParameterReporter(Classifier(types))
        record = OperationRecord(nickname="x", type_name="VipsX", summary=[])

        assert reporter.report(
            _int(types, "a"), ParameterRole.from_flags(ArgumentFlags.REQUIRED_INPUT), record
        )
        assert reporter.report(
            _int(types, "b"), ParameterRole.from_flags(ArgumentFlags.OPTIONAL_INPUT), record
        )

        assert record.required[1] == "a"
        assert record.optional[1] == "b"


class TestOperationReport:
    """Tests for one operation's block."""

    def test_partition(self, registry: TypeSystemRegistry) -> None:
        """REQUIRED holds a then c; OPTIONAL holds b then d."""
        report = generate_report(registry)

        assert report.text() == (
            "OPERATION:\n"
            "partition:VipsPartition\n"
            "VipsPartition (partition), partition test\n"
            "REQUIRED:\n"
            "PARAM:\n"
            "a\n"
            "A\n"
            "\n"
            "VipsImage\n"
            "PARAM:\n"
            "OUTPUT:\n"
            "c\n"
            "C\n"
            "\n"
            "VipsImage\n"
            "OPTIONAL:\n"
            "PARAM:\n"
            "b\n"
            "b\n"
            "b value\n"
            "int:0:100:10\n"
            "PARAM:\n"
            "OUTPUT:\n"
            "d\n"
            "d\n"
            "d value\n"
            "int:0:100:10\n"
        )

    def test_empty_groups_keep_keywords(self, types: TypeSystem) -> None:
        """An operation with no parameters still emits both group keywords."""
        define_operation(types, "VipsNothing", nickname="nothing", description="no arguments")

        with TypeSystemRegistry(types) as registry:
            record = RegistryWalker(registry).run().records[0]

        assert record.lines() == [
            "OPERATION:",
            "nothing:VipsNothing",
            "VipsNothing (nothing), no arguments",
            "REQUIRED:",
            "OPTIONAL:",
        ]

    def test_summary_flags(self, types: TypeSystem) -> None:
        define_operation(
            types,
            "VipsFast",
            nickname="fast",
            description="fast one",
            flags=OperationFlags.SEQUENTIAL | OperationFlags.NOCACHE,
        )

        with TypeSystemRegistry(types) as registry:
            summary = registry.class_summary(types.from_name("VipsFast"))

        assert summary == "VipsFast (fast), fast one, sequential, nocache"


class TestSkipRules:
    """Abstract and deprecated operations are not reported."""

    def test_abstract_skipped(self, types: TypeSystem) -> None:
        define_operation(types, "VipsBase", nickname="base", description="", abstract=True)
        define_operation(types, "VipsLeaf", "VipsBase", nickname="leaf", description="")

        report = generate_report(TypeSystemRegistry(types))

        assert [r.type_name for r in report.records] == ["VipsLeaf"]

    def test_deprecated_class_skipped(self, types: TypeSystem) -> None:
        define_operation(
            types, "VipsOld", nickname="old", description="", flags=OperationFlags.DEPRECATED
        )
        define_operation(types, "VipsNew", nickname="new", description="")

        report = generate_report(TypeSystemRegistry(types))

        assert [r.type_name for r in report.records] == ["VipsNew"]

    def test_deprecated_instance_skipped(self, types: TypeSystem) -> None:
        """Flags are read from the instance, so an init hook can deprecate it."""

        def deprecate(operation: Operation) -> None:
            operation.flags |= OperationFlags.DEPRECATED

        define_operation(types, "VipsOld", nickname="old", description="", init=deprecate)
        registry = TypeSystemRegistry(types)

        assert len(generate_report(registry)) == 0
        assert registry.live_instances == 0

    def test_deprecated_operation_not_classified(self, types: TypeSystem) -> None:
        """A deprecated operation with an unclassifiable argument does not fail the walk."""
        spec = ParamSpec(name="p", nick="p", blurb="", value_type=types.from_name("gpointer"))
        define_operation(
            types,
            "VipsOld",
            nickname="old",
            description="",
            flags=OperationFlags.DEPRECATED,
            arguments=[Argument(spec, ArgumentFlags.REQUIRED_INPUT)],
        )

        assert len(generate_report(TypeSystemRegistry(types))) == 0

    def test_skipped_argument_kinds(self, types: TypeSystem) -> None:
        """Deprecated and non-construction arguments leave no PARAM: block."""
        gboolean = types.from_name("gboolean")
        define_operation(
            types,
            "VipsMixed",
            nickname="mixed",
            description="",
            arguments=[
                Argument(_image(types, "in"), ArgumentFlags.REQUIRED_INPUT),
                Argument(
                    BooleanParamSpec(name="old", nick="old", blurb="", value_type=gboolean),
                    ArgumentFlags.OPTIONAL_INPUT | ArgumentFlags.DEPRECATED,
                ),
                Argument(
                    BooleanParamSpec(name="live", nick="live", blurb="", value_type=gboolean),
                    ArgumentFlags.INPUT,
                ),
            ],
        )

        (record,) = generate_report(TypeSystemRegistry(types)).records

        assert record.required.count("PARAM:") == 1
        assert record.optional == []


class TestFailures:
    """The first error aborts the walk and nothing leaks."""

    def test_unsupported_boxed_aborts(self, types: TypeSystem) -> None:
        spec = BoxedParamSpec(
            name="str", nick="s", blurb="", value_type=types.from_name("VipsRefString")
        )
        define_operation(
            types,
            "VipsStrings",
            nickname="strings",
            description="",
            arguments=[Argument(spec, ArgumentFlags.REQUIRED_INPUT)],
        )
        registry = TypeSystemRegistry(types)

        with pytest.raises(UnsupportedBoxedTypeError):
            generate_report(registry)
        assert registry.live_instances == 0

    def test_unsupported_value_aborts(self, types: TypeSystem) -> None:
        spec = ParamSpec(name="p", nick="p", blurb="", value_type=types.from_name("gpointer"))
        define_operation(
            types,
            "VipsPointer",
            nickname="pointer",
            description="",
            arguments=[Argument(spec, ArgumentFlags.OPTIONAL_INPUT)],
        )

        with pytest.raises(UnsupportedValueTypeError):
            generate_report(TypeSystemRegistry(types))

    def test_earlier_records_still_yielded(self, types: TypeSystem) -> None:
        """walk yields operations before the failing one, then raises."""
        define_operation(types, "VipsGood", nickname="good", description="")
        spec = ParamSpec(name="p", nick="p", blurb="", value_type=types.from_name("gpointer"))
        define_operation(
            types,
            "VipsBad",
            nickname="bad",
            description="",
            arguments=[Argument(spec, ArgumentFlags.REQUIRED_INPUT)],
        )

        seen: list[str] = []
        with TypeSystemRegistry(types) as registry, pytest.raises(UnsupportedValueTypeError):
            for record in RegistryWalker(registry).walk():
                seen.append(record.type_name)

        assert seen == ["VipsGood"]

    def test_instantiation_failure(self, types: TypeSystem) -> None:
        def refuse(operation: Operation) -> None:
            raise RuntimeError("no resources")

        define_operation(types, "VipsBroken", nickname="broken", description="", init=refuse)

        with pytest.raises(InstantiationError) as exc_info:
            generate_report(TypeSystemRegistry(types))
        assert exc_info.value.type_name == "VipsBroken"
        assert "no resources" in str(exc_info.value)

    def test_registry_closed_after_failure(self, types: TypeSystem) -> None:
        spec = ParamSpec(name="p", nick="p", blurb="", value_type=types.from_name("gpointer"))
        define_operation(
            types,
            "VipsBad",
            nickname="bad",
            description="",
            arguments=[Argument(spec, ArgumentFlags.REQUIRED_INPUT)],
        )
        registry = TypeSystemRegistry(types)

        with pytest.raises(UnsupportedValueTypeError):
            generate_report(registry)
        assert not registry.is_open

    def test_unknown_root(self, registry: TypeSystemRegistry) -> None:
        with pytest.raises(RegistryInitError):
            generate_report(registry, root_type="VipsNope")


class TestOrdering:
    """Report order follows the registry."""

    def test_registry_order(self, types: TypeSystem) -> None:
        define_operation(types, "VipsGroup", nickname="group", description="", abstract=True)
        define_operation(types, "VipsZeta", "VipsGroup", nickname="zeta", description="")
        define_operation(types, "VipsAlpha", "VipsGroup", nickname="alpha", description="")
        define_operation(types, "VipsMiddle", nickname="middle", description="")

        report = generate_report(TypeSystemRegistry(types))

        assert [r.nickname for r in report.records] == ["zeta", "alpha", "middle"]

    def test_repeat_runs_identical(self, builtin_types: TypeSystem) -> None:
        """Two runs over the same registry produce identical text."""
        registry = TypeSystemRegistry(builtin_types)

        assert generate_report(registry).text() == generate_report(registry).text()

    def test_subtree_root(self, builtin_types: TypeSystem) -> None:
        """Walking from an intermediate type reports only its subtree."""
        report = generate_report(TypeSystemRegistry(builtin_types), root_type="VipsBinary")

        assert [r.nickname for r in report.records] == ["add", "subtract"]


class TestBuiltinReport:
    """Spot checks over the builtin catalog."""

    @pytest.fixture
    def text(self, builtin_types: TypeSystem) -> str:
        return generate_report(TypeSystemRegistry(builtin_types)).text()

    def test_profile_load_blob(self, text: str) -> None:
        assert "PARAM:\nOUTPUT:\nprofile\nProfile\nLoaded profile\nVipsBlob\n" in text

    def test_buffer_blob_is_byte_data(self, text: str) -> None:
        assert "PARAM:\nbuffer\nBuffer\nBuffer to load from\nbyte-data\n" in text

    def test_uint64(self, text: str) -> None:
        assert "uint64:0:18446744073709551615:104857600\n" in text

    def test_object_reference(self, text: str) -> None:
        assert "VipsInterpolate-VIPS interpolators\n" in text

    def test_deprecated_operation_absent(self, text: str) -> None:
        assert "copy_legacy" not in text

    def test_deprecated_argument_absent(self, text: str) -> None:
        assert "auto_rotate" not in text
        assert "\nstrip\n" not in text

    def test_abstract_absent(self, text: str) -> None:
        assert "OPERATION:\narithmetic:" not in text
        assert "OPERATION:\nadd:VipsAdd\n" in text

    def test_double_bounds(self, text: str) -> None:
        assert "double:1:1000000:1\n" in text
        assert "double:-10000000:10000000:0\n" in text
