"""Report generation.

``RegistryWalker`` drives ``OperationReporter`` over every concrete,
non-deprecated operation type; ``OperationReporter`` drives
``ParameterReporter`` over each operation's arguments. Any error aborts the
walk; instances are released on every path.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from spyglass.core.errors import SpyglassError
from spyglass.core.operation import OperationFlags, ParameterRole
from spyglass.core.registry import DEFAULT_ROOT_TYPE
from spyglass.introspect.classify import Classifier
from spyglass.introspect.render import render_category
from spyglass.observability import (
    bind_context,
    get_logger,
    operation_span,
    trace_operation_failed,
    traced,
    unbind_context,
)

if TYPE_CHECKING:
    from spyglass.core.operation import Operation
    from spyglass.core.params import ParamSpec
    from spyglass.core.registry import OperationRegistry
    from spyglass.core.types import TypeHandle

logger = get_logger(__name__)


@dataclass
class OperationRecord:
    """Report of one operation type.

    Attributes:
        nickname: Display nickname.
        type_name: Registered type name.
        summary: Class summary lines from the registry.
        required: Rendered ``PARAM:`` blocks of required parameters.
        optional: Rendered ``PARAM:`` blocks of optional parameters.
    """

    nickname: str
    type_name: str
    summary: list[str]
    required: list[str] = field(default_factory=list)
    optional: list[str] = field(default_factory=list)

    def lines(self) -> list[str]:
        return [
            "OPERATION:",
            f"{self.nickname}:{self.type_name}",
            *self.summary,
            "REQUIRED:",
            *self.required,
            "OPTIONAL:",
            *self.optional,
        ]


@dataclass
class Report:
    """Every operation record of one walk, in registry order."""

    records: list[OperationRecord] = field(default_factory=list)

    def lines(self) -> Iterator[str]:
        for record in self.records:
            yield from record.lines()

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines())

    def __len__(self) -> int:
        return len(self.records)


class ParameterReporter:
    """Renders one parameter into its operation record."""

    def __init__(self, classifier: Classifier) -> None:
        self.classifier = classifier

    def render(self, spec: ParamSpec, role: ParameterRole) -> list[str] | None:
        """Render a ``PARAM:`` block, or None if the parameter is not reportable."""
        if role.is_deprecated or not role.is_construction_parameter:
            return None

        lines = ["PARAM:"]
        if not role.is_input:
            lines.append("OUTPUT:")
        lines.extend((spec.name, spec.nick, spec.blurb))
        lines.extend(render_category(self.classifier.classify(spec)))
        return lines

    def report(self, spec: ParamSpec, role: ParameterRole, record: OperationRecord) -> bool:
        """Append the block to the required or optional group of ``record``.

        Returns:
            True if a block was appended.
        """
        lines = self.render(spec, role)
        if lines is None:
            return False
        group = record.required if role.is_required else record.optional
        group.extend(lines)
        return True


class OperationReporter:
    """Builds the record of one operation instance."""

    def __init__(self, registry: OperationRegistry, classifier: Classifier) -> None:
        self.registry = registry
        self.parameters = ParameterReporter(classifier)

    def report(self, operation: Operation) -> OperationRecord:
        handle = operation.type
        record = OperationRecord(
            nickname=getattr(handle.type_class, "nickname", ""),
            type_name=handle.name,
            summary=self.registry.class_summary(handle).splitlines(),
        )

        arguments = self.registry.declared_parameters(operation)
        for required in (True, False):
            for argument in arguments:
                role = ParameterRole.from_flags(argument.flags)
                if role.is_required == required:
                    self.parameters.report(argument.spec, role, record)

        return record


class RegistryWalker:
    """Walks the registry from a root type and reports every operation.

    The registry must be open for the duration of the walk.

    Example:
        with TypeSystemRegistry(types) as registry:
            report = RegistryWalker(registry).run()
        sys.stdout.write(report.text())
    """

    def __init__(
        self,
        registry: OperationRegistry,
        *,
        root_type: str = DEFAULT_ROOT_TYPE,
        classifier: Classifier | None = None,
    ) -> None:
        self.registry = registry
        self.root_type = root_type
        self.operations = OperationReporter(registry, classifier or Classifier(registry.types))

    def report_type(self, handle: TypeHandle) -> OperationRecord | None:
        """Report one operation type.

        Log events emitted meanwhile carry ``operation=<type name>``.

        Returns:
            The record, or None for abstract and deprecated types.
        """
        bind_context(operation=handle.name)
        try:
            return self._report_type(handle)
        finally:
            unbind_context("operation")

    def _report_type(self, handle: TypeHandle) -> OperationRecord | None:
        if self.registry.is_abstract(handle):
            logger.debug("operation.skipped", reason="abstract")
            return None

        operation = self.registry.instantiate(handle)
        try:
            if OperationFlags.DEPRECATED in self.registry.get_flags(operation):
                logger.debug("operation.skipped", reason="deprecated")
                return None

            with operation_span(handle.name, getattr(handle.type_class, "nickname", "")) as span:
                try:
                    record = self.operations.report(operation)
                except SpyglassError as e:
                    trace_operation_failed(span, e)
                    raise
        finally:
            self.registry.release(operation)

        logger.debug(
            "operation.reported",
            required=record.required.count("PARAM:"),
            optional=record.optional.count("PARAM:"),
        )
        return record

    def walk(self) -> Iterator[OperationRecord]:
        """Yield records in registry order. The first error ends the walk."""
        logger.info("walk.started", root=self.root_type)
        count = 0
        try:
            for handle in self.registry.enumerate_types(self.root_type):
                record = self.report_type(handle)
                if record is not None:
                    count += 1
                    yield record
        except SpyglassError as e:
            logger.error("walk.failed", error=str(e), error_type=type(e).__name__)
            raise
        logger.info("walk.completed", root=self.root_type, operations=count)

    @traced("report.walk")
    def run(self) -> Report:
        return Report(records=list(self.walk()))


def generate_report(registry: OperationRegistry, root_type: str = DEFAULT_ROOT_TYPE) -> Report:
    """Open the registry, walk it and close it again."""
    registry.open()
    try:
        return RegistryWalker(registry, root_type=root_type).run()
    finally:
        registry.close()
