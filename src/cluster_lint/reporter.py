"""
Report rendering for check runs.

Two kinds of output are supported:
- Structured: a DiagnosticResultList document, serialized as JSON or YAML
  from one shared document builder
- Table: human-readable rows, one per condition, grouped by category

Every renderer expands a result with N conditions into N rows or N
condition entries and keeps the conditions in the order the check wrote
them.

Example usage:
    from cluster_lint.reporter import ReportGenerator, TableReporter

    report = executor.execute(["*"])

    # Structured document
    print(ReportGenerator(report).to_json())

    # Table to stdout
    TableReporter(report, verbose=True).print_full_report()
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .check import CATEGORY_ORDER
from .executor import CheckExecution, ExecutionReport
from .result import Condition, ConditionStatus, DiagnosticResult
from .severity import MinimumSeverity, resolve_severity

OUTPUT_FORMATS = ("table", "json", "yaml")

# Impacted objects listed per result in verbose table output.
MAX_IMPACTED_OBJECTS = 50

STATUS_GLYPHS = {
    ConditionStatus.TRUE: "✓",
    ConditionStatus.FALSE: "✗",
    ConditionStatus.UNKNOWN: "⚠",
}


# =============================================================================
# Document Models
# =============================================================================


class _DocModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConditionDoc(_DocModel):
    """One condition entry."""

    type: str
    status: str
    reason: str
    message: str = ""
    last_transition_time: datetime = Field(..., alias="lastTransitionTime")
    impact: Optional[str] = Field(None, description="Upgrade impact hint")


class ObjectReferenceDoc(_DocModel):
    """Reference to an impacted cluster object."""

    api_version: Optional[str] = Field(None, alias="apiVersion")
    kind: str
    namespace: Optional[str] = None
    name: str


class ResultMetadataDoc(_DocModel):
    group: str
    kind: str
    name: str
    annotations: Optional[Dict[str, str]] = None


class ResultSpecDoc(_DocModel):
    description: str = ""


class ResultStatusDoc(_DocModel):
    conditions: List[ConditionDoc] = Field(default_factory=list)


class DiagnosticResultDoc(_DocModel):
    """One diagnostic result in the structured document."""

    metadata: ResultMetadataDoc
    spec: ResultSpecDoc
    status: ResultStatusDoc
    impacted_objects: Optional[List[ObjectReferenceDoc]] = Field(None, alias="impactedObjects")


class ListMetadataDoc(_DocModel):
    cluster_version: Optional[str] = Field(None, alias="clusterVersion")
    target_version: Optional[str] = Field(None, alias="targetVersion")


class DiagnosticResultListDoc(_DocModel):
    """Top-level structured output."""

    kind: str = "DiagnosticResultList"
    metadata: ListMetadataDoc = Field(default_factory=ListMetadataDoc)
    items: List[DiagnosticResultDoc] = Field(default_factory=list)


def _condition_doc(condition: Condition) -> ConditionDoc:
    return ConditionDoc(
        type=condition.type,
        status=condition.status.value,
        reason=condition.reason,
        message=condition.message,
        last_transition_time=condition.last_transition_time,
        impact=condition.impact.value if condition.impact else None,
    )


def result_to_doc(result: DiagnosticResult) -> DiagnosticResultDoc:
    """Convert a DiagnosticResult into its document form."""
    impacted = [
        ObjectReferenceDoc(
            api_version=obj.api_version or None,
            kind=obj.kind,
            namespace=obj.namespace or None,
            name=obj.name,
        )
        for obj in result.impacted_objects
    ]
    return DiagnosticResultDoc(
        metadata=ResultMetadataDoc(
            group=result.group,
            kind=result.kind,
            name=result.name,
            annotations=dict(result.annotations) or None,
        ),
        spec=ResultSpecDoc(description=result.spec.description),
        status=ResultStatusDoc(conditions=[_condition_doc(c) for c in result.conditions]),
        impacted_objects=impacted or None,
    )


def filter_by_severity(
    executions: Sequence[CheckExecution],
    minimum: MinimumSeverity,
) -> List[CheckExecution]:
    """Keep executions whose aggregate severity passes the minimum."""
    return [e for e in executions if minimum.should_include(e.severity)]


def ordered_executions(report: ExecutionReport) -> List[CheckExecution]:
    """Executions grouped by category, invocation order within each group."""
    grouped = report.by_category()
    return [execution for category in CATEGORY_ORDER for execution in grouped[category]]


# =============================================================================
# Structured Output
# =============================================================================


class ReportGenerator:
    """
    Builds the DiagnosticResultList document for a run.

    JSON and YAML output share build_document(), so both formats always
    carry the same content.
    """

    def __init__(
        self,
        report: ExecutionReport,
        min_severity: MinimumSeverity = MinimumSeverity.ALL,
    ):
        """
        Initialize the report generator.

        Args:
            report: Executor output
            min_severity: Drop results below this aggregate severity
        """
        self.report = report
        self.min_severity = min_severity

    def build_document(self) -> DiagnosticResultListDoc:
        executions = filter_by_severity(ordered_executions(self.report), self.min_severity)
        metadata = ListMetadataDoc(
            cluster_version=str(self.report.current_version) if self.report.current_version else None,
            target_version=str(self.report.target_version) if self.report.target_version else None,
        )
        return DiagnosticResultListDoc(
            metadata=metadata,
            items=[result_to_doc(e.result) for e in executions],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the document as plain JSON-compatible data with camelCase keys."""
        return self.build_document().model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    def write(self, path: str, output_format: str = "json") -> Path:
        """
        Write the document to a file.

        Args:
            path: Output file path
            output_format: 'json' or 'yaml'

        Returns:
            Path to written file
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        text = self.to_yaml() if output_format == "yaml" else self.to_json()
        with open(output_path, "w") as f:
            f.write(text)

        return output_path


# =============================================================================
# Table Output
# =============================================================================


class TableReporter:
    """
    Prints a run as a table with one row per condition.

    Rows are grouped by category (components, services, dependencies,
    workloads). A summary over rows, recorded errors, and incompleteness
    follow the table.
    """

    def __init__(
        self,
        report: ExecutionReport,
        verbose: bool = False,
        show_description: bool = False,
        min_severity: MinimumSeverity = MinimumSeverity.ALL,
        output: Optional[TextIO] = None,
    ):
        """
        Initialize the table reporter.

        Args:
            report: Executor output
            verbose: List impacted objects and skipped checks
            show_description: Add a description column
            min_severity: Drop results below this aggregate severity
            output: Output stream (default: sys.stdout)
        """
        self.report = report
        self.verbose = verbose
        self.show_description = show_description
        self.min_severity = min_severity
        self.output = output or sys.stdout

    def _print(self, *args, **kwargs):
        """Print to configured output."""
        print(*args, file=self.output, **kwargs)

    def executions(self) -> List[CheckExecution]:
        return filter_by_severity(ordered_executions(self.report), self.min_severity)

    def rows(self) -> List[List[str]]:
        """Expand every result into one row per condition."""
        rows: List[List[str]] = []
        for execution in self.executions():
            result = execution.result
            for condition in result.conditions:
                severity = resolve_severity([condition])
                row = [
                    STATUS_GLYPHS[condition.status],
                    result.group,
                    result.kind,
                    result.name,
                    severity.value if severity else "",
                    condition.message,
                ]
                if self.show_description:
                    row.append(result.spec.description)
                rows.append(row)
        return rows

    def headers(self) -> List[str]:
        headers = ["STATUS", "GROUP", "KIND", "CHECK", "SEVERITY", "MESSAGE"]
        if self.show_description:
            headers.append("DESCRIPTION")
        return headers

    def print_header(self):
        self._print("=" * 70)
        self._print("CLUSTER LINT")
        self._print("=" * 70)

        current = self.report.current_version
        target = self.report.target_version
        if current is not None and target is not None:
            self._print(f"Mode: UPGRADE ({current} -> {target})")
        elif current is not None:
            self._print(f"Mode: LINT (version {current})")
        else:
            self._print("Mode: LINT")
        self._print()

    def print_table(self):
        """Print the condition rows, one block per category."""
        headers = self.headers()
        all_rows = self.rows()
        widths = [len(h) for h in headers]
        for row in all_rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        def fmt(cells: List[str]) -> str:
            return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

        if not all_rows:
            self._print("No results.")
            return

        self._print(fmt(headers))
        current_group = None
        for row in all_rows:
            if row[1] != current_group:
                if current_group is not None:
                    self._print()
                current_group = row[1]
            self._print(fmt(row))

    def print_impacted_objects(self):
        """List impacted objects per result (verbose only)."""
        for execution in self.executions():
            result = execution.result
            if not result.impacted_objects:
                continue

            total = len(result.impacted_objects)
            self._print()
            self._print(f"Impacted objects for {result.group}/{result.kind}/{result.name} ({total}):")
            for obj in result.impacted_objects[:MAX_IMPACTED_OBJECTS]:
                self._print(f"  - {obj.display()}")
            if total > MAX_IMPACTED_OBJECTS:
                self._print(
                    f"  ... and {total - MAX_IMPACTED_OBJECTS} more "
                    "(use --output json for the full list)"
                )

    def print_summary(self):
        rows = self.rows()
        passed = sum(1 for row in rows if row[0] == STATUS_GLYPHS[ConditionStatus.TRUE])
        failed = len(rows) - passed

        self._print()
        self._print("=" * 70)
        self._print(f"Summary: Total: {len(rows)} | Passed: {passed} | Failed: {failed}")
        self._print(f"Total time: {self.report.duration_ms / 1000:.2f}s")

    def print_errors(self):
        """Print recorded applicability and invocation errors as warnings."""
        if not self.report.errors and not self.report.incomplete:
            return

        self._print()
        for error in self.report.errors:
            self._print(f"WARNING: {error}")
        if self.report.incomplete:
            self._print(
                f"WARNING: run incomplete, deadline reached "
                f"({self.report.abandoned} invocation(s) abandoned)"
            )
            if self.report.abandoned_checks:
                self._print(f"WARNING: not started: {', '.join(self.report.abandoned_checks)}")

    def print_skipped(self):
        if not self.report.skipped:
            return
        self._print()
        self._print("Not applicable for this version pair:")
        for check_id in self.report.skipped:
            self._print(f"  - {check_id}")

    def print_full_report(self):
        """Print complete report with all sections."""
        self.print_header()
        self.print_table()
        if self.verbose:
            self.print_impacted_objects()
            self.print_skipped()
        self.print_errors()
        self.print_summary()


def render(
    report: ExecutionReport,
    output_format: str = "table",
    verbose: bool = False,
    show_description: bool = False,
    min_severity: MinimumSeverity = MinimumSeverity.ALL,
    output: Optional[TextIO] = None,
) -> None:
    """
    Render a run in the requested format.

    Raises:
        ValueError: If the format is not one of OUTPUT_FORMATS
    """
    out = output or sys.stdout
    if output_format == "table":
        TableReporter(report, verbose, show_description, min_severity, out).print_full_report()
    elif output_format == "json":
        print(ReportGenerator(report, min_severity).to_json(), file=out)
    elif output_format == "yaml":
        out.write(ReportGenerator(report, min_severity).to_yaml())
    else:
        raise ValueError(
            f"Invalid output format: {output_format}. Must be one of: {', '.join(OUTPUT_FORMATS)}"
        )
