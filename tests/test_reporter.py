"""Tests for report rendering."""

import io
import json

import pytest
import yaml
from cluster_lint import (
    Category,
    CheckExecution,
    ConditionStatus,
    ExecutionReport,
    Impact,
    ImpactedObject,
    InvocationError,
    MinimumSeverity,
    ReportGenerator,
    TableReporter,
    new_condition,
    parse_version,
    render,
)


def _execution(static_check, check_id, category, statuses, impacted=0):
    check = static_check(check_id, category, resource_types=("x",))
    dr = check.new_result(check_id.split(".")[1], check_id.split(".")[2])
    for i, status in enumerate(statuses):
        dr.status.conditions.append(new_condition(f"Cond{i}", status, "Reason", f"{check_id} #{i}"))
    for i in range(impacted):
        dr.impacted_objects.append(ImpactedObject("Notebook", f"nb{i}", "team"))
    return CheckExecution(check=check, result=dr)


@pytest.fixture
def report(static_check):
    T, F, U = ConditionStatus.TRUE, ConditionStatus.FALSE, ConditionStatus.UNKNOWN
    executions = [
        _execution(static_check, "workloads.notebook.profile", Category.WORKLOAD, [F], impacted=2),
        _execution(static_check, "components.kueue.removal", Category.COMPONENT, [T, F, U]),
        _execution(static_check, "services.mesh.removal", Category.SERVICE, [T]),
    ]
    return ExecutionReport(
        executions=executions,
        current_version=parse_version("2.16.0"),
        target_version=parse_version("3.0.0"),
    )


class TestReportGenerator:
    """Tests for the structured document."""

    def test_document_shape(self, report):
        """Test the DiagnosticResultList envelope."""
        data = ReportGenerator(report).to_dict()
        assert data["kind"] == "DiagnosticResultList"
        assert data["metadata"] == {"clusterVersion": "2.16.0", "targetVersion": "3.0.0"}
        assert len(data["items"]) == 3

    def test_items_grouped_by_category(self, report):
        """Test that items follow category order."""
        data = ReportGenerator(report).to_dict()
        assert [item["metadata"]["group"] for item in data["items"]] == [
            "components", "services", "workloads",
        ]

    def test_condition_order_and_keys(self, report):
        """Test camelCase keys and preserved condition order."""
        item = ReportGenerator(report).to_dict()["items"][0]
        conditions = item["status"]["conditions"]
        assert [c["type"] for c in conditions] == ["Cond0", "Cond1", "Cond2"]
        assert [c["status"] for c in conditions] == ["True", "False", "Unknown"]
        assert "lastTransitionTime" in conditions[0]
        assert "impact" not in conditions[0]
        assert "impactedObjects" not in item

    def test_impacted_objects(self, report):
        item = ReportGenerator(report).to_dict()["items"][2]
        assert item["impactedObjects"][0] == {"kind": "Notebook", "namespace": "team", "name": "nb0"}

    def test_impact_serialized(self, static_check):
        check = static_check("components.a.b")
        dr = check.new_result("a", "b")
        dr.status.conditions.append(
            new_condition("Compatible", ConditionStatus.FALSE, "X", "m", Impact.BLOCKING)
        )
        data = ReportGenerator(ExecutionReport(executions=[CheckExecution(check, dr)])).to_dict()
        assert data["items"][0]["status"]["conditions"][0]["impact"] == "blocking"
        assert data["metadata"] == {}

    def test_json_and_yaml_agree(self, report):
        """Test that both formats come from the same document."""
        generator = ReportGenerator(report)
        assert json.loads(generator.to_json()) == yaml.safe_load(generator.to_yaml())

    def test_min_severity_filter(self, report):
        """Test that the minimum severity drops passing results."""
        data = ReportGenerator(report, MinimumSeverity.CRITICAL).to_dict()
        assert [item["metadata"]["group"] for item in data["items"]] == ["components", "workloads"]

    def test_write(self, report, tmp_path):
        path = ReportGenerator(report).write(str(tmp_path / "out" / "report.yaml"), "yaml")
        assert yaml.safe_load(path.read_text())["kind"] == "DiagnosticResultList"


class TestTableReporter:
    """Tests for table output."""

    def _render(self, report, **kwargs):
        out = io.StringIO()
        TableReporter(report, output=out, **kwargs).print_full_report()
        return out.getvalue()

    def test_one_row_per_condition(self, report):
        """Test that three conditions expand into three rows."""
        rows = TableReporter(report).rows()
        assert len(rows) == 5
        assert [row[5] for row in rows[:3]] == [
            "components.kueue.removal #0",
            "components.kueue.removal #1",
            "components.kueue.removal #2",
        ]

    def test_summary_over_rows(self, report):
        """Test that the summary counts rows, not results."""
        text = self._render(report)
        assert "Summary: Total: 5 | Passed: 2 | Failed: 3" in text

    def test_row_severity_and_glyphs(self, report):
        rows = TableReporter(report).rows()
        assert [row[0] for row in rows[:3]] == ["✓", "✗", "⚠"]
        assert [row[4] for row in rows[:3]] == ["info", "critical", "warning"]

    def test_upgrade_mode_header(self, report):
        assert "Mode: UPGRADE (2.16.0 -> 3.0.0)" in self._render(report)

    def test_description_column(self, report):
        text = self._render(report, show_description=True)
        assert "DESCRIPTION" in text
        assert "Test check components.kueue.removal" in text

    def test_verbose_impacted_objects(self, report):
        text = self._render(report, verbose=True)
        assert "team/nb0 (Notebook)" in text
        assert "team/nb1 (Notebook)" not in self._render(report)

    def test_impacted_objects_truncated(self, static_check):
        """Test that long impacted lists stop at 50 with a hint."""
        execution = _execution(static_check, "workloads.a.b", Category.WORKLOAD, [ConditionStatus.FALSE], impacted=60)
        text = self._render(ExecutionReport(executions=[execution]), verbose=True)
        assert "team/nb49 (Notebook)" in text
        assert "team/nb50 (Notebook)" not in text
        assert "... and 10 more" in text

    def test_errors_and_incomplete_as_warnings(self, report):
        report.errors.append(InvocationError("components.x", RuntimeError("boom")))
        report.incomplete = True
        report.abandoned = 1
        report.abandoned_checks.append("workloads.y")
        text = self._render(report)
        assert "WARNING: check 'components.x' failed: boom" in text
        assert "run incomplete" in text
        assert "not started: workloads.y" in text

    def test_empty(self):
        assert "No results." in self._render(ExecutionReport())


class TestRender:
    """Tests for the render dispatcher."""

    def test_json(self, report):
        out = io.StringIO()
        render(report, "json", output=out)
        assert json.loads(out.getvalue())["kind"] == "DiagnosticResultList"

    def test_invalid_format(self, report):
        with pytest.raises(ValueError, match="Invalid output format"):
            render(report, "xml")
