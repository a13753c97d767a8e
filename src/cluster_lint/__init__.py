"""
cluster-lint: Diagnostic check engine for multi-tenant ML cluster platforms.

This package runs independent validation rules ("checks") against a
cluster's state and reports uniform, severity-ranked diagnostic results.
It supports:

- Lint mode: validate the current installation
- Upgrade assessment: validate against a current/target version pair
- Pattern selection: '*', category shortcuts, exact IDs and globs
- Per-instance workload checks with one result per discovered object
- Table, JSON and YAML output

Quick Start:
    from cluster_lint import Executor, SnapshotReader, TableReporter
    from cluster_lint.checks import default_registry

    reader = SnapshotReader(objects)
    executor = Executor(default_registry(), reader)
    report = executor.execute(selectors=["*"])

    TableReporter(report).print_full_report()

Writing a check:
    from cluster_lint import Category, Check, ConditionStatus

    class DashboardConfigured(Check):
        check_id = "components.dashboard.configured"
        name = "Components :: Dashboard :: Configured"
        description = "Validates that the dashboard component is configured"
        category = Category.COMPONENT

        def validate(self, ctx, target):
            dr = self.new_result("dashboard", "configured")
            ...
            return dr
"""

__version__ = "0.1.0"

# Condition model exports
from .result import (
    Condition,
    ConditionStatus,
    DiagnosticResult,
    Impact,
    ImpactedObject,
    is_valid_annotation_key,
    new_condition,
)
from .severity import (
    MinimumSeverity,
    ResultStatus,
    Severity,
    resolve_severity,
    resolve_status,
)

# Check and registry exports
from .check import (
    Category,
    Check,
    CheckContext,
    DeadlineExceeded,
    Target,
    parse_version,
)
from .registry import CheckRegistry, build_registry
from .selector import select, validate_selector, validate_selectors

# Reader exports
from .reader import ClusterReader, SnapshotReader, load_snapshot
from .resources import ResourceType

# Executor and reporter exports
from .executor import CheckExecution, ExecutionReport, Executor
from .reporter import ReportGenerator, TableReporter, render

# Configuration exports
from .config import LintConfig, find_config_file, load_config

# Error exports
from .errors import (
    ApplicabilityError,
    ConfigError,
    DuplicateIdentityError,
    InvalidPatternError,
    InvocationError,
    LintError,
    NotFoundError,
    RegistryFrozenError,
    ResourceTypeNotFoundError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Condition model
    "Condition",
    "ConditionStatus",
    "DiagnosticResult",
    "Impact",
    "ImpactedObject",
    "is_valid_annotation_key",
    "new_condition",
    # Severity
    "MinimumSeverity",
    "ResultStatus",
    "Severity",
    "resolve_severity",
    "resolve_status",
    # Checks
    "Category",
    "Check",
    "CheckContext",
    "DeadlineExceeded",
    "Target",
    "parse_version",
    "CheckRegistry",
    "build_registry",
    "select",
    "validate_selector",
    "validate_selectors",
    # Reader
    "ClusterReader",
    "SnapshotReader",
    "load_snapshot",
    "ResourceType",
    # Executor / reporter
    "CheckExecution",
    "ExecutionReport",
    "Executor",
    "ReportGenerator",
    "TableReporter",
    "render",
    # Config
    "LintConfig",
    "find_config_file",
    "load_config",
    # Errors
    "ApplicabilityError",
    "ConfigError",
    "DuplicateIdentityError",
    "InvalidPatternError",
    "InvocationError",
    "LintError",
    "NotFoundError",
    "RegistryFrozenError",
    "ResourceTypeNotFoundError",
    "ValidationError",
]
