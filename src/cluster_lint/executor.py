"""
Check executor - core execution engine.

The executor turns a selection request into results:

1. Resolve candidate checks from the registry (selectors + category)
2. Drop checks whose can_apply() is False for the version pair
3. Build targets: one unbound target per component/service/dependency
   check, one bound target per discovered instance for workload checks
4. Invoke every (check, target) pair and collect results in invocation order

A failing invocation never aborts the run. Applicability and invocation
failures are recorded next to the results and logged as warnings. A single
deadline bounds the whole run; when it passes, unfinished invocations are
abandoned, finished ones are kept, and the report is marked incomplete.

Example usage:
    from cluster_lint import Executor, build_registry
    from cluster_lint.checks import BUILTIN_CHECKS

    executor = Executor(build_registry(BUILTIN_CHECKS), reader)
    report = executor.execute(selectors=["components"], timeout=300)
    for execution in report.executions:
        print(execution.check.check_id, execution.severity)
"""

import logging
import queue
import threading
import time
from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from packaging.version import Version

from .check import CATEGORY_ORDER, Category, Check, CheckContext, DeadlineExceeded, Target
from .errors import (
    ApplicabilityError,
    InvocationError,
    LintError,
    ResourceTypeNotFoundError,
    ValidationError,
)
from .reader import ClusterReader
from .registry import CheckRegistry
from .result import DiagnosticResult
from .severity import ResultStatus, Severity, resolve_severity, resolve_status

logger = logging.getLogger(__name__)


@dataclass
class CheckExecution:
    """
    One collected result.

    Attributes:
        check: The check that produced the result
        result: The validated diagnostic result
        sequence: Position in invocation order
    """
    check: Check
    result: DiagnosticResult
    sequence: int = 0

    @property
    def category(self) -> Category:
        return self.check.category

    @property
    def severity(self) -> Optional[Severity]:
        return resolve_severity(self.result.conditions)

    @property
    def status(self) -> Optional[ResultStatus]:
        return resolve_status(self.result.conditions)


@dataclass
class ExecutionReport:
    """
    Outcome of one run.

    Attributes:
        executions: Results in invocation order
        errors: ApplicabilityError and InvocationError instances
        skipped: IDs of checks that did not apply to the version pair
        incomplete: True if the deadline cut the run short
        abandoned: Number of invocations that never finished; a check
            abandoned before its targets were known counts once
        abandoned_checks: IDs of checks the deadline stopped before their
            invocations were planned
        current_version: Version context of the run
        target_version: Version context of the run
        duration_ms: Wall time of the run
    """
    executions: List[CheckExecution] = field(default_factory=list)
    errors: List[LintError] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    incomplete: bool = False
    abandoned: int = 0
    abandoned_checks: List[str] = field(default_factory=list)
    current_version: Optional[Version] = None
    target_version: Optional[Version] = None
    duration_ms: int = 0

    def by_category(self) -> Dict[Category, List[CheckExecution]]:
        """Group executions by category, keeping invocation order within each."""
        grouped: Dict[Category, List[CheckExecution]] = {c: [] for c in CATEGORY_ORDER}
        for execution in self.executions:
            grouped[execution.category].append(execution)
        return grouped

    @property
    def has_critical(self) -> bool:
        return any(e.severity == Severity.CRITICAL for e in self.executions)

    @property
    def has_warning(self) -> bool:
        return any(e.severity == Severity.WARNING for e in self.executions)


@dataclass
class _Invocation:
    check: Check
    target: Target


class _DaemonPool:
    """
    Worker pool on daemon threads.

    Work abandoned at the deadline keeps its thread until it returns, but a
    daemon thread never holds up interpreter exit. Callers wait on the
    returned futures with their own timeout.
    """

    def __init__(self, max_workers: int, name: str):
        self.max_workers = max_workers
        self.name = name
        self._queue: "queue.SimpleQueue" = queue.SimpleQueue()
        self._threads: List[threading.Thread] = []

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future: Future = Future()
        self._queue.put((future, fn, args))
        if len(self._threads) < self.max_workers:
            thread = threading.Thread(
                target=self._work,
                name=f"{self.name}-{len(self._threads)}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        return future

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            future, fn, args = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(result)

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Stop the workers; with cancel_futures, queued work never starts."""
        if cancel_futures:
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if item is not None:
                    item[0].cancel()
        for _ in self._threads:
            self._queue.put(None)
        if wait:
            for thread in self._threads:
                thread.join()


class Executor:
    """
    Runs selected checks against a cluster reader.

    Invocations run on a thread pool. With max_workers=1 (the default)
    they run one at a time in invocation order; with more workers they run
    concurrently and results are still collected in invocation order.

    Example:
        executor = Executor(registry, reader, max_workers=4)
        report = executor.execute(["workloads"], timeout=60)
        if report.incomplete:
            print("deadline reached")
    """

    def __init__(
        self,
        registry: CheckRegistry,
        reader: ClusterReader,
        max_workers: int = 1,
        on_check_start: Optional[Callable[[Check, Target], None]] = None,
        on_check_complete: Optional[Callable[[Check, Target, Optional[DiagnosticResult]], None]] = None,
    ):
        """
        Initialize the executor.

        Args:
            registry: Populated check registry
            reader: Read capability handed to every target
            max_workers: Number of concurrent invocations
            on_check_start: Optional callback invoked before each invocation,
                from the worker thread
            on_check_complete: Optional callback invoked after each invocation
                in invocation order; result is None on failure
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.registry = registry
        self.reader = reader
        self.max_workers = max_workers
        self.on_check_start = on_check_start
        self.on_check_complete = on_check_complete

    def resolve(
        self,
        selectors: Sequence[str] = ("*",),
        category: Optional[Category] = None,
    ) -> List[Check]:
        """
        Resolve selectors to checks, ordered by category then ID.

        Raises:
            InvalidPatternError: If any selector is malformed
        """
        seen: Dict[str, Check] = {}
        for pattern in selectors:
            for check in self.registry.list_by_pattern(pattern, category):
                seen.setdefault(check.check_id, check)
        order = {c: i for i, c in enumerate(CATEGORY_ORDER)}
        return sorted(seen.values(), key=lambda c: (order[c.category], c.check_id))

    def plan(
        self,
        selectors: Sequence[str] = ("*",),
        category: Optional[Category] = None,
        current_version: Optional[Version] = None,
        target_version: Optional[Version] = None,
    ) -> Dict[str, List[str]]:
        """
        Show which checks would run without invoking them.

        Returns:
            Dictionary with 'applicable', 'skipped' and 'errors' check IDs;
            the cause of each error is logged as a warning
        """
        plan: Dict[str, List[str]] = {"applicable": [], "skipped": [], "errors": []}
        for check in self.resolve(selectors, category):
            try:
                applies = check.can_apply(current_version, target_version)
            except Exception as e:
                logger.warning("%s", ApplicabilityError(check.check_id, e))
                plan["errors"].append(check.check_id)
                continue
            plan["applicable" if applies else "skipped"].append(check.check_id)
        return plan

    def _discover(
        self,
        ctx: CheckContext,
        pool: _DaemonPool,
        check: Check,
        target_base: Target,
        report: ExecutionReport,
    ) -> List[Target]:
        """
        List every instance of the check's resource types as bound targets.

        Raises:
            DeadlineExceeded: If the deadline passes before listing finishes
        """
        targets: List[Target] = []
        for resource_type in check.resource_types:
            ctx.raise_if_expired()
            future = pool.submit(self.reader.list, resource_type)
            try:
                instances = future.result(timeout=ctx.remaining())
            except FutureTimeoutError:
                future.cancel()
                raise DeadlineExceeded(f"listing {resource_type} for {check.check_id}") from None
            except ResourceTypeNotFoundError:
                logger.debug("Resource type %s not served, no instances for %s", resource_type, check.check_id)
                continue
            except Exception as e:
                error = InvocationError(check.check_id, e, resource=str(resource_type))
                logger.warning("Failed to list %s for %s: %s", resource_type, check.check_id, e)
                report.errors.append(error)
                continue
            for instance in instances:
                targets.append(
                    Target(
                        reader=self.reader,
                        current_version=target_base.current_version,
                        target_version=target_base.target_version,
                        resource=instance,
                    )
                )
        return targets

    def _invoke(self, ctx: CheckContext, check: Check, target: Target) -> DiagnosticResult:
        ctx.raise_if_expired()
        if self.on_check_start:
            self.on_check_start(check, target)

        result = check.validate(ctx, target)
        if not isinstance(result, DiagnosticResult):
            raise ValidationError(
                f"validate() must return a DiagnosticResult, got {type(result).__name__}"
            )
        result.validate()
        return result

    def execute(
        self,
        selectors: Sequence[str] = ("*",),
        category: Optional[Category] = None,
        current_version: Optional[Version] = None,
        target_version: Optional[Version] = None,
        timeout: Optional[float] = None,
    ) -> ExecutionReport:
        """
        Run the selected checks.

        Args:
            selectors: Selector patterns; a check matching any of them runs
            category: Optional category filter
            current_version: Installed version (None in lint mode)
            target_version: Upgrade target version (None in lint mode)
            timeout: Seconds before the run is abandoned; None for no limit

        Returns:
            ExecutionReport with results, recorded errors and completion state

        Raises:
            InvalidPatternError: If any selector is malformed
        """
        started = time.perf_counter()
        ctx = CheckContext.with_timeout(timeout)
        report = ExecutionReport(current_version=current_version, target_version=target_version)
        base = Target(reader=self.reader, current_version=current_version, target_version=target_version)

        checks = self.resolve(selectors, category)
        pool = _DaemonPool(self.max_workers, "cluster-lint")
        try:
            invocations = self._plan_invocations(ctx, pool, checks, base, report)
            if report.incomplete:
                report.abandoned = len(invocations) + len(report.abandoned_checks)
            else:
                self._run(ctx, pool, invocations, report)
        finally:
            if report.incomplete:
                ctx.cancelled.set()
            pool.shutdown(wait=not report.incomplete, cancel_futures=True)

        report.duration_ms = int((time.perf_counter() - started) * 1000)
        return report

    def _plan_invocations(
        self,
        ctx: CheckContext,
        pool: _DaemonPool,
        checks: List[Check],
        base: Target,
        report: ExecutionReport,
    ) -> List[_Invocation]:
        invocations: List[_Invocation] = []
        for index, check in enumerate(checks):
            if ctx.expired():
                self._abandon_checks(checks[index:], report)
                break

            try:
                applies = check.can_apply(base.current_version, base.target_version)
            except Exception as e:
                error = ApplicabilityError(check.check_id, e)
                logger.warning("%s", error)
                report.errors.append(error)
                continue

            if not applies:
                logger.debug("Skipping %s: not applicable", check.check_id)
                report.skipped.append(check.check_id)
                continue

            if check.category == Category.WORKLOAD:
                try:
                    targets = self._discover(ctx, pool, check, base, report)
                except DeadlineExceeded:
                    self._abandon_checks(checks[index:], report)
                    break
                logger.debug("Discovered %d targets for %s", len(targets), check.check_id)
            else:
                targets = [base]
            invocations.extend(_Invocation(check, target) for target in targets)
        return invocations

    def _abandon_checks(self, checks: Sequence[Check], report: ExecutionReport) -> None:
        report.incomplete = True
        for check in checks:
            logger.debug("Abandoned %s before planning at deadline", check.check_id)
            report.abandoned_checks.append(check.check_id)

    def _run(
        self,
        ctx: CheckContext,
        pool: _DaemonPool,
        invocations: List[_Invocation],
        report: ExecutionReport,
    ) -> None:
        futures: List[Future] = [
            pool.submit(self._invoke, ctx, inv.check, inv.target) for inv in invocations
        ]
        for sequence, (inv, future) in enumerate(zip(invocations, futures)):
            self._collect(ctx, sequence, inv, future, report)

    def _collect(
        self,
        ctx: CheckContext,
        sequence: int,
        inv: _Invocation,
        future: Future,
        report: ExecutionReport,
    ) -> None:
        resource = inv.target.describe()
        try:
            if report.incomplete:
                # Past the deadline only already-finished invocations count.
                if not future.done():
                    raise FutureTimeoutError()
                result = future.result()
            else:
                result = future.result(timeout=ctx.remaining())
        except (FutureTimeoutError, CancelledError, DeadlineExceeded):
            future.cancel()
            report.incomplete = True
            report.abandoned += 1
            logger.debug("Abandoned %s%s at deadline", inv.check.check_id, f" on {resource}" if resource else "")
            return
        except Exception as e:
            error = InvocationError(inv.check.check_id, e, resource=resource)
            logger.warning("%s", error)
            report.errors.append(error)
            if self.on_check_complete:
                self.on_check_complete(inv.check, inv.target, None)
            return

        report.executions.append(CheckExecution(check=inv.check, result=result, sequence=sequence))
        if self.on_check_complete:
            self.on_check_complete(inv.check, inv.target, result)
