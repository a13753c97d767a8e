"""
Check registry.

The registry holds every check known to a run, keyed by check ID. It is
filled once at startup through build_registry() and frozen on the first
lookup, so the set of checks cannot change while a run is in progress.

Example:
    from cluster_lint.checks import BUILTIN_CHECKS
    from cluster_lint.registry import build_registry

    registry = build_registry(BUILTIN_CHECKS)
    for check in registry.list_by_pattern("components"):
        print(check.check_id)
"""

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from .check import Category, Check
from .errors import DuplicateIdentityError, RegistryFrozenError
from .selector import matches_pattern, validate_selector

logger = logging.getLogger(__name__)


class CheckRegistry:
    """
    Holds registered checks and answers pattern queries.

    Registration fails on a duplicate ID (the first check stays registered)
    and after the first lookup. Queries return checks ordered by ID.
    """

    def __init__(self) -> None:
        self._checks: Dict[str, Check] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, check: Check) -> None:
        """
        Register a check.

        Raises:
            ValueError: If the check has no ID or no Category, or is a
                workload check without resource_types
            DuplicateIdentityError: If the ID is already registered
            RegistryFrozenError: If the registry has already been queried
        """
        if not check.check_id:
            raise ValueError(f"{type(check).__name__} has no check_id")
        if not isinstance(check.category, Category):
            raise ValueError(
                f"check '{check.check_id}' category must be a Category enum, "
                f"got {type(check.category)}"
            )
        if check.category == Category.WORKLOAD and not check.resource_types:
            raise ValueError(f"workload check '{check.check_id}' declares no resource_types")
        if self._frozen:
            raise RegistryFrozenError(check.check_id)
        if check.check_id in self._checks:
            raise DuplicateIdentityError(check.check_id)

        self._checks[check.check_id] = check
        logger.debug("Registered check %s (%s)", check.check_id, check.category.value)

    def _freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            logger.debug("Registry frozen with %d checks", len(self._checks))

    def get(self, check_id: str) -> Optional[Check]:
        """Return the check with this ID, or None."""
        self._freeze()
        return self._checks.get(check_id)

    def list_all(self) -> List[Check]:
        """Return every registered check, ordered by ID."""
        self._freeze()
        return [self._checks[key] for key in sorted(self._checks)]

    def list_by_category(self, category: Category) -> List[Check]:
        return [check for check in self.list_all() if check.category == category]

    def list_by_pattern(self, pattern: str, category: Optional[Category] = None) -> List[Check]:
        """
        Return checks matching the selector pattern and optional category.

        Raises:
            InvalidPatternError: If the pattern is a malformed glob
        """
        validate_selector(pattern)
        matched: List[Check] = []
        for check in self.list_all():
            if category is not None and check.category != category:
                continue
            if matches_pattern(check, pattern):
                matched.append(check)
        return matched

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: object) -> bool:
        return check_id in self._checks

    def __iter__(self) -> Iterator[Check]:
        return iter(self.list_all())


CheckFactory = Callable[[], Check]


def build_registry(factories: Iterable[CheckFactory]) -> CheckRegistry:
    """
    Build a registry from a static list of check constructors.

    A registration conflict is a programming error and propagates.
    """
    registry = CheckRegistry()
    for factory in factories:
        registry.register(factory())
    return registry
