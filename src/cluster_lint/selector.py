"""
Check selection by pattern.

A selector string is evaluated against each check in this order:

1. "*" matches every check
2. A category shortcut ("components", "services", "workloads",
   "dependencies") matches every check in that category
3. An exact check ID matches that check
4. Otherwise the string is a case-sensitive shell glob over the check ID:
   '*' and '?' match within a path segment (not across '/'), '[...]'
   matches a character class ('^' or '!' negates), '\\' escapes.

Example:
    matches_pattern(check, "components.*")   # glob
    matches_pattern(check, "services")       # category shortcut
    matches_pattern(check, "[")              # raises InvalidPatternError
"""

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence

from .check import Category, Check
from .errors import InvalidPatternError

WILDCARD = "*"

CATEGORY_SHORTCUTS = {category.group: category for category in Category}


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Pattern[str]:
    """
    Translate a glob into an anchored regular expression.

    Raises:
        InvalidPatternError: On an unterminated or empty character class,
            or a trailing escape character
    """
    out: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            while i + 1 < n and pattern[i + 1] == "*":
                i += 1
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            if i + 1 >= n:
                raise InvalidPatternError(pattern, "trailing escape character")
            i += 1
            out.append(re.escape(pattern[i]))
        elif c == "[":
            i, cls = _parse_class(pattern, i)
            out.append(cls)
            continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z")


def _parse_class(pattern: str, start: int):
    i = start + 1
    n = len(pattern)
    negate = False
    if i < n and pattern[i] in "^!":
        negate = True
        i += 1

    items: List[str] = []
    while i < n and pattern[i] != "]":
        c = pattern[i]
        if c == "\\":
            i += 1
            if i >= n:
                raise InvalidPatternError(pattern, "trailing escape character")
            c = pattern[i]
        lo = c
        i += 1
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi = pattern[i + 1]
            if hi == "\\":
                if i + 2 >= n:
                    raise InvalidPatternError(pattern, "trailing escape character")
                hi = pattern[i + 2]
                i += 1
            if hi < lo:
                raise InvalidPatternError(pattern, f"invalid range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
            i += 2
        else:
            items.append(re.escape(lo))

    if i >= n:
        raise InvalidPatternError(pattern, "unterminated character class")
    if not items:
        raise InvalidPatternError(pattern, "empty character class")

    body = "".join(items)
    if negate:
        return i + 1, f"[^/{body}]"
    return i + 1, f"[{body}]"


def matches_pattern(check: Check, pattern: str) -> bool:
    """
    Return True if the check matches the selector pattern.

    Raises:
        InvalidPatternError: If the pattern is a malformed glob
    """
    if pattern == WILDCARD:
        return True

    category = CATEGORY_SHORTCUTS.get(pattern)
    if category is not None:
        return check.category == category

    if pattern == check.check_id:
        return True

    return compile_glob(pattern).match(check.check_id) is not None


def validate_selector(pattern: str) -> None:
    """
    Validate a single selector without matching it against anything.

    Raises:
        InvalidPatternError: If the selector is empty or a malformed glob
    """
    if not pattern:
        raise InvalidPatternError(pattern, "selector must not be empty")
    if pattern == WILDCARD or pattern in CATEGORY_SHORTCUTS:
        return
    compile_glob(pattern)


def validate_selectors(patterns: Optional[Sequence[str]]) -> None:
    """
    Validate a list of selectors; the list itself must not be empty.

    Raises:
        InvalidPatternError: On an empty list or any invalid member
    """
    if not patterns:
        raise InvalidPatternError("", "at least one selector is required")
    for pattern in patterns:
        validate_selector(pattern)


def select(
    checks: Iterable[Check],
    patterns: Sequence[str],
    category: Optional[Category] = None,
) -> List[Check]:
    """
    Return the checks matching any of the patterns and the category filter.

    Result order follows check ID; a check matched by several patterns
    appears once.

    Raises:
        InvalidPatternError: If any pattern is malformed
    """
    validate_selectors(patterns)
    selected: List[Check] = []
    for check in sorted(checks, key=lambda c: c.check_id):
        if category is not None and check.category != category:
            continue
        if any(matches_pattern(check, pattern) for pattern in patterns):
            selected.append(check)
    return selected
