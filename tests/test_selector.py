"""Tests for check selection."""

import pytest
from cluster_lint import Category, InvalidPatternError, select, validate_selector, validate_selectors
from cluster_lint.selector import compile_glob, matches_pattern


@pytest.fixture
def checks(static_check):
    return [
        static_check("components.dashboard.available", Category.COMPONENT),
        static_check("components.kueue.managed-removal", Category.COMPONENT),
        static_check("services.servicemesh.removal", Category.SERVICE),
        static_check("workloads.notebook.dashboard-link", Category.WORKLOAD, resource_types=("x",)),
        static_check("dependencies.certmanager.installed", Category.DEPENDENCY),
    ]


def _ids(checks):
    return [c.check_id for c in checks]


class TestMatchesPattern:
    """Tests for matches_pattern precedence."""

    def test_wildcard(self, checks):
        """Test that '*' matches every check."""
        assert all(matches_pattern(c, "*") for c in checks)

    @pytest.mark.parametrize("shortcut,category", [
        ("components", Category.COMPONENT),
        ("services", Category.SERVICE),
        ("workloads", Category.WORKLOAD),
        ("dependencies", Category.DEPENDENCY),
    ])
    def test_category_shortcut(self, checks, shortcut, category):
        """Test that a category shortcut matches exactly that category."""
        for check in checks:
            assert matches_pattern(check, shortcut) == (check.category == category)

    def test_exact_id(self, checks):
        """Test exact identifier matching."""
        matched = [c for c in checks if matches_pattern(c, "components.kueue.managed-removal")]
        assert _ids(matched) == ["components.kueue.managed-removal"]

    def test_glob_prefix(self, checks):
        """Test a category-prefixed glob."""
        matched = [c for c in checks if matches_pattern(c, "components.*")]
        assert _ids(matched) == ["components.dashboard.available", "components.kueue.managed-removal"]

    def test_glob_substring(self, checks):
        """Test a substring glob across categories."""
        matched = [c for c in checks if matches_pattern(c, "*dashboard*")]
        assert _ids(matched) == ["components.dashboard.available", "workloads.notebook.dashboard-link"]

    def test_question_mark(self, static_check):
        """Test single character matching."""
        assert matches_pattern(static_check("a.b1"), "a.b?")
        assert not matches_pattern(static_check("a.b12"), "a.b?")

    def test_case_sensitive(self, checks):
        """Test that globs are case-sensitive."""
        assert not any(matches_pattern(c, "COMPONENTS.*") for c in checks)

    def test_star_does_not_cross_slash(self, static_check):
        """Test that '*' stays within a path segment."""
        assert not matches_pattern(static_check("a/b"), "a*")

    def test_character_class(self, static_check):
        """Test bracket classes and negation."""
        assert matches_pattern(static_check("check-a"), "check-[abc]")
        assert not matches_pattern(static_check("check-d"), "check-[abc]")
        assert matches_pattern(static_check("check-d"), "check-[^abc]")
        assert matches_pattern(static_check("check-5"), "check-[0-9]")

    def test_escape(self, static_check):
        """Test that a backslash makes the next character literal."""
        assert matches_pattern(static_check("a*b"), "a\\*b")
        assert not matches_pattern(static_check("axb"), "a\\*b")

    def test_no_match_is_empty(self, checks):
        """Test that an unmatched pattern gives no checks."""
        assert not any(matches_pattern(c, "nonexistent.*") for c in checks)


class TestInvalidPatterns:
    """Tests for malformed selectors."""

    @pytest.mark.parametrize("pattern", ["[", "abc[", "[]", "trailing\\", "[z-a]"])
    def test_malformed_glob(self, pattern):
        """Test that malformed globs raise and name the pattern."""
        with pytest.raises(InvalidPatternError) as excinfo:
            compile_glob(pattern)
        assert excinfo.value.pattern == pattern

    def test_matches_pattern_raises(self, checks):
        """Test that matching with a malformed glob raises."""
        with pytest.raises(InvalidPatternError):
            matches_pattern(checks[0], "[")

    def test_validate_selector_empty(self):
        with pytest.raises(InvalidPatternError, match="must not be empty"):
            validate_selector("")

    def test_validate_selectors_empty_list(self):
        with pytest.raises(InvalidPatternError, match="at least one selector"):
            validate_selectors([])

    def test_validate_selectors_ok(self):
        validate_selectors(["*", "components", "workloads.ray.*"])


class TestSelect:
    """Tests for select."""

    def test_union_without_duplicates(self, checks):
        """Test that several patterns are unioned in ID order."""
        selected = select(checks, ["services", "*dashboard*", "components.*"])
        assert _ids(selected) == [
            "components.dashboard.available",
            "components.kueue.managed-removal",
            "services.servicemesh.removal",
            "workloads.notebook.dashboard-link",
        ]

    def test_category_filter(self, checks):
        """Test that the category filter intersects with the patterns."""
        selected = select(checks, ["*dashboard*"], category=Category.WORKLOAD)
        assert _ids(selected) == ["workloads.notebook.dashboard-link"]

    def test_invalid_pattern(self, checks):
        with pytest.raises(InvalidPatternError):
            select(checks, ["components.*", "["])
