"""
Error types for the check engine.

Every failure the engine reports derives from LintError so callers can
catch engine problems without catching unrelated exceptions:

- DuplicateIdentityError / RegistryFrozenError: registry misuse at startup
- InvalidPatternError: a selector could not be parsed
- ApplicabilityError: a check's can_apply() raised
- InvocationError: a check's validate() raised or returned an invalid result
- ValidationError: a DiagnosticResult violates the condition model
- ConfigError: configuration file or values are invalid
"""

from typing import Optional


class LintError(Exception):
    """Base exception for check engine errors."""

    pass


class DuplicateIdentityError(LintError):
    """Raised when a check identifier is registered twice."""

    def __init__(self, check_id: str):
        self.check_id = check_id
        super().__init__(f"check with ID '{check_id}' already registered")


class RegistryFrozenError(LintError):
    """Raised when registering after the registry has been queried."""

    def __init__(self, check_id: str):
        self.check_id = check_id
        super().__init__(
            f"cannot register check '{check_id}': registry is frozen after first lookup"
        )


class InvalidPatternError(LintError):
    """Raised when a selector pattern cannot be parsed."""

    def __init__(self, pattern: str, detail: str = "syntax error in pattern"):
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"invalid pattern {pattern!r}: {detail}")


class ValidationError(LintError):
    """Raised when a diagnostic result violates the condition model."""

    pass


class ApplicabilityError(LintError):
    """Raised when a check's applicability could not be evaluated."""

    def __init__(self, check_id: str, cause: BaseException):
        self.check_id = check_id
        self.cause = cause
        super().__init__(f"check '{check_id}': evaluating applicability: {cause}")


class InvocationError(LintError):
    """Raised when a check invocation fails to produce a valid result."""

    def __init__(
        self,
        check_id: str,
        cause: BaseException,
        resource: Optional[str] = None,
    ):
        self.check_id = check_id
        self.cause = cause
        self.resource = resource
        where = f" on {resource}" if resource else ""
        super().__init__(f"check '{check_id}'{where} failed: {cause}")


class ConfigError(LintError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


class ResourceError(LintError):
    """Base exception for cluster read failures."""

    pass


class ResourceTypeNotFoundError(ResourceError):
    """Raised when the cluster does not serve the requested resource type."""

    def __init__(self, resource_type: object):
        self.resource_type = resource_type
        super().__init__(f"resource type {resource_type} is not known to the cluster")


class NotFoundError(ResourceError):
    """Raised when a requested object does not exist."""

    def __init__(self, resource_type: object, name: str, namespace: Optional[str] = None):
        self.resource_type = resource_type
        self.name = name
        self.namespace = namespace
        ref = f"{namespace}/{name}" if namespace else name
        super().__init__(f"{resource_type} '{ref}' not found")
