"""
Dependency checks: operators the platform relies on.

Operator presence is read from OLM Subscriptions. A cluster without OLM
(Subscription type not served) is treated as having no operators installed.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from ..check import Category, Check, CheckContext, Target
from ..conditions import availability_failure, availability_success
from ..errors import ResourceTypeNotFoundError
from ..resources import SUBSCRIPTION, get_name, lookup
from ..result import DiagnosticResult

SubscriptionMatcher = Callable[[Dict[str, Any]], bool]


def find_operator(target: Target, matcher: SubscriptionMatcher) -> Tuple[bool, str]:
    """
    Search OLM subscriptions for an operator.

    Returns:
        (found, installed CSV name or '')
    """
    try:
        subscriptions = target.reader.list(SUBSCRIPTION)
    except ResourceTypeNotFoundError:
        return False, ""

    for subscription in subscriptions:
        if matcher(subscription):
            return True, str(lookup(subscription, "status.installedCSV", "") or "")
    return False, ""


def operator_package(subscription: Dict[str, Any]) -> Optional[str]:
    """Package name the subscription installs, falling back to its own name."""
    return lookup(subscription, "spec.name") or get_name(subscription)


class CertManagerInstalledCheck(Check):
    check_id = "dependencies.certmanager.installed"
    name = "Dependencies :: CertManager :: Installed"
    description = "Reports the cert-manager operator installation status and version"
    category = Category.DEPENDENCY

    PACKAGES = ("cert-manager", "openshift-cert-manager-operator")

    def validate(self, ctx: CheckContext, target: Target) -> DiagnosticResult:
        dr = self.new_result("certmanager", "installed")
        found, version = find_operator(target, lambda sub: operator_package(sub) in self.PACKAGES)

        if not found:
            availability_failure(dr, "cert-manager operator is not installed")
            return dr

        availability_success(dr, f"cert-manager operator installed (version: {version or 'unknown'})")
        return dr
