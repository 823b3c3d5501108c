"""
Safety Verifier
===============

Reports scripted clauses, which run arbitrary code on the cluster.
"""

from typing import Iterator

from nl_to_es.models import VerificationResult, VerificationStatus
from nl_to_es.verifiers.base import Verifier

SCRIPT_KEYS = {
    "script": "Script clause detected",
    "script_score": "Script scoring detected",
    "scripted_metric": "Scripted metric aggregation detected",
    "script_fields": "Script fields detected",
}


def _find_keys(node, path: str = "") -> Iterator[tuple[str, str]]:
    if isinstance(node, list):
        for i, item in enumerate(node):
            yield from _find_keys(item, f"{path}[{i}]")
    elif isinstance(node, dict):
        for key, value in node.items():
            child = f"{path}.{key}" if path else key
            if key in SCRIPT_KEYS:
                # {"script": {"script": ...}} is one clause
                yield key, child
            else:
                yield from _find_keys(value, child)


class SafetyVerifier(Verifier):
    """Flags script usage anywhere in the document."""

    category = "security"

    @property
    def name(self) -> str:
        return "SafetyVerifier"

    def verify(self, query: dict, schema: dict) -> VerificationResult:
        violations = [f"{SCRIPT_KEYS[key]} at '{path}'" for key, path in _find_keys(query)]

        if violations:
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.FAILED,
                message=f"Safety check failed: {'; '.join(violations)}",
                details={"errors": violations},
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message="No scripted clauses detected",
        )
