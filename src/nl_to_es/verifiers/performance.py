"""
Performance Verifier
====================

Heuristic warnings for query shapes that tend to be slow.
"""

from nl_to_es.models import VerificationResult, VerificationStatus
from nl_to_es.verifiers.base import Verifier

MAX_RESULT_WINDOW = 10000


def _leading_wildcards(node) -> list[str]:
    found = []
    if isinstance(node, list):
        for item in node:
            found.extend(_leading_wildcards(item))
    elif isinstance(node, dict):
        for key, value in node.items():
            if key == "wildcard" and isinstance(value, dict):
                for field, pattern in value.items():
                    if isinstance(pattern, dict):
                        pattern = pattern.get("value", "")
                    if isinstance(pattern, str) and pattern[:1] in ("*", "?"):
                        found.append(field)
            else:
                found.extend(_leading_wildcards(value))
    return found


class PerformanceVerifier(Verifier):
    """Warns about leading wildcards and oversized result windows."""

    category = "performance"

    @property
    def name(self) -> str:
        return "PerformanceVerifier"

    def verify(self, query: dict, schema: dict) -> VerificationResult:
        warnings = [
            f"Leading wildcard on '{field}' forces a full term scan"
            for field in _leading_wildcards(query.get("query"))
        ]

        offset, size = query.get("from"), query.get("size")
        window = (offset if isinstance(offset, int) else 0) + (size if isinstance(size, int) else 0)
        if window > MAX_RESULT_WINDOW:
            warnings.append(f"Result window {window} exceeds {MAX_RESULT_WINDOW}")

        if warnings:
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.FAILED,
                message="; ".join(warnings),
                details={"errors": warnings},
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message="No performance concerns found",
        )
