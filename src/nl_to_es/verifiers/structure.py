"""
Structure Verifier
==================

Checks that a candidate has a well-formed root query clause.
"""

from nl_to_es.models import VerificationResult, VerificationStatus
from nl_to_es.verifiers.base import Verifier


class StructureVerifier(Verifier):
    """Requires a non-empty ``query`` object at the document root."""

    category = "syntax"

    @property
    def name(self) -> str:
        return "StructureVerifier"

    def verify(self, query: dict, schema: dict) -> VerificationResult:
        root = query.get("query") if isinstance(query, dict) else None

        if not isinstance(root, dict) or not root:
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.FAILED,
                message="Basic syntax error: query object missing or malformed.",
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message="Root query clause is present",
        )
