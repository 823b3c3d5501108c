"""
Base Verifier Classes
=====================

Abstract verifier and the query validator that runs a chain of them.
"""

from abc import ABC, abstractmethod

from nl_to_es.models import ValidationResult, VerificationResult, VerificationStatus

VALID_SCORE = 80
INVALID_SCORE = 20


class Verifier(ABC):
    """Base class for all query checks."""

    #: Which ValidationResult list a failure message goes to.
    category: str = "syntax"

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this verifier."""
        pass

    @abstractmethod
    def verify(self, query: dict, schema: dict) -> VerificationResult:
        """
        Check the query against this verifier's rules.

        Args:
            query: Candidate Elasticsearch query document
            schema: Index schema (``{"mappings": {"properties": ...}}``)

        Returns:
            VerificationResult indicating pass/fail with details
        """
        pass


class QueryValidator:
    """
    Runs verifiers over a candidate query and folds them into a ValidationResult.

    Only ``syntax`` checks decide validity and score. Checks in other
    categories add diagnostics without touching the score.
    """

    def __init__(self, verifiers: list[Verifier] | None = None) -> None:
        if verifiers is not None:
            self.verifiers = verifiers
        else:
            # Lazy import to avoid circular imports
            from nl_to_es.verifiers.structure import StructureVerifier

            self.verifiers = [StructureVerifier()]

    def run(self, query: dict, schema: dict) -> list[VerificationResult]:
        return [verifier.verify(query, schema) for verifier in self.verifiers]

    def validate(self, query: dict, schema: dict) -> ValidationResult:
        diagnostics: dict[str, list[str]] = {
            "syntax": [],
            "schema": [],
            "performance": [],
            "security": [],
        }

        for verifier, result in zip(self.verifiers, self.run(query, schema)):
            if result.status != VerificationStatus.FAILED:
                continue
            messages = result.details.get("errors") or [result.message]
            diagnostics.setdefault(verifier.category, []).extend(messages)

        is_valid = not diagnostics["syntax"]
        if is_valid:
            recommendations = ["Consider adding more specific filters."]
        else:
            recommendations = ["Query is fundamentally flawed."]

        return ValidationResult(
            is_valid=is_valid,
            score=VALID_SCORE if is_valid else INVALID_SCORE,
            syntax_errors=tuple(diagnostics["syntax"]),
            schema_errors=tuple(diagnostics["schema"]),
            performance_warnings=tuple(diagnostics["performance"]),
            security_issues=tuple(diagnostics["security"]),
            recommendations=tuple(recommendations),
        )
