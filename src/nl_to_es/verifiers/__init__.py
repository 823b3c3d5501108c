"""
Verifiers Module
================

Validation chain for candidate Elasticsearch queries.
"""

from nl_to_es.verifiers.base import QueryValidator, Verifier
from nl_to_es.verifiers.performance import PerformanceVerifier
from nl_to_es.verifiers.safety import SafetyVerifier
from nl_to_es.verifiers.schema import SchemaVerifier
from nl_to_es.verifiers.structure import StructureVerifier

__all__ = [
    "Verifier",
    "QueryValidator",
    "StructureVerifier",
    "SchemaVerifier",
    "SafetyVerifier",
    "PerformanceVerifier",
]
