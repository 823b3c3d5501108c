"""
Agents Module
=============

The stages of the query synthesis pipeline.
"""

from nl_to_es.agents.consensus import ConsensusSelector
from nl_to_es.agents.intent import IntentExtractor
from nl_to_es.agents.perspectives import PerspectiveGenerator
from nl_to_es.agents.query_builder import (
    MANDATORY_FILTERS,
    QuerySynthesizer,
    enforce_mandatory_filters,
    optimize_query,
)

__all__ = [
    "IntentExtractor",
    "PerspectiveGenerator",
    "QuerySynthesizer",
    "ConsensusSelector",
    "MANDATORY_FILTERS",
    "enforce_mandatory_filters",
    "optimize_query",
]
