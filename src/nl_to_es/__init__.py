"""
NL-to-Elasticsearch Query Agent
===============================

Multi-perspective synthesis of validated Elasticsearch queries from
natural language requests.
"""

from nl_to_es.models import (
    AgentLog,
    AnalysisType,
    Approach,
    Complexity,
    Entities,
    Intent,
    LLMConfig,
    Perspective,
    PipelineResponse,
    QueryResult,
    RequestContext,
    SampleQuery,
    ValidationResult,
    VerificationResult,
    VerificationStatus,
)
from nl_to_es.exceptions import (
    AgentError,
    CompletionError,
    CompletionTimeoutError,
    ConfigurationError,
    ExtractionError,
    ProviderError,
    SynthesisError,
)
from nl_to_es.agent import QueryAgent
from nl_to_es.agents import (
    ConsensusSelector,
    IntentExtractor,
    PerspectiveGenerator,
    QuerySynthesizer,
)
from nl_to_es.verifiers import (
    PerformanceVerifier,
    QueryValidator,
    SafetyVerifier,
    SchemaVerifier,
    StructureVerifier,
    Verifier,
)
from nl_to_es.llm import (
    CompletionService,
    HTTPCompletionService,
    MockLLM,
    RetryingCompletionService,
)
from nl_to_es.settings import InMemorySettingsStore, JsonFileSettingsStore, SettingsStore
from nl_to_es.schema import JOBS_INDEX_SCHEMA

__version__ = "0.1.0"

__all__ = [
    # Models
    "AgentLog",
    "AnalysisType",
    "Approach",
    "Complexity",
    "Entities",
    "Intent",
    "LLMConfig",
    "Perspective",
    "PipelineResponse",
    "QueryResult",
    "RequestContext",
    "SampleQuery",
    "ValidationResult",
    "VerificationResult",
    "VerificationStatus",
    # Errors
    "AgentError",
    "CompletionError",
    "CompletionTimeoutError",
    "ConfigurationError",
    "ExtractionError",
    "ProviderError",
    "SynthesisError",
    # Agent
    "QueryAgent",
    "IntentExtractor",
    "PerspectiveGenerator",
    "QuerySynthesizer",
    "ConsensusSelector",
    # Verifiers
    "Verifier",
    "QueryValidator",
    "StructureVerifier",
    "SchemaVerifier",
    "SafetyVerifier",
    "PerformanceVerifier",
    # LLM
    "CompletionService",
    "HTTPCompletionService",
    "RetryingCompletionService",
    "MockLLM",
    # Settings
    "SettingsStore",
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "JOBS_INDEX_SCHEMA",
]
