"""
Data Models
===========

Core data structures for the multi-perspective query agent.

Records serialise to plain dicts with camelCase keys so they can be
exchanged with settings files, example corpora and API clients.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class AnalysisType(str, Enum):
    """Kind of analysis the user is asking for."""

    SEARCH = "search"
    AGGREGATION = "aggregation"
    ANALYTICS = "analytics"


class Complexity(str, Enum):
    """Rough size of the request."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Approach(str, Enum):
    """Query-construction strategy of a perspective."""

    EXACT_MATCH = "exact_match"
    FUZZY_SEARCH = "fuzzy_search"
    ANALYTICS = "analytics"
    TREND_ANALYSIS = "trend_analysis"


class VerificationStatus(Enum):
    """Status of a single validation check."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class VerificationResult:
    """Result of a single validation check."""

    verifier_name: str
    status: VerificationStatus
    message: str
    details: dict = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Entities:
    """Entities extracted from the user's text."""

    companies: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    skills: tuple[str, ...] = ()
    job_titles: tuple[str, ...] = ()
    date_ranges: tuple[dict, ...] = ()
    salary_ranges: tuple[dict, ...] = ()

    def to_dict(self) -> dict:
        return {
            "companies": list(self.companies),
            "locations": list(self.locations),
            "skills": list(self.skills),
            "jobTitles": list(self.job_titles),
            "dateRanges": [dict(r) for r in self.date_ranges],
            "salaryRanges": [dict(r) for r in self.salary_ranges],
        }


@dataclass(frozen=True)
class Intent:
    """Normalized structured intent. Created once per request."""

    entities: Entities
    analysis_type: AnalysisType
    complexity: Complexity
    confidence: float
    raw_input: str

    def to_dict(self) -> dict:
        return {
            "entities": self.entities.to_dict(),
            "analysisType": self.analysis_type.value,
            "complexity": self.complexity.value,
            "confidence": self.confidence,
            "rawInput": self.raw_input,
        }


@dataclass(frozen=True)
class Perspective:
    """A named query-construction strategy."""

    id: str
    name: str
    description: str
    approach: Approach
    reasoning: str
    confidence: float
    estimated_complexity: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "approach": self.approach.value,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "estimatedComplexity": self.estimated_complexity,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Diagnostics and score for one candidate query."""

    is_valid: bool
    score: float
    syntax_errors: tuple[str, ...] = ()
    schema_errors: tuple[str, ...] = ()
    performance_warnings: tuple[str, ...] = ()
    security_issues: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "syntaxErrors": list(self.syntax_errors),
            "schemaErrors": list(self.schema_errors),
            "performanceWarnings": list(self.performance_warnings),
            "securityIssues": list(self.security_issues),
            "score": self.score,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class AgentLog:
    """Single entry in the per-request agent log."""

    agent: str
    action: str
    input: Any
    output: Any
    duration_ms: float
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        data = {
            "timestamp": self.timestamp.isoformat(),
            "agent": self.agent,
            "action": self.action,
            "input": self.input,
            "output": self.output,
            "duration": self.duration_ms,
            "success": self.success,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class QueryResult:
    """A candidate query joined with the perspective that produced it."""

    query: dict
    perspective: Perspective
    validation: ValidationResult
    reasoning: str
    complexity: int
    agent_logs: list[AgentLog] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "perspective": self.perspective.to_dict(),
            "validation": self.validation.to_dict(),
            "reasoning": self.reasoning,
            "complexity": self.complexity,
            "agentLogs": [log.to_dict() for log in self.agent_logs],
        }


@dataclass
class PipelineResponse:
    """Final result of one request."""

    candidates: list[QueryResult]
    best: Optional[QueryResult]
    logs: Optional[list[AgentLog]] = None

    def to_dict(self) -> dict:
        return {
            "candidates": [c.to_dict() for c in self.candidates],
            "best": self.best.to_dict() if self.best else None,
            "logs": [log.to_dict() for log in self.logs] if self.logs is not None else None,
        }


@dataclass(frozen=True)
class SampleQuery:
    """Example corpus entry used to ground prompts."""

    id: str
    description: str
    user_intent: str
    query: dict
    tags: tuple[str, ...] = ()
    complexity: str = "simple"
    success_rate: float = 1.0
    business_context: Optional[str] = None
    performance_notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SampleQuery":
        """Build an entry from stored data, ignoring malformed optional values."""
        tags = data.get("tags")
        success_rate = data.get("successRate", 1.0)
        if isinstance(success_rate, bool) or not isinstance(success_rate, (int, float)):
            success_rate = 1.0
        query = data.get("query")
        return cls(
            id=str(data.get("id", "")),
            description=str(data.get("description") or ""),
            user_intent=str(data.get("userIntent") or ""),
            query=query if isinstance(query, dict) else {},
            tags=tuple(t for t in tags if isinstance(t, str)) if isinstance(tags, list) else (),
            complexity=str(data.get("complexity") or "simple"),
            success_rate=float(success_rate),
            business_context=data.get("businessContext"),
            performance_notes=data.get("performanceNotes"),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "description": self.description,
            "userIntent": self.user_intent,
            "query": self.query,
            "tags": list(self.tags),
            "complexity": self.complexity,
            "successRate": self.success_rate,
        }
        if self.business_context is not None:
            data["businessContext"] = self.business_context
        if self.performance_notes is not None:
            data["performanceNotes"] = self.performance_notes
        return data


@dataclass(frozen=True)
class LLMConfig:
    """Completion service configuration. Timeout is in seconds."""

    provider: str = "gemini"
    model: str = "gemini-1.5-pro-latest"
    temperature: float = 0.2
    max_tokens: int = 2048
    timeout: float = 30.0
    retry_attempts: int = 2
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "LLMConfig":
        defaults = cls()
        return cls(
            provider=data.get("provider", defaults.provider),
            model=data.get("model", defaults.model),
            temperature=float(data.get("temperature", defaults.temperature)),
            max_tokens=int(data.get("maxTokens", defaults.max_tokens)),
            timeout=float(data.get("timeout", defaults.timeout)),
            retry_attempts=int(data.get("retryAttempts", defaults.retry_attempts)),
            api_key=data.get("apiKey"),
            base_url=data.get("baseUrl"),
        )

    def to_dict(self, include_secrets: bool = True) -> dict:
        data = {
            "provider": self.provider,
            "model": self.model,
            "temperature": self.temperature,
            "maxTokens": self.max_tokens,
            "timeout": self.timeout,
            "retryAttempts": self.retry_attempts,
            "baseUrl": self.base_url,
        }
        if include_secrets:
            data["apiKey"] = self.api_key
        return data


@dataclass(frozen=True)
class RequestContext:
    """Settings snapshot taken at the start of a request."""

    config: LLMConfig
    schema: dict
    sample_queries: tuple[SampleQuery, ...] = ()
    debug: bool = False
    session_id: str = ""

    @property
    def schema_properties(self) -> dict:
        return (self.schema.get("mappings") or {}).get("properties") or {}


@dataclass
class LLMResponse:
    """Response from a provider call."""

    content: str
    model: str
    finish_reason: str = "stop"
    tokens_used: int = 0
