"""
API Schemas
===========

Pydantic models for API request/response validation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that exchanges camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryRequest(CamelModel):
    """Request body for query generation."""

    query: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Natural language request to convert to Elasticsearch queries",
        examples=["Find software engineer jobs in San Francisco requiring JavaScript"],
    )
    debug: bool | None = Field(
        default=None,
        description="Include agent logs in the response (default: stored debug flag)",
    )


class PerspectiveResponse(CamelModel):
    """Query-construction strategy of one candidate."""

    id: str
    name: str
    description: str
    approach: str
    reasoning: str
    confidence: float
    estimated_complexity: int


class ValidationResponse(CamelModel):
    """Validation diagnostics of one candidate."""

    is_valid: bool
    syntax_errors: list[str] = Field(default_factory=list)
    schema_errors: list[str] = Field(default_factory=list)
    performance_warnings: list[str] = Field(default_factory=list)
    security_issues: list[str] = Field(default_factory=list)
    score: float
    recommendations: list[str] = Field(default_factory=list)


class AgentLogResponse(CamelModel):
    """Single agent log entry."""

    timestamp: str = Field(..., description="ISO 8601 timestamp")
    agent: str
    action: str
    input: Any = None
    output: Any = None
    duration: float = Field(..., description="Duration in milliseconds")
    success: bool
    error: str | None = None


class QueryResultResponse(CamelModel):
    """One candidate query with its perspective and validation."""

    query: dict[str, Any]
    perspective: PerspectiveResponse
    validation: ValidationResponse
    reasoning: str
    complexity: int


class QueryResponse(CamelModel):
    """Response body for query generation."""

    candidates: list[QueryResultResponse] = Field(default_factory=list)
    best: QueryResultResponse | None = Field(
        None, description="Selected candidate, null when no usable query was produced"
    )
    logs: list[AgentLogResponse] | None = Field(
        None, description="Agent logs (debug mode only)"
    )
    request_id: str = Field(..., description="Unique request identifier")
    processing_time_ms: float = Field(..., description="Processing time in milliseconds")


class LLMConfigModel(CamelModel):
    """Completion service settings."""

    provider: str = "gemini"
    model: str = "gemini-1.5-pro-latest"
    temperature: float = Field(0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(2048, gt=0)
    timeout: float = Field(30.0, gt=0, description="Per-call timeout in seconds")
    retry_attempts: int = Field(2, ge=0, le=10)
    api_key: str | None = None
    base_url: str | None = None


class SchemaModel(CamelModel):
    """Elasticsearch index schema."""

    mappings: dict[str, Any] = Field(default_factory=lambda: {"properties": {}})
    version: str = "1.0"
    last_updated: str | None = None
    index_name: str = "default_index"


class SampleQueryModel(CamelModel):
    """Example corpus entry."""

    id: str
    description: str = ""
    user_intent: str = ""
    query: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    complexity: str = "simple"
    success_rate: float = 1.0
    business_context: str | None = None
    performance_notes: str | None = None


class DebugFlagModel(CamelModel):
    """Debug flag setting."""

    enabled: bool


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual component health checks",
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(..., description="Whether the service is ready to handle requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    request_id: str | None = Field(None, description="Request ID if available")
    details: dict[str, Any] | None = Field(None, description="Additional error details")
