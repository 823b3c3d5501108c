"""
Query Routes
============

Main API endpoint for natural language to Elasticsearch conversion.
"""

import time
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from api.schemas import (
    AgentLogResponse,
    ErrorResponse,
    QueryRequest,
    QueryResponse,
    QueryResultResponse,
)
from nl_to_es.exceptions import ExtractionError
from observability.logging_config import get_logger
from observability.metrics import track_query_metrics
from observability.tracing import pipeline_span

router = APIRouter(prefix="/api/v1", tags=["Query"])

logger = get_logger(__name__)


def get_agent(request: Request):
    """Dependency to get the configured agent from app state."""
    return request.app.state.agent


def get_request_id(request: Request) -> str:
    """Reuse the telemetry request ID, or generate one."""
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


@router.post(
    "/query",
    response_model=QueryResponse,
    response_model_by_alias=True,
    responses={
        422: {"model": ErrorResponse, "description": "Intent could not be extracted"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Convert natural language to ranked Elasticsearch queries",
    description="Takes a natural language request and returns validated candidate queries",
)
async def process_query(
    request: QueryRequest,
    request_id: Annotated[str, Depends(get_request_id)],
    agent=Depends(get_agent),
) -> QueryResponse:
    """
    Process a natural language request and return candidate queries.

    The endpoint:
    1. Extracts a structured intent from the request
    2. Builds one candidate query per perspective
    3. Validates the candidates and selects the best one
    4. Returns all candidates, the best one and (in debug mode) agent logs

    Args:
        request: Query request with natural language text
        agent: Injected QueryAgent instance
        request_id: Request ID shared with the telemetry middleware

    Returns:
        QueryResponse with candidates and metadata
    """
    start_time = time.perf_counter()

    try:
        with pipeline_span("process_request", request_id=request_id):
            result = await agent.process_request(request.query, debug=request.debug)
    except ExtractionError as e:
        duration = time.perf_counter() - start_time
        track_query_metrics(success=False, candidates=0, duration_seconds=duration)
        logger.warning("Intent extraction failed", request_id=request_id, error=str(e))
        raise HTTPException(
            status_code=422,
            detail=ErrorResponse(
                error="ExtractionError",
                message=str(e),
                request_id=request_id,
            ).model_dump(),
        )

    duration = time.perf_counter() - start_time
    track_query_metrics(
        success=result.best is not None,
        candidates=len(result.candidates),
        duration_seconds=duration,
        best_score=result.best.validation.score if result.best else None,
    )
    logger.info(
        "Query processed",
        request_id=request_id,
        candidates=len(result.candidates),
        best=result.best.perspective.name if result.best else None,
    )

    return QueryResponse(
        candidates=[
            QueryResultResponse.model_validate(c.to_dict()) for c in result.candidates
        ],
        best=QueryResultResponse.model_validate(result.best.to_dict()) if result.best else None,
        logs=[AgentLogResponse.model_validate(log.to_dict()) for log in result.logs]
        if result.logs is not None
        else None,
        request_id=request_id,
        processing_time_ms=duration * 1000,
    )
