"""
FastAPI Application
===================

Main FastAPI application for the NL-to-Elasticsearch query service.
"""

import json
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.middleware.telemetry import TelemetryMiddleware
from api.routes.health import router as health_router
from api.routes.query import router as query_router
from api.routes.settings import router as settings_router
from api.schemas import ErrorResponse
from nl_to_es.agent import QueryAgent
from nl_to_es.config import (
    create_completion_service,
    create_settings_store,
    load_llm_config,
    use_mock_llm,
)
from nl_to_es.llm.mock import MockLLM
from observability.logging_config import get_logger, setup_logging
from observability.metrics import metrics_endpoint, setup_metrics
from observability.tracing import setup_tracing

DEMO_INTENT = {
    "entities": {
        "jobTitles": ["Software Engineer"],
        "locations": ["San Francisco"],
        "skills": ["JavaScript"],
    },
    "analysisType": "search",
    "complexity": "simple",
    "confidence": 0.9,
}

DEMO_QUERY = {
    "query": {
        "bool": {
            "must": [{"match": {"job_title": "software engineer"}}],
            "filter": [{"term": {"location.keyword": "San Francisco"}}],
        }
    }
}


def create_agent(http_client: httpx.AsyncClient | None = None) -> QueryAgent:
    """
    Create and configure the query agent from the environment.

    Args:
        http_client: Shared client for provider calls (owned by the caller)
    """
    config = load_llm_config()
    settings = create_settings_store()

    if use_mock_llm():
        # Canned replies keyed on the intent and query-builder prompts
        llm = MockLLM(
            responses={
                "Extract structured intent": [json.dumps(DEMO_INTENT)],
                "BUILD ELASTICSEARCH QUERY": [json.dumps(DEMO_QUERY)],
            }
        )
    else:
        llm = create_completion_service(config, http_client=http_client)

    return QueryAgent(llm=llm, settings=settings, default_config=config)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler. Owns the shared provider HTTP client."""
    logger = get_logger(__name__)
    logger.info("Starting NL-to-ES API", version=__version__)

    app.state.http_client = httpx.AsyncClient()
    try:
        if getattr(app.state, "agent", None) is None:
            app.state.agent = create_agent(http_client=app.state.http_client)

        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Shutting down NL-to-ES API")


def create_app(agent: QueryAgent | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        agent: Pre-built agent (tests); built from the environment otherwise
    """
    setup_logging()

    app = FastAPI(
        title="NL-to-Elasticsearch Query API",
        description=(
            "Multi-perspective agent that converts natural language requests "
            "into validated Elasticsearch queries."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.agent = agent

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(query_router)
    app.include_router(settings_router)

    setup_metrics(app)
    app.add_route("/metrics", metrics_endpoint)
    setup_tracing(app)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        get_logger(__name__).exception("Unhandled error", error=str(exc))
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="InternalServerError",
                message="An unexpected error occurred",
                request_id=request_id,
            ).model_dump(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
