"""
Prometheus Metrics
==================

Application metrics for monitoring and alerting.
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
    multiprocess,
)

QUERY_PATH = "/api/v1/query"

# Create a custom registry for this application
REGISTRY = CollectorRegistry()

APP_INFO = Info(
    "nl_to_es",
    "NL-to-Elasticsearch application information",
    registry=REGISTRY,
)

# Request metrics
REQUESTS_TOTAL = Counter(
    "nl_to_es_requests_total",
    "Total number of requests processed by the pipeline",
    ["status"],  # success, empty, failure
    registry=REGISTRY,
)

REQUEST_DURATION = Histogram(
    "nl_to_es_request_duration_seconds",
    "Pipeline processing duration in seconds",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    registry=REGISTRY,
)

CANDIDATES_PER_REQUEST = Histogram(
    "nl_to_es_candidates_per_request",
    "Number of surviving candidate queries per request",
    buckets=[0, 1, 2, 3],
    registry=REGISTRY,
)

BEST_SCORE = Histogram(
    "nl_to_es_best_candidate_score",
    "Validation score of the selected candidate",
    buckets=[20, 40, 60, 80, 100],
    registry=REGISTRY,
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY,
)

ACTIVE_REQUESTS = Gauge(
    "nl_to_es_active_requests",
    "Number of requests currently in the pipeline",
    registry=REGISTRY,
)


def setup_metrics(app: FastAPI) -> None:
    """
    Set up Prometheus metrics for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    APP_INFO.info({"version": app.version})

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Callable) -> Response:
        """Middleware to track HTTP metrics."""
        start_time = time.perf_counter()

        is_query_endpoint = request.url.path == QUERY_PATH
        if is_query_endpoint:
            ACTIVE_REQUESTS.inc()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code,
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=request.url.path,
            ).observe(duration)

            return response
        finally:
            if is_query_endpoint:
                ACTIVE_REQUESTS.dec()


def track_query_metrics(
    success: bool,
    candidates: int,
    duration_seconds: float,
    best_score: float | None = None,
) -> None:
    """
    Track metrics for a completed pipeline request.

    Args:
        success: Whether a best candidate was produced
        candidates: Number of surviving candidates
        duration_seconds: Total processing time
        best_score: Validation score of the best candidate
    """
    if success:
        status = "success"
    elif candidates == 0:
        status = "empty"
    else:
        status = "failure"
    REQUESTS_TOTAL.labels(status=status).inc()
    REQUEST_DURATION.observe(duration_seconds)
    CANDIDATES_PER_REQUEST.observe(candidates)

    if best_score is not None:
        BEST_SCORE.observe(best_score)


async def metrics_endpoint(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Handle multiprocess mode if using gunicorn
    try:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        metrics = generate_latest(registry)
    except ValueError:
        # Not in multiprocess mode
        metrics = generate_latest(REGISTRY)

    return Response(
        content=metrics,
        media_type=CONTENT_TYPE_LATEST,
    )
