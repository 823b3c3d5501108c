"""
Pytest Fixtures
===============

Shared fixtures for NL-to-Elasticsearch agent tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add src and the repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from nl_to_es.agent import QueryAgent
from nl_to_es.llm.mock import MockLLM
from nl_to_es.models import (
    AnalysisType,
    Complexity,
    Entities,
    Intent,
    LLMConfig,
    RequestContext,
    SampleQuery,
)
from nl_to_es.schema import JOBS_INDEX_SCHEMA
from nl_to_es.settings import InMemorySettingsStore
from nl_to_es.verifiers.base import QueryValidator
from nl_to_es.verifiers.performance import PerformanceVerifier
from nl_to_es.verifiers.safety import SafetyVerifier
from nl_to_es.verifiers.schema import SchemaVerifier
from nl_to_es.verifiers.structure import StructureVerifier

# Prompt markers used to route MockLLM replies
INTENT_PROMPT = "Extract structured intent"
QUERY_PROMPT = "BUILD ELASTICSEARCH QUERY"

SF_INTENT = {
    "entities": {
        "jobTitles": ["Software Engineer"],
        "locations": ["San Francisco"],
        "skills": ["JavaScript"],
    },
    "analysisType": "search",
    "complexity": "simple",
    "confidence": 0.9,
}

SF_QUERY = {
    "query": {
        "bool": {
            "must": [{"match": {"job_title": "software engineer"}}],
            "filter": [{"term": {"location.keyword": "San Francisco"}}],
        }
    }
}

COUNT_INTENT = {
    "entities": {"companies": ["Acme Corp"]},
    "analysisType": "aggregation",
    "complexity": "medium",
    "confidence": 0.8,
}

COUNT_QUERY = {
    "size": 10,
    "query": {"term": {"company_name.keyword": "Acme Corp"}},
    "aggs": {"by_company": {"terms": {"field": "company_name.keyword", "size": 10}}},
}


@pytest.fixture
def jobs_schema() -> dict:
    """Return the jobs index schema."""
    return JOBS_INDEX_SCHEMA


@pytest.fixture
def sample_corpus() -> list[SampleQuery]:
    """A small example corpus."""
    return [
        SampleQuery(
            id="1",
            description="Find jobs at a company",
            user_intent="jobs at google",
            query={"query": {"term": {"company_name.keyword": "Google"}}},
            tags=("company", "search", "exact_match"),
        ),
        SampleQuery(
            id="2",
            description="Count jobs per company",
            user_intent="how many jobs by company",
            query={"size": 0, "aggs": {"c": {"terms": {"field": "company_name.keyword"}}}},
            tags=("company", "aggregation"),
            complexity="medium",
        ),
        SampleQuery(
            id="3",
            description="Python developer jobs in Berlin",
            user_intent="python jobs in berlin",
            query={"query": {"match": {"job_description": "python"}}},
            tags=("skills", "location", "search", "fuzzy"),
        ),
    ]


@pytest.fixture
def request_context(jobs_schema: dict, sample_corpus: list[SampleQuery]) -> RequestContext:
    """A settings snapshot with the jobs schema and corpus."""
    return RequestContext(
        config=LLMConfig(retry_attempts=0, timeout=5.0),
        schema=jobs_schema,
        sample_queries=tuple(sample_corpus),
        debug=True,
        session_id="session-test",
    )


@pytest.fixture
def sf_intent() -> Intent:
    """Intent for 'software engineer jobs in San Francisco requiring JavaScript'."""
    return Intent(
        entities=Entities(
            job_titles=("Software Engineer",),
            locations=("San Francisco",),
            skills=("JavaScript",),
        ),
        analysis_type=AnalysisType.SEARCH,
        complexity=Complexity.SIMPLE,
        confidence=0.9,
        raw_input="Find software engineer jobs in San Francisco requiring JavaScript",
    )


@pytest.fixture
def structure_verifier() -> StructureVerifier:
    return StructureVerifier()


@pytest.fixture
def schema_verifier() -> SchemaVerifier:
    return SchemaVerifier()


@pytest.fixture
def safety_verifier() -> SafetyVerifier:
    return SafetyVerifier()


@pytest.fixture
def performance_verifier() -> PerformanceVerifier:
    return PerformanceVerifier()


@pytest.fixture
def full_validator() -> QueryValidator:
    """Validator running every check."""
    return QueryValidator(
        verifiers=[
            StructureVerifier(),
            SchemaVerifier(),
            SafetyVerifier(),
            PerformanceVerifier(),
        ]
    )


@pytest.fixture
def mock_llm_sf() -> MockLLM:
    """Mock LLM answering the San Francisco search request."""
    return MockLLM(
        responses={
            INTENT_PROMPT: [json.dumps(SF_INTENT)],
            QUERY_PROMPT: [json.dumps(SF_QUERY)],
        }
    )


@pytest.fixture
def mock_llm_count() -> MockLLM:
    """Mock LLM answering the per-company count request."""
    return MockLLM(
        responses={
            INTENT_PROMPT: [json.dumps(COUNT_INTENT)],
            QUERY_PROMPT: [json.dumps(COUNT_QUERY)],
        }
    )


@pytest.fixture
def settings_store(jobs_schema: dict, sample_corpus: list[SampleQuery]) -> InMemorySettingsStore:
    """In-memory store seeded with the jobs schema and corpus."""
    return InMemorySettingsStore(
        {
            "elasticsearchSchema": jobs_schema,
            "sampleQueries": [s.to_dict() for s in sample_corpus],
        }
    )


@pytest.fixture
def agent_sf(mock_llm_sf: MockLLM, settings_store: InMemorySettingsStore) -> QueryAgent:
    """Agent wired to the San Francisco mock."""
    return QueryAgent(llm=mock_llm_sf, settings=settings_store)


@pytest.fixture
def agent_count(mock_llm_count: MockLLM, settings_store: InMemorySettingsStore) -> QueryAgent:
    """Agent wired to the count mock."""
    return QueryAgent(llm=mock_llm_count, settings=settings_store)
