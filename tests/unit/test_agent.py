"""
Unit Tests for QueryAgent
=========================

Tests for the main agent controller.
"""

import asyncio
import json

import httpx
import pytest

from nl_to_es.agent import QueryAgent
from nl_to_es.agents.query_builder import MANDATORY_FILTERS
from nl_to_es.exceptions import ExtractionError, ProviderError
from nl_to_es.llm.mock import FailingLLM, MockLLM
from nl_to_es.llm.providers import HTTPCompletionService
from nl_to_es.llm.retry import RetryingCompletionService
from nl_to_es.models import LLMConfig
from nl_to_es.settings import InMemorySettingsStore

from conftest import INTENT_PROMPT, QUERY_PROMPT, SF_INTENT, SF_QUERY


class TestAgentBasic:
    """Basic agent functionality tests."""

    def test_agent_creation(self, mock_llm_sf: MockLLM) -> None:
        """Test that agent can be created with default settings."""
        agent = QueryAgent(llm=mock_llm_sf)
        assert isinstance(agent.llm, RetryingCompletionService)
        assert agent.validator is not None
        assert agent.default_config == LLMConfig()

    def test_agent_without_retries(self, mock_llm_sf: MockLLM) -> None:
        agent = QueryAgent(llm=mock_llm_sf, with_retries=False)
        assert agent.llm is mock_llm_sf

    @pytest.mark.asyncio
    async def test_sf_request(self, agent_sf: QueryAgent) -> None:
        """A search with title, one location and a skill."""
        result = await agent_sf.process_request(
            "Find software engineer jobs in San Francisco requiring JavaScript"
        )

        assert [c.perspective.name for c in result.candidates] == [
            "Targeted Search",
            "Skills-Focused",
        ]
        assert result.best is not None
        assert result.best.perspective.name == "Targeted Search"
        assert result.best.perspective.confidence == pytest.approx(0.765)
        assert result.best.validation.is_valid is True
        assert result.best.validation.score == 80
        for mandatory in MANDATORY_FILTERS:
            assert mandatory in result.best.query["query"]["bool"]["filter"]

    @pytest.mark.asyncio
    async def test_count_request(self, agent_count: QueryAgent) -> None:
        """An aggregation request returns a hits-free query."""
        result = await agent_count.process_request(
            "Count jobs by company Acme Corp posted this year"
        )

        assert [c.perspective.name for c in result.candidates] == ["Analytics"]
        assert result.best.query["track_total_hits"] is True
        assert result.best.query["size"] == 0
        assert "aggs" in result.best.query

    @pytest.mark.asyncio
    async def test_candidate_reasoning(self, agent_sf: QueryAgent) -> None:
        result = await agent_sf.process_request("software jobs")
        best = result.best
        assert best.reasoning.startswith("Query built based on Targeted Search perspective. ")
        assert best.complexity == best.perspective.estimated_complexity


class TestAgentLogs:
    """Tests for the per-request agent log."""

    @pytest.mark.asyncio
    async def test_logs_hidden_without_debug(self, agent_sf: QueryAgent) -> None:
        result = await agent_sf.process_request("software jobs")
        assert result.logs is None

    @pytest.mark.asyncio
    async def test_logs_in_debug(self, agent_sf: QueryAgent) -> None:
        result = await agent_sf.process_request("software jobs", debug=True)

        agents = [log.agent for log in result.logs]
        assert agents == ["IntentParser", "QueryBuilder", "QueryBuilder", "ConsensusAgent"]
        assert all(log.success for log in result.logs)

    @pytest.mark.asyncio
    async def test_stored_debug_flag(self, agent_sf: QueryAgent) -> None:
        await agent_sf.set_debug(True)
        result = await agent_sf.process_request("software jobs")
        assert result.logs is not None

    @pytest.mark.asyncio
    async def test_logs_reset_per_request(self, agent_sf: QueryAgent) -> None:
        first = await agent_sf.process_request("software jobs", debug=True)
        second = await agent_sf.process_request("software jobs", debug=True)
        assert len(first.logs) == len(second.logs)
        assert first.logs is not second.logs

    @pytest.mark.asyncio
    async def test_branch_logs_attached_to_candidate(self, agent_sf: QueryAgent) -> None:
        result = await agent_sf.process_request("software jobs")
        for candidate in result.candidates:
            assert [log.action for log in candidate.agent_logs] == ["buildQuery"]


class TestAgentFailures:
    """Tests for fatal and per-branch failures."""

    @pytest.mark.asyncio
    async def test_malformed_intent_fails_request(self) -> None:
        llm = MockLLM(responses={INTENT_PROMPT: ["not json at all"]})
        agent = QueryAgent(llm=llm)

        with pytest.raises(ExtractionError) as exc_info:
            await agent.process_request("anything")

        logs = exc_info.value.agent_logs
        assert [log.agent for log in logs] == ["IntentParser", "AgentOrchestrator"]
        assert logs[-1].action == "processQuery"
        assert not any(log.success for log in logs)

    @pytest.mark.asyncio
    async def test_provider_down_fails_request(self) -> None:
        llm = FailingLLM()
        settings = InMemorySettingsStore({"llmConfig": {"retryAttempts": 1}})
        agent = QueryAgent(llm=llm, settings=settings)

        with pytest.raises(ExtractionError):
            await agent.process_request("anything")
        assert llm.calls == 2

    @pytest.mark.asyncio
    async def test_failing_branch_is_dropped(self) -> None:
        llm = MockLLM(
            responses={
                INTENT_PROMPT: [json.dumps(SF_INTENT)],
                "PERSPECTIVE: Skills-Focused": [ProviderError("rate limited", status_code=429)],
                QUERY_PROMPT: [json.dumps(SF_QUERY)],
            }
        )
        agent = QueryAgent(llm=llm)

        result = await agent.process_request("software jobs", debug=True)

        assert [c.perspective.name for c in result.candidates] == ["Targeted Search"]
        assert result.best.perspective.name == "Targeted Search"

        failed = [log for log in result.logs if not log.success]
        assert [(log.agent, log.action) for log in failed] == [
            ("QueryBuilder", "buildQuery"),
            ("AgentOrchestrator", "processPerspective-Skills-Focused"),
        ]
        assert "rate limited" in failed[-1].error
        # Default budget: one attempt plus two retries
        assert llm.call_counts["PERSPECTIVE: Skills-Focused"] == 3

    @pytest.mark.asyncio
    async def test_all_branches_fail(self) -> None:
        llm = MockLLM(
            responses={
                INTENT_PROMPT: [json.dumps(SF_INTENT)],
                QUERY_PROMPT: ["no json here"],
            }
        )
        result = await QueryAgent(llm=llm).process_request("software jobs", debug=True)

        assert result.candidates == []
        assert result.best is None
        assert result.logs[-1].agent == "AgentOrchestrator"

    @pytest.mark.asyncio
    async def test_rootless_draft_repaired(self) -> None:
        """A draft without a query root is completed with match_all."""
        llm = MockLLM(
            responses={
                INTENT_PROMPT: [json.dumps(SF_INTENT)],
                QUERY_PROMPT: [json.dumps({"size": 10})],
            }
        )
        result = await QueryAgent(llm=llm).process_request("software jobs")

        assert len(result.candidates) == 2
        assert all(c.validation.is_valid for c in result.candidates)
        assert result.best.query["query"]["bool"]["must"] == [{"match_all": {}}]
        assert result.best.query["size"] == 10

    @pytest.mark.asyncio
    async def test_branches_run_concurrently(self) -> None:
        llm = MockLLM(
            responses={
                INTENT_PROMPT: [json.dumps(SF_INTENT)],
                QUERY_PROMPT: [json.dumps(SF_QUERY)],
            },
            delay=0.2,
        )
        agent = QueryAgent(llm=llm)

        loop = asyncio.get_running_loop()
        start = loop.time()
        result = await agent.process_request("software jobs")
        elapsed = loop.time() - start

        assert len(result.candidates) == 2
        # Intent call plus one round of parallel branch calls
        assert elapsed < 0.2 * 3

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        llm = MockLLM(
            responses={
                INTENT_PROMPT: [json.dumps(SF_INTENT)],
                QUERY_PROMPT: [json.dumps(SF_QUERY)],
            },
            delay=0.2,
        )
        task = asyncio.create_task(QueryAgent(llm=llm).process_request("software jobs"))

        # Let intent extraction finish and the branches start
        await asyncio.sleep(0.3)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(llm.prompts) == 3


class TestProviderFailures:
    """Provider-level failures surface as extraction failures."""

    @staticmethod
    def http_agent(body, provider: str) -> QueryAgent:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        settings = InMemorySettingsStore(
            {"llmConfig": {"provider": provider, "apiKey": "k", "retryAttempts": 0}}
        )
        return QueryAgent(llm=HTTPCompletionService(http_client=client), settings=settings)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "provider,body",
        [
            ("gemini", {"candidates": [{"content": {"parts": []}}]}),
            ("anthropic", {"content": ["oops"]}),
            ("openai", {"choices": [{"message": {"content": ["text"]}}]}),
        ],
    )
    async def test_malformed_provider_body(self, provider: str, body: dict) -> None:
        agent = self.http_agent(body, provider)

        with pytest.raises(ExtractionError) as exc_info:
            await agent.process_request("software jobs")

        logs = exc_info.value.agent_logs
        assert [(log.agent, log.success) for log in logs] == [
            ("IntentParser", False),
            ("AgentOrchestrator", False),
        ]
        assert "Invalid response format" in logs[0].error

    @pytest.mark.asyncio
    async def test_stored_unknown_provider(self) -> None:
        agent = self.http_agent({}, "cohere")

        with pytest.raises(ExtractionError, match="Unsupported LLM provider") as exc_info:
            await agent.process_request("software jobs")
        assert exc_info.value.agent_logs[0].agent == "IntentParser"


class TestAgentSettings:
    """Tests for the settings snapshot."""

    @pytest.mark.asyncio
    async def test_snapshot_defaults(self, mock_llm_sf: MockLLM) -> None:
        agent = QueryAgent(llm=mock_llm_sf)
        context = await agent.snapshot()

        assert context.config == LLMConfig()
        assert context.schema["indexName"] == "default_index"
        assert context.sample_queries == ()
        assert context.debug is False
        assert context.session_id.startswith("session-")

    @pytest.mark.asyncio
    async def test_update_config_used_next_request(self, mock_llm_sf: MockLLM) -> None:
        agent = QueryAgent(llm=mock_llm_sf)
        await agent.update_config(LLMConfig(provider="openai", model="gpt-4"))

        context = await agent.snapshot()
        assert context.config.provider == "openai"
        assert context.config.model == "gpt-4"

    @pytest.mark.asyncio
    async def test_debug_override(self, agent_sf: QueryAgent) -> None:
        await agent_sf.set_debug(True)
        context = await agent_sf.snapshot(debug=False)
        assert context.debug is False
