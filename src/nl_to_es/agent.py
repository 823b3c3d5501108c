"""
Query Agent Controller
======================

Main agent that orchestrates multi-perspective query synthesis.
"""

import asyncio
import logging
import time
import uuid

from nl_to_es.agents.consensus import ConsensusSelector
from nl_to_es.agents.intent import IntentExtractor
from nl_to_es.agents.perspectives import PerspectiveGenerator
from nl_to_es.agents.query_builder import QuerySynthesizer
from nl_to_es.exceptions import ExtractionError
from nl_to_es.llm.base import CompletionService
from nl_to_es.llm.retry import RetryingCompletionService
from nl_to_es.models import (
    AgentLog,
    Intent,
    LLMConfig,
    Perspective,
    PipelineResponse,
    QueryResult,
    RequestContext,
)
from nl_to_es.settings import InMemorySettingsStore, SettingsStore
from nl_to_es.verifiers.base import QueryValidator

logger = logging.getLogger(__name__)


class QueryAgent:
    """
    Main agent that turns free text into ranked Elasticsearch queries.

    The agent:
    1. Snapshots configuration, schema and example corpus from the settings store
    2. Extracts a structured intent (the only fatal step)
    3. Derives up to three query perspectives from the intent
    4. Builds and validates one candidate per perspective, concurrently
    5. Selects the best surviving candidate
    6. Records an agent log for every step, returned in debug mode
    """

    AGENT_NAME = "AgentOrchestrator"

    def __init__(
        self,
        llm: CompletionService,
        settings: SettingsStore | None = None,
        validator: QueryValidator | None = None,
        default_config: LLMConfig | None = None,
        with_retries: bool = True,
    ) -> None:
        """
        Initialize the agent.

        Args:
            llm: Completion service used for intent extraction and query drafting
            settings: Settings store (defaults to an empty in-memory store)
            validator: Query validator (defaults to the structural check only)
            default_config: Model settings used when the store has none
            with_retries: Wrap llm with per-call timeout and retry handling
        """
        self.llm = RetryingCompletionService(llm) if with_retries else llm
        self.settings = settings or InMemorySettingsStore()
        self.default_config = default_config or LLMConfig()
        self.intent_extractor = IntentExtractor(self.llm)
        self.perspective_generator = PerspectiveGenerator()
        self.query_builder = QuerySynthesizer(self.llm)
        self.validator = validator or QueryValidator()
        self.consensus = ConsensusSelector()

    async def snapshot(self, debug: bool | None = None) -> RequestContext:
        """Read one consistent view of the settings for a request."""
        config, schema, corpus, stored_debug = await asyncio.gather(
            self.settings.get_config(),
            self.settings.get_schema(),
            self.settings.get_example_corpus(),
            self.settings.get_debug(),
        )
        return RequestContext(
            config=config or self.default_config,
            schema=schema,
            sample_queries=tuple(corpus),
            debug=stored_debug if debug is None else debug,
            session_id=f"session-{uuid.uuid4().hex[:12]}",
        )

    async def update_config(self, config: LLMConfig) -> None:
        await self.settings.set_config(config)
        logger.info("LLM config updated: %s/%s", config.provider, config.model)

    async def set_debug(self, debug: bool) -> None:
        await self.settings.set_debug(debug)
        logger.info("Debug mode set to %s", debug)

    async def _build_candidate(
        self, intent: Intent, perspective: Perspective, context: RequestContext
    ) -> tuple[QueryResult | None, list[AgentLog]]:
        """Synthesize and validate one perspective. Never raises on branch failure."""
        branch_logs: list[AgentLog] = []
        start = time.perf_counter()

        try:
            query = await self.query_builder.build(intent, perspective, context, branch_logs)
            validation = self.validator.validate(query, context.schema)
        except Exception as e:
            logger.warning(
                "Perspective %s (%s) failed: %s", perspective.name, perspective.id, e
            )
            branch_logs.append(
                AgentLog(
                    agent=self.AGENT_NAME,
                    action=f"processPerspective-{perspective.name}",
                    input={"perspectiveId": perspective.id},
                    output=None,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    success=False,
                    error=str(e),
                )
            )
            return None, branch_logs

        result = QueryResult(
            query=query,
            perspective=perspective,
            validation=validation,
            reasoning=f"Query built based on {perspective.name} perspective. {perspective.reasoning}",
            complexity=perspective.estimated_complexity,
            agent_logs=branch_logs,
        )
        return result, branch_logs

    async def process_request(self, user_input: str, debug: bool | None = None) -> PipelineResponse:
        """
        Main entry point: convert free text into candidate queries.

        Args:
            user_input: The user's request in natural language
            debug: Override the stored debug flag for this request

        Returns:
            PipelineResponse with all candidates, the best one and (in debug
            mode) the agent logs

        Raises:
            ExtractionError: If the intent cannot be extracted
        """
        context = await self.snapshot(debug)
        logs: list[AgentLog] = []  # Reset for new request
        start = time.perf_counter()

        try:
            intent = await self.intent_extractor.extract(user_input, context, logs)
        except ExtractionError as e:
            logs.append(
                AgentLog(
                    agent=self.AGENT_NAME,
                    action="processQuery",
                    input={"userInput": user_input},
                    output=None,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    success=False,
                    error=str(e),
                )
            )
            logger.error("Request %s failed: %s", context.session_id, e)
            e.agent_logs = tuple(logs)
            raise

        perspectives = self.perspective_generator.generate(intent)
        logger.debug(
            "Request %s perspectives: %s",
            context.session_id,
            [p.name for p in perspectives],
        )

        outcomes = await asyncio.gather(
            *(self._build_candidate(intent, p, context) for p in perspectives)
        )

        candidates: list[QueryResult] = []
        for result, branch_logs in outcomes:
            logs.extend(branch_logs)
            if result is not None:
                candidates.append(result)

        best = self.consensus.select(candidates, logs)

        logger.info(
            "Request %s done: %d/%d candidates, best=%s",
            context.session_id,
            len(candidates),
            len(perspectives),
            best.perspective.name if best else None,
        )
        return PipelineResponse(
            candidates=candidates,
            best=best,
            logs=logs if context.debug else None,
        )
