"""
Intent Extractor
================

Turns free text into a normalized structured intent.
"""

import json
import logging
import time

from nl_to_es.exceptions import AgentError, ExtractionError
from nl_to_es.llm.base import CompletionService
from nl_to_es.models import (
    AgentLog,
    AnalysisType,
    Complexity,
    Entities,
    Intent,
    RequestContext,
    SampleQuery,
)
from nl_to_es.parsing import parse_json_object

logger = logging.getLogger(__name__)

COMPANY_NORMALIZATIONS = {
    "alphabet": "Alphabet Inc.",
    "google": "Google",
    "microsoft": "Microsoft",
    "apple": "Apple Inc.",
    "amazon": "Amazon",
    "meta": "Meta",
    "facebook": "Meta",
}

SKILL_NORMALIZATIONS = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "nodejs": "Node.js",
    "reactjs": "React",
}

DATE_RANGE_KEYS = ("gte", "lte", "gt", "lt")
SALARY_RANGE_KEYS = ("min", "max", "currency")


def normalize_company_name(company: str) -> str:
    return COMPANY_NORMALIZATIONS.get(company.lower(), company)


def normalize_skill_name(skill: str) -> str:
    return SKILL_NORMALIZATIONS.get(skill.lower(), skill)


def find_relevant_examples(
    user_input: str, samples: tuple[SampleQuery, ...] | list[SampleQuery], limit: int = 3
) -> list[SampleQuery]:
    """
    Rank corpus entries by how many query words they contain.

    Each lowercase whitespace-separated word of the input scores one point
    when it occurs as a substring of the entry's description, intent and
    tags. Ties keep corpus order.
    """
    keywords = user_input.lower().split()

    scored = []
    for sample in samples:
        sample_text = f"{sample.description} {sample.user_intent} {' '.join(sample.tags)}".lower()
        score = sum(1 for keyword in keywords if keyword in sample_text)
        scored.append((score, sample))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [sample for _, sample in scored[:limit]]


def _string_list(value) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(
        str(v)
        for v in value
        if isinstance(v, (str, int, float)) and not isinstance(v, bool) and str(v).strip()
    )


def _range_list(value, keys: tuple[str, ...]) -> tuple[dict, ...]:
    if not isinstance(value, list):
        return ()
    ranges = []
    for item in value:
        if not isinstance(item, dict):
            continue
        cleaned = {k: item[k] for k in keys if item.get(k) is not None}
        if cleaned:
            ranges.append(cleaned)
    return tuple(ranges)


def _clamp_confidence(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.5
    return max(0.0, min(1.0, float(value)))


def coerce_intent(parsed: dict, raw_input: str) -> Intent:
    """
    Coerce loosely shaped model output into a valid Intent.

    Missing or malformed arrays become empty, unknown enum values fall back
    to ``search``/``simple`` and confidence is clamped to [0, 1].
    """
    entities = parsed.get("entities")
    if not isinstance(entities, dict):
        entities = {}

    analysis_values = {a.value for a in AnalysisType}
    complexity_values = {c.value for c in Complexity}
    analysis_type = parsed.get("analysisType")
    complexity = parsed.get("complexity")

    return Intent(
        entities=Entities(
            companies=tuple(
                normalize_company_name(c) for c in _string_list(entities.get("companies"))
            ),
            locations=_string_list(entities.get("locations")),
            skills=tuple(normalize_skill_name(s) for s in _string_list(entities.get("skills"))),
            job_titles=_string_list(entities.get("jobTitles")),
            date_ranges=_range_list(entities.get("dateRanges"), DATE_RANGE_KEYS),
            salary_ranges=_range_list(entities.get("salaryRanges"), SALARY_RANGE_KEYS),
        ),
        analysis_type=AnalysisType(analysis_type)
        if analysis_type in analysis_values
        else AnalysisType.SEARCH,
        complexity=Complexity(complexity) if complexity in complexity_values else Complexity.SIMPLE,
        confidence=_clamp_confidence(parsed.get("confidence")),
        raw_input=raw_input,
    )


class IntentExtractor:
    """Extracts structured intent from user text via the completion service."""

    AGENT_NAME = "IntentParser"

    SYSTEM_PROMPT_TEMPLATE = """You are an expert Elasticsearch intent parser for a jobs index.

JOBS INDEX SCHEMA:
{schema}

Your task is to extract structured information from user queries and return JSON in this exact format:
{{
  "entities": {{
    "companies": ["extracted company names"],
    "locations": ["extracted locations"],
    "skills": ["extracted skills/technologies"],
    "jobTitles": ["extracted job titles"],
    "dateRanges": [{{"gte": "date", "lte": "date"}}],
    "salaryRanges": [{{"min": number, "max": number}}]
  }},
  "analysisType": "search|aggregation|analytics",
  "complexity": "simple|medium|complex",
  "confidence": 0.95
}}

EXTRACTION RULES:
- Extract only entities that can be mapped to schema fields
- Normalize company names to common formats (Google vs Alphabet Inc.)
- Convert location references to standardized forms
- Identify programming languages, frameworks, and technical skills
- Parse relative dates (e.g., "last 30 days" becomes a range using now-30d format)
- Extract salary information when mentioned
- Classify complexity: simple (1-2 criteria), medium (3-4 criteria), complex (5+ criteria or aggregations)
- Set confidence based on clarity of user intent

RESPONSE: Return only valid JSON, no explanations."""

    USER_PROMPT_TEMPLATE = """USER QUERY: "{user_input}"

RELEVANT EXAMPLE PATTERNS:
{examples}

Extract structured intent from the user query:"""

    def __init__(self, llm: CompletionService, example_limit: int = 3) -> None:
        self.llm = llm
        self.example_limit = example_limit

    def build_system_prompt(self, context: RequestContext) -> str:
        return self.SYSTEM_PROMPT_TEMPLATE.format(
            schema=json.dumps(context.schema_properties, indent=2)
        )

    def build_user_prompt(self, user_input: str, context: RequestContext) -> str:
        examples = find_relevant_examples(user_input, context.sample_queries, self.example_limit)
        rendered = "\n".join(
            f"- Intent: {ex.user_intent}\n"
            f"  Entities found: {', '.join(ex.tags)}\n"
            f"  Complexity: {ex.complexity}"
            for ex in examples
        )
        return self.USER_PROMPT_TEMPLATE.format(user_input=user_input, examples=rendered or "(none)")

    async def extract(
        self, user_input: str, context: RequestContext, logs: list[AgentLog]
    ) -> Intent:
        """
        Extract an Intent from raw text.

        Args:
            user_input: The user's free-text request
            context: Settings snapshot for this request
            logs: Per-request log list; one entry is appended

        Raises:
            ExtractionError: On completion failure or unparseable output
        """
        start = time.perf_counter()
        try:
            response = await self.llm.complete(
                self.build_user_prompt(user_input, context),
                self.build_system_prompt(context),
                context.config,
            )
            intent = coerce_intent(parse_json_object(response), user_input)
        except (AgentError, ValueError) as e:
            logs.append(
                AgentLog(
                    agent=self.AGENT_NAME,
                    action="parse",
                    input={"userInput": user_input},
                    output=None,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    success=False,
                    error=str(e),
                )
            )
            logger.warning("Intent parsing failed: %s", e)
            raise ExtractionError(f"Intent parsing failed: {e}") from e

        logs.append(
            AgentLog(
                agent=self.AGENT_NAME,
                action="parse",
                input={"userInput": user_input},
                output=intent.to_dict(),
                duration_ms=(time.perf_counter() - start) * 1000,
                success=True,
            )
        )
        return intent
