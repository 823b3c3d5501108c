"""
Query Synthesizer
=================

Drafts an Elasticsearch query for one perspective, then enforces the
mandatory filters and applies optimization defaults.
"""

import copy
import json
import logging
import time

from nl_to_es.exceptions import AgentError, SynthesisError
from nl_to_es.llm.base import CompletionService
from nl_to_es.models import (
    AgentLog,
    AnalysisType,
    Approach,
    Complexity,
    Intent,
    Perspective,
    RequestContext,
    SampleQuery,
)
from nl_to_es.parsing import parse_json_object

logger = logging.getLogger(__name__)

MANDATORY_FILTERS = (
    {"term": {"is_deleted.keyword": "0"}},
    {"term": {"is_duplicate": False}},
)

DEFAULT_SOURCE_FIELDS = (
    "job_title",
    "company_name",
    "location",
    "raw_salary",
    "posted_date",
    "url",
)

DEFAULT_RESULT_SIZE = 50
COMPLEX_QUERY_TIMEOUT = "30s"

_APPROACH_TAGS = {
    Approach.EXACT_MATCH: "exact_match",
    Approach.FUZZY_SEARCH: "fuzzy",
    Approach.ANALYTICS: "aggregation",
}


def score_sample(intent: Intent, perspective: Perspective, sample: SampleQuery) -> int:
    """Additive relevance score of one corpus entry."""
    tags = set(sample.tags)
    entities = intent.entities
    score = 0

    if entities.companies and "company" in tags:
        score += 3
    if entities.locations and "location" in tags:
        score += 3
    if entities.skills and "skills" in tags:
        score += 3
    if entities.job_titles and "job_title" in tags:
        score += 3
    if entities.date_ranges and "date_range" in tags:
        score += 2
    if entities.salary_ranges and "salary" in tags:
        score += 2

    if intent.analysis_type == AnalysisType.AGGREGATION and "aggregation" in tags:
        score += 5
    if intent.analysis_type == AnalysisType.SEARCH and "search" in tags:
        score += 2
    if intent.analysis_type == AnalysisType.ANALYTICS and "analytics" in tags:
        score += 4

    if intent.complexity.value == sample.complexity:
        score += 2

    approach_tag = _APPROACH_TAGS.get(perspective.approach)
    if approach_tag and approach_tag in tags:
        score += 3

    return score


def find_similar_queries(
    intent: Intent,
    perspective: Perspective,
    samples: tuple[SampleQuery, ...] | list[SampleQuery],
    limit: int = 3,
) -> list[SampleQuery]:
    scored = [(score_sample(intent, perspective, s), s) for s in samples]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [sample for _, sample in scored[:limit]]


def enforce_mandatory_filters(query: dict) -> dict:
    """
    Return a copy of query whose bool root carries both mandatory filters.

    A missing root becomes ``match_all`` and a non-bool root is wrapped as a
    ``must`` clause. Filters already present (by structural equality) are
    not added again, so the operation is idempotent.
    """
    result = copy.deepcopy(query)
    root = result.get("query")
    if not isinstance(root, dict) or not root:
        root = {"match_all": {}}

    bool_clause = root.get("bool") if len(root) == 1 else None
    if isinstance(bool_clause, dict):
        bool_clause = dict(bool_clause)
    else:
        bool_clause = {"must": [root]}

    filters = bool_clause.get("filter")
    if filters is None:
        filters = []
    elif isinstance(filters, dict):
        filters = [filters]
    else:
        filters = list(filters)

    for mandatory in MANDATORY_FILTERS:
        if not any(existing == mandatory for existing in filters):
            filters.append(copy.deepcopy(mandatory))

    bool_clause["filter"] = filters
    result["query"] = {"bool": bool_clause}
    return result


def optimize_query(query: dict, intent: Intent) -> dict:
    """Apply result-window, timeout and projection defaults."""
    optimized = dict(query)
    analysis = intent.analysis_type

    if not optimized.get("size") and analysis != AnalysisType.AGGREGATION:
        optimized["size"] = DEFAULT_RESULT_SIZE

    if intent.complexity == Complexity.COMPLEX and not optimized.get("timeout"):
        optimized["timeout"] = COMPLEX_QUERY_TIMEOUT

    if "_source" not in optimized and analysis == AnalysisType.SEARCH:
        optimized["_source"] = list(DEFAULT_SOURCE_FIELDS)

    if analysis == AnalysisType.AGGREGATION:
        optimized["track_total_hits"] = True
        optimized["size"] = 0

    return optimized


class QuerySynthesizer:
    """Builds one candidate query per perspective."""

    AGENT_NAME = "QueryBuilder"

    SYSTEM_PROMPT_TEMPLATE = """You are an expert Elasticsearch Query Builder for jobs data.

JOBS INDEX SCHEMA:
{schema}

MANDATORY REQUIREMENTS:
1. Always include: {{"term": {{"is_deleted.keyword": "0"}}}}
2. Always include: {{"term": {{"is_duplicate": false}}}}
3. Use .keyword fields for exact matching and aggregations
4. Use analyzed fields for full-text search
5. Prefer filters over queries for performance
6. Include appropriate date range filters

FIELD USAGE PATTERNS:
- job_title: Use both analyzed and .keyword versions
- company_name: Prefer .keyword for exact matches, analyzed for fuzzy
- location: Use analyzed for fuzzy matching, .keyword for exact
- standardized_geo_point: For geo-distance queries
- crawled_date/posted_date: For time-based filtering
- job_description: For skills and requirements matching
- raw_salary: For salary-based filtering
- skills.name: For technical skills matching

QUERY OPTIMIZATION:
- Use term queries for exact matches
- Use match queries for full-text search
- Use filters in bool context when possible
- Limit aggregation sizes to reasonable values
- Use _source filtering to reduce payload size
- Avoid script queries and leading wildcards

RESPONSE FORMAT:
Return only a valid Elasticsearch 7.x JSON query. No explanations or additional text."""

    USER_PROMPT_TEMPLATE = """BUILD ELASTICSEARCH QUERY:

USER INTENT:
{intent}

PERSPECTIVE: {name}
Approach: {approach}
Description: {description}
Reasoning: {reasoning}

SIMILAR SUCCESSFUL QUERIES:
{examples}

Generate the optimized Elasticsearch query based on the intent and perspective:"""

    def __init__(self, llm: CompletionService, example_limit: int = 3) -> None:
        self.llm = llm
        self.example_limit = example_limit

    def build_system_prompt(self, context: RequestContext) -> str:
        return self.SYSTEM_PROMPT_TEMPLATE.format(
            schema=json.dumps(context.schema_properties, indent=2)
        )

    def build_user_prompt(
        self, intent: Intent, perspective: Perspective, context: RequestContext
    ) -> str:
        similar = find_similar_queries(
            intent, perspective, context.sample_queries, self.example_limit
        )
        examples = "\n".join(
            f"Example: {q.description}\n"
            f"Intent: {q.user_intent}\n"
            f"Query Structure:\n{json.dumps(q.query, indent=2)}\n"
            f"Performance Notes: {q.performance_notes or 'Good performance'}\n"
            for q in similar
        )
        return self.USER_PROMPT_TEMPLATE.format(
            intent=json.dumps(intent.to_dict(), indent=2),
            name=perspective.name,
            approach=perspective.approach.value,
            description=perspective.description,
            reasoning=perspective.reasoning,
            examples=examples or "(none)",
        )

    async def build(
        self,
        intent: Intent,
        perspective: Perspective,
        context: RequestContext,
        logs: list[AgentLog],
    ) -> dict:
        """
        Build, enforce and optimize a query for one perspective.

        Raises:
            SynthesisError: On completion failure or when no JSON object
                can be recovered from the response
        """
        start = time.perf_counter()
        log_input = {"intent": intent.to_dict(), "perspective": perspective.to_dict()}

        try:
            response = await self.llm.complete(
                self.build_user_prompt(intent, perspective, context),
                self.build_system_prompt(context),
                context.config,
            )
            drafted = parse_json_object(response, recover=True)
        except (AgentError, ValueError) as e:
            logs.append(
                AgentLog(
                    agent=self.AGENT_NAME,
                    action="buildQuery",
                    input=log_input,
                    output=None,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    success=False,
                    error=str(e),
                )
            )
            raise SynthesisError(f"Query building failed: {e}") from e

        query = optimize_query(enforce_mandatory_filters(drafted), intent)

        logs.append(
            AgentLog(
                agent=self.AGENT_NAME,
                action="buildQuery",
                input=log_input,
                output=query,
                duration_ms=(time.perf_counter() - start) * 1000,
                success=True,
            )
        )
        logger.debug("Built query for perspective %s", perspective.name)
        return query
