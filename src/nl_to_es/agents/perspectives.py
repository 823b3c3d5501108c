"""
Perspective Generator
=====================

Derives up to three ranked query strategies from an intent.

Pure and deterministic apart from the generated ids: no I/O and no model
calls. Each rule below fires at most once, in fixed order.
"""

import uuid

from nl_to_es.models import AnalysisType, Approach, Intent, Perspective

MAX_PERSPECTIVES = 3


def _new_id() -> str:
    return f"perspective-{uuid.uuid4().hex[:12]}"


class PerspectiveGenerator:
    """Rule-based generator of query-construction perspectives."""

    def __init__(self, max_perspectives: int = MAX_PERSPECTIVES) -> None:
        self.max_perspectives = max_perspectives

    def generate(self, intent: Intent) -> list[Perspective]:
        entities = intent.entities
        analysis = intent.analysis_type
        is_search = analysis == AnalysisType.SEARCH
        drafts: list[dict] = []

        if analysis in (AnalysisType.AGGREGATION, AnalysisType.ANALYTICS):
            drafts.append(
                {
                    "name": "Analytics",
                    "description": "Aggregate matching jobs to answer a statistical question.",
                    "approach": Approach.ANALYTICS,
                    "reasoning": "The request asks for counts, distributions or other aggregate figures.",
                    "confidence": 0.9,
                    "estimated_complexity": 3,
                }
            )

        targeted_single_location = False
        if (
            is_search
            and (entities.job_titles or entities.companies or len(entities.locations) == 1)
            and intent.confidence > 0.7
        ):
            targeted_single_location = len(entities.locations) == 1
            drafts.append(
                {
                    "name": "Targeted Search",
                    "description": "Exact matching on job title, company and location keywords.",
                    "approach": Approach.EXACT_MATCH,
                    "reasoning": "Specific, well-understood entities can be matched precisely.",
                    "confidence": 0.85 * intent.confidence,
                    "estimated_complexity": 2,
                }
            )

        if is_search and entities.skills:
            has_exact = any(d["approach"] == Approach.EXACT_MATCH for d in drafts)
            drafts.append(
                {
                    "name": "Skills-Focused",
                    "description": "Full-text matching of skills against descriptions and skill fields.",
                    "approach": Approach.FUZZY_SEARCH,
                    "reasoning": "Skills are phrased loosely in postings and benefit from fuzzy matching.",
                    "confidence": (0.65 if has_exact else 0.75) * intent.confidence,
                    "estimated_complexity": 3,
                }
            )

        if is_search and entities.locations and not targeted_single_location:
            drafts.append(
                {
                    "name": "Location-Focused",
                    "description": "Filter by location first, then rank the remaining criteria.",
                    "approach": Approach.EXACT_MATCH,
                    "reasoning": "Location is a strong, cheap filter for job searches.",
                    "confidence": 0.7 * intent.confidence,
                    "estimated_complexity": 2,
                }
            )

        if entities.date_ranges and analysis in (AnalysisType.SEARCH, AnalysisType.ANALYTICS):
            drafts.append(
                {
                    "name": "Trend Analysis",
                    "description": "Bucket postings over time within the requested date range.",
                    "approach": Approach.TREND_ANALYSIS,
                    "reasoning": "A date range suggests interest in how postings change over time.",
                    "confidence": 0.6 * intent.confidence,
                    "estimated_complexity": 3,
                }
            )

        if is_search and not drafts:
            drafts.append(
                {
                    "name": "General Search",
                    "description": "Broad full-text search over the jobs index.",
                    "approach": Approach.FUZZY_SEARCH,
                    "reasoning": "No specific entities were recognized, so fall back to a broad match.",
                    "confidence": 0.5 * intent.confidence,
                    "estimated_complexity": 2,
                }
            )

        drafts.sort(key=lambda d: d["confidence"], reverse=True)
        return [Perspective(id=_new_id(), **d) for d in drafts[: self.max_perspectives]]
