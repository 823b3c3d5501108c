"""
Consensus Selector
==================

Picks the single best candidate by validation score, then confidence.
"""

import time

from nl_to_es.models import AgentLog, QueryResult


class ConsensusSelector:
    """Deterministic ranking over candidate query results."""

    AGENT_NAME = "ConsensusAgent"

    def select(
        self, candidates: list[QueryResult], logs: list[AgentLog] | None = None
    ) -> QueryResult | None:
        """
        Return the highest-ranked candidate, or None for an empty list.

        Ranking is (validation score desc, perspective confidence desc);
        the sort is stable so equal candidates keep their input order.
        """
        if not candidates:
            return None

        start = time.perf_counter()
        ranked = sorted(
            candidates,
            key=lambda c: (c.validation.score, c.perspective.confidence),
            reverse=True,
        )
        best = ranked[0]

        if logs is not None:
            logs.append(
                AgentLog(
                    agent=self.AGENT_NAME,
                    action="selectBestQuery",
                    input={"queryResultsCount": len(candidates)},
                    output={
                        "bestResultId": best.perspective.id,
                        "bestResultScore": best.validation.score,
                    },
                    duration_ms=(time.perf_counter() - start) * 1000,
                    success=True,
                )
            )
        return best
