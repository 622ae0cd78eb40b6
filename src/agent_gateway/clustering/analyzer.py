"""Per-question orchestration: cluster, conditionally reassign, merge."""

from __future__ import annotations

from typing import Callable, Sequence

from loguru import logger

from agent_gateway.clustering.coverage import (
    merge_reassigned,
    split_uncategorized,
    validate_coverage,
)
from agent_gateway.clustering.engine import ClusterEngine
from agent_gateway.clustering.models import ClusteringResult, Item
from agent_gateway.clustering.reassigner import Reassigner
from agent_gateway.config import Settings, get_settings
from agent_gateway.llm.oracle import Oracle
from agent_gateway.streaming.cancellation import CancellationToken


class QuestionAnalyzer:
    """Runs the two LLM passes for one question and returns the final clusters."""

    def __init__(
        self,
        oracle: Oracle | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.oracle = oracle or Oracle(settings=self.settings)
        self.engine = ClusterEngine(oracle=self.oracle, settings=self.settings)
        self.reassigner = Reassigner(oracle=self.oracle, settings=self.settings)

    async def analyze(
        self,
        question: str,
        items: Sequence[Item],
        token: CancellationToken | None = None,
        on_reassign: Callable[[str], object] | None = None,
    ) -> ClusteringResult:
        """Cluster ``items``; reassign the uncategorized bucket when it is too large.

        ``on_reassign`` is called with the question right before the second
        oracle call so callers can report progress.
        """
        label = self.settings.uncategorized_label
        result = await self.engine.cluster(question, items, token)

        kept, bucket = split_uncategorized(result.clusters, label)
        if len(bucket) <= self.settings.reassign_threshold:
            return result

        if on_reassign is not None:
            on_reassign(question)
        logger.info(
            "Uncategorized bucket has {} answers (> {}); reassigning",
            len(bucket),
            self.settings.reassign_threshold,
        )

        items_by_id = {item.id: item for item in items}
        bucket_items = [items_by_id[item_id] for item_id in bucket]
        reassigned = await self.reassigner.reassign(question, bucket_items, kept, token)

        clusters = merge_reassigned(kept, reassigned.assignments, reassigned.uncategorized, label)
        report = validate_coverage([item.id for item in items], clusters)
        if not report.valid:
            logger.error("Merged clusters for '{}' lost coverage: {}", question[:60], report.summary())
        return ClusteringResult(question=question, clusters=clusters)
