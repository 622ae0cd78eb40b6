"""First-pass clustering of one question's answers."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from agent_gateway.clustering.base_llm_component import BaseLLMComponent
from agent_gateway.clustering.coverage import repair_clusters, validate_coverage
from agent_gateway.clustering.models import Cluster, ClusteringResult, Item
from agent_gateway.clustering.schemas import ClusteringResponse
from agent_gateway.llm.prompts import render_clustering_prompt
from agent_gateway.streaming.cancellation import CancellationToken


class ClusterEngine(BaseLLMComponent):
    """Asks the oracle for clusters once, then repairs its output deterministically."""

    async def cluster(
        self,
        question: str,
        items: Sequence[Item],
        token: CancellationToken | None = None,
    ) -> ClusteringResult:
        """Cluster ``items`` for ``question``.

        The returned clusters cover every item id exactly once. Oracle errors
        (timeout, transport, schema) propagate; coverage violations do not.
        """
        if not items:
            return ClusteringResult(question=question, clusters=[])

        prompt = render_clustering_prompt(question, self._as_pairs(items))
        response = await self.oracle.generate_structured(prompt, ClusteringResponse, token)

        clusters = [
            Cluster(label=payload.label or f"Cluster {index}", item_ids=list(payload.item_ids))
            for index, payload in enumerate(response.clusters, start=1)
        ]
        expected_ids = [item.id for item in items]
        report = validate_coverage(expected_ids, clusters)
        if not report.valid:
            logger.warning(
                "Clustering output for '{}' violates coverage ({}); repairing",
                question[:60],
                report.summary(),
            )
        clusters = repair_clusters(expected_ids, clusters, self.uncategorized_label)

        logger.info(
            "Clustered {} answers into {} clusters for '{}'",
            len(items),
            len(clusters),
            question[:60],
        )
        return ClusteringResult(question=question, clusters=clusters)
