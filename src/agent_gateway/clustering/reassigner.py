"""Second pass that places the uncategorized bucket into labelled clusters."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from agent_gateway.clustering.base_llm_component import BaseLLMComponent
from agent_gateway.clustering.coverage import (
    normalize_reassign_output,
    validate_reassign_coverage,
)
from agent_gateway.clustering.models import Cluster, Item, ReassignmentResult
from agent_gateway.clustering.schemas import ReassignmentResponse
from agent_gateway.llm.prompts import render_reassignment_prompt
from agent_gateway.streaming.cancellation import CancellationToken


class Reassigner(BaseLLMComponent):
    """Re-asks the oracle about uncategorized answers, given the kept labels."""

    async def reassign(
        self,
        question: str,
        uncategorized_items: Sequence[Item],
        kept_clusters: Sequence[Cluster],
        token: CancellationToken | None = None,
    ) -> ReassignmentResult:
        """Return a partition of ``uncategorized_items`` ids into labels and residue."""
        expected_ids = [item.id for item in uncategorized_items]
        if not expected_ids:
            return ReassignmentResult()

        labels = [cluster.label for cluster in kept_clusters]
        prompt = render_reassignment_prompt(question, self._as_pairs(uncategorized_items), labels)
        response = await self.oracle.generate_structured(prompt, ReassignmentResponse, token)

        raw = ReassignmentResult(
            assignments={label: list(ids) for label, ids in response.assignments.items()},
            uncategorized=list(response.uncategorized),
        )
        result = normalize_reassign_output(expected_ids, raw, self.uncategorized_label)

        report = validate_reassign_coverage(expected_ids, result, self.uncategorized_label)
        if not report.valid:
            logger.error("Reassignment normalization left gaps: {}", report.summary())

        logger.info(
            "Reassigned {} of {} uncategorized answers for '{}'",
            len(expected_ids) - len(result.uncategorized),
            len(expected_ids),
            question[:60],
        )
        return result
