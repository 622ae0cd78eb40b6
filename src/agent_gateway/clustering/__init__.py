"""Clustering components: first-pass engine, reassignment and coverage repair."""

from agent_gateway.clustering.analyzer import QuestionAnalyzer
from agent_gateway.clustering.coverage import (
    merge_reassigned,
    normalize_reassign_output,
    repair_clusters,
    validate_coverage,
    validate_reassign_coverage,
)
from agent_gateway.clustering.engine import ClusterEngine
from agent_gateway.clustering.models import (
    Cluster,
    ClusteringResult,
    CoverageReport,
    Item,
    ReassignmentResult,
)
from agent_gateway.clustering.reassigner import Reassigner

__all__ = [
    "QuestionAnalyzer",
    "ClusterEngine",
    "Reassigner",
    "Cluster",
    "ClusteringResult",
    "CoverageReport",
    "Item",
    "ReassignmentResult",
    "merge_reassigned",
    "normalize_reassign_output",
    "repair_clusters",
    "validate_coverage",
    "validate_reassign_coverage",
]
