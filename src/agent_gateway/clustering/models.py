"""Records passed between the clustering and reassignment stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Item:
    """One free-text answer; ``id`` is the identity used across LLM round-trips."""

    id: str
    text: str


@dataclass(slots=True)
class Cluster:
    """Group of item ids sharing a label."""

    label: str
    item_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.item_ids)

    def copy(self) -> "Cluster":
        return Cluster(label=self.label, item_ids=list(self.item_ids))


@dataclass(slots=True)
class ClusteringResult:
    """Clusters produced for exactly one question."""

    question: str
    clusters: list[Cluster]


@dataclass(slots=True)
class ReassignmentResult:
    """Second-pass placement of the uncategorized bucket."""

    assignments: dict[str, list[str]] = field(default_factory=dict)
    uncategorized: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CoverageReport:
    """Difference between the expected id set and what the clusters contain."""

    missing_ids: tuple[str, ...] = ()
    extra_ids: tuple[str, ...] = ()
    duplicate_ids: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not (self.missing_ids or self.extra_ids or self.duplicate_ids)

    def summary(self) -> str:
        return (
            f"missing={len(self.missing_ids)} extra={len(self.extra_ids)} "
            f"duplicates={len(self.duplicate_ids)}"
        )
