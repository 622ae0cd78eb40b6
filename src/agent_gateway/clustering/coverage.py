"""Coverage validation and deterministic repair of oracle cluster output.

The oracle is asked to place every item id exactly once but nothing forces it
to. The functions here never raise on non-compliant output; they detect the
violation and repair it so that the final clusters partition the input ids.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from agent_gateway.clustering.models import Cluster, CoverageReport, ReassignmentResult

UNCATEGORIZED_LABEL = "uncategorized"


def validate_coverage(expected_ids: Iterable[str], clusters: Sequence[Cluster]) -> CoverageReport:
    """Compare cluster contents with the expected id set."""
    expected = list(dict.fromkeys(expected_ids))
    expected_set = set(expected)
    seen: set[str] = set()
    extra: list[str] = []
    duplicates: list[str] = []

    for cluster in clusters:
        for item_id in cluster.item_ids:
            if item_id not in expected_set:
                if item_id not in extra:
                    extra.append(item_id)
                continue
            if item_id in seen:
                if item_id not in duplicates:
                    duplicates.append(item_id)
                continue
            seen.add(item_id)

    missing = [item_id for item_id in expected if item_id not in seen]
    return CoverageReport(
        missing_ids=tuple(missing),
        extra_ids=tuple(extra),
        duplicate_ids=tuple(duplicates),
    )


def is_uncategorized(label: str, uncategorized_label: str = UNCATEGORIZED_LABEL) -> bool:
    """True if ``label`` names the residual bucket, ignoring case and spacing."""
    return _label_key(label) == _label_key(uncategorized_label)


def is_canonical(clusters: Sequence[Cluster], uncategorized_label: str = UNCATEGORIZED_LABEL) -> bool:
    """No empty clusters and at most one uncategorized cluster, placed last."""
    if not all(cluster.item_ids for cluster in clusters):
        return False
    positions = [
        index for index, cluster in enumerate(clusters) if is_uncategorized(cluster.label, uncategorized_label)
    ]
    if not positions:
        return True
    return positions == [len(clusters) - 1] and clusters[-1].label == uncategorized_label


def repair_clusters(
    expected_ids: Iterable[str],
    clusters: Sequence[Cluster],
    uncategorized_label: str = UNCATEGORIZED_LABEL,
) -> list[Cluster]:
    """Return clusters that cover ``expected_ids`` exactly once.

    Earlier clusters are authoritative: a duplicated id stays where it was
    first seen. Foreign ids are dropped, clusters left empty are removed and
    every id still missing is appended, in input order, to a trailing
    uncategorized cluster that also absorbs any uncategorized clusters the
    oracle produced itself. A valid, canonical set is returned unchanged (as
    copies), which makes the repair idempotent.
    """
    expected = list(dict.fromkeys(expected_ids))
    if validate_coverage(expected, clusters).valid and is_canonical(clusters, uncategorized_label):
        return [cluster.copy() for cluster in clusters]

    expected_set = set(expected)
    seen: set[str] = set()
    repaired: list[Cluster] = []
    bucket: list[str] = []

    for cluster in clusters:
        kept: list[str] = []
        for item_id in cluster.item_ids:
            if item_id in expected_set and item_id not in seen:
                seen.add(item_id)
                kept.append(item_id)
        if not kept:
            continue
        if is_uncategorized(cluster.label, uncategorized_label):
            # folded into the single trailing bucket below
            bucket.extend(kept)
        else:
            repaired.append(Cluster(label=cluster.label, item_ids=kept))

    bucket.extend(item_id for item_id in expected if item_id not in seen)
    if bucket:
        repaired.append(Cluster(label=uncategorized_label, item_ids=bucket))
    return repaired


def split_uncategorized(
    clusters: Sequence[Cluster],
    uncategorized_label: str = UNCATEGORIZED_LABEL,
) -> tuple[list[Cluster], list[str]]:
    """Separate regular clusters from the uncategorized bucket."""
    kept = [cluster for cluster in clusters if not is_uncategorized(cluster.label, uncategorized_label)]
    uncategorized = [
        item_id
        for cluster in clusters
        if is_uncategorized(cluster.label, uncategorized_label)
        for item_id in cluster.item_ids
    ]
    return kept, uncategorized


def normalize_reassign_output(
    expected_ids: Iterable[str],
    raw: ReassignmentResult,
    uncategorized_label: str = UNCATEGORIZED_LABEL,
) -> ReassignmentResult:
    """Turn arbitrary reassignment output into a partition of ``expected_ids``.

    Foreign ids are dropped, the first label claiming an id keeps it, empty
    labels are removed, ``uncategorized`` is deduplicated against claimed ids
    and every id left unclaimed is appended to ``uncategorized``.
    """
    expected = list(dict.fromkeys(expected_ids))
    expected_set = set(expected)
    claimed: set[str] = set()
    assignments: dict[str, list[str]] = {}

    for label, item_ids in raw.assignments.items():
        label = " ".join(str(label).split())
        if not label:
            continue
        kept: list[str] = []
        for item_id in item_ids:
            if item_id in expected_set and item_id not in claimed:
                claimed.add(item_id)
                kept.append(item_id)
        if kept:
            assignments.setdefault(label, []).extend(kept)

    uncategorized: list[str] = []
    for label in [label for label in assignments if is_uncategorized(label, uncategorized_label)]:
        uncategorized.extend(assignments.pop(label))
    for item_id in raw.uncategorized:
        if item_id in expected_set and item_id not in claimed:
            claimed.add(item_id)
            uncategorized.append(item_id)

    uncategorized.extend(item_id for item_id in expected if item_id not in claimed)
    return ReassignmentResult(assignments=assignments, uncategorized=uncategorized)


def validate_reassign_coverage(
    expected_ids: Iterable[str],
    result: ReassignmentResult,
    uncategorized_label: str = UNCATEGORIZED_LABEL,
) -> CoverageReport:
    """Coverage of a reassignment result; a check, not a correction step."""
    clusters = [Cluster(label=label, item_ids=list(ids)) for label, ids in result.assignments.items()]
    clusters.append(Cluster(label=uncategorized_label, item_ids=list(result.uncategorized)))
    return validate_coverage(expected_ids, clusters)


def merge_reassigned(
    kept: Sequence[Cluster],
    assignments: Mapping[str, Sequence[str]],
    uncategorized: Sequence[str],
    uncategorized_label: str = UNCATEGORIZED_LABEL,
) -> list[Cluster]:
    """Fold reassigned ids into the kept clusters.

    Labels are matched ignoring case and repeated whitespace; unknown labels
    become new clusters in assignment order. A trailing uncategorized cluster
    is added only when ``uncategorized`` is non-empty. ``kept`` is not mutated.
    """
    merged = [cluster.copy() for cluster in kept]
    by_label: dict[str, Cluster] = {}
    for cluster in merged:
        by_label.setdefault(_label_key(cluster.label), cluster)

    for label, item_ids in assignments.items():
        if not item_ids:
            continue
        target = by_label.get(_label_key(label))
        if target is None:
            target = Cluster(label=label, item_ids=[])
            merged.append(target)
            by_label[_label_key(label)] = target
        target.item_ids.extend(item_ids)

    if uncategorized:
        merged.append(Cluster(label=uncategorized_label, item_ids=list(uncategorized)))
    return merged


def _label_key(label: str) -> str:
    return " ".join(label.split()).casefold()
