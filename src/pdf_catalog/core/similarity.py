"""Similarity ordering and grouping of fingerprints."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..config.defaults import DEFAULT_THRESHOLD
from ..models import HashEntry
from .fingerprint import to_image_hash


def hamming_distance(a: int, b: int) -> int:
    return int(to_image_hash(a) - to_image_hash(b))


def _check_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        raise ValueError(f"threshold must be a non-negative integer, got {threshold!r}")
    return threshold


def sort_key(entry: HashEntry) -> tuple[int, int, float]:
    return (entry.fingerprint, entry.size_bytes, entry.modified_at)


def sort_entries(entries: Iterable[HashEntry]) -> List[HashEntry]:
    """Numeric order of fingerprints keeps visually close documents adjacent."""
    return sorted(entries, key=sort_key)


def group_boundaries(entries: List[HashEntry], threshold: int) -> List[int]:
    """Indices ``i`` where a new group starts before ``entries[i]``."""
    _check_threshold(threshold)
    return [
        index
        for index in range(1, len(entries))
        if hamming_distance(entries[index - 1].fingerprint, entries[index].fingerprint) > threshold
    ]


def group_entries(entries: List[HashEntry], threshold: int) -> List[List[HashEntry]]:
    if not entries:
        return []
    groups: List[List[HashEntry]] = []
    start = 0
    for boundary in group_boundaries(entries, threshold):
        groups.append(entries[start:boundary])
        start = boundary
    groups.append(entries[start:])
    return groups


class SimilarityGrouper:
    """Keeps the last sorted list so a threshold change only re-groups."""

    def __init__(self, threshold: int = DEFAULT_THRESHOLD) -> None:
        self.threshold = _check_threshold(threshold)
        self.sorted_entries: List[HashEntry] = []

    def sort_and_group(
        self, entries: Iterable[HashEntry], threshold: Optional[int] = None
    ) -> List[List[HashEntry]]:
        if threshold is not None:
            self.threshold = _check_threshold(threshold)
        self.sorted_entries = sort_entries(entries)
        return group_entries(self.sorted_entries, self.threshold)

    def regroup(self, threshold: int) -> List[List[HashEntry]]:
        self.threshold = _check_threshold(threshold)
        return group_entries(self.sorted_entries, self.threshold)

    @property
    def groups(self) -> List[List[HashEntry]]:
        return group_entries(self.sorted_entries, self.threshold)
