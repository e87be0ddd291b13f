import random
from pathlib import Path

import pytest

from pdf_catalog.core import (
    SimilarityGrouper,
    group_boundaries,
    group_entries,
    hamming_distance,
    sort_entries,
    to_image_hash,
)
from pdf_catalog.models import HashEntry

ALL_ONES = 2**64 - 1


def _entry(name: str, fingerprint: int, size: int = 100, mtime: float = 0.0) -> HashEntry:
    return HashEntry(path=Path(name), fingerprint=fingerprint, size_bytes=size, modified_at=mtime)


def test_hamming_distance_properties() -> None:
    rng = random.Random(11)
    samples = [0, 3, ALL_ONES] + [rng.getrandbits(64) for _ in range(20)]
    for a in samples:
        assert hamming_distance(a, a) == 0
        for b in samples:
            distance = hamming_distance(a, b)
            assert distance == hamming_distance(b, a)
            assert 0 <= distance <= 64

    assert hamming_distance(0, ALL_ONES) == 64
    assert hamming_distance(0, 3) == 2


def test_hamming_distance_matches_image_hash_difference() -> None:
    rng = random.Random(5)
    for _ in range(20):
        a, b = rng.getrandbits(64), rng.getrandbits(64)
        assert hamming_distance(a, b) == to_image_hash(a) - to_image_hash(b)
        assert hamming_distance(a, b) == bin(a ^ b).count("1")


def test_sort_uses_fingerprint_then_size_then_mtime() -> None:
    entries = [
        _entry("c", 5, size=10, mtime=2.0),
        _entry("a", 5, size=10, mtime=1.0),
        _entry("b", 5, size=5, mtime=9.0),
        _entry("d", 1, size=999, mtime=9.0),
    ]

    ordered = [entry.path.name for entry in sort_entries(entries)]

    assert ordered == ["d", "b", "a", "c"]


def test_sort_is_idempotent() -> None:
    rng = random.Random(5)
    entries = [_entry(str(i), rng.getrandbits(64), rng.randint(1, 3), rng.random()) for i in range(50)]

    once = sort_entries(entries)
    assert sort_entries(once) == once
    assert sort_entries(list(reversed(entries))) == once


def test_fingerprints_sort_as_unsigned() -> None:
    entries = [_entry("high", 2**63), _entry("low", 2**63 - 1)]
    assert [entry.path.name for entry in sort_entries(entries)] == ["low", "high"]


def test_three_document_scenario() -> None:
    entries = sort_entries([_entry("ones", ALL_ONES), _entry("three", 3), _entry("zero", 0)])

    assert [entry.fingerprint for entry in entries] == [0, 3, ALL_ONES]
    assert group_boundaries(entries, 8) == [2]
    groups = group_entries(entries, 8)
    assert [[entry.path.name for entry in group] for group in groups] == [["zero", "three"], ["ones"]]


def test_adjacent_entries_share_group_iff_within_threshold() -> None:
    rng = random.Random(2)
    entries = sort_entries(_entry(str(i), rng.getrandbits(12)) for i in range(40))
    threshold = 4
    boundaries = set(group_boundaries(entries, threshold))

    for index in range(1, len(entries)):
        distance = hamming_distance(entries[index - 1].fingerprint, entries[index].fingerprint)
        assert (index in boundaries) == (distance > threshold)


def test_raising_threshold_never_adds_groups() -> None:
    rng = random.Random(9)
    entries = sort_entries(_entry(str(i), rng.getrandbits(16)) for i in range(60))

    counts = [len(group_entries(entries, threshold)) for threshold in range(0, 17)]

    assert counts == sorted(counts, reverse=True)
    assert counts[-1] == 1


def test_zero_threshold_groups_identical_only() -> None:
    entries = sort_entries([_entry("a", 7), _entry("b", 7), _entry("c", 6)])

    groups = group_entries(entries, 0)

    assert [[entry.path.name for entry in group] for group in groups] == [["c"], ["a", "b"]]


def test_empty_input() -> None:
    assert sort_entries([]) == []
    assert group_entries([], 8) == []


def test_negative_threshold_rejected() -> None:
    with pytest.raises(ValueError):
        group_boundaries([], -1)
    with pytest.raises(ValueError):
        SimilarityGrouper(threshold=-3)


def test_grouper_regroups_without_resorting() -> None:
    grouper = SimilarityGrouper()
    groups = grouper.sort_and_group([_entry("ones", ALL_ONES), _entry("three", 3), _entry("zero", 0)])
    assert len(groups) == 2
    assert grouper.threshold == 8

    assert len(grouper.regroup(64)) == 1
    assert len(grouper.regroup(0)) == 3
    assert grouper.groups == grouper.regroup(0)
    assert [entry.fingerprint for entry in grouper.sorted_entries] == [0, 3, ALL_ONES]
