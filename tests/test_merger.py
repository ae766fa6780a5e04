"""
Unit tests for BlockMerger.
"""

from src.dayplan.merger import BlockMerger
from src.dayplan.models import BlockKind, ScheduledBlock


def block(name, start, duration, kind=BlockKind.TASK, priority=50):
    return ScheduledBlock(
        name=name, start_slot=start, duration=duration, kind=kind, priority=priority
    )


def test_merges_adjacent_same_identity_blocks():
    merged = BlockMerger().merge([block("Essay", 10, 2), block("Essay", 12, 3)])

    assert merged == [block("Essay", 10, 5)]
    assert merged[0].completion_slot == 15


def test_merge_works_on_start_order_not_input_order():
    merged = BlockMerger().merge(
        [block("Essay", 12, 3), block("Lunch", 24, 2, BlockKind.EVENT), block("Essay", 10, 2)]
    )

    assert [(b.name, b.start_slot, b.duration) for b in merged] == [
        ("Essay", 10, 5),
        ("Lunch", 24, 2),
    ]


def test_does_not_merge_across_gap_or_identity_change():
    blocks = [
        block("Essay", 0, 2),
        block("Essay", 3, 1),
        block("Essay", 4, 1, priority=60),
        block("Essay", 5, 1, BlockKind.EVENT, priority=60),
        block("Other", 6, 1, BlockKind.EVENT, priority=60),
    ]

    merged = BlockMerger().merge(blocks)

    assert len(merged) == 5


def test_merges_chain_of_three():
    merged = BlockMerger().merge([block("A", 1, 1), block("A", 2, 1), block("A", 3, 1)])

    assert merged == [block("A", 1, 3)]


def test_merge_is_idempotent():
    merger = BlockMerger()
    blocks = [
        block("A", 0, 2),
        block("A", 2, 2),
        block("B", 4, 1),
        block("Standup", 5, 1, BlockKind.EVENT),
        block("B", 6, 2),
    ]

    once = merger.merge(blocks)

    assert merger.merge(once) == once


def test_input_blocks_are_not_modified():
    first = block("A", 0, 2)
    BlockMerger().merge([first, block("A", 2, 2)])

    assert first.duration == 2
