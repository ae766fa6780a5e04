"""BlockMerger - coalesces slot-adjacent blocks with the same identity."""

from typing import Iterable

from src.dayplan.models import ScheduledBlock


class BlockMerger:
    """Merges consecutive blocks sharing kind, name and priority.

    Adjacency is judged on a start-ordered view; the caller applies its own
    presentation order afterwards. Output is a fixed point: merging it again
    changes nothing.
    """

    def merge(self, blocks: Iterable[ScheduledBlock]) -> list[ScheduledBlock]:
        merged: list[ScheduledBlock] = []
        for block in sorted(blocks, key=lambda b: b.start_slot):
            last = merged[-1] if merged else None
            if last is not None and self._continues(last, block):
                merged[-1] = last.model_copy(
                    update={"duration": last.duration + block.duration}
                )
            else:
                merged.append(block)
        return merged

    @staticmethod
    def _continues(last: ScheduledBlock, block: ScheduledBlock) -> bool:
        return (
            last.kind == block.kind
            and last.name == block.name
            and last.priority == block.priority
            and last.start_slot + last.duration == block.start_slot
        )
