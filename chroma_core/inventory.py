from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .palette import Swatch
from .rng import RandomSource, default_random_source, draw_from, secure_shuffle

logger = logging.getLogger(__name__)

SlotId = str


class InventoryError(ValueError):
    """Raised when bucket contents no longer partition the swatch universe."""


class DrawStatus(Enum):
    DRAWN = 'drawn'
    EXHAUSTED = 'exhausted'  # pool and discard pile were both empty


@dataclass(frozen=True)
class DrawResult:
    """Outcome of one draw into a slot. `released` is the swatch that left the slot, if any."""
    slot_id: SlotId
    status: DrawStatus
    drawn: Optional[Swatch] = None
    released: Optional[Swatch] = None

    @property
    def ok(self) -> bool:
        return self.status is DrawStatus.DRAWN


class Inventory:
    """
    Tracks every swatch of the universe in exactly one of four buckets:

    - pool: drawable, unassigned
    - assigned: slot id -> swatch currently shown on that slot
    - discarded: released by the player; refills the pool once it runs dry
    - collected: retired by a declared collection; never drawn again

    All mutations go through deal / discard_and_redraw / collect_and_redraw,
    which keep the four buckets a partition of the universe.
    """

    def __init__(self, universe: Iterable[Swatch], source: Optional[RandomSource] = None) -> None:
        self.universe: List[Swatch] = list(universe)
        self.source: RandomSource = source or default_random_source()
        self.pool: List[Swatch] = secure_shuffle(list(self.universe), self.source)  # type: ignore[assignment]
        self.assigned: Dict[SlotId, Swatch] = {}
        self.discarded: List[Swatch] = []
        self.collected: List[Swatch] = []

    @classmethod
    def restore(
        cls,
        universe: Iterable[Swatch],
        pool: Sequence[Swatch],
        assigned: Mapping[SlotId, Swatch],
        discarded: Sequence[Swatch],
        collected: Sequence[Swatch],
        source: Optional[RandomSource] = None,
    ) -> 'Inventory':
        """Rebuilds an inventory from explicit buckets, validating the partition."""
        inv = cls.__new__(cls)
        inv.universe = list(universe)
        inv.source = source or default_random_source()
        inv.pool = list(pool)
        inv.assigned = dict(assigned)
        inv.discarded = list(discarded)
        inv.collected = list(collected)
        inv.check_invariant()
        return inv

    # ---------- queries ----------

    def swatch_at(self, slot_id: SlotId) -> Optional[Swatch]:
        return self.assigned.get(slot_id)

    def counts(self) -> Dict[str, int]:
        return {
            'available': len(self.pool),
            'assigned': len(self.assigned),
            'discarded': len(self.discarded),
            'collected': len(self.collected),
        }

    def check_invariant(self) -> None:
        """Raises InventoryError unless the buckets hold each universe swatch exactly once."""
        held = Counter(self.pool)
        held.update(self.assigned.values())
        held.update(self.discarded)
        held.update(self.collected)
        expected = Counter(self.universe)
        if held != expected:
            missing = sorted(s.swatch_id for s in (expected - held))
            extra = sorted(s.swatch_id for s in (held - expected))
            raise InventoryError(f'Inventory out of balance (missing={missing}, extra={extra})')

    # ---------- transitions ----------

    def refill_if_empty(self) -> int:
        """Moves the shuffled discard pile into an empty pool. Returns the number moved."""
        if self.pool or not self.discarded:
            return 0
        secure_shuffle(self.discarded, self.source)
        moved = len(self.discarded)
        self.pool.extend(self.discarded)
        self.discarded.clear()
        logger.debug('Refilled pool with %d discarded swatches', moved)
        return moved

    def _draw(self) -> Optional[Swatch]:
        self.refill_if_empty()
        if not self.pool:
            return None
        return draw_from(self.pool, self.source)

    def deal(self, slot_ids: Iterable[SlotId]) -> List[DrawResult]:
        """Draws one swatch into every listed slot that is currently empty."""
        results: List[DrawResult] = []
        for slot_id in slot_ids:
            if slot_id in self.assigned:
                continue
            sw = self._draw()
            if sw is None:
                results.append(DrawResult(slot_id, DrawStatus.EXHAUSTED))
                continue
            self.assigned[slot_id] = sw
            results.append(DrawResult(slot_id, DrawStatus.DRAWN, drawn=sw))
        return results

    def discard_and_redraw(self, slot_id: SlotId) -> DrawResult:
        """
        Replaces the slot's swatch with a fresh draw and moves the old one to the discard pile.

        The refill happens before the old swatch is released, so the slot never
        gets its own swatch back. With nothing to draw the slot is left untouched.
        """
        sw = self._draw()
        if sw is None:
            return DrawResult(slot_id, DrawStatus.EXHAUSTED)
        previous = self.assigned.get(slot_id)
        if previous is not None:
            self.discarded.append(previous)
        self.assigned[slot_id] = sw
        logger.debug('Slot %s: discarded %s, drew %s', slot_id,
                     previous.swatch_id if previous else None, sw.swatch_id)
        return DrawResult(slot_id, DrawStatus.DRAWN, drawn=sw, released=previous)

    def collect_and_redraw(self, slot_id: SlotId) -> DrawResult:
        """Retires the slot's swatch permanently, then tries to draw a replacement.

        When nothing is left to draw the slot stays empty.
        """
        previous = self.assigned.pop(slot_id, None)
        if previous is not None:
            self.collected.append(previous)
        sw = self._draw()
        if sw is None:
            return DrawResult(slot_id, DrawStatus.EXHAUSTED, released=previous)
        self.assigned[slot_id] = sw
        return DrawResult(slot_id, DrawStatus.DRAWN, drawn=sw, released=previous)
