from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .db import DeclaredCollection, MemoryCollectionStore, SwatchSnapshot, contains_record, utc_timestamp
from .inventory import DrawResult, Inventory, SlotId
from .matching import Match, dedupe_by_priority, find_matches, is_actionable
from .palette import Swatch, generate_palette
from .rng import RandomSource, default_random_source
from .rules import CardFacts

logger = logging.getLogger(__name__)

DEFAULT_HAND_SIZE = 8

NO_SELECTION_MESSAGE = 'No cards selected. Use the Collect checkboxes to select cards to declare.'
NO_MATCH_MESSAGE = 'No valid collections found among the selected cards.'


class SlotError(KeyError):
    """An operation named a slot this session does not have."""


def default_slot_ids(count: int = DEFAULT_HAND_SIZE) -> List[SlotId]:
    return [f"card-{i + 1}" for i in range(max(0, count))]


@dataclass
class DeclareOutcome:
    ok: bool
    message: str
    matches: List[Match] = field(default_factory=list)
    added: List[DeclaredCollection] = field(default_factory=list)
    redraws: List[DrawResult] = field(default_factory=list)

    def summary_lines(self) -> List[str]:
        return [f"{m.name}: {', '.join(m.slot_ids)}" for m in self.matches]


class GameSession:
    """
    Owns the slots, their selection flags, the inventory and the collection store.

    Every state change of a game goes through this object; the Flask app and
    the CLI rebuild or keep one per player and call its operations.
    """

    def __init__(
        self,
        slot_ids: Sequence[SlotId],
        inventory: Inventory,
        store=None,
        selected: Optional[Iterable[SlotId]] = None,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.slot_ids: List[SlotId] = list(slot_ids)
        self.inventory = inventory
        self.store = store if store is not None else MemoryCollectionStore()
        self.clock = clock
        self.selected: Dict[SlotId, bool] = {sid: False for sid in self.slot_ids}
        for sid in selected or ():
            self._require_slot(sid)
            self.selected[sid] = True

    @classmethod
    def new(
        cls,
        slot_ids: Optional[Sequence[SlotId]] = None,
        store=None,
        source: Optional[RandomSource] = None,
        universe: Optional[Sequence[Swatch]] = None,
    ) -> 'GameSession':
        """Starts a fresh game: clears stored collections and deals a hand."""
        src = source or default_random_source()
        inv = Inventory(universe if universe is not None else generate_palette(), src)
        session = cls(slot_ids if slot_ids is not None else default_slot_ids(), inv, store)
        session.start()
        return session

    def start(self) -> List[DrawResult]:
        if not self.store.clear():
            logger.warning('Stored collections could not be cleared at session start')
        results = self.inventory.deal(self.slot_ids)
        short = [r.slot_id for r in results if not r.ok]
        if short:
            logger.warning('Ran out of swatches while dealing: %s left empty', ', '.join(short))
        return results

    # ---------- queries ----------

    def _require_slot(self, slot_id: SlotId) -> None:
        if slot_id not in self.selected:
            raise SlotError(slot_id)

    def swatch_at(self, slot_id: SlotId) -> Optional[Swatch]:
        self._require_slot(slot_id)
        return self.inventory.swatch_at(slot_id)

    def selected_cards(self) -> List[CardFacts]:
        """Occupied, selected slots in slot order."""
        out: List[CardFacts] = []
        for sid in self.slot_ids:
            sw = self.inventory.swatch_at(sid)
            if self.selected[sid] and sw is not None:
                out.append(CardFacts.from_swatch(sid, sw))
        return out

    def can_declare(self) -> bool:
        return is_actionable(self.selected_cards())

    def status(self) -> Dict[str, int]:
        counts = self.inventory.counts()
        return {
            'available': counts['available'],
            'discarded': counts['discarded'],
            'collected': counts['collected'],
        }

    def collections(self) -> List[DeclaredCollection]:
        return self.store.load()

    # ---------- player actions ----------

    def discard(self, slot_id: SlotId) -> DrawResult:
        self._require_slot(slot_id)
        result = self.inventory.discard_and_redraw(slot_id)
        if not result.ok:
            logger.info('Discard on %s ignored: no swatches available', slot_id)
        return result

    def set_selected(self, slot_id: SlotId, selected: bool = True) -> bool:
        self._require_slot(slot_id)
        self.selected[slot_id] = bool(selected)
        return self.can_declare()

    def declare(self) -> DeclareOutcome:
        """
        Records every collection found in the current selection and retires its swatches.

        Only allowed when a rule covers the whole selection. Overlapping matches on the
        same slots are reduced to the highest-priority rule; each survivor is stored
        unless an identical record exists. Swatches are snapshotted before any slot
        is redrawn, and each involved slot is collected once.
        """
        cards = self.selected_cards()
        if not cards:
            return DeclareOutcome(ok=False, message=NO_SELECTION_MESSAGE)
        if not is_actionable(cards):
            return DeclareOutcome(ok=False, message=NO_MATCH_MESSAGE)

        matches = dedupe_by_priority(find_matches(cards))
        declared_at = self.clock()
        stored = self.store.load()
        added: List[DeclaredCollection] = []
        involved: List[SlotId] = []
        for m in matches:
            record = DeclaredCollection(
                rule_name=m.name,
                slot_ids=m.slot_ids,
                swatches=tuple(SwatchSnapshot.of(self.inventory.assigned[sid]) for sid in m.slot_ids),
                declared_at=declared_at,
            )
            if not contains_record(stored, record):
                stored.append(record)
                added.append(record)
            for sid in m.slot_ids:
                if sid not in involved:
                    involved.append(sid)

        if added and not self.store.save(stored):
            logger.warning('Declared collections could not be saved')

        redraws: List[DrawResult] = []
        for sid in involved:
            redraws.append(self.inventory.collect_and_redraw(sid))
            self.selected[sid] = False

        header = 'New collections saved:' if added else 'Collections found (already saved or newly found):'
        outcome = DeclareOutcome(ok=True, message=header, matches=matches, added=added, redraws=redraws)
        logger.debug('Declared %s', '; '.join(outcome.summary_lines()))
        return outcome
