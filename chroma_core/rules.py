from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Set, Tuple

from .palette import Swatch

WHEEL = 12
COMPLEMENT = WHEEL // 2


@dataclass(frozen=True)
class CardFacts:
    """What the matcher needs to know about one selected slot."""
    slot_id: str
    hue_index: Optional[int]  # 0..11, None for neutrals
    level: int

    @property
    def is_neutral(self) -> bool:
        return self.hue_index is None

    @classmethod
    def from_swatch(cls, slot_id: str, swatch: Swatch) -> 'CardFacts':
        return cls(slot_id=slot_id, hue_index=swatch.hue_index, level=swatch.level)


Cards = Sequence[CardFacts]


@dataclass(frozen=True)
class Rule:
    name: str
    size: int
    priority: int  # lower wins when two rules match the same slot set
    test: Callable[[Cards], bool]


# ---------- predicates ----------

def _all_chromatic(cards: Cards) -> bool:
    return all(not c.is_neutral for c in cards)


def _all_neutral(cards: Cards) -> bool:
    return all(c.is_neutral for c in cards)


def _same_level(cards: Cards) -> bool:
    return len({c.level for c in cards}) == 1


def _single_hue(cards: Cards) -> bool:
    return _all_chromatic(cards) and len({c.hue_index for c in cards}) == 1


def _hues(cards: Cards) -> Set[int]:
    return {int(c.hue_index) % WHEEL for c in cards if c.hue_index is not None}


def _sorted_levels(cards: Cards) -> Tuple[int, ...]:
    return tuple(sorted(c.level for c in cards))


def is_consecutive(indices: Set[int], length: int) -> bool:
    """True if some run s, s+1, ..., s+length-1 (mod 12) is fully present."""
    present = {i % WHEEL for i in indices}
    for s in range(WHEEL):
        if all((s + off) % WHEEL in present for off in range(length)):
            return True
    return False


def _flat_chromatic(cards: Cards) -> bool:
    # every hue-based rule wants chromatic swatches at one level
    return _all_chromatic(cards) and _same_level(cards)


# ---------- rule tests ----------

def _complementary_duo(cards: Cards) -> bool:
    if not _flat_chromatic(cards):
        return False
    a, b = (int(c.hue_index) for c in cards)
    return (a - b) % WHEEL == COMPLEMENT


def _monochrome_triad(cards: Cards) -> bool:
    return _single_hue(cards) and _sorted_levels(cards) == (1, 3, 5)


def _grey_triad(cards: Cards) -> bool:
    return _all_neutral(cards) and _sorted_levels(cards) == (1, 3, 5)


def _analogous(length: int) -> Callable[[Cards], bool]:
    def test(cards: Cards) -> bool:
        return _flat_chromatic(cards) and is_consecutive(_hues(cards), length)
    return test


def _split_complementary_triad(cards: Cards) -> bool:
    if not _flat_chromatic(cards):
        return False
    hues = _hues(cards)
    for h in hues:
        comp = (h + COMPLEMENT) % WHEEL
        if (comp - 1) % WHEEL in hues and (comp + 1) % WHEEL in hues:
            return True
    return False


def _hue_triad(cards: Cards) -> bool:
    if not _flat_chromatic(cards):
        return False
    hues = _hues(cards)
    return any(all((s + step) % WHEEL in hues for step in (0, 4, 8)) for s in range(WHEEL))


def _monochrome_tetrad(cards: Cards) -> bool:
    return _single_hue(cards) and _sorted_levels(cards) in ((1, 2, 3, 4), (2, 3, 4, 5))


def _grey_tetrad(cards: Cards) -> bool:
    return _all_neutral(cards) and _sorted_levels(cards) in ((1, 2, 3, 4), (2, 3, 4, 5))


def _complementary_tetrad(cards: Cards) -> bool:
    if not _flat_chromatic(cards):
        return False
    hues = _hues(cards)
    return len(hues) == 4 and all((h + COMPLEMENT) % WHEEL in hues for h in hues)


def _monochrome_scale(cards: Cards) -> bool:
    return _single_hue(cards) and _sorted_levels(cards) == (1, 2, 3, 4, 5)


def _grey_scale(cards: Cards) -> bool:
    return _all_neutral(cards) and _sorted_levels(cards) == (1, 2, 3, 4, 5)


# Evaluation order within a size also breaks priority ties.
RULES: Tuple[Rule, ...] = (
    Rule('Complementary Duo', 2, 4, _complementary_duo),
    Rule('Monochrome Triad', 3, 3, _monochrome_triad),
    Rule('Grey Scale Triad', 3, 3, _grey_triad),
    Rule('Analogous Triad', 3, 3, _analogous(3)),
    Rule('Split Complementary Triad', 3, 3, _split_complementary_triad),
    Rule('Hue Triad', 3, 3, _hue_triad),
    Rule('Monochrome Tetrad', 4, 2, _monochrome_tetrad),
    Rule('Grey Scale Tetrad', 4, 2, _grey_tetrad),
    Rule('Analogous Tetrad', 4, 2, _analogous(4)),
    Rule('Complementary Tetrad', 4, 2, _complementary_tetrad),
    Rule('Monochrome Value Scale', 5, 1, _monochrome_scale),
    Rule('Grey Value Scale', 5, 1, _grey_scale),
    Rule('Analogous Scale', 5, 1, _analogous(5)),
)


def rule_named(name: str) -> Rule:
    for rule in RULES:
        if rule.name == name:
            return rule
    raise KeyError(name)
