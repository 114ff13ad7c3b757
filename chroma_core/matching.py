from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .rules import RULES, CardFacts, Rule

MIN_COLLECTION_SIZE = 2
MAX_COLLECTION_SIZE = 5


@dataclass(frozen=True)
class Match:
    """One rule satisfied by one exact set of slots."""
    rule: Rule
    slot_ids: Tuple[str, ...]

    @property
    def name(self) -> str:
        return self.rule.name

    @property
    def key(self) -> FrozenSet[str]:
        return frozenset(self.slot_ids)


def find_matches(cards: Sequence[CardFacts], rules: Iterable[Rule] = RULES) -> List[Match]:
    """
    Tests every 2..5-card sub-selection of `cards` against the rule table.

    Selections smaller than 2 or larger than 5 never match. A sub-selection may
    satisfy several rules; each (rule, slots) pair is reported.
    """
    n = len(cards)
    if n < MIN_COLLECTION_SIZE or n > MAX_COLLECTION_SIZE:
        return []
    table = list(rules)
    found: List[Match] = []
    for k in range(MIN_COLLECTION_SIZE, MAX_COLLECTION_SIZE + 1):
        sized = [r for r in table if r.size == k]
        if not sized or k > n:
            continue
        for combo in combinations(cards, k):
            for rule in sized:
                if rule.test(combo):
                    found.append(Match(rule, tuple(c.slot_id for c in combo)))
    return found


def exact_matches(cards: Sequence[CardFacts], rules: Iterable[Rule] = RULES) -> List[Match]:
    """Matches whose slot set is the whole selection."""
    selection = frozenset(c.slot_id for c in cards)
    return [m for m in find_matches(cards, rules) if m.key == selection]


def is_actionable(cards: Sequence[CardFacts], rules: Iterable[Rule] = RULES) -> bool:
    """True when a rule covers exactly the selected slots, no more and no fewer."""
    return bool(exact_matches(cards, rules))


def dedupe_by_priority(matches: Iterable[Match]) -> List[Match]:
    """Keeps one match per exact slot set, preferring the lowest priority number.

    The first-seen order of slot sets is preserved; ties keep the earlier match.
    """
    chosen: Dict[FrozenSet[str], Match] = {}
    for m in matches:
        existing = chosen.get(m.key)
        if existing is None:
            chosen[m.key] = m
            continue
        if m.rule.priority < existing.rule.priority:
            chosen[m.key] = m
    return list(chosen.values())
