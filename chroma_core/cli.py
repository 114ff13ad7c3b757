from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from .db import MemoryCollectionStore, SqliteCollectionStore
from .palette import generate_palette
from .rng import PseudoRandomSource, default_random_source
from .session import DEFAULT_HAND_SIZE, GameSession, default_slot_ids
from .view import palette_rows, render_hand

HELP = """Commands:
  d N      discard card N and draw a replacement
  s N      toggle card N for collection
  c        declare the selected cards as a collection
  l        list declared collections
  p        show the full palette
  q        quit"""


def _slot_for(session: GameSession, token: str) -> Optional[str]:
    try:
        n = int(token)
    except ValueError:
        return token if token in session.selected else None
    if 1 <= n <= len(session.slot_ids):
        return session.slot_ids[n - 1]
    return None


def _print_palette() -> None:
    for row in palette_rows(generate_palette()):
        print('  '.join(f"{cell['label']:<20}" for cell in row[:4]) + ' ...')
        print('    ' + ' '.join(cell['background'] for cell in row))


def _print_collections(session: GameSession) -> None:
    records = session.collections()
    if not records:
        print('No collections declared yet.')
        return
    print('Collected Sets')
    for r in records:
        labels = ', '.join(s.label for s in r.swatches)
        print(f"  {r.rule_name} ({r.declared_at}): {labels}")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Color swatch card game')
    parser.add_argument('--cards', type=int, default=int(os.getenv('CHROMA_HAND_SIZE', str(DEFAULT_HAND_SIZE))),
                        help='Number of card slots in the hand')
    parser.add_argument('--db', default=os.getenv('CHROMA_DB', 'data/collections.db'), help='SQLite DB file path')
    parser.add_argument('--memory', action='store_true', help='Keep declared collections in memory only')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed (uses a non-secure source)')
    parser.add_argument('--debug', action='store_true', help='Verbose logging')
    args = parser.parse_args(argv)

    debug = args.debug or os.getenv('CHROMA_DEBUG', '0').lower() in ('1', 'true', 'yes', 'on')
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    store = MemoryCollectionStore() if args.memory else SqliteCollectionStore(args.db)
    source = PseudoRandomSource(args.seed) if args.seed is not None else default_random_source()
    session = GameSession.new(default_slot_ids(args.cards), store=store, source=source)

    print(render_hand(session))
    print(HELP)
    while True:
        try:
            text = input('> ').strip()
        except EOFError:
            break
        if not text:
            continue
        cmd, _, rest = text.partition(' ')
        cmd = cmd.lower()
        if cmd == 'q':
            break
        if cmd in ('d', 's'):
            slot = _slot_for(session, rest.strip())
            if slot is None:
                print('Unknown card. Try again.')
                continue
            if cmd == 'd':
                result = session.discard(slot)
                if not result.ok:
                    print('No swatches available to draw.')
            else:
                ready = session.set_selected(slot, not session.selected[slot])
                print('Declare: ready' if ready else 'Declare: not a collection yet')
        elif cmd == 'c':
            outcome = session.declare()
            print(outcome.message)
            for line in outcome.summary_lines():
                print('  ' + line)
        elif cmd == 'l':
            _print_collections(session)
            continue
        elif cmd == 'p':
            _print_palette()
            continue
        else:
            print(HELP)
            continue
        print(render_hand(session))


if __name__ == '__main__':
    main()
