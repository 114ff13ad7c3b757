"""
Chroma core Python package.

This package contains the data structures and pure-logic helpers behind the
color-swatch card game, kept apart from app.py so they can be tested directly.
Modules:
- palette.py: Swatch and the 65-swatch palette
- rng.py: random sources, secure index and shuffle
- inventory.py: pool / assigned / discarded / collected buckets
- rules.py, matching.py: color-harmony rule table and collection detection
- db.py: declared collection records and their stores
- session.py: GameSession controller
- view.py: presentation helpers (contrast, palette grid, text hand)
"""
