from __future__ import annotations

# Facade module that re-exports the chroma core.
# The Flask app, the CLI and the tests import from here;
# single-responsibility modules live under chroma_core/*.

from chroma_core.palette import (  # noqa: F401
    HUES,
    HUE_NAMES,
    LIGHTNESS_LEVELS,
    NEUTRAL_VALUES,
    Swatch,
    generate_palette,
    hsl_to_rgb,
    palette_lookup,
    swatch_id,
)
from chroma_core.rng import (  # noqa: F401
    PseudoRandomSource,
    RandomSource,
    SecureRandomSource,
    default_random_source,
    secure_random_index,
    secure_shuffle,
)
from chroma_core.inventory import (  # noqa: F401
    DrawResult,
    DrawStatus,
    Inventory,
    InventoryError,
)
from chroma_core.rules import RULES, CardFacts, Rule, is_consecutive, rule_named  # noqa: F401
from chroma_core.matching import (  # noqa: F401
    Match,
    dedupe_by_priority,
    exact_matches,
    find_matches,
    is_actionable,
)
from chroma_core.db import (  # noqa: F401
    DeclaredCollection,
    MemoryCollectionStore,
    SqliteCollectionStore,
    SwatchSnapshot,
)
from chroma_core.session import (  # noqa: F401
    DEFAULT_HAND_SIZE,
    DeclareOutcome,
    GameSession,
    SlotError,
    default_slot_ids,
)
from chroma_core.view import luminance, palette_rows, render_hand, swatch_view, text_color  # noqa: F401
