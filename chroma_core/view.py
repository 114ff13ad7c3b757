from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .palette import HUES, LEVEL_COUNT, RGB, Swatch

LIGHT_TEXT_THRESHOLD = 0.6


def luminance(rgb: RGB) -> float:
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def text_color(rgb: RGB) -> str:
    """Black text on light swatches, white text on dark ones."""
    return '#000' if luminance(rgb) > LIGHT_TEXT_THRESHOLD else '#fff'


def swatch_view(sw: Optional[Swatch]) -> Optional[Dict[str, Any]]:
    if sw is None:
        return None
    return {
        'id': sw.swatch_id,
        'background': sw.css,
        'label': sw.label,
        'textColor': text_color(sw.color),
        'hue': sw.hue,
        'level': sw.level,
    }


def palette_rows(universe: Sequence[Swatch]) -> List[List[Dict[str, Any]]]:
    """The 13x5 reference grid: one row per level (V1 first), 12 hues then the neutral."""
    by_key = {(sw.hue, sw.level): sw for sw in universe}
    rows: List[List[Dict[str, Any]]] = []
    for level in range(1, LEVEL_COUNT + 1):
        row: List[Dict[str, Any]] = []
        for h in list(HUES) + [None]:
            sw = by_key.get((h, level))
            if sw is not None:
                row.append(swatch_view(sw))  # type: ignore[arg-type]
        rows.append(row)
    return rows


def render_hand(session) -> str:
    """Plain-text hand, one slot per line, for the terminal."""
    lines: List[str] = []
    for i, sid in enumerate(session.slot_ids, start=1):
        sw = session.inventory.swatch_at(sid)
        mark = '[x]' if session.selected[sid] else '[ ]'
        text = f"{sw.label:<22} {sw.css}" if sw is not None else '(empty)'
        lines.append(f"{i:>2}. {mark} {sid:<8} {text}")
    st = session.status()
    lines.append(f"Available {st['available']} · Discarded {st['discarded']} · Collected {st['collected']}")
    return "\n".join(lines)
