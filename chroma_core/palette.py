from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

RGB = Tuple[int, int, int]

HUE_STEP = 30
HUES: Tuple[int, ...] = tuple(k * HUE_STEP for k in range(12))
HUE_NAMES: Tuple[str, ...] = (
    'Red-Orange',     # 0
    'Yellow-Orange',  # 30
    'Yellow',         # 60
    'Yellow-Green',   # 90
    'Green',          # 120
    'Blue-Green',     # 150
    'Cyan',           # 180
    'Blue',           # 210
    'Blue-Violet',    # 240
    'Violet',         # 270
    'Magenta',        # 300
    'Red',            # 330
)

SATURATION = 80
MIN_LIGHTNESS = 20  # darkest chromatic level, avoids pure black
MAX_LIGHTNESS = 92  # lightest chromatic level, avoids pure white
LEVEL_COUNT = 5
NEUTRAL_VALUES: Tuple[int, ...] = (100, 75, 50, 25, 0)  # level 1 (white) .. level 5 (black)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


LIGHTNESS_LEVELS: Tuple[int, ...] = tuple(
    _round_half_up(MIN_LIGHTNESS + (i * (MAX_LIGHTNESS - MIN_LIGHTNESS)) / (LEVEL_COUNT - 1))
    for i in range(LEVEL_COUNT)
)


@dataclass(frozen=True)
class Swatch:
    """An immutable color token. `hue` is None for the neutral greys."""
    hue: Optional[int]
    level_value: int  # lightness (chromatic) or grey (neutral) percentage
    level: int        # 1 = lightest .. 5 = darkest
    label: str
    color: RGB

    @property
    def is_neutral(self) -> bool:
        return self.hue is None

    @property
    def hue_index(self) -> Optional[int]:
        return None if self.hue is None else self.hue // HUE_STEP

    @property
    def swatch_id(self) -> str:
        return swatch_id(self.hue, self.level)

    @property
    def css(self) -> str:
        r, g, b = self.color
        return f"rgb({r}, {g}, {b})"


def swatch_id(hue: Optional[int], level: int) -> str:
    """Stable identifier used on the wire and in persisted snapshots."""
    if hue is None:
        return f"n-v{level}"
    return f"h{hue}-v{level}"


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Converts HSL (degrees, percent, percent) to an 8-bit RGB triple."""
    s /= 100.0
    l /= 100.0
    a = s * min(l, 1 - l)

    def f(n: int) -> float:
        k = (n + h / 30.0) % 12
        return l - a * max(-1.0, min(k - 3, 9 - k, 1.0))

    return (_round_half_up(255 * f(0)), _round_half_up(255 * f(8)), _round_half_up(255 * f(4)))


def hue_name(hue: int) -> str:
    idx = hue // HUE_STEP
    if 0 <= idx < len(HUE_NAMES) and hue % HUE_STEP == 0:
        return HUE_NAMES[idx]
    return f"{hue}°"


def _neutral_label(value: int, level: int) -> str:
    if value == 100:
        return f"White · V{level}"
    if value == 0:
        return f"Black · V{level}"
    return f"Neutral · V{level}"


def generate_palette() -> List[Swatch]:
    """Builds the 65 swatches: 12 hues x 5 lightness levels plus 5 neutral greys.

    Output order is hue-major then darkest-to-lightest; callers shuffle.
    """
    swatches: List[Swatch] = []
    for h in HUES:
        name = hue_name(h)
        for li, lightness in enumerate(LIGHTNESS_LEVELS):
            level = LEVEL_COUNT - li
            swatches.append(Swatch(
                hue=h,
                level_value=lightness,
                level=level,
                label=f"{name} · V{level}",
                color=hsl_to_rgb(h, SATURATION, lightness),
            ))
    for ni, value in enumerate(NEUTRAL_VALUES):
        level = ni + 1
        grey = _round_half_up(value / 100 * 255)
        swatches.append(Swatch(
            hue=None,
            level_value=value,
            level=level,
            label=_neutral_label(value, level),
            color=(grey, grey, grey),
        ))
    return swatches


def palette_lookup(universe: Iterable[Swatch]) -> Dict[str, Swatch]:
    """Maps swatch ids to swatches; raises ValueError on duplicate identity."""
    out: Dict[str, Swatch] = {}
    for sw in universe:
        key = sw.swatch_id
        if key in out:
            raise ValueError(f'Duplicate swatch identity: {key}')
        out[key] = sw
    return out
