from __future__ import annotations

import logging
import os
import random
from typing import Callable, List, MutableSequence, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

_UINT32_RANGE = 1 << 32


class RandomSource(Protocol):
    """Anything that can pick a uniform index in [0, n)."""

    def uniform_index(self, n: int) -> int: ...


class SecureRandomSource:
    """
    Cryptographically strong source backed by the OS entropy pool.

    Each draw reads a 32-bit unsigned integer and rejects samples at or above
    the largest multiple of `n` that fits, so the final `% n` has no modulo bias.
    `read_bytes` is injectable so the rejection path can be exercised.
    """

    def __init__(self, read_bytes: Optional[Callable[[int], bytes]] = None) -> None:
        self._read = read_bytes or os.urandom

    def uniform_index(self, n: int) -> int:
        if n <= 0:
            return 0
        limit = (_UINT32_RANGE // n) * n
        while True:
            r = int.from_bytes(self._read(4), 'big')
            if r < limit:
                return r % n


class PseudoRandomSource:
    """
    Lower-quality fallback backed by the Mersenne Twister.

    Used when the OS offers no entropy source, and with a fixed seed wherever
    a reproducible sequence is wanted (tests, --seed on the CLI).
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def uniform_index(self, n: int) -> int:
        if n <= 0:
            return 0
        return self._rng.randrange(n)


def default_random_source() -> RandomSource:
    """Returns the secure source, or the pseudo-random fallback if the OS has none."""
    try:
        os.urandom(1)
    except NotImplementedError:
        logger.warning('No OS entropy source available; falling back to pseudo-random draws')
        return PseudoRandomSource()
    return SecureRandomSource()


def secure_random_index(n: int, source: Optional[RandomSource] = None) -> int:
    """Returns an unbiased index in [0, n); 0 when n <= 0."""
    if n <= 0:
        return 0
    src = source or default_random_source()
    idx = src.uniform_index(n)
    if not 0 <= idx < n:
        raise ValueError(f'Random source returned {idx} outside [0, {n})')
    return idx


def secure_shuffle(seq: MutableSequence[T], source: Optional[RandomSource] = None) -> MutableSequence[T]:
    """In-place Fisher-Yates shuffle; returns the same sequence for chaining."""
    src = source or default_random_source()
    for i in range(len(seq) - 1, 0, -1):
        j = secure_random_index(i + 1, src)
        seq[i], seq[j] = seq[j], seq[i]
    return seq


def draw_from(items: List[T], source: Optional[RandomSource] = None) -> T:
    """Removes and returns a uniformly chosen element; the list must be non-empty."""
    if not items:
        raise IndexError('draw from empty list')
    return items.pop(secure_random_index(len(items), source))
