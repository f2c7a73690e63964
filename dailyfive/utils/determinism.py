from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
FNV_OFFSET = 0x811C9DC5
FNV_PRIME = 0x01000193

# Per-question seed spacing within one day
OPTION_SEED_STRIDE = 7


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


class Mulberry32:
    """Seeded 32-bit generator producing floats in [0, 1).

    Bit-for-bit compatible with the common mulberry32 routine, so the same
    seed yields the same stream on every platform.
    """

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK32

    def next_uint32(self) -> int:
        self.state = (self.state + 0x6D2B79F5) & MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return (t ^ (t >> 14)) & MASK32

    def random(self) -> float:
        return self.next_uint32() / 4294967296


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Return a Fisher-Yates permutation of ``items`` driven by ``seed``.

    The input is never mutated. Sequences of length <= 1 come back as a copy.
    """
    out = list(items)
    rng = Mulberry32(seed)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def fnv1a32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``text``."""
    h = FNV_OFFSET
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * FNV_PRIME) & MASK32
    return h


def fnv1a_hex(text: str) -> str:
    return f"{fnv1a32(text):08x}"


def option_seed(day: str, index: int, nonce: str = "") -> int:
    """Seed for shuffling the options of question ``index`` on ``day``."""
    base = int(day)
    if nonce:
        base ^= fnv1a32(nonce)
    return (base + index * OPTION_SEED_STRIDE) & MASK32


def pool_seed(day: str, nonce: str, salt: int) -> int:
    """Seed for reordering a candidate pool when a reroll nonce is given."""
    return (fnv1a32(nonce + day) ^ salt) & MASK32
