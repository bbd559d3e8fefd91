"""
Bit-level helpers shared by the smell battery and the distinguishers.

A "view" selects which bits of a 16-byte digest a test looks at:

- full / first / second: the digest as is (128 bits, word a, word b).
- peeled / peeled_first / peeled_second: the digest with the last
  FINAL_ROUNDS mixing rounds undone by unmix_state. For variants 1-5 that is
  the state right before finalization; for variant 6 it is the state right
  after `b = 0`.
"""

import secrets
from typing import Dict, Final, List, Optional, Sequence, Tuple
import random

from goodhart_hash.hashes import BLOCK_SIZE, FINAL_ROUNDS
from goodhart_hash.mixing import unmix_state


OUTPUT_BITS: Final[int] = 128
WORD_BITS: Final[int] = 64
MASK_128: Final[int] = (1 << OUTPUT_BITS) - 1

VIEWS: Final[Tuple[str, ...]] = (
    "full", "first", "second",
    "peeled", "peeled_first", "peeled_second",
)


# ==========================
# 工具：views
# ==========================

def view_width(view: str) -> int:
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}, expected one of {VIEWS}")
    return OUTPUT_BITS if view in ("full", "peeled") else WORD_BITS

def view_bits(digest: bytes, view: str = "full", peel_rounds: int = FINAL_ROUNDS) -> int:
    """Return the bits of `digest` selected by `view` as an int."""
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}, expected one of {VIEWS}")
    if len(digest) != BLOCK_SIZE:
        raise ValueError("digest must be 16 bytes")

    a = int.from_bytes(digest[0:8], "little")
    b = int.from_bytes(digest[8:16], "little")
    if view.startswith("peeled"):
        a, b = unmix_state(a, b, peel_rounds)

    if view.endswith("first"):
        return a
    if view.endswith("second"):
        return b
    return a | (b << WORD_BITS)


# ==========================
# 工具：bits
# ==========================

def popcnt(x: int) -> int:
    return x.bit_count()

def gf2_rank(vectors: Sequence[int]) -> int:
    """Rank over GF(2) of arbitrary-width bit vectors."""
    basis: Dict[int, int] = {}
    rank = 0
    for v in vectors:
        x = v
        while x:
            p = x.bit_length() - 1
            if p in basis:
                x ^= basis[p]
            else:
                basis[p] = x
                rank += 1
                break
    return rank

def summarize(values: List[int]) -> Dict[str, float]:
    """avg / p10 / p50 / p90 / min / max of a non-empty list."""
    vs = sorted(values)
    n = len(vs)
    return {
        "avg": sum(vs) / n,
        "p10": vs[int(0.10 * (n - 1))],
        "p50": vs[int(0.50 * (n - 1))],
        "p90": vs[int(0.90 * (n - 1))],
        "min": vs[0],
        "max": vs[-1],
    }


# ==========================
# 工具：sampling
# ==========================

def sample_key(length: int, rng: Optional[random.Random] = None) -> bytes:
    # no rng: exploratory run, use OS randomness
    if rng is None:
        return secrets.token_bytes(length)
    return bytes(rng.getrandbits(8) for _ in range(length))

def sample_seed(rng: Optional[random.Random] = None) -> int:
    if rng is None:
        return secrets.randbits(32)
    return rng.getrandbits(32)

def sample_bit(width: int, rng: Optional[random.Random] = None) -> int:
    if rng is None:
        return secrets.randbelow(width)
    return rng.randrange(width)

def flip_bit(key: bytes, bit_pos: int) -> bytes:
    """Flip bit `bit_pos` (little-endian bit order within each byte)."""
    if not 0 <= bit_pos < 8 * len(key):
        raise ValueError(f"bit_pos must be in [0, {8 * len(key)})")
    out = bytearray(key)
    out[bit_pos // 8] ^= 1 << (bit_pos % 8)
    return bytes(out)
