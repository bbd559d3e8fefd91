"""
Goodhart hashes: six 128-bit seeded hashes built on one ARX mixer.

These are NOT for real use. Some of them are built specifically to pass the
usual empirical hash-quality tests (avalanche, bias, collisions) while still
having structural problems:

- 1: no per-block mixing, length ignored. Blocks commute and a trailing zero
     byte disappears.
- 2: like 1 but the length is folded in. Folding length on its own does not
     fix anything: a trailing 0x01 cancels the length change.
- 3: 12 rounds per block (the "full" mix).
- 4: 4 rounds per block.
- 5: 5 rounds per block; already closes most of the gap to 3.
- 6: 5 rounds per block, then the second state word is zeroed and the state
     re-mixed. Output is still 128 bits but only 64 bits of it are real.

Usage:
    from goodhart_hash import goodhart_hash_5

    digest = goodhart_hash_5(b"Hello, World!", 12345)          # 16 bytes
    digest = goodhart_hash_5(b"Hello, World!", use_seed=False)  # seed ignored
"""

from typing import Callable, Dict, Final, NamedTuple, Tuple, Union

from goodhart_hash.mixing import MASK_64, mix_state


BLOCK_SIZE: Final[int] = 128 // 8
SEED_ROUNDS: Final[int] = 12
FINAL_ROUNDS: Final[int] = 12
COLLAPSE_ROUNDS: Final[int] = 12
MAX_SEED: Final[int] = 0xFFFFFFFF

# Seeding is on by default. Pass use_seed=False to reproduce the unseeded
# outputs from the "Hash Design and Goodhart's Law" article; it changes every
# output value.
USE_SEED_DEFAULT: Final[bool] = True

BytesLike = Union[bytes, bytearray, memoryview]


class Variant(NamedTuple):
    number: int
    name: str
    block_rounds: int    # mix rounds after each absorbed block
    fold_length: bool    # a ^= len(key) before the final mix
    collapse: bool       # b = 0 + another mix after the final mix


VARIANTS: Final[Tuple[Variant, ...]] = (
    Variant(1, "goodhart_hash_1", block_rounds=0, fold_length=False, collapse=False),
    Variant(2, "goodhart_hash_2", block_rounds=0, fold_length=True, collapse=False),
    Variant(3, "goodhart_hash_3", block_rounds=12, fold_length=True, collapse=False),
    Variant(4, "goodhart_hash_4", block_rounds=4, fold_length=True, collapse=False),
    Variant(5, "goodhart_hash_5", block_rounds=5, fold_length=True, collapse=False),
    Variant(6, "goodhart_hash_6", block_rounds=5, fold_length=True, collapse=True),
)


def get_variant(which: Union[int, str]) -> Variant:
    """Look a variant up by number (1..6) or by name ("goodhart_hash_3" or "3")."""
    for v in VARIANTS:
        if which == v.number or which == v.name or which == str(v.number):
            return v
    raise ValueError(f"unknown variant: {which!r}")


# ==========================
# 工具：参数检查
# ==========================

def _as_bytes(key: BytesLike) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise TypeError(f"key must be bytes-like, not {type(key).__name__}")
    return bytes(key)

def _check_seed(seed: int) -> int:
    if not 0 <= seed <= MAX_SEED:
        raise ValueError("seed must be an unsigned 32-bit integer")
    return seed


# ==========================
# 核心：参数化 hash
# ==========================

def goodhart_hash(
    key: BytesLike,
    seed: int = 0,
    *,
    block_rounds: int,
    fold_length: bool = True,
    collapse: bool = False,
    use_seed: bool = USE_SEED_DEFAULT,
) -> bytes:
    """
    The shared shape behind all six variants.

    Args:
        key: input bytes; its length is the hashed length (slice to hash a prefix).
        seed: unsigned 32-bit seed, ignored when use_seed is False.
        block_rounds: mix rounds run after absorbing each 16-byte block.
        fold_length: xor the byte length into the first state word before
            the final mix.
        collapse: after the final mix, zero the second state word and mix
            again, leaving 64 bits of effective state.
        use_seed: mix the seed into the initial state.

    Returns:
        16 bytes: state word a then state word b, both little-endian.
    """
    data = _as_bytes(key)
    if block_rounds < 0:
        raise ValueError("block_rounds must be >= 0")

    a, b = 0, 0
    if use_seed:
        a, b = mix_state(_check_seed(seed), 0, SEED_ROUNDS)

    # 每 16 字节一块；最后不足 16 的块右侧补 0。空输入一块都不吸收。
    for offset in range(0, len(data), BLOCK_SIZE):
        block = data[offset: offset + BLOCK_SIZE].ljust(BLOCK_SIZE, b"\x00")

        a ^= int.from_bytes(block[0:8], "little")
        b ^= int.from_bytes(block[8:16], "little")

        if block_rounds:
            a, b = mix_state(a, b, block_rounds)

    if fold_length:
        a ^= len(data) & MASK_64
    a, b = mix_state(a, b, FINAL_ROUNDS)

    if collapse:
        # Only as strong as a 64-bit hash, but still looks like 128 bits.
        b = 0
        a, b = mix_state(a, b, COLLAPSE_ROUNDS)

    return a.to_bytes(8, "little") + b.to_bytes(8, "little")


def hash_with_variant(
    variant: Variant,
    key: BytesLike,
    seed: int = 0,
    *,
    use_seed: bool = USE_SEED_DEFAULT,
) -> bytes:
    return goodhart_hash(
        key,
        seed,
        block_rounds=variant.block_rounds,
        fold_length=variant.fold_length,
        collapse=variant.collapse,
        use_seed=use_seed,
    )


# ==========================
# 六个具名入口
# ==========================

def goodhart_hash_1(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """No per-block mixing, length not folded in."""
    return hash_with_variant(VARIANTS[0], key, seed, use_seed=use_seed)

def goodhart_hash_2(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """No per-block mixing, length folded in."""
    return hash_with_variant(VARIANTS[1], key, seed, use_seed=use_seed)

def goodhart_hash_3(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """12 mix rounds per block."""
    return hash_with_variant(VARIANTS[2], key, seed, use_seed=use_seed)

def goodhart_hash_4(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """4 mix rounds per block."""
    return hash_with_variant(VARIANTS[3], key, seed, use_seed=use_seed)

def goodhart_hash_5(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """5 mix rounds per block."""
    return hash_with_variant(VARIANTS[4], key, seed, use_seed=use_seed)

def goodhart_hash_6(key: BytesLike, seed: int = 0, *, use_seed: bool = USE_SEED_DEFAULT) -> bytes:
    """
    Variant 5 plus a deliberate entropy collapse: the second state word is
    zeroed after the final mix and the state mixed once more. It passes the
    same empirical tests as variant 5 with only 64 bits of real strength.
    """
    return hash_with_variant(VARIANTS[5], key, seed, use_seed=use_seed)


HashFunction = Callable[..., bytes]

HASH_FUNCTIONS: Final[Dict[str, HashFunction]] = {
    "goodhart_hash_1": goodhart_hash_1,
    "goodhart_hash_2": goodhart_hash_2,
    "goodhart_hash_3": goodhart_hash_3,
    "goodhart_hash_4": goodhart_hash_4,
    "goodhart_hash_5": goodhart_hash_5,
    "goodhart_hash_6": goodhart_hash_6,
}


def _self_test() -> None:
    # Vectors from the C reference build (seeded, seed = 0xDEADBEEF).
    fox = b"The quick brown fox jumps over the lazy dog"
    expected = {
        1: "9ce2a288ec1968779f77ee008f131dc0",
        2: "b503d63a2f71448a3d027f37eb825d2a",
        3: "b9ba077ce743b694f1e44d1871f5db6e",
        4: "cf00d52947fafae31e1aa7880905b9f0",
        5: "ed83792274f2e1d7ff63d5128bbf6c1a",
        6: "180f7951a8494b2d7e9e3fc06da1fa5e",
    }
    for v in VARIANTS:
        digest = HASH_FUNCTIONS[v.name](fox, 0xDEADBEEF)
        assert digest.hex() == expected[v.number], (v.name, digest.hex())

    # Unseeded: the empty input is just the finalization of (0, 0).
    assert goodhart_hash_1(b"", 12345, use_seed=False).hex() == "0a5618ac2399f486c145cdf0f392e181"

    # Variant 1 cannot see zero padding.
    assert goodhart_hash_1(b"ABCDE", 7) == goodhart_hash_1(b"ABCDE" + bytes(11), 7)


if __name__ == "__main__":
    _self_test()
    print("OK")
