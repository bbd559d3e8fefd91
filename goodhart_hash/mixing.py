from typing import Final, Tuple

# ==========================
# 常量
# ==========================

MASK_64: Final[int] = (1 << 64) - 1

# Rotation constants, indexed by round number mod 16.
ROTATIONS: Final[Tuple[int, ...]] = (
    12, 39, 21, 13, 32, 11, 24, 53,
    17, 27, 57, 13, 50, 8, 52, 8,
)

# ==========================
# 工具：64-bit rotate
# ==========================

def bit_rotate_left(x: int, n: int) -> int:
    x &= MASK_64
    n &= 63  # n mod 64
    if n == 0:
        return x
    return ((x << n) & MASK_64) | (x >> (64 - n))

def bit_rotate_right(x: int, n: int) -> int:
    x &= MASK_64
    n &= 63  # n mod 64
    if n == 0:
        return x
    return (x >> n) | ((x << (64 - n)) & MASK_64)


# ==========================
# 核心：ARX mixing
# ==========================

def mix_state(a: int, b: int, rounds: int) -> Tuple[int, int]:
    """
    Run `rounds` add-rotate-xor rounds over the 128-bit state (a, b):

        a = a + b + 1
        b = rotl(b, ROTATIONS[i % 16]) ^ a

    The table index always starts at 0, so calls with different round
    counts leave the table at different positions.
    """
    if rounds < 0:
        raise ValueError("rounds must be >= 0")

    a &= MASK_64
    b &= MASK_64
    for i in range(rounds):
        a = (a + b + 1) & MASK_64
        b = bit_rotate_left(b, ROTATIONS[i % 16]) ^ a
    return a, b


def unmix_state(a: int, b: int, rounds: int) -> Tuple[int, int]:
    """Exact inverse of mix_state for the same round count."""
    if rounds < 0:
        raise ValueError("rounds must be >= 0")

    a &= MASK_64
    b &= MASK_64
    for i in reversed(range(rounds)):
        b = bit_rotate_right(b ^ a, ROTATIONS[i % 16])
        a = (a - b - 1) & MASK_64
    return a, b
