"""
Differential experiments and structural probes for the Goodhart hashes
======================================================================
The smell battery asks "does the output look random?". These ask "is there
exact structure?", and answer it with outcomes that are 0 or 1, not z-scores:

- delta_experiment: distribution of output differences for a fixed key delta.
- block_swap_probe: hash(A || B) == hash(B || A)?
- trailing_byte_probe: hash(K) == hash(K || t) for len(K) % 16 == 0?
- finalization_inversion_probe: after peeling the final mix, is the second
  state word zero?
"""

from collections import Counter
from typing import Any, Callable, Dict, Optional
import random

from goodhart_hash.hashes import BLOCK_SIZE
from goodhart_hash.views import (
    WORD_BITS,
    sample_key,
    sample_seed,
    view_bits,
    view_width,
)


HashFn = Callable[..., bytes]


def apply_delta(key: bytes, delta: bytes) -> bytes:
    """Apply an XOR difference of the same length to a key."""
    if len(key) != len(delta):
        raise ValueError("key and delta must have the same length")
    return bytes(k ^ d for k, d in zip(key, delta))


def make_single_bit_delta(key_len: int, bit_pos: int) -> bytes:
    """Construct a key_len-byte XOR difference with a single 1-bit."""
    if not (0 <= bit_pos < 8 * key_len):
        raise ValueError(f"bit_pos must be in [0, {8 * key_len})")
    delta = bytearray(key_len)
    delta[bit_pos // 8] = 1 << (bit_pos % 8)
    return bytes(delta)


# ==========================
# 差分实验
# ==========================

def delta_experiment(
    hash_fn: HashFn,
    num_samples: int,
    delta: bytes,
    view: str = "full",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Differential experiment on a whole hash.

    Parameters:
    - num_samples: number of (key, seed) samples
    - delta: XOR difference applied to the key; its length is the key length
    - view: which output bits to difference (see goodhart_hash.views)
    """
    if num_samples <= 0:
        raise ValueError("num_samples must be > 0")
    if not delta:
        raise ValueError("delta must be non-empty")
    width = view_width(view)

    delta_counter: Counter = Counter()
    bit_ones = [0] * width

    for _ in range(num_samples):
        key = sample_key(len(delta), rng)
        seed = sample_seed(rng)

        y1 = view_bits(hash_fn(key, seed, use_seed=use_seed), view)
        y2 = view_bits(hash_fn(apply_delta(key, delta), seed, use_seed=use_seed), view)
        dy = y1 ^ y2

        delta_counter[dy] += 1
        for i in range(width):
            if (dy >> i) & 1:
                bit_ones[i] += 1

    return {
        "num_samples": num_samples,
        "view": view,
        "width": width,
        "distinct_delta_out": len(delta_counter),
        "zero_prob": delta_counter[0] / num_samples,
        "bit_bias": [c / num_samples for c in bit_ones],
        "top_deltas": delta_counter.most_common(10),
    }


def pretty_print_diff_result(name: str, result: Dict[str, Any]) -> None:
    print(f"\n==== Differential Experiment: {name} (view={result['view']}) ====")
    print(f"Samples: {result['num_samples']}")
    print(f"Distinct delta_out: {result['distinct_delta_out']}")
    print(f"P[delta_out = 0]: {result['zero_prob']:.6f}")

    digits = result["width"] // 4
    print("Top 5 most common delta_out (value, count, probability):")
    for dy, cnt in result["top_deltas"][:5]:
        print(f" dy = {dy:#0{digits + 2}x}, count = {cnt}, prob ~= {cnt / result['num_samples']:.6f}")

    print("First 16 bit 1-probabilities:")
    for i in range(16):
        print(f"  bit {i:2d}: {result['bit_bias'][i]:.4f}")
    print("...")


# ==========================
# 结构探针
# ==========================

def _rate(equal: int, samples: int) -> Dict[str, Any]:
    return {"samples": samples, "equal": equal, "rate": equal / samples}


def block_swap_probe(
    hash_fn: HashFn,
    samples: int = 100,
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """Without per-block mixing, absorption is a plain XOR and blocks commute."""
    if samples <= 0:
        raise ValueError("samples must be > 0")

    equal = 0
    for _ in range(samples):
        block_a = sample_key(BLOCK_SIZE, rng)
        block_b = sample_key(BLOCK_SIZE, rng)
        while block_b == block_a:
            block_b = sample_key(BLOCK_SIZE, rng)
        seed = sample_seed(rng)

        if hash_fn(block_a + block_b, seed, use_seed=use_seed) == hash_fn(block_b + block_a, seed, use_seed=use_seed):
            equal += 1
    return _rate(equal, samples)


def trailing_byte_probe(
    hash_fn: HashFn,
    tail: int,
    samples: int = 100,
    blocks: int = 1,
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Compare hash(K) against hash(K || tail) for whole-block keys K.

    The extra byte lands in a fresh zero-padded block. With no per-block
    mixing it only xors `tail` into word a; the length fold then xors in
    len(K) ^ (len(K) + 1), which is 1 for even lengths. So tail=0x00 collides
    when length is ignored, and tail=0x01 collides when it is folded in.
    """
    if samples <= 0:
        raise ValueError("samples must be > 0")
    if blocks < 0:
        raise ValueError("blocks must be >= 0")
    if not 0 <= tail <= 0xFF:
        raise ValueError("tail must be a byte value")

    suffix = bytes([tail])
    equal = 0
    for _ in range(samples):
        key = sample_key(BLOCK_SIZE * blocks, rng)
        seed = sample_seed(rng)
        if hash_fn(key, seed, use_seed=use_seed) == hash_fn(key + suffix, seed, use_seed=use_seed):
            equal += 1
    return _rate(equal, samples)


def finalization_inversion_probe(
    hash_fn: HashFn,
    samples: int = 100,
    key_len: int = 16,
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    The finalization mix is a bijection and needs no key to undo. Peel it and
    look at the second state word: a hash that zeroed it before re-mixing shows
    it here for every input.
    """
    if samples <= 0:
        raise ValueError("samples must be > 0")
    if key_len < 0:
        raise ValueError("key_len must be >= 0")

    zero = 0
    distinct = set()
    for _ in range(samples):
        b = view_bits(hash_fn(sample_key(key_len, rng), sample_seed(rng), use_seed=use_seed), "peeled_second")
        distinct.add(b)
        if b == 0:
            zero += 1

    result = _rate(zero, samples)
    result["distinct_second_words"] = len(distinct)
    result["effective_bits_upper_bound"] = 2 * WORD_BITS if zero < samples else WORD_BITS
    return result


def pretty_print_probe(name: str, probe: str, result: Dict[str, Any]) -> None:
    print(f"  {probe:<28s} {name:<16s} equal={result['equal']:4d}/{result['samples']}  rate={result['rate']:.3f}")


def run_structural_probes(
    hash_fn: HashFn,
    name: str,
    *,
    heavy: bool = False,
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Dict[str, Any]]:
    samples = 100 if not heavy else 2000
    results = {
        "block_swap": block_swap_probe(hash_fn, samples, use_seed=use_seed, rng=rng),
        "trailing_0x00": trailing_byte_probe(hash_fn, 0x00, samples, use_seed=use_seed, rng=rng),
        "trailing_0x01": trailing_byte_probe(hash_fn, 0x01, samples, use_seed=use_seed, rng=rng),
        "peeled_second_is_zero": finalization_inversion_probe(hash_fn, samples, use_seed=use_seed, rng=rng),
    }

    print(f"\n=== Structural probes ({name}) ===")
    for probe, r in results.items():
        pretty_print_probe(name, probe, r)

    # single-bit key delta seen through the peeled view
    diff = delta_experiment(
        hash_fn,
        num_samples=samples,
        delta=make_single_bit_delta(BLOCK_SIZE, 0),
        view="peeled",
        use_seed=use_seed,
        rng=rng,
    )
    pretty_print_diff_result(f"{name}, key bit 0", diff)
    results["delta_bit0_peeled"] = diff
    return results
