"""
Goodhart hash quick red-flag tests
- Avalanche (bit-flip) stats
- Output bit bias (max deviation)
- Collision sanity (should be none at this scale)
- Jacobian span-rank of single-bit key flips over GF(2)
- Empirical entropy of one output word

This is NOT a proof. It's a structural smell test, and the whole point of the
Goodhart variants is that every one of them passes it on the plain "full"
view. Run the same tests on a "peeled" view to see what they hide.
"""

from collections import Counter
from typing import Any, Callable, Dict, List, Optional
import math
import random

from goodhart_hash.views import (
    flip_bit,
    gf2_rank,
    popcnt,
    sample_bit,
    sample_key,
    sample_seed,
    summarize,
    view_bits,
    view_width,
)


HashFn = Callable[..., bytes]


def _digest(hash_fn: HashFn, key: bytes, seed: int, use_seed: bool) -> bytes:
    return hash_fn(key, seed, use_seed=use_seed)

def _check_counts(**counts: int) -> None:
    for name, value in counts.items():
        if value <= 0:
            raise ValueError(f"{name} must be > 0")


# ====== Test 1: Avalanche (bit flip) ======
def avalanche_test(
    hash_fn: HashFn,
    key_len: int = 16,
    samples: int = 1000,
    view: str = "full",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Flip ONE random key bit, measure the Hamming distance of the viewed bits.
    A healthy hash sits near width / 2.
    """
    _check_counts(key_len=key_len, samples=samples)
    width = view_width(view)

    dists = []
    for _t in range(samples):
        key = sample_key(key_len, rng)
        seed = sample_seed(rng)
        out0 = view_bits(_digest(hash_fn, key, seed, use_seed), view)

        bit = sample_bit(8 * key_len, rng)
        out1 = view_bits(_digest(hash_fn, flip_bit(key, bit), seed, use_seed), view)

        dists.append(popcnt(out0 ^ out1))

    result: Dict[str, Any] = {"view": view, "width": width, "key_len": key_len, "samples": samples}
    result.update(summarize(dists))
    result["avg_fraction"] = result["avg"] / width
    return result


# ====== Test 2: Output bit bias ======
def bit_bias_test(
    hash_fn: HashFn,
    key_len: int = 16,
    samples: int = 2000,
    view: str = "full",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    _check_counts(key_len=key_len, samples=samples)
    width = view_width(view)
    ones = [0] * width

    for _t in range(samples):
        y = view_bits(_digest(hash_fn, sample_key(key_len, rng), sample_seed(rng), use_seed), view)
        for i in range(width):
            ones[i] += (y >> i) & 1

    # worst bit globally, plus a z-score: std = sqrt(0.25/N)
    p = [c / samples for c in ones]
    bias = [abs(pi - 0.5) for pi in p]
    worst_bit = max(range(width), key=lambda i: bias[i])
    std = math.sqrt(0.25 / samples)
    return {
        "view": view,
        "width": width,
        "samples": samples,
        "worst_bit": worst_bit,
        "worst_p1": p[worst_bit],
        "worst_bias": bias[worst_bit],
        "worst_z": (p[worst_bit] - 0.5) / std,
        "p": p,
    }


# ====== Test 3: Collision sanity ======
def collision_sanity(
    hash_fn: HashFn,
    key_len: int = 16,
    seed_samples: int = 5,
    outputs_per_seed: int = 2000,
    view: str = "full",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Hash distinct random keys under a fixed seed and count repeated outputs.
    In 128 bits at this scale any collision is a bug or severe structure.
    """
    _check_counts(key_len=key_len, seed_samples=seed_samples, outputs_per_seed=outputs_per_seed)
    if outputs_per_seed > 256 ** key_len:
        raise ValueError(f"cannot draw {outputs_per_seed} distinct keys of length {key_len}")

    per_seed = []
    for _k in range(seed_samples):
        seed = sample_seed(rng)
        keys = set()
        while len(keys) < outputs_per_seed:
            keys.add(sample_key(key_len, rng))

        seen = set()
        collisions = 0
        for key in keys:
            y = view_bits(_digest(hash_fn, key, seed, use_seed), view)
            if y in seen:
                collisions += 1
            else:
                seen.add(y)
        per_seed.append({"seed": seed, "collisions": collisions, "unique": len(seen)})

    return {
        "view": view,
        "outputs_per_seed": outputs_per_seed,
        "per_seed": per_seed,
        "total_collisions": sum(r["collisions"] for r in per_seed),
    }


# ====== Test 4: Jacobian span-rank (XOR-derivative) ======
def span_rank_test(
    hash_fn: HashFn,
    key_len: int = 16,
    points: int = 5,
    view: str = "full",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Rank of span{ f(z xor e_i) xor f(z) } over GF(2) for every single-bit
    flip e_i of the key. An output word that does not depend on the key caps
    the rank at the width of the words that do.
    """
    _check_counts(key_len=key_len, points=points)
    width = view_width(view)

    ranks = []
    for _p in range(points):
        key = sample_key(key_len, rng)
        seed = sample_seed(rng)
        base = view_bits(_digest(hash_fn, key, seed, use_seed), view)

        vecs = []
        for bit in range(8 * key_len):
            y = view_bits(_digest(hash_fn, flip_bit(key, bit), seed, use_seed), view)
            vecs.append(y ^ base)
        ranks.append(gf2_rank(vecs))

    result: Dict[str, Any] = {
        "view": view,
        "width": width,
        "flips": 8 * key_len,
        "points": points,
        "max_possible": min(width, 8 * key_len),
    }
    result.update(summarize(ranks))
    return result


# ====== Test 5: Word entropy ======
def word_entropy_test(
    hash_fn: HashFn,
    key_len: int = 16,
    samples: int = 1000,
    view: str = "second",
    use_seed: bool = True,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Plug-in (Shannon) entropy of the viewed bits over distinct random keys.
    With all values distinct this is log2(samples), the most N samples can show.
    """
    _check_counts(key_len=key_len, samples=samples)
    width = view_width(view)

    counts: Counter = Counter()
    for _t in range(samples):
        counts[view_bits(_digest(hash_fn, sample_key(key_len, rng), sample_seed(rng), use_seed), view)] += 1

    entropy = 0.0
    for c in counts.values():
        q = c / samples
        entropy -= q * math.log2(q)

    return {
        "view": view,
        "width": width,
        "samples": samples,
        "distinct": len(counts),
        "entropy_bits": entropy,
        "ceiling_bits": math.log2(samples),
        "most_common": counts.most_common(3),
    }


# ====== Pretty printing ======
def pretty_print_avalanche(name: str, r: Dict[str, Any]) -> None:
    print(f"\n=== Avalanche test ({name}, view={r['view']}) ===")
    print(f"width={r['width']}  key_len={r['key_len']}  samples={r['samples']}")
    print(f"avg_hd={r['avg']:.2f} ({r['avg_fraction']:.3f})  p10={r['p10']}  p50={r['p50']}  "
          f"p90={r['p90']}  min={r['min']}  max={r['max']}")

def pretty_print_bit_bias(name: str, r: Dict[str, Any]) -> None:
    print(f"\n=== Bit bias test ({name}, view={r['view']}) ===")
    print(f"total_outputs={r['samples']}")
    print(f"worst_bit={r['worst_bit']}  p1={r['worst_p1']:.6f}  bias={r['worst_bias']:.6f}  z={r['worst_z']:.2f}")

def pretty_print_collision(name: str, r: Dict[str, Any]) -> None:
    print(f"\n=== Collision sanity ({name}, view={r['view']}) ===")
    for row in r["per_seed"]:
        print(f"seed={row['seed']:#010x}  collisions={row['collisions']}  "
              f"unique={row['unique']} / {r['outputs_per_seed']}")

def pretty_print_span_rank(name: str, r: Dict[str, Any]) -> None:
    print(f"\n=== All-single-bit span rank ({name}, view={r['view']}) ===")
    print(f"flips={r['flips']}  width={r['width']}  points={r['points']}  max_possible={r['max_possible']}")
    print(f"avg={r['avg']:.2f}  p50={r['p50']}  min={r['min']}  max={r['max']}")

def pretty_print_entropy(name: str, r: Dict[str, Any]) -> None:
    print(f"\n=== Word entropy ({name}, view={r['view']}) ===")
    print(f"samples={r['samples']}  distinct={r['distinct']}")
    print(f"entropy={r['entropy_bits']:.2f} bits  (ceiling for this sample size {r['ceiling_bits']:.2f})")


class StatsSmellSuite:
    """
    The statistics only; differential and structural distinguishers live in
    goodhart_hash.distinguishers and are run explicitly from the CLI.

    Each check runs on the plain view (what a test battery sees) and, where it
    is informative, on the peeled view (what the structure actually is).
    """

    def __init__(
        self,
        hash_fn: HashFn,
        name: str,
        *,
        key_len: int = 16,
        use_seed: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.hash_fn = hash_fn
        self.name = name
        self.key_len = key_len
        self.use_seed = use_seed
        self.rng = rng

    def _kw(self) -> Dict[str, Any]:
        return {"key_len": self.key_len, "use_seed": self.use_seed, "rng": self.rng}

    def run_avalanche(self, *, heavy: bool) -> List[Dict[str, Any]]:
        results = []
        for view in ("full", "second", "peeled", "peeled_second"):
            r = avalanche_test(self.hash_fn, samples=1000 if not heavy else 10_000, view=view, **self._kw())
            pretty_print_avalanche(self.name, r)
            results.append(r)
        return results

    def run_bit_bias(self, *, heavy: bool) -> Dict[str, Any]:
        r = bit_bias_test(self.hash_fn, samples=2000 if not heavy else 50_000, **self._kw())
        pretty_print_bit_bias(self.name, r)
        return r

    def run_collision(self, *, heavy: bool) -> Dict[str, Any]:
        # short keys have fewer distinct values than the budget
        budget = 2000 if not heavy else 20_000
        r = collision_sanity(
            self.hash_fn,
            seed_samples=5 if not heavy else 10,
            outputs_per_seed=min(budget, 256 ** self.key_len),
            **self._kw(),
        )
        pretty_print_collision(self.name, r)
        return r

    def run_span_rank(self, *, heavy: bool) -> List[Dict[str, Any]]:
        results = []
        for view in ("full", "peeled"):
            r = span_rank_test(self.hash_fn, points=2 if not heavy else 10, view=view, **self._kw())
            pretty_print_span_rank(self.name, r)
            results.append(r)
        return results

    def run_word_entropy(self, *, heavy: bool) -> List[Dict[str, Any]]:
        results = []
        for view in ("second", "peeled_second"):
            r = word_entropy_test(self.hash_fn, samples=1000 if not heavy else 20_000, view=view, **self._kw())
            pretty_print_entropy(self.name, r)
            results.append(r)
        return results

    def run(self, *, heavy: bool) -> None:
        self.run_avalanche(heavy=heavy)
        self.run_bit_bias(heavy=heavy)
        self.run_collision(heavy=heavy)
        self.run_span_rank(heavy=heavy)
        self.run_word_entropy(heavy=heavy)
