import random

import pytest

from goodhart_hash import (
    HASH_FUNCTIONS,
    USE_SEED_DEFAULT,
    VARIANTS,
    get_variant,
    goodhart_hash,
    goodhart_hash_1,
    goodhart_hash_2,
    goodhart_hash_5,
    goodhart_hash_6,
    hash_with_variant,
    mix_state,
)
from goodhart_hash.hashes import FINAL_ROUNDS, SEED_ROUNDS, _self_test


ALL_HASHES = [HASH_FUNCTIONS[v.name] for v in VARIANTS]


def _state_bytes(a, b):
    return a.to_bytes(8, "little") + b.to_bytes(8, "little")


def test_variant_table():
    assert [v.number for v in VARIANTS] == [1, 2, 3, 4, 5, 6]
    assert [v.block_rounds for v in VARIANTS] == [0, 0, 12, 4, 5, 5]
    assert [v.fold_length for v in VARIANTS] == [False, True, True, True, True, True]
    assert [v.collapse for v in VARIANTS] == [False, False, False, False, False, True]
    assert set(HASH_FUNCTIONS) == {v.name for v in VARIANTS}


def test_get_variant_lookup():
    assert get_variant(3).block_rounds == 12
    assert get_variant("goodhart_hash_6").collapse
    assert get_variant("4").number == 4
    with pytest.raises(ValueError):
        get_variant(7)
    with pytest.raises(ValueError):
        get_variant("murmur")


def test_seed_enabled_by_default():
    assert USE_SEED_DEFAULT is True
    assert goodhart_hash_5(b"abc", 99) == goodhart_hash_5(b"abc", 99, use_seed=True)


def test_self_test_passes():
    _self_test()


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_output_is_16_bytes(hash_fn):
    for length in (0, 1, 15, 16, 17, 31, 32, 33, 100):
        digest = hash_fn(bytes(i % 256 for i in range(length)), 5)
        assert isinstance(digest, bytes)
        assert len(digest) == 16


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_deterministic(hash_fn):
    rng = random.Random(1)
    for _ in range(20):
        key = bytes(rng.getrandbits(8) for _ in range(rng.randrange(64)))
        seed = rng.getrandbits(32)
        assert hash_fn(key, seed) == hash_fn(key, seed)


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_accepts_bytes_like(hash_fn):
    key = b"Hello, World!"
    assert hash_fn(bytearray(key), 3) == hash_fn(key, 3)
    assert hash_fn(memoryview(key), 3) == hash_fn(key, 3)


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_embedded_zero_bytes(hash_fn):
    assert hash_fn(b"a\x00b", 0) != hash_fn(b"ab", 0)


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_seed_sensitivity(hash_fn):
    rng = random.Random(2024)
    key = b"seed sensitivity"
    for _ in range(200):
        s1, s2 = rng.getrandbits(32), rng.getrandbits(32)
        if s1 != s2:
            assert hash_fn(key, s1) != hash_fn(key, s2)


@pytest.mark.parametrize("hash_fn", ALL_HASHES)
def test_seed_ignored_when_disabled(hash_fn):
    key = b"unseeded"
    assert hash_fn(key, 0, use_seed=False) == hash_fn(key, 0xFFFFFFFF, use_seed=False)
    assert hash_fn(key, 0, use_seed=False) != hash_fn(key, 0, use_seed=True)


@pytest.mark.parametrize("variant", VARIANTS)
@pytest.mark.parametrize("seed", [0, 1, 0xDEADBEEF])
def test_empty_input_skips_absorption(variant, seed):
    # seeding alone, then the variant's finalization, nothing absorbed
    a, b = mix_state(seed, 0, SEED_ROUNDS)
    a, b = mix_state(a, b, FINAL_ROUNDS)  # len 0 folds nothing
    if variant.collapse:
        a, b = mix_state(a, 0, 12)
    assert hash_with_variant(variant, b"", seed) == _state_bytes(a, b)


@pytest.mark.parametrize("variant", VARIANTS)
def test_empty_input_is_not_a_zero_block(variant):
    # one absorbed all-zero block would run block_rounds extra mixing rounds
    a, b = mix_state(7, 0, SEED_ROUNDS)
    a, b = mix_state(a, b, variant.block_rounds)
    a, b = mix_state(a, b, FINAL_ROUNDS)
    if variant.collapse:
        a, b = mix_state(a, 0, 12)
    spurious = _state_bytes(a, b)
    if variant.block_rounds:
        assert hash_with_variant(variant, b"", 7) != spurious
    else:
        assert hash_with_variant(variant, b"", 7) == spurious


def test_unseeded_empty_input_is_finalized_zero_state():
    a, b = mix_state(0, 0, FINAL_ROUNDS)
    assert goodhart_hash_1(b"", 1234, use_seed=False) == _state_bytes(a, b)


def test_single_block_absorption_by_hand():
    key = b"ABCDEFGHIJKLMNOP"
    a, b = mix_state(11, 0, SEED_ROUNDS)
    a ^= int.from_bytes(key[:8], "little")
    b ^= int.from_bytes(key[8:], "little")
    a, b = mix_state(a, b, 5)
    a ^= 16
    a, b = mix_state(a, b, FINAL_ROUNDS)
    assert goodhart_hash_5(key, 11) == _state_bytes(a, b)


def test_zero_padding_invisible_to_variant_1():
    for seed in (0, 1, 0xDEADBEEF):
        assert goodhart_hash_1(b"ABCDE", seed) == goodhart_hash_1(b"ABCDE" + bytes(11), seed)


@pytest.mark.parametrize("variant", VARIANTS[1:])
def test_length_fold_separates_padding(variant):
    for seed in (0, 1, 0xDEADBEEF):
        short = hash_with_variant(variant, b"ABCDE", seed)
        padded = hash_with_variant(variant, b"ABCDE" + bytes(11), seed)
        assert short != padded


def test_length_fold_shares_a_word_with_data():
    # len 17 ending in 0x10 xors the same value into word a as folding len 16
    seq = bytes(range(17))
    assert goodhart_hash_1(seq, 0) == goodhart_hash_2(seq[:16], 0)


def test_variant_6_differs_from_variant_5():
    assert goodhart_hash_6(b"collapse", 9) != goodhart_hash_5(b"collapse", 9)


def test_parameterized_matches_named():
    key = b"parameterized"
    assert goodhart_hash(key, 3, block_rounds=5, fold_length=True, collapse=True) == goodhart_hash_6(key, 3)
    assert goodhart_hash(key, 3, block_rounds=0, fold_length=False) == goodhart_hash_1(key, 3)


def test_other_round_counts():
    # not one of the six, but the shape generalizes
    key = b"x" * 40
    assert goodhart_hash(key, 0, block_rounds=1) != goodhart_hash(key, 0, block_rounds=2)


@pytest.mark.parametrize("bad_key", ["text", 123, None, [1, 2, 3]])
def test_non_bytes_key_rejected(bad_key):
    with pytest.raises(TypeError):
        goodhart_hash_5(bad_key, 0)


@pytest.mark.parametrize("bad_seed", [-1, 1 << 32])
def test_seed_out_of_range_rejected(bad_seed):
    with pytest.raises(ValueError):
        goodhart_hash_5(b"abc", bad_seed)


@pytest.mark.parametrize("bad_seed", [-1, 1 << 32])
def test_seed_range_not_checked_when_unseeded(bad_seed):
    assert goodhart_hash_1(b"x", bad_seed, use_seed=False) == goodhart_hash_1(b"x", 0, use_seed=False)


def test_negative_block_rounds_rejected():
    with pytest.raises(ValueError):
        goodhart_hash(b"abc", 0, block_rounds=-1)
