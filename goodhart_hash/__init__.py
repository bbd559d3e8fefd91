from goodhart_hash.hashes import (
    BLOCK_SIZE,
    HASH_FUNCTIONS,
    USE_SEED_DEFAULT,
    VARIANTS,
    Variant,
    get_variant,
    goodhart_hash,
    goodhart_hash_1,
    goodhart_hash_2,
    goodhart_hash_3,
    goodhart_hash_4,
    goodhart_hash_5,
    goodhart_hash_6,
    hash_with_variant,
)
from goodhart_hash.mixing import ROTATIONS, mix_state, unmix_state

__all__ = [
    "BLOCK_SIZE",
    "HASH_FUNCTIONS",
    "ROTATIONS",
    "USE_SEED_DEFAULT",
    "VARIANTS",
    "Variant",
    "get_variant",
    "goodhart_hash",
    "goodhart_hash_1",
    "goodhart_hash_2",
    "goodhart_hash_3",
    "goodhart_hash_4",
    "goodhart_hash_5",
    "goodhart_hash_6",
    "hash_with_variant",
    "mix_state",
    "unmix_state",
]
