import sys
from typing import List, Optional

from goodhart_hash.distinguishers import run_structural_probes
from goodhart_hash.hashes import HASH_FUNCTIONS, VARIANTS, get_variant
from goodhart_hash.smell import StatsSmellSuite

USAGE = "usage: python -m goodhart_hash [--heavy] [--structural] [--no-seed] [--variant=1..6] [--key-len=N]"


def _int_option(argv: List[str], name: str, default: Optional[int]) -> Optional[int]:
    prefix = name + "="
    for arg in argv:
        if arg.startswith(prefix):
            return int(arg[len(prefix):])
    return default


def main(argv: Optional[List[str]] = None) -> None:
    # CLI:
    # - 默认：六个变体都只跑统计/气味测试（StatsSmellSuite）
    # - --structural：额外跑结构探针和差分实验
    # - --variant=N 只测一个变体；--key-len=N 改输入长度；--no-seed 关闭 seed
    argv = sys.argv[1:] if argv is None else argv
    heavy = ("--heavy" in argv)
    structural = ("--structural" in argv)
    use_seed = ("--no-seed" not in argv)
    key_len = _int_option(argv, "--key-len", 16)
    only = _int_option(argv, "--variant", None)
    if key_len <= 0:
        raise ValueError("--key-len must be > 0")

    variants = VARIANTS if only is None else (get_variant(only),)
    for v in variants:
        print("\n" + "=" * 60)
        print(f"{v.name}: block_rounds={v.block_rounds}  fold_length={v.fold_length}  "
              f"collapse={v.collapse}  use_seed={use_seed}")
        print("=" * 60)

        hash_fn = HASH_FUNCTIONS[v.name]
        StatsSmellSuite(hash_fn, v.name, key_len=key_len, use_seed=use_seed).run(heavy=heavy)

        # --- optional: exact structure (kept outside the stats suite) ---
        if structural:
            run_structural_probes(hash_fn, v.name, heavy=heavy, use_seed=use_seed)


def cli(argv: Optional[List[str]] = None) -> None:
    try:
        main(argv)
    except ValueError as e:
        raise SystemExit(f"{USAGE}\nerror: {e}") from None


if __name__ == "__main__":
    cli()
