"""
List and load persisted sweep artifacts.

Read-only: nothing under sims/ is modified.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .io_utils import collect_results, list_artifacts, load_artifact, sims_dir


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Inspect predator-prey sweep artifacts.")
    p.add_argument("name", nargs="?", default=None, help="Artifact file name to load (default: first listed).")
    p.add_argument("--mode", choices=["full", "quick"], default="full")
    p.add_argument("--data-dir", type=Path, default=None)
    p.add_argument("--table", action="store_true", help="Print one row per artifact instead of loading one.")
    return p.parse_args(argv)


def describe(record: dict) -> list[str]:
    lines = []
    for k in sorted(record):
        v = record[k]
        if isinstance(v, np.ndarray):
            lines.append(f"{k}: array shape={v.shape} dtype={v.dtype}")
        else:
            lines.append(f"{k}: {v}")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    directory = sims_dir(args.data_dir, mode=args.mode)

    names = list_artifacts(directory)
    print(f"{len(names)} artifact(s) in {directory}")

    if args.table:
        print(collect_results(directory).drop(columns=["path"], errors="ignore").to_string(index=False))
        return

    for name in names:
        print(f"  {name}")
    if not names and args.name is None:
        return

    chosen = args.name if args.name is not None else names[0]
    print("")
    print(f"[LOAD] {chosen}")
    for line in describe(load_artifact(directory / chosen)):
        print(f"  {line}")


if __name__ == "__main__":
    main()
