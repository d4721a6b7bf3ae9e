from __future__ import annotations

import logging
import numbers
import os
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union
from uuid import uuid4

import numpy as np
import pandas as pd

PathLike = Union[str, Path]

ARTIFACT_SUFFIX = "npz"
TRAJECTORY_KEYS = ("t", "u")
TAG_KEYS = ("gitcommit", "script", "created")


def package_root() -> Path:
    """Return the package directory (repo-relative data lives under this)."""
    return Path(__file__).resolve().parent


def data_root() -> Path:
    return package_root() / "data"


def _mode_suffix(mode: str) -> str:
    return "" if mode == "full" else f"_{mode}"


def sims_dir(data_dir: Optional[PathLike] = None, *, mode: str = "full") -> Path:
    """Two-level artifact directory: <data_dir>/sims/predprey[_<mode>]."""
    root = Path(data_dir) if data_dir is not None else data_root()
    return root / "sims" / f"predprey{_mode_suffix(mode)}"


def index_path(data_dir: Optional[PathLike] = None, *, mode: str = "full") -> Path:
    root = Path(data_dir) if data_dir is not None else data_root()
    return root / f"sweep_index{_mode_suffix(mode)}.csv"


def ensure_data_layout(data_dir: Optional[PathLike] = None, *, mode: str = "full") -> None:
    root = Path(data_dir) if data_dir is not None else data_root()
    sims_dir(root, mode=mode).mkdir(parents=True, exist_ok=True)
    (root / "figures").mkdir(parents=True, exist_ok=True)


def get_logger(*, mode: str = "full", data_dir: Optional[PathLike] = None) -> logging.Logger:
    """
    Configure and return the diagnostics logger.

    Logs to `<data_dir>/diagnostics.log` (or `_quick`) and also to stderr.
    """
    root = Path(data_dir) if data_dir is not None else data_root()
    ensure_data_layout(root, mode=mode)
    logger = logging.getLogger("predprey_sweep")
    logger.setLevel(logging.INFO)

    # Avoid duplicate handlers if called multiple times in-process.
    if getattr(logger, "_configured", False):
        return logger

    log_path = root / f"diagnostics{_mode_suffix(mode)}.log"

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(fmt)

    sh = logging.StreamHandler()
    sh.setLevel(logging.INFO)
    sh.setFormatter(fmt)

    logger.addHandler(fh)
    logger.addHandler(sh)
    logger.propagate = False
    logger._configured = True  # type: ignore[attr-defined]
    return logger


# ---------------------------------------------------------------------------
# Artifact naming
# ---------------------------------------------------------------------------


def _format_value(v: Any) -> str:
    if isinstance(v, (bool, np.bool_)):
        return str(bool(v)).lower()
    if isinstance(v, numbers.Integral):
        return str(int(v))
    if isinstance(v, numbers.Real):
        return format(float(v), ".12g")
    return str(v)


def _is_name_field(v: Any) -> bool:
    return isinstance(v, (numbers.Real, str, np.bool_))


def savename(params: Mapping[str, Any], suffix: str = ARTIFACT_SUFFIX, *, connector: str = "_") -> str:
    """
    Deterministic artifact name from scalar parameter values.

    Only scalar entries (numbers and strings) take part; arrays such as the
    trajectory and the provenance tags (gitcommit, script, created) are
    skipped, so a loaded artifact maps back to its own name. Keys are sorted
    in plain string order and each entry is rendered as `key=value`, floats
    formatted by `.12g`, e.g.

        carrying_capacity=1000_conversion_rate=0.1_..._tend=50.npz

    Identical parameter values always map to the same name.
    """
    parts = [
        f"{k}={_format_value(params[k])}"
        for k in sorted(params)
        if k not in TAG_KEYS and _is_name_field(params[k])
    ]
    if not parts:
        raise ValueError("savename needs at least one scalar parameter")
    name = connector.join(parts)
    return f"{name}.{suffix}" if suffix else name


# ---------------------------------------------------------------------------
# Provenance tags
# ---------------------------------------------------------------------------


def git_commit(cwd: Optional[Path] = None) -> Optional[str]:
    """Current HEAD (suffixed `_dirty` for uncommitted changes), or None outside a checkout."""
    cwd = cwd if cwd is not None else package_root()
    try:
        head = subprocess.run(
            ["git", "rev-parse", "HEAD"], cwd=cwd, capture_output=True, text=True, check=False
        )
    except FileNotFoundError:
        return None
    if head.returncode != 0:
        return None
    commit = head.stdout.strip()
    status = subprocess.run(
        ["git", "status", "--porcelain"], cwd=cwd, capture_output=True, text=True, check=False
    )
    if status.returncode == 0 and status.stdout.strip():
        commit += "_dirty"
    return commit


LOOKUP_GIT = object()


def tag_record(record: dict, *, script: Optional[str] = None, gitcommit: Any = LOOKUP_GIT) -> dict:
    """
    Return a copy of record with gitcommit (if available), script and created.

    Pass `gitcommit` (a string, or None for "no commit") to skip the git lookup.
    """
    out = dict(record)
    commit = git_commit() if gitcommit is LOOKUP_GIT else gitcommit
    if commit is not None:
        out["gitcommit"] = commit
    out["script"] = script if script is not None else Path(sys.argv[0]).name
    out["created"] = datetime.now(timezone.utc).isoformat()
    return out


# ---------------------------------------------------------------------------
# Artifact read/write
# ---------------------------------------------------------------------------


def save_artifact(record: Mapping[str, Any], path: PathLike) -> Path:
    """
    Atomic .npz write (temp file -> rename).

    An interrupted run never leaves a partial artifact; concurrent writers of
    the same name resolve to the last completed write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    arrays = {k: np.asarray(v) for k, v in record.items() if v is not None}
    tmp = path.with_suffix(path.suffix + f".tmp.{os.getpid()}.{uuid4().hex}")
    try:
        with open(tmp, "wb") as fh:
            np.savez(fh, **arrays)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
    return path


def load_artifact(path: PathLike) -> dict[str, Any]:
    """Load an artifact back into a flat dict (0-d entries become Python scalars)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No artifact at {path}")
    out: dict[str, Any] = {}
    with np.load(path, allow_pickle=False) as data:
        for k in data.files:
            arr = data[k]
            out[k] = arr.item() if arr.ndim == 0 else arr
    return out


def list_artifacts(directory: PathLike) -> list[str]:
    """Sorted artifact file names in directory."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"No artifact directory at {directory}")
    return sorted(p.name for p in directory.glob(f"*.{ARTIFACT_SUFFIX}") if p.is_file())


def collect_results(directory: PathLike) -> pd.DataFrame:
    """One row per artifact: scalar fields plus `path` and `n_samples`."""
    directory = Path(directory)
    rows = []
    for name in list_artifacts(directory):
        rec = load_artifact(directory / name)
        row = {k: v for k, v in rec.items() if k not in TRAJECTORY_KEYS}
        row["n_samples"] = int(np.asarray(rec["t"]).shape[0]) if "t" in rec else 0
        row["path"] = str(directory / name)
        rows.append(row)
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Sweep index CSV
# ---------------------------------------------------------------------------


def atomic_write_csv(df: pd.DataFrame, path: Path) -> None:
    """Atomic CSV write (temp file -> rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + f".tmp.{os.getpid()}.{uuid4().hex}")
    df.to_csv(tmp, index=False)
    os.replace(tmp, path)


def read_csv_or_empty(path: Path, *, expected_columns: Optional[Iterable[str]] = None) -> pd.DataFrame:
    if not path.exists():
        if expected_columns is None:
            return pd.DataFrame()
        return pd.DataFrame(columns=list(expected_columns))
    df = pd.read_csv(path)
    if expected_columns is not None:
        for c in expected_columns:
            if c not in df.columns:
                raise ValueError(f"Missing required column '{c}' in {path}")
    return df


def upsert_row(df: pd.DataFrame, row: dict, *, key_cols: list[str]) -> pd.DataFrame:
    """
    Insert/replace a row in a DataFrame using a composite key.
    Returns a new DataFrame (does not mutate in-place).
    """
    if df.empty:
        return pd.DataFrame([row])

    mask = pd.Series(True, index=df.index)
    for k in key_cols:
        mask &= df[k] == row[k]

    if mask.any():
        df2 = df.loc[~mask]
        return pd.concat([df2, pd.DataFrame([row])], ignore_index=True)
    return pd.concat([df, pd.DataFrame([row])], ignore_index=True)
