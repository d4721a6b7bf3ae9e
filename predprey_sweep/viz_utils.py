"""
Visualisation utilities for predprey_sweep.

This module is intentionally *read-only* with respect to simulation
artifacts: it only reads existing .npz files (or in-memory trajectories) and
writes figure files.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .io_utils import PathLike, collect_results, list_artifacts, load_artifact
from .model import Trajectory

COLOURS = {
    "prey": "#009E73",  # green
    "predator": "#D55E00",  # orange
}

# Columns written alongside every artifact that never vary meaningfully.
_NON_PARAM_COLS = {"path", "n_samples", "gitcommit", "script", "created"}


def _try_import_seaborn() -> tuple[bool, object | None]:
    try:
        import seaborn as sns  # type: ignore

        return True, sns
    except ImportError:
        return False, None


def _apply_style() -> None:
    has_sns, sns = _try_import_seaborn()
    import matplotlib as mpl

    if has_sns:
        sns.set_theme(style="whitegrid")  # type: ignore[union-attr]

    # rcParams should override seaborn theme if seaborn is present
    mpl.rcParams.update(
        {
            "font.size": 11,
            "axes.titlesize": 11,
            "axes.labelsize": 11,
            "legend.fontsize": 10,
            "lines.linewidth": 1.5,
            "grid.linewidth": 0.6,
        }
    )


def _unpack(traj: Union[Trajectory, Mapping[str, Any]]) -> tuple[np.ndarray, np.ndarray]:
    if isinstance(traj, Trajectory):
        return traj.t, traj.u
    return np.asarray(traj["t"]), np.asarray(traj["u"])


def plot_trajectory(traj: Union[Trajectory, Mapping[str, Any]], ax=None, *, title: Optional[str] = None):
    """Draw prey and predator populations against time; returns the axes."""
    import matplotlib.pyplot as plt

    t, u = _unpack(traj)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 5))

    ax.plot(t, u[0], color=COLOURS["prey"], label="prey")
    ax.plot(t, u[1], color=COLOURS["predator"], label="predator")
    ax.set_xlabel("t")
    ax.set_ylabel("population")
    ax.grid(True, axis="y", alpha=0.20)
    ax.legend(loc="upper right", frameon=False)
    if title:
        ax.set_title(title)
    return ax


def save_trajectory_figure(
    traj: Union[Trajectory, Mapping[str, Any]],
    path: PathLike,
    *,
    title: Optional[str] = None,
) -> Path:
    import matplotlib.pyplot as plt

    _apply_style()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(8, 5))
    plot_trajectory(traj, ax, title=title)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path


def _varying_columns(df: pd.DataFrame) -> list[str]:
    cols = [c for c in df.columns if c not in _NON_PARAM_COLS]
    return [c for c in cols if df[c].nunique(dropna=False) > 1]


def generate_sweep_figure(directory: PathLike, out_path: PathLike, *, ncols: int = 3) -> Optional[Path]:
    """
    One panel per artifact in directory, titled by the swept parameters.

    Returns None (and writes nothing) if the directory holds no artifacts.
    """
    import matplotlib.pyplot as plt

    directory = Path(directory)
    names = list_artifacts(directory)
    if not names:
        print(f"[WARN] No artifacts in {directory}; skipping figure generation.")
        return None

    _apply_style()
    df = collect_results(directory)
    varying = _varying_columns(df)

    n = len(names)
    ncols = max(1, min(ncols, n))
    nrows = int(math.ceil(n / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 3.5 * nrows), squeeze=False)

    for ax, name in zip(axes.flat, names):
        rec = load_artifact(directory / name)
        label = ", ".join(f"{k}={rec[k]:.3g}" for k in varying if k in rec) or name
        plot_trajectory(rec, ax, title=label)
    for ax in list(axes.flat)[n:]:
        ax.set_axis_off()

    fig.tight_layout()
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    print(f"[FIGURE] Saved sweep overview to {out_path}")
    return out_path
