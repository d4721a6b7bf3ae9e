from __future__ import annotations

from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional

import pandas as pd
from tqdm import tqdm

from . import config
from .io_utils import (
    LOOKUP_GIT,
    PathLike,
    atomic_write_csv,
    git_commit,
    read_csv_or_empty,
    save_artifact,
    savename,
    tag_record,
    upsert_row,
)
from .model import (
    Scenario,
    Trajectory,
    TrajectoryDiagnostics,
    report_diagnostics,
    simulate,
    trajectory_diagnostics,
)
from .sweep import scenarios_from_sweep

INDEX_COLS = (
    ["artifact"]
    + Scenario.field_names()
    + [
        "n_samples",
        "final_prey",
        "final_predator",
        "min_prey",
        "min_predator",
        "all_finite",
        "nonnegative",
    ]
)


def _noop(msg: str) -> None:
    pass


def baseline_scenario(*, dt: float = config.DT, tend: float = config.TEND) -> Scenario:
    """Constant-parameter scenario used by the demo path."""
    return Scenario(
        prey0=config.PREY0,
        predator0=config.PREDATOR0,
        tend=tend,
        growth_rate=config.GROWTH_RATE,
        predation_rate=config.PREDATION_RATE,
        death_rate=config.DEATH_RATE,
        conversion_rate=config.CONVERSION_RATE,
        carrying_capacity=config.CARRYING_CAPACITY,
        dt=dt,
    )


def artifact_name(scenario: Scenario) -> str:
    return savename(scenario.as_dict())


def simulate_and_save(
    scenario: Scenario,
    out_dir: PathLike,
    *,
    script: Optional[str] = None,
    gitcommit: Any = LOOKUP_GIT,
    warn_hook: Optional[Callable[[str], None]] = None,
) -> tuple[Path, TrajectoryDiagnostics]:
    """
    Simulate one scenario and persist parameters + trajectory.

    The artifact name depends only on the scenario's parameter values, so a
    repeated scenario overwrites the earlier file.
    """
    name = artifact_name(scenario)
    traj = simulate(scenario)
    diag = trajectory_diagnostics(traj, warn_hook=warn_hook, context=name)

    record: dict[str, Any] = {**scenario.as_dict(), "t": traj.t, "u": traj.u}
    record = tag_record(record, script=script, gitcommit=gitcommit)
    path = save_artifact(record, Path(out_dir) / name)
    return path, diag


_Task = tuple[Scenario, str, Optional[str], Optional[str]]


def _simulate_and_save_task(task: _Task) -> tuple[Path, TrajectoryDiagnostics]:
    # Top-level so it pickles for ProcessPoolExecutor.
    scenario, out_dir, script, gitcommit = task
    return simulate_and_save(scenario, out_dir, script=script, gitcommit=gitcommit)


def _iter_results(
    tasks: list[_Task], workers: int
) -> Iterator[tuple[Path, TrajectoryDiagnostics]]:
    if workers <= 1:
        for task in tasks:
            yield _simulate_and_save_task(task)
        return
    with ProcessPoolExecutor(max_workers=workers) as executor:
        yield from executor.map(_simulate_and_save_task, tasks)


def duplicate_artifact_names(scenarios: list[Scenario]) -> dict[str, int]:
    counts = Counter(artifact_name(s) for s in scenarios)
    return {name: n for name, n in counts.items() if n > 1}


def run_sweep(
    allparams: Mapping[str, Any],
    *,
    out_dir: PathLike,
    index_csv: Optional[PathLike] = None,
    workers: int = 1,
    script: Optional[str] = None,
    logger_info: Callable[[str], None] = _noop,
    logger_warn: Callable[[str], None] = _noop,
    progress: bool = True,
) -> list[Path]:
    """
    Expand `allparams`, simulate every scenario and write one artifact each.

    The whole sweep definition is validated before anything runs. Returns
    artifact paths in scenario order. A write failure propagates; artifacts
    already written stay on disk.
    """
    scenarios = scenarios_from_sweep(allparams)
    out_dir = Path(out_dir)

    logger_info(f"START sweep: n_scenarios={len(scenarios)} workers={workers} out_dir={out_dir}")

    for name, n in duplicate_artifact_names(scenarios).items():
        logger_warn(f"sweep: {n} scenarios share artifact {name}; last write wins")

    index_df = pd.DataFrame()
    if index_csv is not None:
        index_csv = Path(index_csv)
        index_df = read_csv_or_empty(index_csv, expected_columns=INDEX_COLS)

    # one git lookup per sweep, shared by every artifact
    commit = git_commit()
    tasks = [(s, str(out_dir), script, commit) for s in scenarios]
    paths: list[Path] = []
    results = tqdm(
        _iter_results(tasks, workers), total=len(tasks), desc="sweep", leave=True, disable=not progress
    )
    for i, (path, diag) in enumerate(results):
        scenario = scenarios[i]
        report_diagnostics(diag, logger_warn, context=path.name)
        paths.append(path)

        if index_csv is not None:
            row = {"artifact": path.name, **scenario.as_dict(), **asdict(diag)}
            index_df = upsert_row(index_df, row, key_cols=["artifact"])
            index_df = index_df[INDEX_COLS]
            atomic_write_csv(index_df, index_csv)

    logger_info(f"END sweep: wrote {len(set(paths))} artifact(s)")
    return paths


def run_demo(
    overrides: Optional[Mapping[str, float]] = None,
    *,
    base: Optional[Scenario] = None,
    figure_path: Optional[PathLike] = None,
    logger_info: Callable[[str], None] = _noop,
    logger_warn: Callable[[str], None] = _noop,
) -> tuple[Scenario, Trajectory, TrajectoryDiagnostics]:
    """
    Constant-parameter run with optional scalar overrides (e.g. slider values).

    Nothing is persisted; the trajectory is only handed to the plotting
    collaborator when figure_path is given.
    """
    scenario = base if base is not None else baseline_scenario()
    if overrides:
        scenario = scenario.with_overrides(**overrides)

    logger_info(f"demo: {scenario}")
    traj = simulate(scenario)
    diag = trajectory_diagnostics(traj, warn_hook=logger_warn, context="demo")

    if figure_path is not None:
        from .viz_utils import save_trajectory_figure

        save_trajectory_figure(traj, figure_path, title=artifact_name(scenario).rsplit(".", 1)[0])
        logger_info(f"demo: wrote figure {figure_path}")

    logger_info(
        f"demo: n_samples={diag.n_samples} final_prey={diag.final_prey:.6g} "
        f"final_predator={diag.final_predator:.6g}"
    )
    return scenario, traj, diag
