from __future__ import annotations

import math
import numbers
from dataclasses import MISSING, asdict, dataclass, field, fields, replace
from functools import partial
from typing import Callable, Optional, Sequence

import numpy as np

from . import config


@dataclass(frozen=True)
class Scenario:
    """
    One fully specified simulation run.

    Kinetic parameters follow the usual Lotka-Volterra naming:
    growth_rate = alpha, predation_rate = beta, death_rate = delta,
    conversion_rate = gamma, carrying_capacity = K.
    """

    prey0: float
    predator0: float
    tend: float
    growth_rate: float
    predation_rate: float
    death_rate: float
    conversion_rate: float
    carrying_capacity: float = config.CARRYING_CAPACITY
    dt: float = config.DT

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
                raise ValueError(f"{f.name} must be a real number, got {value!r}")
            value = float(value)
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
            object.__setattr__(self, f.name, value)
        if self.tend < 0:
            raise ValueError("tend must be >= 0")
        if self.dt <= 0:
            raise ValueError("dt must be > 0")
        if self.carrying_capacity <= 0:
            raise ValueError("carrying_capacity must be > 0")

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, d: dict) -> "Scenario":
        """Build a scenario from a flat mapping, rejecting unknown or missing keys."""
        known = set(cls.field_names())
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown scenario parameter(s): {unknown}")
        required = [f.name for f in fields(cls) if f.default is MISSING]
        missing = [k for k in required if k not in d]
        if missing:
            raise ValueError(f"Missing scenario parameter(s): {missing}")
        return cls(**d)

    def as_dict(self) -> dict[str, float]:
        return asdict(self)

    def with_overrides(self, **overrides: float) -> "Scenario":
        unknown = sorted(set(overrides) - set(self.field_names()))
        if unknown:
            raise ValueError(f"Unknown scenario parameter(s): {unknown}")
        return replace(self, **overrides)

    @property
    def initial_state(self) -> np.ndarray:
        return np.array([self.prey0, self.predator0], dtype=np.float64)

    @property
    def kinetic_params(self) -> tuple[float, float, float, float]:
        return (self.growth_rate, self.predation_rate, self.death_rate, self.conversion_rate)


@dataclass(frozen=True)
class Trajectory:
    """Sampled solution: t has shape (n,), u has shape (2, n) (one column per sample)."""

    t: np.ndarray
    u: np.ndarray = field(repr=False)

    @property
    def prey(self) -> np.ndarray:
        return self.u[0]

    @property
    def predator(self) -> np.ndarray:
        return self.u[1]

    def __len__(self) -> int:
        return int(self.t.shape[0])


@dataclass(frozen=True)
class TrajectoryDiagnostics:
    """Postcondition checks for a single trajectory."""

    n_samples: int
    final_prey: float
    final_predator: float
    min_prey: float  # NaN if any prey sample is NaN
    min_predator: float
    all_finite: bool
    nonnegative: bool


def preypred(
    u: Sequence[float],
    p: Sequence[float],
    t: float,
    *,
    carrying_capacity: float = config.CARRYING_CAPACITY,
) -> np.ndarray:
    """
    Logistic-limited Lotka-Volterra right-hand side.

        d(prey)/dt     = alpha * prey * (1 - prey / K) - beta * prey * predator
        d(predator)/dt = -delta * predator + gamma * prey * predator

    `p` is (alpha, beta, delta, gamma). `t` is unused (autonomous system) but
    kept so the integrator can call every right-hand side the same way.
    Returns a new array; `u` is never modified.
    """
    prey, predator = u[0], u[1]
    alpha, beta, delta, gamma = p
    return np.array(
        [
            alpha * prey * (1.0 - prey / carrying_capacity) - beta * prey * predator,
            -delta * predator + gamma * prey * predator,
        ],
        dtype=np.float64,
    )


def _time_grid(t0: float, t1: float, dt: float) -> np.ndarray:
    span = t1 - t0
    if span == 0.0:
        return np.array([t0], dtype=np.float64)
    n = span / dt
    n_round = round(n)
    if abs(n - n_round) <= 1e-9 * max(1.0, n):
        n_steps = int(n_round)
    else:
        n_steps = int(math.ceil(n))
    # a non-zero span always keeps both endpoints
    n_steps = max(1, n_steps)
    t = t0 + dt * np.arange(n_steps + 1, dtype=np.float64)
    t = np.minimum(t, t1)
    t[-1] = t1
    return t


def integrate_rk4(
    rhs: Callable[[np.ndarray, Sequence[float], float], np.ndarray],
    u0: Sequence[float],
    tspan: tuple[float, float],
    p: Sequence[float],
    dt: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Classic fixed-step 4th-order Runge-Kutta.

    Returns (t, u) with t of shape (n,) and u of shape (len(u0), n). The first
    column is u0 at tspan[0]; the last step is shortened so the final sample
    lands exactly on tspan[1]. Overflow and NaN are not trapped: they are
    carried through as ordinary values.
    """
    t0, t1 = float(tspan[0]), float(tspan[1])
    if t1 < t0:
        raise ValueError("tspan must satisfy tspan[0] <= tspan[1]")
    if dt <= 0:
        raise ValueError("dt must be > 0")

    t = _time_grid(t0, t1, float(dt))
    y = np.asarray(u0, dtype=np.float64).copy()
    u = np.empty((y.shape[0], t.shape[0]), dtype=np.float64)
    u[:, 0] = y

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for i in range(t.shape[0] - 1):
            ti = t[i]
            h = t[i + 1] - ti
            k1 = rhs(y, p, ti)
            k2 = rhs(y + 0.5 * h * k1, p, ti + 0.5 * h)
            k3 = rhs(y + 0.5 * h * k2, p, ti + 0.5 * h)
            k4 = rhs(y + h * k3, p, ti + h)
            y = y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
            u[:, i + 1] = y

    return t, u


def simulate(scenario: Scenario) -> Trajectory:
    """Integrate one scenario over [0, tend]."""
    rhs = partial(preypred, carrying_capacity=scenario.carrying_capacity)
    t, u = integrate_rk4(
        rhs,
        scenario.initial_state,
        (0.0, scenario.tend),
        scenario.kinetic_params,
        scenario.dt,
    )
    return Trajectory(t=t, u=u)


def trajectory_diagnostics(
    traj: Trajectory,
    *,
    warn_hook: Optional[Callable[[str], None]] = None,
    context: str = "",
) -> TrajectoryDiagnostics:
    """
    Data-quality checks on a finished trajectory.

    Negative or non-finite populations are reported via warn_hook (if
    provided); they are never raised.
    """
    u = traj.u
    all_finite = bool(np.all(np.isfinite(u)))
    with np.errstate(invalid="ignore"):
        nonnegative = not bool(np.any(u < 0.0))

    diag = TrajectoryDiagnostics(
        n_samples=len(traj),
        final_prey=float(u[0, -1]),
        final_predator=float(u[1, -1]),
        min_prey=float(np.min(u[0])),
        min_predator=float(np.min(u[1])),
        all_finite=all_finite,
        nonnegative=nonnegative,
    )

    if warn_hook is not None:
        report_diagnostics(diag, warn_hook, context=context)
    return diag


def report_diagnostics(
    diag: TrajectoryDiagnostics,
    warn_hook: Callable[[str], None],
    *,
    context: str = "",
) -> int:
    """Emit one warning per failed postcondition; returns the number emitted."""
    suffix = f" [{context}]" if context else ""
    n = 0
    if not diag.all_finite:
        warn_hook("non-finite population values in trajectory" + suffix)
        n += 1
    if not diag.nonnegative:
        warn_hook(
            "negative population values in trajectory"
            + suffix
            + f" (min_prey={diag.min_prey:.6g}, min_predator={diag.min_predator:.6g})"
        )
        n += 1
    return n
