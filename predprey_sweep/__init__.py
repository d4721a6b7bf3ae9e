"""
Predator-prey simulation sweep

This package integrates a logistic-limited Lotka-Volterra model with a
fixed-step RK4 scheme, expands declarative parameter sweeps into scenarios,
and persists each scenario's trajectory under a name derived from its
parameter values.
"""

from .config import (  # noqa: F401
    ALLPARAMS,
    ALLPARAMS_QUICK,
    CARRYING_CAPACITY,
    CONVERSION_RATE,
    DEATH_RATE,
    DT,
    GROWTH_RATE,
    PREDATION_RATE,
    PREDATOR0,
    PREY0,
    TEND,
)
from .model import Scenario, Trajectory, integrate_rk4, preypred, simulate  # noqa: F401
from .sweep import expand_sweep, scenarios_from_sweep  # noqa: F401
