"""
Scenario expansion for parameter sweeps.

A sweep definition maps parameter names to either a scalar (held constant)
or a sequence of scalars (an axis). Expansion forms the cartesian product of
all axes in definition order, first axis outermost.
"""

from __future__ import annotations

import itertools
import numbers
from collections.abc import Sequence
from typing import Any, Mapping

import numpy as np

from .model import Scenario


def _is_number(x: Any) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, (bool, np.bool_))


def _is_axis(x: Any) -> bool:
    if isinstance(x, np.ndarray):
        return True
    return isinstance(x, Sequence) and not isinstance(x, (str, bytes))


def _axis_values(name: str, value: Any) -> list:
    if isinstance(value, np.ndarray) and value.ndim != 1:
        raise ValueError(f"Sweep axis '{name}' must be one-dimensional, got shape {value.shape}")
    values = list(value)
    if not values:
        raise ValueError(f"Sweep axis '{name}' is empty")
    for v in values:
        if not _is_number(v):
            raise ValueError(f"Sweep axis '{name}' has non-numeric value {v!r}")
    return values


def expand_sweep(spec: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Expand a sweep definition into one dict per scenario.

    Raises ValueError for non-numeric values or empty axes, before anything
    is simulated. An all-scalar definition yields exactly one scenario.
    """
    axes: dict[str, list] = {}
    for name, value in spec.items():
        if _is_axis(value):
            axes[name] = _axis_values(name, value)
        elif not _is_number(value):
            raise ValueError(f"Sweep parameter '{name}' has non-numeric value {value!r}")

    out = []
    for combo in itertools.product(*axes.values()):
        chosen = dict(zip(axes.keys(), combo))
        out.append({name: chosen.get(name, value) for name, value in spec.items()})
    return out


def scenarios_from_sweep(spec: Mapping[str, Any]) -> list[Scenario]:
    """Expand and validate every scenario up front."""
    return [Scenario.from_dict(d) for d in expand_sweep(spec)]


def n_scenarios(spec: Mapping[str, Any]) -> int:
    n = 1
    for name, value in spec.items():
        if _is_axis(value):
            n *= len(_axis_values(name, value))
    return n
