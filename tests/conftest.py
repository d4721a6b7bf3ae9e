import matplotlib

matplotlib.use("Agg")

import pytest

from predprey_sweep.model import Scenario


@pytest.fixture
def small_scenario():
    """Baseline kinetics on a short, coarse grid so tests stay fast."""
    return Scenario(
        prey0=10.0,
        predator0=10.0,
        tend=1.0,
        growth_rate=1.1,
        predation_rate=0.4,
        death_rate=0.4,
        conversion_rate=0.1,
        carrying_capacity=1000.0,
        dt=0.1,
    )


@pytest.fixture
def small_sweep():
    """3 x 2 sweep: prey0 and conversion_rate are axes, everything else scalar."""
    return {
        "prey0": [10.0, 100.0, 1000.0],
        "predator0": 10.0,
        "tend": 1.0,
        "growth_rate": 1.1,
        "predation_rate": 0.4,
        "death_rate": 0.4,
        "conversion_rate": [0.1, 0.2],
        "dt": 0.1,
    }
