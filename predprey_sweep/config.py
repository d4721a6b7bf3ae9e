"""
Configuration for the predator-prey sweep experiments.

Only numpy/pandas/tqdm/matplotlib are assumed available in the environment.
"""

# Baseline kinetic parameters
GROWTH_RATE = 1.1  # alpha
PREDATION_RATE = 0.4  # beta
DEATH_RATE = 0.4  # delta
CONVERSION_RATE = 0.1  # gamma
CARRYING_CAPACITY = 1000.0  # K

# Initial state and time span
PREY0 = 10.0
PREDATOR0 = 10.0
TEND = 50.0

# Fixed RK4 step
DT = 0.01

# Quick mode (dev / smoke test)
DT_QUICK = 0.1
TEND_QUICK = 20.0

# Sweep definitions: sequences are expanded, scalars are held constant.
ALLPARAMS = {
    "prey0": [10.0, 100.0, 1000.0],
    "predator0": PREDATOR0,
    "tend": TEND,
    "growth_rate": GROWTH_RATE,
    "predation_rate": PREDATION_RATE,
    "death_rate": DEATH_RATE,
    "conversion_rate": [0.1, 0.2],
    "carrying_capacity": CARRYING_CAPACITY,
    "dt": DT,
}

ALLPARAMS_QUICK = {
    "prey0": [10.0, 100.0],
    "predator0": PREDATOR0,
    "tend": TEND_QUICK,
    "growth_rate": GROWTH_RATE,
    "predation_rate": PREDATION_RATE,
    "death_rate": DEATH_RATE,
    "conversion_rate": [0.1, 0.2],
    "carrying_capacity": CARRYING_CAPACITY,
    "dt": DT_QUICK,
}
