from __future__ import annotations

"""
Sanity-check / validation script.

This script intentionally does NOT write into the data/ directory.
It evaluates the right-hand side at a reference point, checks the interior
equilibrium, and measures the empirical RK4 convergence order on the
baseline scenario.
"""

import math

import numpy as np

from . import config
from .experiments import baseline_scenario
from .model import preypred, simulate, trajectory_diagnostics


def main() -> None:
    p = (config.GROWTH_RATE, config.PREDATION_RATE, config.DEATH_RATE, config.CONVERSION_RATE)
    K = config.CARRYING_CAPACITY

    # ---- Reference derivative
    du = preypred(np.array([10.0, 10.0]), p, 0.0, carrying_capacity=K)
    print("[VALIDATION] derivative at (prey, predator) = (10, 10)")
    print(f"d(prey)/dt={du[0]:.6g} (expected -29.11), d(predator)/dt={du[1]:.6g} (expected 6)")
    print("")

    # ---- Interior equilibrium: prey* = delta/gamma, predator* = alpha/beta * (1 - prey*/K)
    alpha, beta, delta, gamma = p
    prey_eq = delta / gamma
    pred_eq = alpha / beta * (1.0 - prey_eq / K)
    du_eq = preypred(np.array([prey_eq, pred_eq]), p, 0.0, carrying_capacity=K)
    print("[VALIDATION] interior equilibrium")
    print(f"prey*={prey_eq:.6g}, predator*={pred_eq:.6g}, |f(u*)|={float(np.max(np.abs(du_eq))):.3g}")
    print("")

    # ---- Zero-length span
    zero = simulate(baseline_scenario(tend=0.0))
    print(f"[VALIDATION] zero span: n_samples={len(zero)}, u0={zero.u[:, 0].tolist()}")
    print("")

    # ---- Convergence order (reference at dt/8)
    tend = 10.0
    dts = [0.08, 0.04, 0.02]
    ref = simulate(baseline_scenario(dt=dts[-1] / 8.0, tend=tend)).u[:, -1]
    errs = []
    for dt in dts:
        traj = simulate(baseline_scenario(dt=dt, tend=tend))
        diag = trajectory_diagnostics(traj, warn_hook=lambda msg: print(f"[VALIDATION][WARN] {msg}"))
        err = float(np.max(np.abs(traj.u[:, -1] - ref)))
        errs.append(err)
        print(f"dt={dt}: n_samples={diag.n_samples} final=({diag.final_prey:.8g}, {diag.final_predator:.8g}) err={err:.3g}")
    for (dt1, e1), (dt2, e2) in zip(zip(dts, errs), zip(dts[1:], errs[1:])):
        if e1 > 0 and e2 > 0:
            print(f"observed order {dt1}->{dt2}: {math.log(e1 / e2) / math.log(dt1 / dt2):.3g} (expected ~4)")
    print("")

    # ---- Baseline run
    diag = trajectory_diagnostics(
        simulate(baseline_scenario()), warn_hook=lambda msg: print(f"[VALIDATION][WARN] {msg}")
    )
    print(f"[VALIDATION] baseline: {diag}")
    print("")
    print("[VALIDATION COMPLETE] Model behaviour consistent with the stated equations.")


if __name__ == "__main__":
    main()
