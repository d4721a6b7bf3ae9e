from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .experiments import baseline_scenario, run_demo, run_sweep
from .io_utils import data_root, ensure_data_layout, get_logger, index_path, sims_dir


def parse_override(text: str) -> tuple[str, float]:
    """Parse KEY=VALUE into (key, float(value))."""
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    try:
        return key, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"value for {key!r} is not a number: {value!r}") from None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run predator-prey sweep experiments.")
    p.add_argument(
        "--mode",
        choices=["full", "quick"],
        default="full",
        help="full: ALLPARAMS at DT; quick: ALLPARAMS_QUICK writing _quick outputs",
    )
    p.add_argument(
        "--only",
        choices=["sweep", "demo", "all"],
        default="all",
        help="Run only the sweep, only the constant-parameter demo, or both.",
    )
    p.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Root for sims/, figures/ and logs (default: package data/ directory).",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for the sweep (1 = sequential).",
    )
    p.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        type=parse_override,
        action="append",
        default=[],
        help="Scalar override for the demo scenario (repeatable), e.g. --set growth_rate=1.3",
    )
    p.add_argument("--no-figures", action="store_true", help="Skip figure generation.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    mode = args.mode
    only = args.only
    data_dir = args.data_dir if args.data_dir is not None else data_root()

    ensure_data_layout(data_dir, mode=mode)
    logger = get_logger(mode=mode, data_dir=data_dir)

    if mode == "quick":
        allparams = config.ALLPARAMS_QUICK
        base = baseline_scenario(dt=config.DT_QUICK, tend=config.TEND_QUICK)
    else:
        allparams = config.ALLPARAMS
        base = baseline_scenario()

    logger.info(f"RUN START mode={mode} only={only} data_dir={data_dir}")

    warn = logger.warning
    info = logger.info
    figures = Path(data_dir) / "figures"
    suffix = "" if mode == "full" else f"_{mode}"

    if only in ("all", "demo"):
        run_demo(
            dict(args.overrides),
            base=base,
            figure_path=None if args.no_figures else figures / f"demo{suffix}.png",
            logger_info=info,
            logger_warn=warn,
        )

    if only in ("all", "sweep"):
        out_dir = sims_dir(data_dir, mode=mode)
        run_sweep(
            allparams,
            out_dir=out_dir,
            index_csv=index_path(data_dir, mode=mode),
            workers=args.workers,
            script="run_experiments.py",
            logger_info=info,
            logger_warn=warn,
        )
        if not args.no_figures:
            from .viz_utils import generate_sweep_figure

            generate_sweep_figure(out_dir, figures / f"sweep_overview{suffix}.png")

    logger.info("RUN END")


if __name__ == "__main__":
    main()
