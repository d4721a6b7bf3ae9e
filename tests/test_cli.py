"""
Tests for the command-line entry points and figure generation.
"""

import argparse

import pytest

from predprey_sweep import inspect_results, run_experiments
from predprey_sweep.experiments import run_sweep
from predprey_sweep.io_utils import list_artifacts, sims_dir
from predprey_sweep.viz_utils import generate_sweep_figure


class TestParseArgs:

    def test_override(self):
        assert run_experiments.parse_override("growth_rate=1.3") == ("growth_rate", 1.3)

    @pytest.mark.parametrize("text", ["growth_rate", "=1.0", "growth_rate=fast"])
    def test_bad_override(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            run_experiments.parse_override(text)

    def test_defaults(self):
        args = run_experiments.parse_args([])
        assert args.mode == "full"
        assert args.only == "all"
        assert args.workers == 1
        assert args.overrides == []

    def test_repeated_set(self):
        args = run_experiments.parse_args(["--set", "prey0=12", "--set", "death_rate=0.5"])
        assert dict(args.overrides) == {"prey0": 12.0, "death_rate": 0.5}

    def test_bad_set_exits(self):
        with pytest.raises(SystemExit):
            run_experiments.parse_args(["--set", "prey0"])


class TestMain:

    def test_quick_sweep(self, tmp_path):
        run_experiments.main(["--mode", "quick", "--only", "sweep", "--no-figures", "--data-dir", str(tmp_path)])
        names = list_artifacts(sims_dir(tmp_path, mode="quick"))
        assert len(names) == 4
        assert (tmp_path / "sweep_index_quick.csv").exists()

    def test_quick_demo_with_figure(self, tmp_path):
        run_experiments.main(
            ["--mode", "quick", "--only", "demo", "--set", "growth_rate=1.2", "--data-dir", str(tmp_path)]
        )
        assert (tmp_path / "figures" / "demo_quick.png").exists()
        assert list_artifacts(sims_dir(tmp_path, mode="quick")) == []


class TestInspect:

    def test_list_and_load(self, tmp_path, small_sweep, capsys):
        run_sweep(small_sweep, out_dir=sims_dir(tmp_path), progress=False)
        inspect_results.main(["--data-dir", str(tmp_path)])
        out = capsys.readouterr().out
        assert "6 artifact(s)" in out
        assert "[LOAD]" in out
        assert "u: array shape=(2, 11)" in out

    def test_table(self, tmp_path, small_sweep, capsys):
        run_sweep(small_sweep, out_dir=sims_dir(tmp_path), progress=False)
        inspect_results.main(["--data-dir", str(tmp_path), "--table"])
        out = capsys.readouterr().out
        assert "conversion_rate" in out

    def test_missing_artifact(self, tmp_path, small_sweep):
        run_sweep(small_sweep, out_dir=sims_dir(tmp_path), progress=False)
        with pytest.raises(FileNotFoundError):
            inspect_results.main(["--data-dir", str(tmp_path), "nope.npz"])

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            inspect_results.main(["--data-dir", str(tmp_path)])


class TestFigures:

    def test_sweep_figure(self, tmp_path, small_sweep):
        out_dir = sims_dir(tmp_path)
        run_sweep(small_sweep, out_dir=out_dir, progress=False)
        path = generate_sweep_figure(out_dir, tmp_path / "figures" / "overview.png")
        assert path is not None and path.exists()

    def test_empty_directory(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert generate_sweep_figure(tmp_path / "empty", tmp_path / "x.png") is None
        assert not (tmp_path / "x.png").exists()
