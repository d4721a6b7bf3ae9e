"""
Tests for artifact naming, persistence and read-back.
"""

import numpy as np
import pandas as pd
import pytest

from predprey_sweep.io_utils import (
    collect_results,
    index_path,
    list_artifacts,
    load_artifact,
    save_artifact,
    savename,
    sims_dir,
    tag_record,
    upsert_row,
)


class TestSavename:

    def test_sorted_and_formatted(self):
        name = savename({"b": 0.1, "a": 10.0, "c": 3})
        assert name == "a=10_b=0.1_c=3.npz"

    def test_arrays_excluded(self):
        name = savename({"a": 1.0, "t": np.arange(3.0), "u": np.zeros((2, 3)), "l": [1, 2]})
        assert name == "a=1.npz"

    def test_insertion_order_irrelevant(self):
        assert savename({"x": 1.5, "y": 2.0}) == savename({"y": 2.0, "x": 1.5})

    def test_distinct_values_distinct_names(self):
        assert savename({"x": 0.1}) != savename({"x": 0.2})

    def test_strings_and_suffix(self):
        assert savename({"model": "lv", "k": 2.5}, "csv") == "k=2.5_model=lv.csv"

    def test_provenance_tags_excluded(self):
        params = {"a": 1.0, "script": "x", "created": "2024-01-01T00:00:00+00:00", "gitcommit": "abc"}
        assert savename(params) == "a=1.npz"

    def test_loaded_artifact_maps_back_to_its_name(self, tmp_path):
        rec = tag_record({"a": 1.0, "t": np.arange(3.0)}, script="run.py", gitcommit="abc")
        path = save_artifact(rec, tmp_path / savename(rec))
        assert path.name == "a=1.npz"
        assert savename(load_artifact(path)) == path.name

    def test_no_scalars(self):
        with pytest.raises(ValueError):
            savename({"t": np.arange(3.0)})


class TestArtifacts:

    def _record(self):
        return {
            "prey0": 10.0,
            "conversion_rate": 0.1,
            "t": np.linspace(0.0, 1.0, 11),
            "u": np.vstack([np.linspace(10, 5, 11), np.linspace(10, 12, 11)]),
            "script": "test",
        }

    def test_round_trip(self, tmp_path):
        rec = self._record()
        path = save_artifact(rec, tmp_path / "a" / "b" / savename(rec))
        out = load_artifact(path)
        assert out["prey0"] == 10.0
        assert out["conversion_rate"] == 0.1
        assert isinstance(out["prey0"], float)
        assert out["script"] == "test"
        np.testing.assert_array_equal(out["t"], rec["t"])
        np.testing.assert_array_equal(out["u"], rec["u"])
        assert out["u"].shape[1] == out["t"].shape[0]

    def test_overwrite_last_write_wins(self, tmp_path):
        rec = self._record()
        path = tmp_path / "x.npz"
        save_artifact(rec, path)
        rec["script"] = "second"
        save_artifact(rec, path)
        assert load_artifact(path)["script"] == "second"
        assert list_artifacts(tmp_path) == ["x.npz"]

    def test_none_values_skipped(self, tmp_path):
        rec = self._record()
        rec["gitcommit"] = None
        out = load_artifact(save_artifact(rec, tmp_path / "x.npz"))
        assert "gitcommit" not in out

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_artifact(tmp_path / "nope.npz")

    def test_list_missing_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_artifacts(tmp_path / "nope")

    def test_list_only_artifacts(self, tmp_path):
        save_artifact(self._record(), tmp_path / "b.npz")
        save_artifact(self._record(), tmp_path / "a.npz")
        (tmp_path / "notes.txt").write_text("x")
        assert list_artifacts(tmp_path) == ["a.npz", "b.npz"]

    def test_collect_results(self, tmp_path):
        rec = self._record()
        save_artifact(rec, tmp_path / "a.npz")
        rec["prey0"] = 20.0
        save_artifact(rec, tmp_path / "b.npz")
        df = collect_results(tmp_path)
        assert len(df) == 2
        assert sorted(df["prey0"].tolist()) == [10.0, 20.0]
        assert (df["n_samples"] == 11).all()
        assert "t" not in df.columns


class TestLayoutAndTags:

    def test_sims_dir(self, tmp_path):
        assert sims_dir(tmp_path) == tmp_path / "sims" / "predprey"
        assert sims_dir(tmp_path, mode="quick") == tmp_path / "sims" / "predprey_quick"
        assert index_path(tmp_path, mode="quick") == tmp_path / "sweep_index_quick.csv"

    def test_tag_record(self):
        rec = {"a": 1.0}
        tagged = tag_record(rec, script="run.py")
        assert tagged["script"] == "run.py"
        assert "created" in tagged
        assert rec == {"a": 1.0}

    def test_tag_record_given_commit_skips_lookup(self, monkeypatch):
        def fail():
            raise AssertionError("git lookup should not run")

        monkeypatch.setattr("predprey_sweep.io_utils.git_commit", fail)
        assert tag_record({"a": 1.0}, gitcommit="abc")["gitcommit"] == "abc"
        assert "gitcommit" not in tag_record({"a": 1.0}, gitcommit=None)

    def test_tag_record_looks_up_commit_by_default(self, monkeypatch):
        monkeypatch.setattr("predprey_sweep.io_utils.git_commit", lambda: "deadbeef")
        assert tag_record({"a": 1.0})["gitcommit"] == "deadbeef"

    def test_upsert_row(self):
        df = pd.DataFrame([{"artifact": "a", "v": 1}, {"artifact": "b", "v": 2}])
        df = upsert_row(df, {"artifact": "a", "v": 3}, key_cols=["artifact"])
        assert len(df) == 2
        assert df.loc[df["artifact"] == "a", "v"].item() == 3
        df = upsert_row(df, {"artifact": "c", "v": 4}, key_cols=["artifact"])
        assert len(df) == 3
