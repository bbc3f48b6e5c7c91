# tests/test_paths.py
from joker_arena import paths


def test_relative_paths_land_in_results_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(paths.RESULTS_DIR_ENV, str(tmp_path / "out"))

    resolved = paths.resolve_results_path("scores.csv")
    assert resolved == tmp_path / "out" / "scores.csv"
    assert (tmp_path / "out").is_dir()


def test_absolute_paths_are_unchanged(tmp_path):
    target = tmp_path / "elsewhere.csv"
    assert paths.resolve_results_path(target) == target


def test_default_results_dir(monkeypatch):
    monkeypatch.delenv(paths.RESULTS_DIR_ENV, raising=False)
    assert paths.results_dir() == paths.DEFAULT_RESULTS_DIR
