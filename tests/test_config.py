from pathlib import Path

import pytest

from anneal.errors import InvalidInputError
from tsp.config import get_app_config, load_annealing_settings


def test_defaults_without_file():
    settings = load_annealing_settings(None)
    assert settings.initial_temperature == 100.0
    assert settings.stop_temperature == 0.05
    assert settings.max_iter is None
    assert settings.seed is None
    params = settings.to_params()
    assert params.initial_temperature == 100.0


def test_load_yaml_settings(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("seed: 7\nmax_iter: 1000\nstop_temperature: 0.5\n", encoding="utf-8")
    settings = load_annealing_settings(path)
    assert settings.seed == 7
    assert settings.to_params().max_iter == 1000
    assert settings.to_params().stop_temperature == 0.5


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_annealing_settings(path).initial_temperature == 100.0


@pytest.mark.parametrize(
    "content",
    [
        "- 1\n- 2\n",
        "initial_temperature: -1\n",
        "stop_temperature: 200\n",
        "max_iter: 0\n",
        "unknown_key: 1\n",
        "seed: [unclosed\n",
    ],
)
def test_invalid_settings(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_annealing_settings(path)


def test_missing_settings_file(tmp_path):
    with pytest.raises(InvalidInputError):
        load_annealing_settings(tmp_path / "nope.yaml")


def test_app_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("TSP_SA_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TSP_SA_LOG_LEVEL", "debug")
    monkeypatch.setenv("TSP_SA_SETTINGS", str(tmp_path / "run.yaml"))
    cfg = get_app_config()
    assert cfg.log_dir == tmp_path / "logs"
    assert cfg.log_level == "DEBUG"
    assert cfg.settings_path == Path(tmp_path / "run.yaml")


def test_app_config_defaults(monkeypatch):
    monkeypatch.delenv("TSP_SA_SETTINGS", raising=False)
    monkeypatch.delenv("TSP_SA_LOG_LEVEL", raising=False)
    cfg = get_app_config()
    assert cfg.settings_path is None
    assert cfg.log_level == "INFO"


def test_non_utf8_settings_file(tmp_path):
    path = tmp_path / "latin1.yaml"
    path.write_bytes(b"seed: 1\n# K\xf6ln\n")
    with pytest.raises(InvalidInputError):
        load_annealing_settings(path)
