import json

import pytest

from anneal.base import get_session
from anneal.sa import sa_create_session_safe, sa_get_state_safe, sa_run_safe, sa_step_safe
from anneal.tour import Point


@pytest.fixture
def session_id(square):
    result = sa_create_session_safe(square, 3, seed=0)
    assert result["success"] is True
    return result["state"]["session_id"]


def test_create_session_initial_state(session_id):
    state = sa_get_state_safe(session_id)["state"]
    assert state["iter"] == 0
    assert state["T"] == 100.0
    assert state["schedule"] == "INVERSE_ITERATION"
    assert state["tour"] == ["A", "B", "C", "D"]
    assert state["cost"] == pytest.approx(4.0)
    assert state["done"] is False


def test_step_advances_iterations(session_id):
    result = sa_step_safe(session_id, n_steps=10)
    assert result["success"] is True
    assert result["steps"] == 10
    assert result["state"]["iter"] == 10
    assert result["state"]["T"] == pytest.approx(100.0 / 11)
    assert sorted(result["state"]["tour"]) == ["A", "B", "C", "D"]
    assert set(result["last_step"]) == {"i", "j", "delta", "accepted"}


def test_run_to_completion_removes_session(session_id):
    result = sa_run_safe(session_id)
    assert result["success"] is True
    assert result["state"]["done"] is True
    assert result["state"]["iter"] == 1999
    assert get_session(session_id) is None
    assert sa_get_state_safe(session_id)["success"] is False


def test_step_stops_at_threshold(square):
    sid = sa_create_session_safe(square, 1, seed=1)["state"]["session_id"]
    result = sa_step_safe(sid, n_steps=500)
    assert result["steps"] == 100
    assert result["state"]["done"] is True
    again = sa_step_safe(sid)
    assert again["steps"] == 0
    assert again["last_step"] is None


def test_single_city_session_is_done():
    result = sa_create_session_safe([Point("solo", 0.0, 0.0)], 2)
    assert result["state"]["done"] is True
    assert sa_step_safe(result["state"]["session_id"])["steps"] == 0


@pytest.mark.parametrize(
    "points,schedule,kwargs",
    [
        ([], 1, {}),
        ([Point("a", 0.0, 0.0), Point("b", 1.0, 1.0)], 9, {}),
        ([Point("a", 0.0, 0.0), Point("b", 1.0, 1.0)], 1, {"initial_temperature": -5.0}),
        ([Point("a", 0.0, 0.0), Point("b", 1.0, 1.0)], 2, {"stop_temperature": 0.0}),
    ],
)
def test_create_session_failures(points, schedule, kwargs):
    result = sa_create_session_safe(points, schedule, **kwargs)
    assert result["success"] is False
    assert "error" in result


def test_unknown_session():
    assert sa_step_safe("nope")["success"] is False
    assert sa_run_safe("nope")["success"] is False


def test_non_positive_steps(session_id):
    assert sa_step_safe(session_id, n_steps=0)["success"] is False


def test_session_trace(tmp_path, square):
    sid = sa_create_session_safe(square, 2, seed=0, max_iter=5, trace_dir=str(tmp_path))["state"]["session_id"]
    sa_step_safe(sid, n_steps=3)
    sa_run_safe(sid)

    lines = (tmp_path / f"{sid}_history.csv").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1 + 5
    payload = json.loads((tmp_path / f"{sid}_result.json").read_text(encoding="utf-8"))
    assert payload["iterations"] == 5
    assert payload["max_iter"] == 5
