from __future__ import annotations

import contextlib
import csv
import json
import logging
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from anneal.base import (
    AnnealParams,
    AnnealSession,
    SearchState,
    create_session,
    get_session,
    new_session_id,
    remove_session,
)
from anneal.errors import InvalidInputError
from anneal.schedules import CoolingSchedule
from anneal.tour import Point, Tour, swap_neighbor, tour_cost


logger = logging.getLogger("tsp_sa.anneal.sa")

HISTORY_HEADER = [
    "iter",
    "i",
    "j",
    "accepted",
    "delta",
    "current_cost",
    "T",
    "tour",
]


@dataclass
class AnnealResult:
    """一次完整退火运行的结果与统计信息。"""

    tour: Tour
    cost: float
    iterations: int
    temperature: float
    accepted: int
    rejected: int


def make_rng(seed: Optional[int] = None) -> random.Random:
    """构造随机数来源；seed 为 None 时每次运行结果不同。"""
    return random.Random(seed)


def acceptance_probability(delta: float, temperature: float) -> float:
    """
    Metropolis 接受概率。

    delta = cost(current) - cost(candidate)，delta > 0 表示候选解更短，必然接受；
    否则按 exp(delta / T) 接受，delta == 0 时概率为 1。
    """
    if delta > 0:
        return 1.0
    return math.exp(delta / temperature)


def _draw_distinct_indices(rng: Any, n: int) -> tuple:
    i = rng.randrange(n)
    j = rng.randrange(n)
    while j == i:
        j = rng.randrange(n)
    return i, j


def anneal_step(
    state: SearchState,
    schedule: CoolingSchedule,
    rng: Any,
    params: Optional[AnnealParams] = None,
) -> Dict[str, Any]:
    """
    执行一次退火迭代：产生邻域解、做接受判定、降温。

    返回本步的明细（交换位置、delta、是否接受），供日志与历史记录使用。
    """
    params = params or AnnealParams()
    n = len(state.current_tour)

    state.iteration += 1
    i, j = _draw_distinct_indices(rng, n)
    candidate = swap_neighbor(state.current_tour, i, j)
    candidate_cost = tour_cost(candidate)
    delta = state.current_cost - candidate_cost

    if delta > 0:
        accept = True
    else:
        accept = rng.random() < acceptance_probability(delta, state.temperature)

    if accept:
        state.current_tour = candidate
        state.current_cost = candidate_cost
        state.n_accepted += 1
    else:
        state.n_rejected += 1

    state.temperature = schedule.next_temperature(
        state.temperature, state.iteration, params.initial_temperature
    )

    logger.debug(
        "SA step：iter=%d, swap=(%d, %d), delta=%.6g, accept=%s, cost=%.6g, T=%.6g",
        state.iteration,
        i,
        j,
        delta,
        accept,
        state.current_cost,
        state.temperature,
    )
    return {"i": i, "j": j, "delta": delta, "accepted": accept}


# ------------------------- 运行历史 ------------------------- #
def _history_path(trace_dir: Union[str, Path], run_id: str) -> Path:
    return Path(trace_dir) / f"{run_id}_history.csv"


def _result_path(trace_dir: Union[str, Path], run_id: str) -> Path:
    return Path(trace_dir) / f"{run_id}_result.json"


def _history_row(state: SearchState, step: Dict[str, Any]) -> List[Any]:
    return [
        state.iteration,
        step["i"],
        step["j"],
        int(step["accepted"]),
        float(step["delta"]),
        float(state.current_cost),
        float(state.temperature),
        ":".join(state.current_tour.names()),
    ]


@contextlib.contextmanager
def _open_history(trace_dir: Optional[Union[str, Path]], run_id: str) -> Iterator[Any]:
    """
    打开一次运行的历史 CSV，返回 csv.writer；trace_dir 为空时返回 None。

    打开失败只记录日志，不影响退火本身。
    """
    if trace_dir is None:
        yield None
        return
    try:
        path = _history_path(trace_dir, run_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        f = path.open("w", newline="", encoding="utf-8")
    except OSError:
        logger.exception("打开退火历史 CSV 时出错（已忽略）。")
        yield None
        return
    with f:
        writer = csv.writer(f)
        writer.writerow(HISTORY_HEADER)
        logger.info("退火历史写入：%s", path)
        yield writer


def _append_step_log(sess: AnnealSession, step: Dict[str, Any]) -> None:
    """将会话的单步迭代结果追加写入 CSV。"""
    if sess.trace_dir is None:
        return
    try:
        path = _history_path(sess.trace_dir, sess.session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        write_header = not path.exists() or path.stat().st_size == 0
        with path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if write_header:
                writer.writerow(HISTORY_HEADER)
            writer.writerow(_history_row(sess.state, step))
    except OSError:
        logger.exception("写入退火迭代历史 CSV 时出错（已忽略）。")


def _write_result_log(
    trace_dir: Optional[Union[str, Path]],
    run_id: str,
    schedule: CoolingSchedule,
    params: AnnealParams,
    result: AnnealResult,
) -> None:
    """运行结束时写入一份汇总结果 JSON。"""
    if trace_dir is None:
        return
    try:
        path = _result_path(trace_dir, run_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, Any] = {
            "run_id": run_id,
            "schedule": schedule.name,
            "initial_temperature": params.initial_temperature,
            "stop_temperature": params.stop_temperature,
            "max_iter": params.max_iter,
            "iterations": result.iterations,
            "final_temperature": result.temperature,
            "accepted": result.accepted,
            "rejected": result.rejected,
            "cost": result.cost,
            "tour": result.tour.names(),
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("已写入退火结果：%s", path)
    except OSError:
        logger.exception("写入退火结果 JSON 时出错（已忽略）。")


def _result_from_state(state: SearchState) -> AnnealResult:
    return AnnealResult(
        tour=state.current_tour,
        cost=state.current_cost,
        iterations=state.iteration,
        temperature=state.temperature,
        accepted=state.n_accepted,
        rejected=state.n_rejected,
    )


# ------------------------- 主流程 ------------------------- #
def anneal(
    points: Sequence[Point],
    schedule: Union[CoolingSchedule, int, str],
    rng: Any = None,
    params: Optional[AnnealParams] = None,
    trace_dir: Optional[Union[str, Path]] = None,
) -> AnnealResult:
    """
    用模拟退火求解 TSP。

    说明：
    - 初始路径为输入顺序，初始温度为 params.initial_temperature；
    - 每次迭代随机交换两个不同位置的城市，按 Metropolis 准则决定是否接受；
    - 无论是否接受都降温一次，温度不高于 params.stop_temperature 时停止；
    - 返回停止时的当前路径（不是历史最优路径）。
    """
    if not points:
        raise InvalidInputError("点集不能为空。")

    schedule = CoolingSchedule.from_selector(schedule)
    params = params or AnnealParams()
    rng = rng if rng is not None else make_rng()

    tour = Tour.from_points(points)
    state = SearchState(
        current_tour=tour,
        current_cost=tour_cost(tour),
        temperature=float(params.initial_temperature),
    )

    run_id = new_session_id()
    logger.info(
        "开始退火：run_id=%s, n=%d, schedule=%s, T0=%s, T_stop=%s, max_iter=%s",
        run_id,
        len(tour),
        schedule.name,
        params.initial_temperature,
        params.stop_temperature,
        params.max_iter,
    )

    with _open_history(trace_dir, run_id) as history:
        while state.is_running(params):
            step = anneal_step(state, schedule, rng, params)
            if history is not None:
                history.writerow(_history_row(state, step))

    result = _result_from_state(state)
    _write_result_log(trace_dir, run_id, schedule, params, result)

    if (
        params.max_iter is not None
        and state.iteration >= params.max_iter
        and state.temperature > params.stop_temperature
    ):
        logger.warning(
            "达到迭代上限 max_iter=%d 时温度仍为 %.6g，提前停止。",
            params.max_iter,
            state.temperature,
        )
    logger.info(
        "退火结束：run_id=%s, iter=%d, cost=%.6g, T=%.6g, accepted=%d, rejected=%d",
        run_id,
        result.iterations,
        result.cost,
        result.temperature,
        result.accepted,
        result.rejected,
    )
    return result


def solve(
    points: Sequence[Point],
    schedule: Union[CoolingSchedule, int, str],
    rng: Any = None,
    params: Optional[AnnealParams] = None,
) -> Tour:
    """返回退火结束时的路径；单个城市直接返回。"""
    return anneal(points, schedule, rng=rng, params=params).tour


# ------------------------- 会话接口 ------------------------- #
def _session_state_payload(sess: AnnealSession) -> Dict[str, Any]:
    state = sess.state
    return {
        "session_id": sess.session_id,
        "schedule": sess.schedule.name,
        "iter": state.iteration,
        "max_iter": sess.params.max_iter,
        "T": state.temperature,
        "T_stop": sess.params.stop_temperature,
        "tour": state.current_tour.names(),
        "cost": state.current_cost,
        "accepted": state.n_accepted,
        "rejected": state.n_rejected,
        "done": sess.done,
    }


def _missing_session(session_id: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error": f"未找到 session_id={session_id} 对应的退火会话。",
    }


def sa_create_session_safe(
    points: Sequence[Point],
    schedule: Union[CoolingSchedule, int, str],
    seed: Optional[int] = None,
    initial_temperature: float = 100.0,
    stop_temperature: float = 0.05,
    max_iter: Optional[int] = None,
    trace_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    创建一个可逐步推进的退火会话。

    与 anneal() 使用同一套迭代逻辑，但把状态保存在会话注册表中，
    调用方可以通过 sa_step_safe 逐步推进、通过 sa_get_state_safe 查看中间状态。
    """
    try:
        if not points:
            raise InvalidInputError("点集不能为空。")
        sched = CoolingSchedule.from_selector(schedule)
        params = AnnealParams(
            initial_temperature=float(initial_temperature),
            stop_temperature=float(stop_temperature),
            max_iter=max_iter,
        )
        sess = create_session(
            Tour.from_points(points),
            sched,
            rng=make_rng(seed),
            params=params,
            trace_dir=trace_dir,
        )
        sess.metadata["seed"] = seed
        logger.info(
            "SA 会话创建成功：session_id=%s, n=%d, schedule=%s",
            sess.session_id,
            len(points),
            sched.name,
        )
        return {"success": True, "state": _session_state_payload(sess)}
    except Exception as exc:  # noqa: BLE001
        logger.exception("SA 会话创建失败：%s", exc)
        return {"success": False, "error": f"SA 会话创建失败: {exc}"}


def sa_get_state_safe(session_id: str) -> Dict[str, Any]:
    """安全查询会话当前状态。"""
    sess = get_session(session_id)
    if sess is None:
        return _missing_session(session_id)
    return {"success": True, "state": _session_state_payload(sess)}


def sa_step_safe(session_id: str, n_steps: int = 1) -> Dict[str, Any]:
    """
    推进会话最多 n_steps 次迭代；会话已结束时不再迭代。

    返回最后一步的明细（若有）以及推进后的状态。
    """
    sess = get_session(session_id)
    if sess is None:
        return _missing_session(session_id)
    if n_steps < 1:
        return {"success": False, "error": f"n_steps 必须为正整数，但为 {n_steps!r}。"}

    last_step: Optional[Dict[str, Any]] = None
    steps_done = 0
    try:
        while steps_done < n_steps and not sess.done:
            last_step = anneal_step(sess.state, sess.schedule, sess.rng, sess.params)
            _append_step_log(sess, last_step)
            steps_done += 1
    except Exception as exc:  # noqa: BLE001
        logger.exception("SA 会话推进失败：session_id=%s", session_id)
        return {"success": False, "error": f"SA 会话推进失败: {exc}"}

    if steps_done and sess.done:
        _write_result_log(
            sess.trace_dir,
            sess.session_id,
            sess.schedule,
            sess.params,
            _result_from_state(sess.state),
        )

    logger.info(
        "SA step：session_id=%s, steps=%d, iter=%d, cost=%.6g, T=%.6g, done=%s",
        sess.session_id,
        steps_done,
        sess.state.iteration,
        sess.state.current_cost,
        sess.state.temperature,
        sess.done,
    )
    return {
        "success": True,
        "steps": steps_done,
        "last_step": last_step,
        "state": _session_state_payload(sess),
    }


def sa_run_safe(session_id: str) -> Dict[str, Any]:
    """把会话运行到终止条件，返回最终路径并从注册表中移除会话。"""
    sess = get_session(session_id)
    if sess is None:
        return _missing_session(session_id)

    try:
        while not sess.done:
            step = anneal_step(sess.state, sess.schedule, sess.rng, sess.params)
            _append_step_log(sess, step)
    except Exception as exc:  # noqa: BLE001
        logger.exception("SA 会话运行失败：session_id=%s", session_id)
        return {"success": False, "error": f"SA 会话运行失败: {exc}"}

    result = _result_from_state(sess.state)
    _write_result_log(sess.trace_dir, sess.session_id, sess.schedule, sess.params, result)
    payload = _session_state_payload(sess)
    remove_session(session_id)
    logger.info(
        "SA 会话完成：session_id=%s, iter=%d, cost=%.6g",
        session_id,
        result.iterations,
        result.cost,
    )
    return {"success": True, "state": payload}
