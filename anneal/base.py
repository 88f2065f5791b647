from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import uuid

from .errors import InvalidInputError
from .schedules import CoolingSchedule
from .tour import Tour


@dataclass
class AnnealParams:
    """
    一次退火运行的参数。

    说明：
    - initial_temperature / stop_temperature 决定温度区间，循环条件为 T > stop_temperature；
    - max_iter 为可选的迭代上限，None 表示只按温度阈值终止。
    """

    initial_temperature: float = 100.0
    stop_temperature: float = 0.05
    max_iter: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_temperature <= 0:
            raise InvalidInputError(f"初始温度必须为正数，但为 {self.initial_temperature!r}。")
        if self.stop_temperature <= 0:
            raise InvalidInputError(f"终止温度必须为正数，但为 {self.stop_temperature!r}。")
        if self.max_iter is not None and self.max_iter < 1:
            raise InvalidInputError(f"max_iter 必须为正整数，但为 {self.max_iter!r}。")


@dataclass
class SearchState:
    """
    退火主循环的瞬时状态，每次迭代都会被更新。

    current_cost 是 current_tour 成本的缓存，只在接受候选解时刷新。
    """

    current_tour: Tour
    current_cost: float
    temperature: float
    iteration: int = 0
    n_accepted: int = 0
    n_rejected: int = 0

    def is_running(self, params: AnnealParams) -> bool:
        # 单个城市无需搜索
        if len(self.current_tour) < 2:
            return False
        if params.max_iter is not None and self.iteration >= params.max_iter:
            return False
        return self.temperature > params.stop_temperature


@dataclass
class AnnealSession:
    """
    可以逐步推进的退火会话。

    rng 为随机数来源（需提供 random() 与 randrange(n)），
    trace_dir 非空时逐步写入迭代历史。
    """

    session_id: str
    schedule: CoolingSchedule
    params: AnnealParams
    state: SearchState
    rng: Any
    trace_dir: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def done(self) -> bool:
        return not self.state.is_running(self.params)


_SESSIONS: Dict[str, AnnealSession] = {}


def new_session_id() -> str:
    """生成简短的会话 ID。"""
    return uuid.uuid4().hex[:8]


def register_session(session: AnnealSession) -> AnnealSession:
    """在全局注册表中登记一个会话。"""
    _SESSIONS[session.session_id] = session
    return session


def create_session(
    tour: Tour,
    schedule: CoolingSchedule,
    rng: Any,
    params: Optional[AnnealParams] = None,
    trace_dir: Optional[str] = None,
) -> AnnealSession:
    """以给定的初始路径创建并登记一个会话。"""
    if len(tour) == 0:
        raise InvalidInputError("点集不能为空。")

    params = params or AnnealParams()
    state = SearchState(
        current_tour=tour,
        current_cost=tour.cost(),
        temperature=float(params.initial_temperature),
    )
    sess = AnnealSession(
        session_id=new_session_id(),
        schedule=schedule,
        params=params,
        state=state,
        rng=rng,
        trace_dir=trace_dir,
    )
    return register_session(sess)


def get_session(session_id: str) -> Optional[AnnealSession]:
    """根据 session_id 获取会话，如果不存在则返回 None。"""
    return _SESSIONS.get(session_id)


def remove_session(session_id: str) -> None:
    """从注册表移除会话（如果存在）。"""
    _SESSIONS.pop(session_id, None)
