from __future__ import annotations

"""
模拟退火求解 TSP 的核心包。

约定：
- tour.py      城市点与巡回路径的数据模型；
- schedules.py 三种降温策略；
- base.py      搜索状态、运行参数与会话注册表；
- sa/core.py   退火主循环与逐步推进的会话接口。
本包不读写输入文件，也不负责命令行输出。
"""

from .base import AnnealParams, SearchState, get_session, remove_session
from .errors import InvalidInputError
from .schedules import CoolingSchedule
from .tour import Point, Tour, distance, swap_neighbor, tour_cost

__all__ = [
    "AnnealParams",
    "CoolingSchedule",
    "InvalidInputError",
    "Point",
    "SearchState",
    "Tour",
    "distance",
    "get_session",
    "remove_session",
    "swap_neighbor",
    "tour_cost",
]
