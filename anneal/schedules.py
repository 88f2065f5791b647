"""
退火降温策略（cooling schedule）。

三种策略都是纯函数，不保存任何内部状态：
- LINEAR：每次迭代温度减 1；
- GEOMETRIC：每次迭代温度乘以 0.9999；
- INVERSE_ITERATION：忽略当前温度，直接按迭代次数计算 T0 / (iteration + 1)。
"""

from __future__ import annotations

import enum
from typing import Union

from .errors import InvalidInputError


LINEAR_STEP = 1.0
GEOMETRIC_FACTOR = 0.9999
DEFAULT_INITIAL_TEMPERATURE = 100.0
DEFAULT_STOP_TEMPERATURE = 0.05


def linear(temperature: float) -> float:
    return temperature - LINEAR_STEP


def geometric(temperature: float) -> float:
    return temperature * GEOMETRIC_FACTOR


def inverse_iteration(
    iteration: int, initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE
) -> float:
    """iteration 为刚完成的那一次迭代的序号（从 1 开始）。"""
    return initial_temperature / (iteration + 1)


class CoolingSchedule(enum.Enum):
    """命令行中的 1 / 2 / 3 分别对应以下三种策略。"""

    LINEAR = 1
    GEOMETRIC = 2
    INVERSE_ITERATION = 3

    def next_temperature(
        self,
        temperature: float,
        iteration: int,
        initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE,
    ) -> float:
        if self is CoolingSchedule.LINEAR:
            return linear(temperature)
        if self is CoolingSchedule.GEOMETRIC:
            return geometric(temperature)
        return inverse_iteration(iteration, initial_temperature)

    @classmethod
    def from_selector(cls, value: Union[int, str, "CoolingSchedule"]) -> "CoolingSchedule":
        """把命令行 / 配置中的选择值（1、2、3）转换为枚举。"""
        if isinstance(value, cls):
            return value
        try:
            return cls(int(str(value).strip()))
        except ValueError as exc:
            choices = ", ".join(str(s.value) for s in cls)
            raise InvalidInputError(
                f"不支持的退火调度：{value!r}，必须是 {choices} 之一。"
            ) from exc


def cooling_steps(
    schedule: CoolingSchedule,
    initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE,
    stop_temperature: float = DEFAULT_STOP_TEMPERATURE,
) -> int:
    """
    从 initial_temperature 降到不高于 stop_temperature 需要的降温次数。

    降温与候选解是否被接受无关，因此这个数字也是退火主循环的迭代次数。
    """
    if stop_temperature <= 0:
        raise InvalidInputError(f"终止温度必须为正数，但为 {stop_temperature!r}。")
    temperature = float(initial_temperature)
    iteration = 0
    while temperature > stop_temperature:
        iteration += 1
        temperature = schedule.next_temperature(temperature, iteration, initial_temperature)
    return iteration
