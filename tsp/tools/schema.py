from __future__ import annotations

"""
使用 Pydantic 定义输入文件与运行设置的结构约束。

注意：
- CityRecord / ProblemInstance 对应输入文件中的一行城市记录与整个问题实例；
- AnnealingSettings 对应可选的 YAML 运行设置文件；
- 校验通过后再转换为 anneal 包中的 Point / AnnealParams，核心算法本身不依赖 Pydantic。
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from anneal.base import AnnealParams
from anneal.tour import Point


class CityRecord(BaseModel):
    """输入文件中的一个城市：名字 + 平面坐标。"""

    name: str = Field(min_length=1)
    x: float
    y: float

    @field_validator("x", "y")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("坐标必须是有限数值")
        return v

    def to_point(self) -> Point:
        return Point(self.name, self.x, self.y)


class ProblemInstance(BaseModel):
    """
    一个完整的问题实例。

    - count 为文件首行声明的城市数量，必须与实际城市记录数一致；
    - 城市名字用于输出，必须唯一。
    """

    count: int = Field(ge=1)
    cities: List[CityRecord]

    @model_validator(mode="after")
    def _check_cities(self) -> "ProblemInstance":
        if len(self.cities) != self.count:
            raise ValueError(
                f"声明了 {self.count} 个城市，但实际读到 {len(self.cities)} 个"
            )
        seen = set()
        for city in self.cities:
            if city.name in seen:
                raise ValueError(f"城市名字重复：{city.name!r}")
            seen.add(city.name)
        return self

    def to_points(self) -> List[Point]:
        return [c.to_point() for c in self.cities]


class AnnealingSettings(BaseModel):
    """
    可选的运行设置（YAML 文件）。

    未提供的字段使用默认值：T0 = 100、终止温度 0.05、不限迭代次数、不固定随机种子。
    """

    initial_temperature: float = Field(default=100.0, gt=0)
    stop_temperature: float = Field(default=0.05, gt=0)
    max_iter: Optional[int] = Field(default=None, ge=1)
    seed: Optional[int] = None
    trace_dir: Optional[str] = None

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def _check_range(self) -> "AnnealingSettings":
        if self.stop_temperature >= self.initial_temperature:
            raise ValueError("stop_temperature 必须小于 initial_temperature")
        return self

    def to_params(self) -> AnnealParams:
        return AnnealParams(
            initial_temperature=self.initial_temperature,
            stop_temperature=self.stop_temperature,
            max_iter=self.max_iter,
        )
