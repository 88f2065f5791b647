from __future__ import annotations

"""
TSP 的基础数据模型：城市点（Point）与巡回路径（Tour）。

约定：
- Point 不可变，由调用方持有；多个 Tour 可以共享同一组 Point。
- Tour 是“值”：任何邻域变换都会返回新的 Tour，而不是原地修改，
  这样拒绝候选解时无需回滚。
- 路径成本不存储，每次按需计算，包含从最后一个城市回到第一个城市的闭合边。
"""

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple


@dataclass(frozen=True)
class Point:
    """平面上一个带名字的城市坐标。name 应唯一，同时用作输出标签。"""

    name: str
    x: float
    y: float


@dataclass(frozen=True)
class Tour:
    """按访问顺序排列的城市序列，隐含首尾相连成环。"""

    cities: Tuple[Point, ...]

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Tour":
        return cls(tuple(points))

    def __len__(self) -> int:
        return len(self.cities)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.cities)

    def __getitem__(self, index: int) -> Point:
        return self.cities[index]

    def names(self) -> List[str]:
        return [p.name for p in self.cities]

    def cost(self) -> float:
        return tour_cost(self)


def distance(a: Point, b: Point) -> float:
    """两个城市之间的欧氏距离。"""
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2)


def tour_cost(tour: Tour) -> float:
    """
    计算巡回路径总长度。

    (i + 1) % n 让最后一个城市连回第一个城市；单个城市时只有一条长度为 0 的自环。
    """
    cities = tour.cities
    n = len(cities)
    return sum(distance(cities[i], cities[(i + 1) % n]) for i in range(n))


def swap_neighbor(tour: Tour, i: int, j: int) -> Tour:
    """
    交换位置 i 与 j 上的城市，返回新的 Tour。

    例如 {A, B, C, D, E} 取 i=1, j=3 时得到 {A, D, C, B, E}。
    """
    n = len(tour)
    if i == j:
        raise ValueError(f"交换位置必须不同，但 i == j == {i}。")
    if not (0 <= i < n and 0 <= j < n):
        raise ValueError(f"交换位置 ({i}, {j}) 超出范围 [0, {n})。")

    cities = list(tour.cities)
    cities[i], cities[j] = cities[j], cities[i]
    return Tour(tuple(cities))


def rotate(tour: Tour, k: int) -> Tour:
    """从位置 k 开始重新排列同一条环路，成本不变。"""
    n = len(tour)
    if n == 0:
        return tour
    k %= n
    return Tour(tour.cities[k:] + tour.cities[:k])


def is_permutation_of(tour: Tour, points: Sequence[Point]) -> bool:
    """判断 tour 是否恰好包含 points 中的每个城市一次。"""
    if len(tour) != len(points):
        return False
    return sorted(map(id, tour.cities)) == sorted(map(id, points))
