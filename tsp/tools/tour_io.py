"""
输入文件解析与结果输出。

输入格式：
    <N>
    <name> <x> <y>
    ...（共 N 行）

输出格式：按访问顺序用冒号连接城市名，并在末尾重复第一个城市，例如 A:B:C:A；
只有一个城市时只输出该城市名。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from anneal.errors import InvalidInputError
from anneal.tour import Point, Tour

from .schema import CityRecord, ProblemInstance


logger = logging.getLogger("tsp_sa.tour_io")


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", str(exc))
    return f"{loc}: {msg}" if loc else msg


def parse_points(text: str) -> List[Point]:
    """
    解析问题实例文本，返回按输入顺序排列的城市列表。

    空行会被跳过；格式错误时抛出 InvalidInputError，错误信息中带有行号。
    """
    lines = [
        (lineno, line.split())
        for lineno, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]
    if not lines:
        raise InvalidInputError("输入为空：缺少城市数量行。")

    count_lineno, count_fields = lines[0]
    if len(count_fields) != 1:
        raise InvalidInputError(f"第 {count_lineno} 行应只包含城市数量，实际为：{' '.join(count_fields)!r}")
    try:
        count = int(count_fields[0])
    except ValueError as exc:
        raise InvalidInputError(
            f"第 {count_lineno} 行的城市数量不是整数：{count_fields[0]!r}"
        ) from exc
    if count < 1:
        raise InvalidInputError(f"城市数量必须为正整数，但为 {count}。")

    city_lines = lines[1:]
    if len(city_lines) != count:
        raise InvalidInputError(
            f"声明了 {count} 个城市，但文件中有 {len(city_lines)} 行城市记录。"
        )

    records: List[CityRecord] = []
    for lineno, fields in city_lines:
        if len(fields) != 3:
            raise InvalidInputError(
                f"第 {lineno} 行应为 '<name> <x> <y>' 三个字段，实际有 {len(fields)} 个。"
            )
        name, x, y = fields
        try:
            records.append(CityRecord(name=name, x=x, y=y))
        except ValidationError as exc:
            raise InvalidInputError(f"第 {lineno} 行格式错误：{_first_error(exc)}") from exc

    try:
        problem = ProblemInstance(count=count, cities=records)
    except ValidationError as exc:
        raise InvalidInputError(f"问题实例不合法：{_first_error(exc)}") from exc

    logger.info("解析到 %d 个城市。", problem.count)
    return problem.to_points()


def load_points(path: Union[str, Path]) -> List[Point]:
    """读取并解析问题实例文件。文件不存在或不可读时抛出 OSError。"""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"输入文件不是有效的 UTF-8 文本: {path}: {exc}") from exc
    logger.info("读取问题实例：%s", path)
    return parse_points(text)


def format_tour(tour: Tour) -> str:
    names = tour.names()
    if len(names) <= 1:
        return "".join(names)
    return ":".join(names + [names[0]])
