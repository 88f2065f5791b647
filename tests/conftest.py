import random

import pytest

from anneal.tour import Point


class ScriptedRng:
    """按预设序列返回随机数，用于验证接受准则的每个分支。"""

    def __init__(self, indices, uniforms=()):
        self.indices = list(indices)
        self.uniforms = list(uniforms)
        self.random_calls = 0

    def randrange(self, n):
        value = self.indices.pop(0)
        assert 0 <= value < n
        return value

    def random(self):
        self.random_calls += 1
        return self.uniforms.pop(0)


@pytest.fixture
def square():
    return [Point("A", 0.0, 0.0), Point("B", 1.0, 0.0), Point("C", 1.0, 1.0), Point("D", 0.0, 1.0)]


@pytest.fixture
def scattered():
    rng = random.Random(7)
    return [Point(f"P{i}", rng.uniform(0, 100), rng.uniform(0, 100)) for i in range(12)]


@pytest.fixture
def scripted_rng():
    return ScriptedRng
