from __future__ import annotations

"""
模拟退火（Simulated Annealing, SA）主流程。

- anneal / solve：一次性运行到温度阈值；
- sa_*_safe：逐步推进的会话接口，出错时返回 {"success": False, "error": ...}。
"""

from .core import (
    AnnealResult,
    acceptance_probability,
    anneal,
    anneal_step,
    make_rng,
    sa_create_session_safe,
    sa_get_state_safe,
    sa_run_safe,
    sa_step_safe,
    solve,
)

__all__ = [
    "AnnealResult",
    "acceptance_probability",
    "anneal",
    "anneal_step",
    "make_rng",
    "sa_create_session_safe",
    "sa_get_state_safe",
    "sa_run_safe",
    "sa_step_safe",
    "solve",
]
