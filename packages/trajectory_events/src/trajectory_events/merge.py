"""事件合并：authoritative + 合成 swing + 轨迹检测 -> 按时间排序的单一列表。

说明：
    合并阶段不丢弃任何事件；去重已经在各检测器内部完成（合成器按 dedup 窗口、
    检测器按已知事件窗口）。这里只负责拼接与排序。
"""

from __future__ import annotations

from typing import Sequence

from trajectory_events.types import BounceEvent


def merge_events(*groups: Sequence[BounceEvent]) -> list[BounceEvent]:
    """拼接多组事件并按 timestamp 升序排序。

    排序是稳定的：时间戳相同的事件保持参数顺序（通常为 authoritative、swing、轨迹检测）。
    """

    merged: list[BounceEvent] = []
    for g in groups:
        merged.extend(g)
    return sorted(merged, key=lambda e: float(e.timestamp))
