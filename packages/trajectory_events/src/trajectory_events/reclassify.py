"""因果一致性重分类。

物理约束：球不可能在没有击球的情况下从球网一侧飞到另一侧。
因此若两个相邻事件分别位于球网两侧、且二者之间没有任何 swing 的 hit 时刻，
则前一个“反弹”实际上应该是一次未被检测到的击球，改写为 `inferred_swing`。

约定：
    - 只有 floor/wall 事件是改写候选；authoritative、swing、inferred_swing 一律不动。
    - 只改 kind，不改 timestamp/position。
    - 单次从左到右扫描；输出为新列表，不修改输入。
    - 判定只依赖位置与 swing 时刻，不依赖相邻事件的 kind，因此对自身输出再跑一遍不会再有变化。
"""

from __future__ import annotations

from dataclasses import replace
from typing import Literal, Sequence

import numpy as np

from trajectory_events.configs import ReclassifierConfig
from trajectory_events.types import KIND_INFERRED_SWING, TRAJECTORY_KINDS, BounceEvent, SwingEvent

CourtSide = Literal["near", "far"]


def court_side(event: BounceEvent, midline_y: float = 0.5) -> CourtSide:
    """事件所在半场：y > midline 为近端（near），否则为远端（far）。"""

    return "near" if event.y > float(midline_y) else "far"


def _has_hit_between(hit_ts: np.ndarray, t0: float, t1: float) -> bool:
    if hit_ts.size == 0:
        return False
    return bool(np.any((hit_ts > t0) & (hit_ts < t1)))


def reclassify_events(
    events: Sequence[BounceEvent],
    swings: Sequence[SwingEvent],
    *,
    cfg: ReclassifierConfig | None = None,
) -> list[BounceEvent]:
    """对已排序的事件列表做因果一致性修正。

    Args:
        events: 合并后、按时间升序的事件。
        swings: 全部 swing（包括未测到球速的），只使用 hit 时刻。
        cfg: ReclassifierConfig；None 时使用默认值。

    Returns:
        新的事件列表，长度与顺序不变；部分 floor/wall 的 kind 被改为 inferred_swing。
    """

    if cfg is None:
        cfg = ReclassifierConfig()

    midline = float(cfg.midline_y)
    hit_ts = np.asarray([float(s.hit_timestamp) for s in swings], dtype=float)

    out: list[BounceEvent] = []
    for i, curr in enumerate(events):
        if i + 1 >= len(events) or curr.kind not in TRAJECTORY_KINDS:
            out.append(curr)
            continue

        nxt = events[i + 1]
        crosses_net = court_side(curr, midline) != court_side(nxt, midline)
        if crosses_net and not _has_hit_between(hit_ts, float(curr.timestamp), float(nxt.timestamp)):
            out.append(replace(curr, kind=KIND_INFERRED_SWING))
        else:
            out.append(curr)

    return out
