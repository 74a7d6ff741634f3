"""轨迹异常检测：从球位置序列里找落地（floor）与撞墙（wall）事件。

对每个内部采样 i（2 <= i <= N-3），取三点窗口 (i-1, i, i+1)：

    incoming = p[i] - p[i-1]
    outgoing = p[i+1] - p[i]

检测分两级（与查看器中的经验规则一致）：
    A) 速度反转：
        - 落地：vy_before 明显向下（y 向下为正），vy_after 反向超过阈值的一定比例，
          且 y 不贴近画面上下边缘。
        - 撞墙：vx 在窗口两侧反号并超过阈值，且 x 靠近左右侧边界。
    B) 方向突变兜底（仅 A 未命中时）：夹角超过 sharp_angle_deg，
       靠近侧边界判为 wall，其余位置一律判为 floor。
       真实轨迹有时在相邻采样间反转得很“缓”，速度符号检测不触发，
       但三点窗口上的净方向变化仍足以说明发生了反弹。

说明：
    - 已知事件（authoritative + 合成的 swing + 本次已检测到的事件）附近不再检测。
    - 命中后通过显式的 consumed_until 游标跳过后续若干采样，避免同一次物理反弹
      在相邻采样上重复触发。
    - “后墙反弹”分类误报率过高，已停用；轨迹检测只产出 floor/wall 两类。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from trajectory_events.configs import TrajectoryDetectorConfig
from trajectory_events.math_utils import angles_between, has_event_near
from trajectory_events.samples import samples_to_arrays
from trajectory_events.types import (
    KIND_FLOOR,
    KIND_WALL,
    UNATTRIBUTED_PLAYER_ID,
    BallSample,
    BounceEvent,
    EventKind,
)

# 触发原因码（用于日志/诊断）。
REASON_VY_REVERSAL = "vy_reversal"
REASON_VX_REVERSAL_NEAR_WALL = "vx_reversal_near_wall"
REASON_SHARP_ANGLE = "sharp_angle"


@dataclass(frozen=True)
class WindowFeatures:
    """三点窗口的运动学特征。"""

    t: float
    x: float
    y: float
    vx_before: float
    vx_after: float
    vy_before: float
    vy_after: float
    angle_deg: float


@dataclass(frozen=True)
class TrajectoryDetection:
    """一次检测命中：事件 + 触发原因 + 采样索引。"""

    event: BounceEvent
    reason: str
    sample_index: int
    angle_deg: float


def _near_side_wall(x: float, cfg: TrajectoryDetectorConfig) -> bool:
    return x < float(cfg.wall_x_min) or x > float(cfg.wall_x_max)


def classify_window(f: WindowFeatures, cfg: TrajectoryDetectorConfig) -> tuple[EventKind | None, str | None]:
    """对单个窗口分类。

    Returns:
        (kind, reason)；未命中时为 (None, None)。
    """

    vy_thr = float(cfg.vy_threshold)
    vx_thr = float(cfg.vx_threshold)

    # region A) 速度反转
    if f.vy_before > vy_thr and f.vy_after < -vy_thr * float(cfg.vy_reversal_fraction):
        if float(cfg.floor_y_min) < f.y < float(cfg.floor_y_max):
            return KIND_FLOOR, REASON_VY_REVERSAL
    elif (f.vx_before > vx_thr and f.vx_after < -vx_thr * float(cfg.vx_reversal_fraction)) or (
        f.vx_before < -vx_thr and f.vx_after > vx_thr * float(cfg.vx_reversal_fraction)
    ):
        if _near_side_wall(f.x, cfg):
            return KIND_WALL, REASON_VX_REVERSAL_NEAR_WALL
    # endregion

    # region B) 方向突变兜底
    if f.angle_deg > float(cfg.sharp_angle_deg):
        if _near_side_wall(f.x, cfg):
            return KIND_WALL, REASON_SHARP_ANGLE
        return KIND_FLOOR, REASON_SHARP_ANGLE
    # endregion

    return None, None


def scan_trajectory(
    samples: Sequence[BallSample],
    *,
    known_timestamps: Iterable[float] = (),
    cfg: TrajectoryDetectorConfig | None = None,
) -> list[TrajectoryDetection]:
    """扫描采样序列并返回全部命中（带诊断信息）。

    Args:
        samples: 按时间升序的球位置采样。
        known_timestamps: 已知事件的时间戳（authoritative + 合成 swing）。
        cfg: TrajectoryDetectorConfig；None 时使用默认值。

    Returns:
        按时间顺序的命中列表。
    """

    if cfg is None:
        cfg = TrajectoryDetectorConfig()

    n = len(samples)
    # 至少需要一个 i 满足 2 <= i <= n-3。
    if n < 5:
        return []

    ts, xs, ys = samples_to_arrays(samples)
    dts = np.diff(ts)
    dxs = np.diff(xs)
    dys = np.diff(ys)

    # angles[i-1] 对应采样 i 的 incoming/outgoing 夹角（i = 1..n-2）。
    incoming = np.stack([dxs[:-1], dys[:-1]], axis=1)
    outgoing = np.stack([dxs[1:], dys[1:]], axis=1)
    angles = angles_between(incoming, outgoing)

    known = [float(t) for t in known_timestamps]
    window_s = float(cfg.known_event_window_s)
    skip = int(cfg.skip_samples_after_detection)

    out: list[TrajectoryDetection] = []
    consumed_until = -1
    for i in range(2, n - 2):
        if i <= consumed_until:
            continue

        t = float(ts[i])
        if has_event_near(t, known, window_s):
            continue

        # 窗口内任一采样坐标非有限值：速度/夹角都不可信，跳过。
        if not bool(np.all(np.isfinite(xs[i - 1 : i + 2])) and np.all(np.isfinite(ys[i - 1 : i + 2]))):
            continue

        dt_before = float(dts[i - 1])
        dt_after = float(dts[i])
        # 时间戳重复/倒序时速度无定义：跳过该窗口。
        if not (dt_before > 0.0 and dt_after > 0.0):
            continue

        feats = WindowFeatures(
            t=t,
            x=float(xs[i]),
            y=float(ys[i]),
            vx_before=float(dxs[i - 1]) / dt_before,
            vx_after=float(dxs[i]) / dt_after,
            vy_before=float(dys[i - 1]) / dt_before,
            vy_after=float(dys[i]) / dt_after,
            angle_deg=float(angles[i - 1]),
        )
        kind, reason = classify_window(feats, cfg)
        if kind is None or reason is None:
            continue

        event = BounceEvent(
            timestamp=t,
            position=(float(np.clip(feats.x, 0.0, 1.0)), float(np.clip(feats.y, 0.0, 1.0))),
            player_id=UNATTRIBUTED_PLAYER_ID,
            kind=kind,
        )
        out.append(TrajectoryDetection(event=event, reason=reason, sample_index=i, angle_deg=feats.angle_deg))
        known.append(t)
        consumed_until = i + skip

    return out


def detect_trajectory_bounces(
    samples: Sequence[BallSample],
    *,
    known_timestamps: Iterable[float] = (),
    cfg: TrajectoryDetectorConfig | None = None,
) -> list[BounceEvent]:
    """检测 floor/wall 事件（`scan_trajectory` 的精简封装）。"""

    return [d.event for d in scan_trajectory(samples, known_timestamps=known_timestamps, cfg=cfg)]
