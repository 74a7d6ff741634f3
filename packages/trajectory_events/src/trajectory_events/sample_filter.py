"""球轨迹清洗：离群点剔除 + 缺口插值 + 时间平滑。

上游检测器经常在相邻帧之间“跳”到别的目标上（误检/瞬移），或在遮挡处丢帧。
本模块在进入事件推断前对采样做一次可选清洗（`SampleFilterConfig.enabled`）。

三个阶段依次执行，均可单独开关：
    1) 离群点剔除：多种启发式先标记“可疑点”，再逐个判断可疑点是否与邻居一致。
    2) 缺口插值：对 2.5 帧间隔 < dt <= max_gap_s 的缺口做 Catmull-Rom 插值补点。
    3) 时间平滑：中心加权滑动平均，只平滑坐标、不改时间戳。

说明：
    - 所有阈值都在归一化坐标下给出（单位：画面宽/高）。
    - 输出坐标始终在 [0, 1] 内：平滑是凸组合；Catmull-Rom 可能过冲，插值点会被截断。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from trajectory_events.configs import SampleFilterConfig
from trajectory_events.math_utils import angles_between
from trajectory_events.samples import samples_to_arrays
from trajectory_events.types import BallSample

# region 离群点启发式常量
_WINDOW3_SPEED_MULT = 1.2
_WINDOW5_SPEED_MULT = 1.5

_SHARP_TURN_DEG = 90.0
_SHARP_TURN_MIN_LEG = 0.02

_PINGPONG_RATIO = 0.3
_PINGPONG_MIN_STEP = 0.05

_JUMP_DIST = 0.15
_JUMP_DT_S = 0.15

_STEP_MIN = 0.03
_STEP_MAX = 0.12
_STEP_SPEED_SCALE = 0.08

_CONSISTENT_MIDPOINT_RATIO = 0.4
_CONSISTENT_SPEED_MULT = 0.5
# endregion

_GAP_FRAME_MULT = 2.5
_CATMULL_ROM_TENSION = 0.5


@dataclass(frozen=True)
class FilterStats:
    """清洗统计。"""

    original_count: int
    removed_outliers: int
    interpolated_points: int
    final_count: int


def _dist(a: BallSample, b: BallSample) -> float:
    return float(math.hypot(float(b.x) - float(a.x), float(b.y) - float(a.y)))


def _speed(a: BallSample, b: BallSample) -> float:
    dt = float(b.timestamp) - float(a.timestamp)
    if dt <= 0.0:
        return 0.0
    return _dist(a, b) / dt


def find_suspicious(samples: Sequence[BallSample], max_velocity: float) -> set[int]:
    """返回可疑采样的索引集合。"""

    n = len(samples)
    if n < 3:
        return set()

    ts, xs, ys = samples_to_arrays(samples)
    dts = np.diff(ts)
    dxs = np.diff(xs)
    dys = np.diff(ys)
    steps = np.hypot(dxs, dys)
    vmax = float(max_velocity)

    suspicious: set[int] = set()

    # 1) 相邻帧速度过大：两端都标记。
    for i in range(1, n):
        if dts[i - 1] > 0.0 and steps[i - 1] / dts[i - 1] > vmax:
            suspicious.update((i - 1, i))

    # 2) 3 帧窗口平均速度：抓“平滑过渡到误检目标”的情况。
    for i in range(2, n):
        dt = float(ts[i] - ts[i - 2])
        if dt > 0.0 and _dist(samples[i - 2], samples[i]) / dt > vmax * _WINDOW3_SPEED_MULT:
            suspicious.update((i - 1, i))

    # 2b) 5 帧窗口：抓更缓慢的漂移，中间帧全部标记。
    for i in range(4, n):
        dt = float(ts[i] - ts[i - 4])
        if dt > 0.0 and _dist(samples[i - 4], samples[i]) / dt > vmax * _WINDOW5_SPEED_MULT:
            suspicious.update(range(i - 3, i + 1))

    # 3) 急转：方向变化大且前后两段位移都不小。
    incoming = np.stack([dxs[:-1], dys[:-1]], axis=1)
    outgoing = np.stack([dxs[1:], dys[1:]], axis=1)
    turn = angles_between(incoming, outgoing)
    for i in range(1, n - 1):
        if turn[i - 1] > _SHARP_TURN_DEG and steps[i - 1] > _SHARP_TURN_MIN_LEG and steps[i] > _SHARP_TURN_MIN_LEG:
            suspicious.add(i)

    # 4) 乒乓：当前点离 i-2 比离 i-1 近得多，说明 i-1 是一次来回跳变。
    for i in range(2, n - 1):
        to_prev2 = _dist(samples[i], samples[i - 2])
        to_prev1 = float(steps[i - 1])
        if to_prev2 < to_prev1 * _PINGPONG_RATIO and to_prev1 > _PINGPONG_MIN_STEP:
            suspicious.add(i - 1)

    # 5) 持续偏移：短时间内整体跳到画面另一区域。
    if n >= 6:
        for start in range(0, n - 4):
            cx = 0.5 * float(xs[start] + xs[start + 1])
            cy = 0.5 * float(ys[start] + ys[start + 1])
            for j in range(start + 2, min(start + 5, n)):
                d = math.hypot(float(xs[j]) - cx, float(ys[j]) - cy)
                if d > _JUMP_DIST and float(ts[j] - ts[start]) < _JUMP_DT_S:
                    suspicious.update(range(start + 1, j + 1))

    # 6) 速度自适应步长：慢球阈值紧，快球阈值松。
    for i in range(1, n):
        local_speed = 0.0
        if i >= 2:
            lookback = min(3, i)
            total = 0.0
            for j in range(i - lookback, i):
                if dts[j] > 0.0:
                    total += float(steps[j] / dts[j])
            local_speed = total / lookback
        thr = min(_STEP_MAX, _STEP_MIN + local_speed * _STEP_SPEED_SCALE)
        if steps[i - 1] > thr:
            suspicious.update((i - 1, i))

    return suspicious


def remove_outliers(samples: Sequence[BallSample], max_velocity: float) -> tuple[list[BallSample], int]:
    """剔除与邻居不一致的可疑点。

    Returns:
        (保留的采样, 剔除数量)。
    """

    n = len(samples)
    if n < 3:
        return list(samples), 0

    suspicious = find_suspicious(samples, max_velocity)
    vmax = float(max_velocity)

    kept: list[BallSample] = []
    removed = 0
    for i, s in enumerate(samples):
        if i not in suspicious:
            kept.append(s)
            continue

        prev_ok = i > 0 and (i - 1) not in suspicious
        next_ok = i < n - 1 and (i + 1) not in suspicious

        consistent = False
        if prev_ok and next_ok:
            prev, nxt = samples[i - 1], samples[i + 1]
            mx = 0.5 * (float(prev.x) + float(nxt.x))
            my = 0.5 * (float(prev.y) + float(nxt.y))
            deviation = math.hypot(float(s.x) - mx, float(s.y) - my)
            consistent = deviation < _dist(prev, nxt) * _CONSISTENT_MIDPOINT_RATIO
        elif prev_ok:
            consistent = _speed(samples[i - 1], s) < vmax * _CONSISTENT_SPEED_MULT
        elif next_ok:
            consistent = _speed(s, samples[i + 1]) < vmax * _CONSISTENT_SPEED_MULT

        if consistent:
            kept.append(s)
        else:
            removed += 1

    return kept, removed


def _catmull_rom(
    p0: BallSample,
    p1: BallSample,
    p2: BallSample,
    p3: BallSample,
    t: float,
    tension: float = _CATMULL_ROM_TENSION,
) -> BallSample:
    """在 p1 与 p2 之间做 Catmull-Rom 插值，t in (0, 1)。"""

    t2 = t * t
    t3 = t2 * t
    h1 = -tension * t3 + 2.0 * tension * t2 - tension * t
    h2 = (2.0 - tension) * t3 + (tension - 3.0) * t2 + 1.0
    h3 = (tension - 2.0) * t3 + (3.0 - 2.0 * tension) * t2 + tension * t
    h4 = tension * t3 - tension * t2

    x = h1 * p0.x + h2 * p1.x + h3 * p2.x + h4 * p3.x
    y = h1 * p0.y + h2 * p1.y + h3 * p2.y + h4 * p3.y
    return BallSample(
        timestamp=float(p1.timestamp) + (float(p2.timestamp) - float(p1.timestamp)) * t,
        x=float(np.clip(x, 0.0, 1.0)),
        y=float(np.clip(y, 0.0, 1.0)),
        interpolated=True,
    )


def interpolate_gaps(
    samples: Sequence[BallSample],
    *,
    max_gap_s: float,
    fps: float,
) -> tuple[list[BallSample], int]:
    """对中等长度的缺口插值补点。

    Returns:
        (补点后的采样, 新增点数)。
    """

    n = len(samples)
    if n < 2:
        return list(samples), 0

    frame_dt = 1.0 / float(fps)
    gap_thr = frame_dt * _GAP_FRAME_MULT

    out: list[BallSample] = []
    added = 0
    for i in range(n):
        curr = samples[i]
        out.append(curr)
        if i == n - 1:
            break

        nxt = samples[i + 1]
        dt = float(nxt.timestamp) - float(curr.timestamp)
        if not (gap_thr < dt <= float(max_gap_s)):
            continue

        # 四舍五入（不用 Python round 的银行家舍入）。
        num = int(math.floor(dt / frame_dt + 0.5)) - 1
        p0 = samples[i - 1] if i > 0 else curr
        p3 = samples[i + 2] if i < n - 2 else nxt
        for j in range(1, num + 1):
            out.append(_catmull_rom(p0, curr, nxt, p3, j / (num + 1)))
            added += 1

    return out, added


def smooth_trajectory(samples: Sequence[BallSample], window: int) -> list[BallSample]:
    """中心加权滑动平均；权重 1/(1+0.5*|j-i|)。"""

    n = len(samples)
    if n < int(window):
        return list(samples)

    _, xs, ys = samples_to_arrays(samples)
    half = int(window) // 2

    out: list[BallSample] = []
    for i, s in enumerate(samples):
        lo = max(0, i - half)
        hi = min(n - 1, i + half)
        idx = np.arange(lo, hi + 1)
        w = 1.0 / (1.0 + np.abs(idx - i) * 0.5)
        sw = float(np.sum(w))
        out.append(replace(s, x=float(np.dot(w, xs[lo : hi + 1]) / sw), y=float(np.dot(w, ys[lo : hi + 1]) / sw)))
    return out


def filter_samples(
    samples: Sequence[BallSample],
    cfg: SampleFilterConfig | None = None,
) -> tuple[list[BallSample], FilterStats]:
    """按配置依次执行三个清洗阶段。

    说明：
        - 输入会先按 timestamp 稳定排序。
        - 不检查 cfg.enabled：该开关由调用方（`infer_events`）决定是否调用本函数。
    """

    if cfg is None:
        cfg = SampleFilterConfig()

    if len(samples) == 0:
        return [], FilterStats(original_count=0, removed_outliers=0, interpolated_points=0, final_count=0)

    current = sorted(samples, key=lambda s: float(s.timestamp))

    removed = 0
    if cfg.remove_outliers:
        current, removed = remove_outliers(current, float(cfg.max_velocity))

    added = 0
    if cfg.interpolate_gaps:
        current, added = interpolate_gaps(current, max_gap_s=float(cfg.max_gap_s), fps=float(cfg.fps))

    if cfg.smooth:
        current = smooth_trajectory(current, int(cfg.smoothing_window))

    stats = FilterStats(
        original_count=len(samples),
        removed_outliers=int(removed),
        interpolated_points=int(added),
        final_count=len(current),
    )
    return current, stats
