"""击球事件合成：把 swing 检测结果落到球轨迹上，生成 `swing` 类型事件。

思路：
    - 只处理测到球速的 swing（ball_speed>0）；球速为 0 是上游约定的“未测到”，
      直接跳过，不视为错误。
    - 若 hit 时刻附近已经有 authoritative 事件或本模块已合成的 swing 事件，则跳过，
      避免重复上游已经做过的工作。
    - 在 [hit - lookback, hit + horizon] 内找时间上最接近 hit 的采样，作为事件位置；
      若最近采样仍离 hit 太远，则认为没有可信位置，不输出。
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from trajectory_events.configs import SwingBounceConfig
from trajectory_events.math_utils import has_event_near
from trajectory_events.samples import samples_to_arrays
from trajectory_events.types import KIND_SWING, BallSample, BounceEvent, SwingEvent


def closest_sample_index(ts: np.ndarray, hit_t: float, cfg: SwingBounceConfig) -> int | None:
    """在 hit 时刻附近的搜索窗口内找最接近的采样索引。

    Args:
        ts: 升序时间戳数组，shape=(N,)。
        hit_t: 击球时刻（秒）。
        cfg: SwingBounceConfig。

    Returns:
        采样索引；窗口内无采样或最近采样的时间差 >= max_match_dt_s 时返回 None。
    """

    start = int(np.searchsorted(ts, hit_t - float(cfg.search_lookback_s), side="left"))
    stop = int(np.searchsorted(ts, hit_t + float(cfg.search_horizon_s), side="right"))
    if stop <= start:
        return None

    # 并列时取窗口内第一个（np.argmin 的语义）。
    diffs = np.abs(ts[start:stop] - hit_t)
    k = int(np.argmin(diffs))
    if float(diffs[k]) >= float(cfg.max_match_dt_s):
        return None
    return start + k


def synthesize_swing_bounces(
    samples: Sequence[BallSample],
    swings: Sequence[SwingEvent],
    *,
    authoritative: Sequence[BounceEvent] = (),
    cfg: SwingBounceConfig | None = None,
) -> list[BounceEvent]:
    """为每个测到球速的 swing 合成一个 `swing` 事件。

    Args:
        samples: 按时间升序的球位置采样。
        swings: 全部 swing 检测。
        authoritative: 上游已有的 authoritative 事件，用于去重。
        cfg: SwingBounceConfig；None 时使用默认值。

    Returns:
        合成的事件列表（按 swings 的输入顺序）。纯函数，无副作用。
    """

    if cfg is None:
        cfg = SwingBounceConfig()
    if len(samples) == 0 or len(swings) == 0:
        return []

    ts, xs, ys = samples_to_arrays(samples)
    known_ts = [float(e.timestamp) for e in authoritative]

    out: list[BounceEvent] = []
    for swing in swings:
        speed = float(swing.ball_speed)
        # NaN 也会落到这里：比较恒为 False。
        if not speed > 0.0:
            continue

        hit_t = float(swing.hit_timestamp)
        if not math.isfinite(hit_t):
            continue

        if has_event_near(hit_t, known_ts, cfg.dedup_window_s):
            continue

        idx = closest_sample_index(ts, hit_t, cfg)
        if idx is None:
            continue
        # 最近采样坐标缺失（NaN/inf）：同样视为没有可信位置。
        if not (np.isfinite(xs[idx]) and np.isfinite(ys[idx])):
            continue

        x = float(np.clip(xs[idx], 0.0, 1.0))
        y = float(np.clip(ys[idx], 0.0, 1.0))
        out.append(
            BounceEvent(
                timestamp=hit_t,
                position=(x, y),
                player_id=int(swing.player_id),
                kind=KIND_SWING,
            )
        )
        known_ts.append(hit_t)

    return out
