"""球位置采样的边界处理。

约定：
    - 引擎内部（合成器/检测器）假设采样已按 timestamp 升序排列，且不会再排序。
    - 排序/清洗属于调用边界的职责：上游数据进入引擎前应先经过 `prepare_samples`。
      未排序的输入不会报错，但速度估计会退化（`infer_events` 会打 warning）。
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

from trajectory_events.types import BallSample


def _in_frame(v: float) -> bool:
    return math.isfinite(v) and 0.0 <= v <= 1.0


def prepare_samples(samples: Iterable[BallSample]) -> list[BallSample]:
    """清洗并排序采样。

    规则：
        - 丢弃 timestamp 非有限值的采样。
        - 丢弃 x/y 不在 [0, 1] 内（或非有限值）的采样：引擎不做越界外推。
        - 按 timestamp 稳定排序（相同时间戳保持输入顺序）。

    Returns:
        新的采样列表。
    """

    kept = [
        s
        for s in samples
        if math.isfinite(float(s.timestamp)) and _in_frame(float(s.x)) and _in_frame(float(s.y))
    ]
    return sorted(kept, key=lambda s: float(s.timestamp))


def is_time_sorted(samples: Sequence[BallSample]) -> bool:
    """检查采样是否按 timestamp 非降序排列。"""

    if len(samples) < 2:
        return True
    ts = np.fromiter((float(s.timestamp) for s in samples), dtype=float, count=len(samples))
    return bool(np.all(np.diff(ts) >= 0.0))


def samples_to_arrays(samples: Sequence[BallSample]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """把采样序列拆成 (ts, xs, ys) 三个 shape=(N,) 的浮点数组。"""

    n = len(samples)
    ts = np.fromiter((float(s.timestamp) for s in samples), dtype=float, count=n)
    xs = np.fromiter((float(s.x) for s in samples), dtype=float, count=n)
    ys = np.fromiter((float(s.y) for s in samples), dtype=float, count=n)
    return ts, xs, ys
