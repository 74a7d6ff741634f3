"""trajectory_events 的轻量几何工具。

设计约束：
    - 仅依赖 NumPy。
    - 零长度向量不定义方向：夹角按 0 度处理（视为“无方向变化”），
      不返回 NaN，也不抛异常。
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def vector_sub(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """返回 a - b（二维）。"""

    return np.asarray(a, dtype=float).reshape(2) - np.asarray(b, dtype=float).reshape(2)


def vector_norm(v: np.ndarray) -> float:
    """返回二维向量的模长。"""

    return float(np.hypot(*np.asarray(v, dtype=float).reshape(2)))


def angle_between(v1: np.ndarray, v2: np.ndarray) -> float:
    """计算两个二维向量的夹角（度）。

    Args:
        v1: 向量 1，shape=(2,)。
        v2: 向量 2，shape=(2,)。

    Returns:
        夹角，范围 [0, 180]。同向为 0，反向为 180；任一向量模长为 0 时返回 0。
    """

    a = np.asarray(v1, dtype=float).reshape(2)
    b = np.asarray(v2, dtype=float).reshape(2)

    n1 = vector_norm(a)
    n2 = vector_norm(b)
    if n1 == 0.0 or n2 == 0.0:
        return 0.0

    # 浮点误差可能让 cos 略超出 [-1, 1]，arccos 前先截断。
    cos_a = float(np.clip(float(np.dot(a, b)) / (n1 * n2), -1.0, 1.0))
    return float(np.degrees(np.arccos(cos_a)))


def angles_between(v1: np.ndarray, v2: np.ndarray) -> np.ndarray:
    """`angle_between` 的向量化版本。

    Args:
        v1: shape=(N,2)。
        v2: shape=(N,2)。

    Returns:
        shape=(N,) 的夹角数组（度）；零长度行返回 0。
    """

    a = np.asarray(v1, dtype=float).reshape(-1, 2)
    b = np.asarray(v2, dtype=float).reshape(-1, 2)
    if a.shape != b.shape:
        raise ValueError(f"shape mismatch: {a.shape} vs {b.shape}")

    n1 = np.hypot(a[:, 0], a[:, 1])
    n2 = np.hypot(b[:, 0], b[:, 1])
    denom = n1 * n2
    ok = denom > 0.0

    out = np.zeros((a.shape[0],), dtype=float)
    if bool(np.any(ok)):
        dots = np.sum(a[ok] * b[ok], axis=1)
        out[ok] = np.degrees(np.arccos(np.clip(dots / denom[ok], -1.0, 1.0)))
    return out


def has_event_near(t: float, event_ts: Sequence[float], window_s: float) -> bool:
    """判断 event_ts 中是否存在与 t 的距离严格小于 window_s 的时间戳。"""

    if len(event_ts) == 0:
        return False
    arr = np.asarray(event_ts, dtype=float)
    return bool(np.any(np.abs(arr - float(t)) < float(window_s)))
