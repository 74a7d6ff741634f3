"""trajectory_events 稳定公共 API。

数据流（单向）：

    samples + swings + authoritative
        -> [可选] 轨迹清洗
        -> 击球事件合成（swing） / 轨迹异常检测（floor/wall）
        -> 合并排序
        -> 因果一致性重分类
        -> 最终事件列表

约定：
    - 纯函数：同一组 (samples, swings, authoritative, cfg) 永远得到同样的、同样顺序的输出。
      不保存任何跨调用状态；上层可以按输入做缓存。
    - 配置只通过参数传入，不读取任何环境/全局状态。
    - 输入采样应已按时间升序（见 `trajectory_events.samples.prepare_samples`）；
      引擎不会替调用方排序，只在发现乱序时打 warning。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from trajectory_events.configs import EventInferenceConfig
from trajectory_events.merge import merge_events
from trajectory_events.reclassify import reclassify_events
from trajectory_events.sample_filter import FilterStats, filter_samples
from trajectory_events.samples import is_time_sorted
from trajectory_events.swing_bounce import synthesize_swing_bounces
from trajectory_events.trajectory_detector import TrajectoryDetection, scan_trajectory
from trajectory_events.types import BallSample, BounceEvent, SwingEvent
from trajectory_events.utils import default_logger


@dataclass(frozen=True)
class InferenceReport:
    """一次推断的结果与诊断。

    属性:
        events: 最终事件（按时间升序）。
        num_authoritative: 输入的 authoritative 事件数。
        num_swing_bounces: 合成的 swing 事件数。
        num_trajectory_bounces: 轨迹检测命中数（重分类之前）。
        num_reclassified: 被改写为 inferred_swing 的事件数。
        detections: 轨迹检测命中明细（含原因码）。
        filter_stats: 启用轨迹清洗时的统计；未启用为 None。
    """

    events: tuple[BounceEvent, ...]
    num_authoritative: int
    num_swing_bounces: int
    num_trajectory_bounces: int
    num_reclassified: int
    detections: tuple[TrajectoryDetection, ...] = ()
    filter_stats: FilterStats | None = None


def infer_events_with_report(
    samples: Sequence[BallSample] | None,
    swings: Sequence[SwingEvent] | None,
    authoritative: Sequence[BounceEvent] | None,
    cfg: EventInferenceConfig | None = None,
    *,
    logger: logging.Logger | None = None,
) -> InferenceReport:
    """执行完整推断并返回诊断信息。

    Raises:
        ValueError: authoritative 中混入了非 authoritative 类型的事件。
    """

    if cfg is None:
        cfg = EventInferenceConfig()
    if logger is None:
        logger = default_logger()

    samples_l = list(samples or ())
    swings_l = list(swings or ())
    auth_l = list(authoritative or ())

    bad = [e for e in auth_l if not e.is_authoritative]
    if bad:
        raise ValueError(f"authoritative events must have kind='authoritative', got {sorted({e.kind for e in bad})}")

    toggles = cfg.toggles
    if toggles.detect_audio_bounces:
        logger.warning("audio bounce detection is not available yet; detect_audio_bounces is ignored")

    filter_stats: FilterStats | None = None
    if cfg.sample_filter.enabled:
        samples_l, filter_stats = filter_samples(samples_l, cfg.sample_filter)
        logger.debug(
            "sample filter: %d -> %d (removed=%d, interpolated=%d)",
            filter_stats.original_count,
            filter_stats.final_count,
            filter_stats.removed_outliers,
            filter_stats.interpolated_points,
        )
    elif not is_time_sorted(samples_l):
        logger.warning("ball samples are not sorted by timestamp; velocity estimates will be degenerate")

    swing_events: list[BounceEvent] = []
    if toggles.synthesize_swing_bounces:
        swing_events = synthesize_swing_bounces(
            samples_l,
            swings_l,
            authoritative=auth_l,
            cfg=cfg.swing_bounce,
        )

    detections: list[TrajectoryDetection] = []
    if toggles.detect_trajectory_bounces:
        known = [float(e.timestamp) for e in auth_l] + [float(e.timestamp) for e in swing_events]
        detections = scan_trajectory(samples_l, known_timestamps=known, cfg=cfg.trajectory)

    merged = merge_events(auth_l, swing_events, [d.event for d in detections])
    final = reclassify_events(merged, swings_l, cfg=cfg.reclassifier)
    num_reclassified = sum(1 for a, b in zip(merged, final) if a.kind != b.kind)

    logger.debug(
        "inferred events: authoritative=%d swing=%d trajectory=%d reclassified=%d total=%d",
        len(auth_l),
        len(swing_events),
        len(detections),
        num_reclassified,
        len(final),
    )

    return InferenceReport(
        events=tuple(final),
        num_authoritative=len(auth_l),
        num_swing_bounces=len(swing_events),
        num_trajectory_bounces=len(detections),
        num_reclassified=int(num_reclassified),
        detections=tuple(detections),
        filter_stats=filter_stats,
    )


def infer_events(
    samples: Sequence[BallSample] | None,
    swings: Sequence[SwingEvent] | None,
    authoritative: Sequence[BounceEvent] | None,
    cfg: EventInferenceConfig | None = None,
    *,
    logger: logging.Logger | None = None,
) -> list[BounceEvent]:
    """推断最终事件时间轴。

    Args:
        samples: 按时间升序的球位置采样；None/空时只返回 authoritative。
        swings: 全部 swing 检测。
        authoritative: 上游已有的权威事件（kind 必须为 authoritative），原样保留。
        cfg: EventInferenceConfig；None 时使用默认值（swing 合成与轨迹检测开启）。
        logger: 可选 logger；None 时使用 `default_logger()`。

    Returns:
        按 timestamp 升序的事件列表（新列表）。
    """

    report = infer_events_with_report(samples, swings, authoritative, cfg, logger=logger)
    return list(report.events)


__all__ = [
    "InferenceReport",
    "infer_events",
    "infer_events_with_report",
]
