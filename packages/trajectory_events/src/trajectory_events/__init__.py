"""trajectory_events 包入口：比赛回放中的球事件时间轴推断。

导出内容：
    - infer_events / infer_events_with_report：单一入口（合成 + 检测 + 合并 + 重分类）。
    - 常用配置 dataclass 与数据类型：作为跨包集成时的稳定构造入口。
    - 各阶段函数：便于单独调用与回归测试。
"""

from trajectory_events.api import InferenceReport, infer_events, infer_events_with_report
from trajectory_events.configs import (
    DetectorToggles,
    EventInferenceConfig,
    ReclassifierConfig,
    SampleFilterConfig,
    SwingBounceConfig,
    TrajectoryDetectorConfig,
)
from trajectory_events.math_utils import angle_between
from trajectory_events.merge import merge_events
from trajectory_events.reclassify import court_side, reclassify_events
from trajectory_events.sample_filter import FilterStats, filter_samples
from trajectory_events.samples import prepare_samples
from trajectory_events.swing_bounce import synthesize_swing_bounces
from trajectory_events.trajectory_detector import detect_trajectory_bounces
from trajectory_events.types import (
    KIND_AUTHORITATIVE,
    KIND_FLOOR,
    KIND_INFERRED_SWING,
    KIND_SWING,
    KIND_WALL,
    BallSample,
    BounceEvent,
    EventKind,
    SwingEvent,
)

__all__ = [
    "BallSample",
    "BounceEvent",
    "DetectorToggles",
    "EventInferenceConfig",
    "EventKind",
    "FilterStats",
    "InferenceReport",
    "KIND_AUTHORITATIVE",
    "KIND_FLOOR",
    "KIND_INFERRED_SWING",
    "KIND_SWING",
    "KIND_WALL",
    "ReclassifierConfig",
    "SampleFilterConfig",
    "SwingBounceConfig",
    "SwingEvent",
    "TrajectoryDetectorConfig",
    "angle_between",
    "court_side",
    "detect_trajectory_bounces",
    "filter_samples",
    "infer_events",
    "infer_events_with_report",
    "merge_events",
    "prepare_samples",
    "reclassify_events",
    "synthesize_swing_bounces",
]
