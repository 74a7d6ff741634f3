"""trajectory_events 的配置定义。

说明：
    - 所有阈值都是经验常量（没有物理推导），因此统一作为可调配置暴露，
      而不是写死在算法模块里。
    - 配置只通过参数显式传入 `infer_events`，算法模块不读取任何全局状态。
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DetectorToggles:
    """三个相互独立的检测器开关。

    说明：
        detect_audio_bounces 目前是保留位：声音检测依赖的前置能力尚未就绪，
        即使置为 True 也会被忽略（并打 warning）。
    """

    synthesize_swing_bounces: bool = True
    detect_trajectory_bounces: bool = True
    detect_audio_bounces: bool = False


@dataclass(frozen=True)
class SwingBounceConfig:
    """击球事件合成（swing -> swing 类型事件）配置。

    属性说明：
        dedup_window_s: 若 hit 时刻附近该窗口内已有 authoritative 或已合成的 swing 事件，则跳过。
        search_lookback_s: 从 hit 时刻往前多少秒开始扫描采样。
        search_horizon_s: 扫描到 hit 时刻之后多少秒停止。
        max_match_dt_s: 最近采样与 hit 时刻的时间差上限；超过则认为没有可信位置。
    """

    dedup_window_s: float = 0.15
    search_lookback_s: float = 0.15
    search_horizon_s: float = 0.2
    max_match_dt_s: float = 0.15

    def __post_init__(self) -> None:
        for name in ("dedup_window_s", "search_lookback_s", "search_horizon_s", "max_match_dt_s"):
            if float(getattr(self, name)) < 0.0:
                raise ValueError(f"{name} must be >= 0")


@dataclass(frozen=True)
class TrajectoryDetectorConfig:
    """轨迹异常（落地/撞墙）检测配置。

    速度单位为“归一化坐标 / 秒”。y 向下为正，因此 vy>0 表示球在画面中下落。

    属性说明：
        known_event_window_s: 已知事件附近该窗口内的采样不再检测。
        vy_threshold: 落地判定的下落速度阈值。
        vy_reversal_fraction: 落地后反向速度需超过 vy_threshold 的该比例。
        floor_y_min / floor_y_max: 落地点 y 的有效范围（排除贴近画面上下边缘的点）。
        vx_threshold: 撞墙判定的横向速度阈值。
        vx_reversal_fraction: 撞墙后反向横向速度需超过 vx_threshold 的该比例。
        wall_x_min / wall_x_max: x 小于 wall_x_min 或大于 wall_x_max 视为靠近侧墙。
        sharp_angle_deg: 方向突变兜底判定的夹角阈值（度）。
        skip_samples_after_detection: 命中后跳过的后续采样数，避免同一次物理反弹重复触发。
    """

    known_event_window_s: float = 0.2

    vy_threshold: float = 0.5
    vy_reversal_fraction: float = 0.3
    floor_y_min: float = 0.1
    floor_y_max: float = 0.95

    vx_threshold: float = 0.3
    vx_reversal_fraction: float = 0.5
    wall_x_min: float = 0.15
    wall_x_max: float = 0.85

    sharp_angle_deg: float = 55.0

    skip_samples_after_detection: int = 3

    def __post_init__(self) -> None:
        if float(self.known_event_window_s) < 0.0:
            raise ValueError("known_event_window_s must be >= 0")
        if float(self.vy_threshold) <= 0.0 or float(self.vx_threshold) <= 0.0:
            raise ValueError("velocity thresholds must be > 0")
        if not (0.0 <= float(self.vy_reversal_fraction) <= 1.0):
            raise ValueError("vy_reversal_fraction must be in [0, 1]")
        if not (0.0 <= float(self.vx_reversal_fraction) <= 1.0):
            raise ValueError("vx_reversal_fraction must be in [0, 1]")
        if not (0.0 <= float(self.floor_y_min) < float(self.floor_y_max) <= 1.0):
            raise ValueError("floor_y_min/floor_y_max must satisfy 0 <= min < max <= 1")
        if not (0.0 <= float(self.wall_x_min) < float(self.wall_x_max) <= 1.0):
            raise ValueError("wall_x_min/wall_x_max must satisfy 0 <= min < max <= 1")
        if not (0.0 < float(self.sharp_angle_deg) < 180.0):
            raise ValueError("sharp_angle_deg must be in (0, 180)")
        if int(self.skip_samples_after_detection) < 0:
            raise ValueError("skip_samples_after_detection must be >= 0")


@dataclass(frozen=True)
class ReclassifierConfig:
    """因果一致性重分类配置。

    说明：
        midline_y 是球网在归一化坐标里的位置。上游坐标若没有做过以球网为中心的校正，
        调用方应显式提供真实中线位置，而不是依赖默认的 0.5。
    """

    midline_y: float = 0.5

    def __post_init__(self) -> None:
        if not (0.0 < float(self.midline_y) < 1.0):
            raise ValueError("midline_y must be in (0, 1)")


@dataclass(frozen=True)
class SampleFilterConfig:
    """球轨迹清洗配置（离群点剔除 + 缺口插值 + 平滑）。

    说明：
        - 默认关闭：引擎默认直接使用上游采样。
        - 开启后各阶段可单独开关；默认参数与任务查看器中的轨迹清洗一致。
    """

    enabled: bool = False

    remove_outliers: bool = True
    # 归一化单位/秒。该值非常激进，只适合低速/近景素材。
    max_velocity: float = 0.6

    interpolate_gaps: bool = True
    max_gap_s: float = 0.5
    fps: float = 30.0

    smooth: bool = True
    smoothing_window: int = 3

    def __post_init__(self) -> None:
        if float(self.max_velocity) <= 0.0:
            raise ValueError("max_velocity must be > 0")
        if float(self.max_gap_s) < 0.0:
            raise ValueError("max_gap_s must be >= 0")
        if float(self.fps) <= 0.0:
            raise ValueError("fps must be > 0")
        if int(self.smoothing_window) < 1:
            raise ValueError("smoothing_window must be >= 1")


@dataclass(frozen=True)
class EventInferenceConfig:
    """事件推断引擎的配置聚合。

    说明：
        各算法模块只使用自己负责的子配置；该类仅作为 `infer_events` 的聚合入口。
    """

    toggles: DetectorToggles = field(default_factory=DetectorToggles)
    swing_bounce: SwingBounceConfig = field(default_factory=SwingBounceConfig)
    trajectory: TrajectoryDetectorConfig = field(default_factory=TrajectoryDetectorConfig)
    reclassifier: ReclassifierConfig = field(default_factory=ReclassifierConfig)
    sample_filter: SampleFilterConfig = field(default_factory=SampleFilterConfig)
