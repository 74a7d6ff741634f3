"""trajectory_events 的核心数据结构定义。

坐标约定（与上游分析结果一致）：
- x/y 为视频画面内的归一化坐标，范围 [0, 1]。
- 原点在画面左上角，x 向右为正，y 向下为正。
- 球网/中线默认位于 y=0.5（见 `ReclassifierConfig.midline_y`）。

说明：
    - 类型层只放字段与语义说明，不做运行时校验；边界校验见 `trajectory_events.samples`。
    - 所有类型均为 frozen dataclass：引擎内部的“改类型”一律通过 `dataclasses.replace`
      产生新对象，不原地修改。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EventKind = Literal["authoritative", "swing", "floor", "wall", "inferred_swing"]

KIND_AUTHORITATIVE: EventKind = "authoritative"
KIND_SWING: EventKind = "swing"
KIND_FLOOR: EventKind = "floor"
KIND_WALL: EventKind = "wall"
KIND_INFERRED_SWING: EventKind = "inferred_swing"

# 轨迹检测器产出、且允许被因果一致性重分类改写的类型。
TRAJECTORY_KINDS: tuple[EventKind, ...] = (KIND_FLOOR, KIND_WALL)

UNATTRIBUTED_PLAYER_ID = -1


@dataclass(frozen=True)
class BallSample:
    """单帧球位置采样。

    属性:
        timestamp: 视频时间（秒）。
        x: 归一化横坐标，[0, 1]。
        y: 归一化纵坐标，[0, 1]，向下为正。
        interpolated: 是否由轨迹清洗的缺口插值合成（上游原始采样恒为 False）。
    """

    timestamp: float
    x: float
    y: float
    interpolated: bool = False


@dataclass(frozen=True)
class SwingEvent:
    """一次挥拍击球检测。

    属性:
        hit_timestamp: 击球时刻（秒）。
        player_id: 击球球员 id。
        ball_speed: 击球后球速；<=0 表示“未测到速度”，不是错误。
    """

    hit_timestamp: float
    player_id: int
    ball_speed: float = 0.0


@dataclass(frozen=True)
class BounceEvent:
    """时间轴上的一个球事件（落地/撞墙/击球）。

    属性:
        timestamp: 事件时刻（秒）。
        position: 事件位置 (x, y)，归一化坐标。
        player_id: 关联球员；-1 表示未归属。
        kind: 事件类型，见 `EventKind`。
        upstream_type: 仅 authoritative 事件使用，保留上游原始 type 字符串（例如 "floor"）。
    """

    timestamp: float
    position: tuple[float, float]
    player_id: int = UNATTRIBUTED_PLAYER_ID
    kind: EventKind = KIND_FLOOR
    upstream_type: str | None = None

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def is_authoritative(self) -> bool:
        return self.kind == KIND_AUTHORITATIVE
