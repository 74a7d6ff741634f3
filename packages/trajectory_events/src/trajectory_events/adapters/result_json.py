"""上游比赛分析结果（statistics result JSON）与引擎类型之间的适配。

上游 JSON 形态（只列出本模块使用的字段）：

    {
      "ball_positions": [{"timestamp": 1.23, "X": 0.41, "Y": 0.62}, ...],
      "ball_bounces":   [{"timestamp": 1.30, "court_pos": [0.4, 0.7],
                          "player_id": -1, "type": "floor"}, ...],
      "players": [
        {"player_id": 0,
         "swings": [{"ball_hit": {"timestamp": 2.0}, "ball_speed": 80.0,
                     "is_in_rally": true}, ...]},
        ...
      ]
    }

说明：
    - 单条记录格式不对时跳过（返回 None），不让一条坏数据拖垮整场比赛。
    - 顶层不是 mapping 属于调用错误，直接抛 TypeError。
    - ball_bounces 全部视为 authoritative，上游 type 保留在 `upstream_type`，
      写回 JSON 时原样还原。
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Sequence

from trajectory_events.api import InferenceReport, infer_events_with_report
from trajectory_events.configs import EventInferenceConfig
from trajectory_events.samples import prepare_samples
from trajectory_events.types import (
    KIND_AUTHORITATIVE,
    UNATTRIBUTED_PLAYER_ID,
    BallSample,
    BounceEvent,
    SwingEvent,
)


def _as_result_mapping(result: Any) -> Mapping[str, Any]:
    if not isinstance(result, Mapping):
        raise TypeError(f"result 必须是 mapping，实际是：{type(result).__name__}")
    return result


def _to_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def _to_int(v: Any, default: int) -> int:
    f = _to_float(v)
    if f is None:
        return int(default)
    return int(f)


def _as_list(v: Any) -> list[Any]:
    if isinstance(v, list):
        return v
    return []


def _as_sample(obj: Any) -> BallSample | None:
    if not isinstance(obj, Mapping):
        return None
    t = _to_float(obj.get("timestamp"))
    x = _to_float(obj.get("X"))
    y = _to_float(obj.get("Y"))
    if t is None or x is None or y is None:
        return None
    return BallSample(timestamp=t, x=x, y=y)


def _as_authoritative(obj: Any) -> BounceEvent | None:
    if not isinstance(obj, Mapping):
        return None
    t = _to_float(obj.get("timestamp"))
    pos = obj.get("court_pos")
    if t is None or not isinstance(pos, (list, tuple)) or len(pos) != 2:
        return None
    x = _to_float(pos[0])
    y = _to_float(pos[1])
    if x is None or y is None:
        return None
    raw_type = obj.get("type")
    return BounceEvent(
        timestamp=t,
        position=(x, y),
        player_id=_to_int(obj.get("player_id"), UNATTRIBUTED_PLAYER_ID),
        kind=KIND_AUTHORITATIVE,
        upstream_type=str(raw_type) if raw_type is not None else None,
    )


def _as_swing(obj: Any, player_id: int) -> SwingEvent | None:
    if not isinstance(obj, Mapping):
        return None
    # 明确标记为不在回合内的挥拍（练习挥拍/发球前空挥）不参与推断。
    if obj.get("is_in_rally") is False:
        return None
    hit = obj.get("ball_hit")
    if not isinstance(hit, Mapping):
        return None
    t = _to_float(hit.get("timestamp"))
    if t is None:
        return None
    # 缺失球速 == 未测到球速（0）。
    speed = _to_float(obj.get("ball_speed"))
    return SwingEvent(hit_timestamp=t, player_id=int(player_id), ball_speed=speed if speed is not None else 0.0)


def samples_from_result(result: Mapping[str, Any]) -> list[BallSample]:
    """解析 ball_positions，并经过 `prepare_samples`（清洗 + 排序）。"""

    data = _as_result_mapping(result)
    parsed = [s for s in (_as_sample(o) for o in _as_list(data.get("ball_positions"))) if s is not None]
    return prepare_samples(parsed)


def swings_from_result(result: Mapping[str, Any]) -> list[SwingEvent]:
    """展开 players[].swings[]，附上所属 player_id。"""

    data = _as_result_mapping(result)
    out: list[SwingEvent] = []
    for player in _as_list(data.get("players")):
        if not isinstance(player, Mapping):
            continue
        pid = _to_int(player.get("player_id"), UNATTRIBUTED_PLAYER_ID)
        for raw in _as_list(player.get("swings")):
            swing = _as_swing(raw, pid)
            if swing is not None:
                out.append(swing)
    return out


def authoritative_from_result(result: Mapping[str, Any]) -> list[BounceEvent]:
    """解析 ball_bounces 为 authoritative 事件（保持输入顺序）。"""

    data = _as_result_mapping(result)
    return [e for e in (_as_authoritative(o) for o in _as_list(data.get("ball_bounces"))) if e is not None]


def event_to_record(event: BounceEvent) -> dict[str, Any]:
    """单个事件 -> JSON 记录（与上游 ball_bounces 同形态）。"""

    if event.is_authoritative and event.upstream_type is not None:
        type_str = event.upstream_type
    else:
        type_str = str(event.kind)
    return {
        "timestamp": float(event.timestamp),
        "court_pos": [float(event.position[0]), float(event.position[1])],
        "player_id": int(event.player_id),
        "type": type_str,
    }


def events_to_records(events: Sequence[BounceEvent]) -> list[dict[str, Any]]:
    return [event_to_record(e) for e in events]


def infer_report_from_result(
    result: Mapping[str, Any],
    cfg: EventInferenceConfig | None = None,
    *,
    logger: logging.Logger | None = None,
) -> InferenceReport:
    """从上游 result 直接推断事件时间轴，并返回诊断信息（CLI 使用）。"""

    samples = samples_from_result(result)
    swings = swings_from_result(result)
    authoritative = authoritative_from_result(result)
    if logger is not None:
        logger.debug(
            "result parsed: samples=%d swings=%d authoritative=%d",
            len(samples),
            len(swings),
            len(authoritative),
        )
    return infer_events_with_report(samples, swings, authoritative, cfg, logger=logger)


def infer_events_from_result(
    result: Mapping[str, Any],
    cfg: EventInferenceConfig | None = None,
    *,
    logger: logging.Logger | None = None,
) -> list[BounceEvent]:
    """从上游 result 直接推断事件时间轴。"""

    return list(infer_report_from_result(result, cfg, logger=logger).events)
