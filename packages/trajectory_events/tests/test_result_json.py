from __future__ import annotations

import json

import pytest

from trajectory_events import KIND_AUTHORITATIVE, KIND_FLOOR, KIND_INFERRED_SWING, KIND_SWING, BounceEvent
from trajectory_events.adapters import (
    authoritative_from_result,
    event_to_record,
    events_to_records,
    infer_events_from_result,
    infer_report_from_result,
    samples_from_result,
    swings_from_result,
)


def _result() -> dict:
    ys = [0.5, 0.6, 0.8, 0.6, 0.4, 0.1, 0.2, 0.1, 0.05, 0.02]
    positions = [{"timestamp": 2.8 + 0.1 * k, "X": 0.5, "Y": y} for k, y in enumerate(ys)]
    # 乱序 + 坏记录：适配层负责清洗与排序。
    positions = list(reversed(positions)) + [
        {"timestamp": 3.05, "X": 1.5, "Y": 0.5},
        {"timestamp": None, "X": 0.5, "Y": 0.5},
        "garbage",
    ]
    return {
        "ball_positions": positions,
        "ball_bounces": [
            {"timestamp": 1.0, "court_pos": [0.3, 0.7], "player_id": 1, "type": "floor"},
            {"timestamp": 1.5, "court_pos": [0.3], "type": "floor"},
        ],
        "players": [
            {
                "player_id": 0,
                "swings": [
                    {"ball_hit": {"timestamp": 0.5}, "ball_speed": 60.0, "is_in_rally": True},
                    {"ball_hit": {"timestamp": 0.7}, "ball_speed": 60.0, "is_in_rally": False},
                    {"ball_hit": {}, "ball_speed": 60.0},
                ],
            },
            {"player_id": 1, "swings": [{"ball_hit": {"timestamp": 4.5}}]},
            "not-a-player",
        ],
    }


def test_samples_are_cleaned_and_sorted():
    samples = samples_from_result(_result())

    assert len(samples) == 10
    ts = [s.timestamp for s in samples]
    assert ts == sorted(ts)
    assert all(0.0 <= s.x <= 1.0 and 0.0 <= s.y <= 1.0 for s in samples)


def test_swings_are_flattened_and_out_of_rally_is_dropped():
    swings = swings_from_result(_result())

    assert [(s.hit_timestamp, s.player_id) for s in swings] == [(0.5, 0), (4.5, 1)]
    # 缺失 ball_speed 视为未测到（0）。
    assert swings[1].ball_speed == 0.0


def test_authoritative_events_keep_upstream_type():
    auth = authoritative_from_result(_result())

    assert len(auth) == 1
    assert auth[0].kind == KIND_AUTHORITATIVE
    assert auth[0].upstream_type == "floor"
    assert auth[0].player_id == 1
    assert event_to_record(auth[0])["type"] == "floor"


def test_missing_sections_are_empty():
    assert samples_from_result({}) == []
    assert swings_from_result({"players": None}) == []
    assert authoritative_from_result({"ball_bounces": "oops"}) == []


def test_non_mapping_result_raises():
    with pytest.raises(TypeError):
        _ = samples_from_result([])  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        _ = infer_events_from_result("x")  # type: ignore[arg-type]


def test_infer_events_from_result_end_to_end():
    events = infer_events_from_result(_result())

    kinds = [e.kind for e in events]
    # 0.5 的 swing 附近没有采样；1.0 为 authoritative；3.0/3.4 为轨迹事件。
    assert kinds == [KIND_AUTHORITATIVE, KIND_INFERRED_SWING, KIND_FLOOR]

    records = events_to_records(events)
    assert [r["type"] for r in records] == ["floor", "inferred_swing", "floor"]
    # 记录可直接序列化。
    assert json.loads(json.dumps(records)) == records


def test_event_to_record_for_derived_event():
    ev = BounceEvent(timestamp=2.0, position=(0.4, 0.6), player_id=0, kind=KIND_SWING)
    assert event_to_record(ev) == {"timestamp": 2.0, "court_pos": [0.4, 0.6], "player_id": 0, "type": "swing"}


def test_report_from_result_matches_event_list():
    report = infer_report_from_result(_result())

    assert list(report.events) == infer_events_from_result(_result())
    assert report.num_authoritative == 1
    assert report.num_swing_bounces == 0
    assert report.num_trajectory_bounces == 2
    assert report.num_reclassified == 1
