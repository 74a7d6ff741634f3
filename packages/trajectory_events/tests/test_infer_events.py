"""端到端：infer_events 的场景与性质测试。"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np
import pytest

from trajectory_events import (
    KIND_AUTHORITATIVE,
    KIND_FLOOR,
    KIND_INFERRED_SWING,
    KIND_SWING,
    KIND_WALL,
    BallSample,
    BounceEvent,
    DetectorToggles,
    EventInferenceConfig,
    SampleFilterConfig,
    SwingEvent,
    infer_events,
    infer_events_with_report,
    reclassify_events,
)

# 引擎自己产出的类型（非 authoritative）。
DERIVED_KINDS = (KIND_SWING, KIND_FLOOR, KIND_WALL, KIND_INFERRED_SWING)


def _samples(points: list[tuple[float, float, float]]) -> list[BallSample]:
    return [BallSample(timestamp=t, x=x, y=y) for t, x, y in points]


def _two_bounce_samples() -> list[BallSample]:
    """近端 t=3.0 (y=0.8) 一次落地，远端 t=3.4 (y=0.2) 一次落地。"""

    ys = [0.5, 0.6, 0.8, 0.6, 0.4, 0.1, 0.2, 0.1, 0.05, 0.02]
    return [BallSample(timestamp=2.8 + 0.1 * k, x=0.5, y=y) for k, y in enumerate(ys)]


def _cfg(**toggles: bool) -> EventInferenceConfig:
    return EventInferenceConfig(toggles=DetectorToggles(**toggles))


def _quiet_logger() -> logging.Logger:
    return logging.getLogger("test")


def test_scenario_single_swing_without_authoritative():
    # 直线轨迹：轨迹检测不会命中，最近 t=2.0 的采样是 t=2.02。
    points = [(t, 0.4 + (t - 2.02) * 0.5, 0.6 + (t - 2.02) * 0.5) for t in (1.88, 1.95, 2.02, 2.09, 2.16)]
    swings = [SwingEvent(hit_timestamp=2.0, player_id=0, ball_speed=80.0)]

    out = infer_events(_samples(points), swings, [])

    assert len(out) == 1
    ev = out[0]
    assert ev.kind == KIND_SWING
    assert ev.timestamp == pytest.approx(2.0)
    assert ev.position == pytest.approx((0.4, 0.6))
    assert ev.player_id == 0


def test_scenario_floor_bounce():
    samples = _samples([(0.9, 0.5, 0.25), (1.0, 0.5, 0.30), (1.1, 0.5, 0.60), (1.2, 0.5, 0.35), (1.3, 0.5, 0.30)])

    out = infer_events(samples, [], [])

    assert [e.kind for e in out] == [KIND_FLOOR]
    assert out[0].timestamp == pytest.approx(1.1)


def test_scenario_reclassification_end_to_end():
    out = infer_events(_two_bounce_samples(), [], [])

    assert [e.kind for e in out] == [KIND_INFERRED_SWING, KIND_FLOOR]
    assert [e.timestamp for e in out] == pytest.approx([3.0, 3.4])
    assert [e.position[1] for e in out] == pytest.approx([0.8, 0.2])


def test_scenario_swing_between_keeps_both_bounces():
    # 未测到球速的 swing 不会合成事件，但仍参与“之间是否有击球”的判定。
    swings = [SwingEvent(hit_timestamp=3.2, player_id=1, ball_speed=0.0)]

    out = infer_events(_two_bounce_samples(), swings, [])

    assert [e.kind for e in out] == [KIND_FLOOR, KIND_FLOOR]


def test_scenario_trajectory_toggle_off():
    swings = [SwingEvent(hit_timestamp=3.2, player_id=1, ball_speed=50.0)]

    out = infer_events(_two_bounce_samples(), swings, [], _cfg(detect_trajectory_bounces=False))

    assert [e.kind for e in out] == [KIND_SWING]
    assert out[0].position == pytest.approx((0.5, 0.4))
    assert not any(e.kind in (KIND_FLOOR, KIND_WALL, KIND_INFERRED_SWING) for e in out)


def test_swing_toggle_off():
    swings = [SwingEvent(hit_timestamp=3.2, player_id=1, ball_speed=50.0)]

    out = infer_events(_two_bounce_samples(), swings, [], _cfg(synthesize_swing_bounces=False))

    assert KIND_SWING not in [e.kind for e in out]
    assert [e.kind for e in out] == [KIND_FLOOR, KIND_FLOOR]


def test_all_detectors_off_returns_sorted_authoritative():
    auth = [
        BounceEvent(timestamp=2.0, position=(0.3, 0.7), kind=KIND_AUTHORITATIVE, upstream_type="floor"),
        BounceEvent(timestamp=1.0, position=(0.6, 0.2), kind=KIND_AUTHORITATIVE, upstream_type="swing"),
    ]
    cfg = _cfg(synthesize_swing_bounces=False, detect_trajectory_bounces=False)

    out = infer_events(_two_bounce_samples(), [], auth, cfg)

    assert out == [auth[1], auth[0]]


def test_audio_toggle_is_reserved(caplog):
    samples = _two_bounce_samples()
    base = infer_events(samples, [], [], logger=_quiet_logger())

    with caplog.at_level(logging.WARNING, logger="test"):
        out = infer_events(samples, [], [], _cfg(detect_audio_bounces=True), logger=_quiet_logger())

    assert out == base
    assert any("audio" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("samples", [None, []])
def test_empty_samples_pass_authoritative_through(samples):
    auth = [BounceEvent(timestamp=1.0, position=(0.5, 0.8), kind=KIND_AUTHORITATIVE, upstream_type="floor")]
    swings = [SwingEvent(hit_timestamp=2.0, player_id=0, ball_speed=80.0)]

    assert infer_events(samples, swings, auth) == auth
    assert infer_events(samples, None, None) == []


def test_authoritative_must_have_authoritative_kind():
    with pytest.raises(ValueError):
        _ = infer_events([], [], [BounceEvent(timestamp=1.0, position=(0.5, 0.5), kind=KIND_FLOOR)])


def test_unsorted_samples_warn(caplog):
    samples = list(reversed(_two_bounce_samples()))
    with caplog.at_level(logging.WARNING, logger="test"):
        _ = infer_events(samples, [], [], logger=_quiet_logger())
    assert any("not sorted" in r.getMessage() for r in caplog.records)


def test_report_counts():
    swings = [SwingEvent(hit_timestamp=3.2, player_id=1, ball_speed=0.0)]
    report = infer_events_with_report(_two_bounce_samples(), swings, [])

    assert report.num_authoritative == 0
    assert report.num_swing_bounces == 0
    assert report.num_trajectory_bounces == 2
    assert report.num_reclassified == 0
    assert [d.sample_index for d in report.detections] == [2, 6]
    assert report.filter_stats is None


def test_report_with_sample_filter_enabled():
    cfg = EventInferenceConfig(sample_filter=SampleFilterConfig(enabled=True))
    samples = [BallSample(timestamp=k / 30.0, x=0.2 + 0.005 * k, y=0.5) for k in range(30)]

    report = infer_events_with_report(samples, [], [], cfg)

    assert report.filter_stats is not None
    assert report.filter_stats.original_count == 30
    assert report.filter_stats.final_count == 30


# region 性质测试


def _random_match(seed: int) -> tuple[list[BallSample], list[SwingEvent], list[BounceEvent]]:
    rng = np.random.default_rng(seed)
    n = 400
    ts = np.cumsum(rng.uniform(0.02, 0.06, size=n))
    xs = np.clip(0.5 + np.cumsum(rng.normal(0.0, 0.03, size=n)), 0.0, 1.0)
    ys = np.clip(0.5 + np.cumsum(rng.normal(0.0, 0.03, size=n)), 0.0, 1.0)
    samples = [BallSample(timestamp=float(t), x=float(x), y=float(y)) for t, x, y in zip(ts, xs, ys)]

    hit_ts = np.sort(rng.uniform(float(ts[0]), float(ts[-1]), size=12))
    swings = [
        SwingEvent(hit_timestamp=float(t), player_id=int(k % 2), ball_speed=float(rng.choice([0.0, 60.0])))
        for k, t in enumerate(hit_ts)
    ]

    auth = [
        BounceEvent(
            timestamp=float(t),
            position=(float(rng.uniform()), float(rng.uniform())),
            kind=KIND_AUTHORITATIVE,
            upstream_type="floor",
        )
        for t in rng.uniform(float(ts[0]), float(ts[-1]), size=4)
    ]
    return samples, swings, auth


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_properties_on_noisy_match(seed):
    samples, swings, auth = _random_match(seed)

    out = infer_events(samples, swings, auth)

    # 确定性：同样输入，同样输出与顺序。
    assert infer_events(samples, swings, auth) == out

    # 时间升序。
    ts = [e.timestamp for e in out]
    assert ts == sorted(ts)

    # 位置有界。
    for e in out:
        assert 0.0 <= e.position[0] <= 1.0
        assert 0.0 <= e.position[1] <= 1.0

    # authoritative 原样保留。
    for a in auth:
        assert a in out

    # 同类型派生事件不会在近时间、近位置重复。
    derived = [e for e in out if e.kind in DERIVED_KINDS]
    for i, a in enumerate(derived):
        for b in derived[i + 1 :]:
            if a.kind != b.kind:
                continue
            far_apart = abs(a.x - b.x) > 0.1 and abs(a.y - b.y) > 0.1
            assert abs(a.timestamp - b.timestamp) >= 0.15 or far_apart

    # 重分类幂等。
    assert reclassify_events(out, swings) == out


def test_inputs_are_not_mutated():
    samples, swings, auth = _random_match(5)
    snapshot = (list(samples), list(swings), list(auth))

    _ = infer_events(samples, swings, auth)

    assert (samples, swings, auth) == snapshot


def test_config_is_explicit_per_call():
    samples = _two_bounce_samples()
    cfg = _cfg()
    off = replace(cfg, toggles=replace(cfg.toggles, detect_trajectory_bounces=False))

    assert len(infer_events(samples, [], [], cfg)) == 2
    assert infer_events(samples, [], [], off) == []
    assert len(infer_events(samples, [], [], cfg)) == 2


# endregion
