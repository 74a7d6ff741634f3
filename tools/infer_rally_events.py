"""从比赛分析结果 JSON 推断球事件时间轴（落地/撞墙/击球）。

使用场景：
- 你已经有上游分析产出的 result JSON（含 ball_positions / ball_bounces / players[].swings）。
- 目标是输出与 ball_bounces 同形态的事件列表，供时间轴/球场叠加层离线回放。

说明：
- 可选 --config 指定 YAML 配置（字段见 trajectory_events.configs）。
- --no-swing-bounces / --no-trajectory-bounces 覆盖配置里的检测器开关。
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from trajectory_events import EventInferenceConfig
from trajectory_events.adapters import events_to_records, infer_report_from_result
from trajectory_events.config_yaml import load_event_inference_config_yaml
from trajectory_events.utils import default_logger


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Infer ball bounce/swing event timeline from a match result JSON")
    p.add_argument("--result-json", required=True, help="Upstream match result JSON path")
    p.add_argument(
        "--out-json",
        default=None,
        help="Output JSON path for the event list (default: <result-json stem>_events.json next to the input)",
    )
    p.add_argument("--config", default=None, help="Optional YAML config for trajectory_events")
    p.add_argument(
        "--no-swing-bounces",
        action="store_true",
        help="Disable swing bounce synthesis",
    )
    p.add_argument(
        "--no-trajectory-bounces",
        action="store_true",
        help="Disable trajectory (floor/wall) bounce detection",
    )
    p.add_argument(
        "--filter-samples",
        action="store_true",
        help="Enable ball sample cleaning (outliers / gaps / smoothing) before inference",
    )
    p.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    return p


def _resolve_config(args: argparse.Namespace) -> EventInferenceConfig:
    cfg = EventInferenceConfig()
    if args.config is not None:
        cfg = load_event_inference_config_yaml(Path(args.config).resolve())

    toggles = cfg.toggles
    if args.no_swing_bounces:
        toggles = replace(toggles, synthesize_swing_bounces=False)
    if args.no_trajectory_bounces:
        toggles = replace(toggles, detect_trajectory_bounces=False)
    cfg = replace(cfg, toggles=toggles)

    if args.filter_samples:
        cfg = replace(cfg, sample_filter=replace(cfg.sample_filter, enabled=True))
    return cfg


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logger = default_logger(logging.DEBUG if args.verbose else None)

    result_path = Path(args.result_json).resolve()
    if not result_path.exists():
        raise RuntimeError(f"找不到 result 输入文件：{result_path}")

    if args.out_json is not None:
        out_path = Path(args.out_json).resolve()
    else:
        out_path = result_path.with_name(f"{result_path.stem}_events.json")

    cfg = _resolve_config(args)

    with result_path.open("r", encoding="utf-8") as f:
        result = json.load(f)
    logger.info("loaded %s", result_path)

    report = infer_report_from_result(result, cfg, logger=logger)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        json.dump({"ball_bounces": events_to_records(report.events)}, f, ensure_ascii=False, indent=2)

    logger.info(
        "wrote %s: events=%d (authoritative=%d swing=%d trajectory=%d reclassified=%d)",
        out_path,
        len(report.events),
        report.num_authoritative,
        report.num_swing_bounces,
        report.num_trajectory_bounces,
        report.num_reclassified,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
