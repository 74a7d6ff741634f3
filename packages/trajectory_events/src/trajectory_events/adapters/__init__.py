"""适配层（adapters）。

说明：
    本包用于承载与上游/外部系统对接的“薄适配层”，例如：
    - 上游比赛分析结果 JSON -> 引擎输入类型。
    - 引擎输出事件 -> 时间轴/球场叠加层消费的 JSON 记录。

依赖约束：
    - adapters 可以依赖核心（types/configs/api），核心模块不反向依赖 adapters。
"""

from trajectory_events.adapters.result_json import (
    authoritative_from_result,
    event_to_record,
    events_to_records,
    infer_events_from_result,
    infer_report_from_result,
    samples_from_result,
    swings_from_result,
)

__all__ = [
    "authoritative_from_result",
    "event_to_record",
    "events_to_records",
    "infer_events_from_result",
    "infer_report_from_result",
    "samples_from_result",
    "swings_from_result",
]
