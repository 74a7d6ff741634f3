"""trajectory_events 的 YAML 配置加载入口。

约定：
    - YAML 顶层为 mapping，对应 `EventInferenceConfig` 的字段名（toggles/trajectory/...）。
    - 子节点也是 mapping，对应各子配置 dataclass 的字段名。
    - 未提供的字段使用 dataclass 默认值；未知字段会报错，避免拼写错误静默失效。
    - 数值合法性由各子配置的 `__post_init__` 负责（ValueError）。

依赖：
    - 本模块依赖 PyYAML（`pyyaml`）。
"""

from __future__ import annotations

from dataclasses import MISSING, Field, fields, is_dataclass
from pathlib import Path
from typing import Any, Mapping, TypeVar

import yaml

from trajectory_events.configs import EventInferenceConfig

_T = TypeVar("_T")


def _as_mapping(x: Any) -> Mapping[str, Any]:
    if x is None:
        return {}
    if isinstance(x, Mapping):
        return x
    raise TypeError(f"YAML 节点必须是 mapping，实际是：{type(x).__name__}")


def _nested_dataclass_type_from_field(f: Field[Any]) -> type | None:
    """通过 default_factory 推断嵌套的子配置 dataclass 类型。"""

    if f.default_factory is MISSING:  # type: ignore[comparison-overlap]
        return None

    inst = f.default_factory()  # type: ignore[misc]
    if is_dataclass(inst):
        return type(inst)

    return None


def _dataclass_from_mapping(cls: type[_T], data: Mapping[str, Any]) -> _T:
    if not is_dataclass(cls):
        raise TypeError(f"期望 dataclass 类型，实际是：{cls}")

    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data.keys()) - allowed)
    if unknown:
        raise KeyError(f"{cls.__name__} 出现未知字段：{unknown}")

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue

        raw = data[f.name]
        nested_cls = _nested_dataclass_type_from_field(f)
        if nested_cls is not None:
            kwargs[f.name] = _dataclass_from_mapping(nested_cls, _as_mapping(raw))
        else:
            kwargs[f.name] = raw

    return cls(**kwargs)  # type: ignore[call-arg]


def event_inference_config_from_dict(data: Mapping[str, Any]) -> EventInferenceConfig:
    """从 dict（通常来自 YAML）构造 `EventInferenceConfig`。"""

    return _dataclass_from_mapping(EventInferenceConfig, data)


def load_event_inference_config_yaml(path: str | Path) -> EventInferenceConfig:
    """从 YAML 文件加载 `EventInferenceConfig`。"""

    p = Path(path)
    text = p.read_text(encoding="utf-8")
    payload = yaml.safe_load(text)
    return event_inference_config_from_dict(_as_mapping(payload))
