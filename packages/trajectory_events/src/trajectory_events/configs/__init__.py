"""trajectory_events 配置包。

说明：
    - 这是一个“纯模型”包，只包含 dataclass 配置定义，不做任何 IO。
    - YAML 加载见 `trajectory_events.config_yaml`。
"""

from trajectory_events.configs.models import (
    DetectorToggles,
    EventInferenceConfig,
    ReclassifierConfig,
    SampleFilterConfig,
    SwingBounceConfig,
    TrajectoryDetectorConfig,
)

__all__ = [
    "DetectorToggles",
    "EventInferenceConfig",
    "ReclassifierConfig",
    "SampleFilterConfig",
    "SwingBounceConfig",
    "TrajectoryDetectorConfig",
]
