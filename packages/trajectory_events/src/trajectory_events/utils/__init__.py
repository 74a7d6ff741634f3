"""trajectory_events 的通用工具模块。"""

from trajectory_events.utils.event_logging import default_logger

__all__ = [
    "default_logger",
]
