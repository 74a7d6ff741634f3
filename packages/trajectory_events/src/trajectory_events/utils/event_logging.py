"""trajectory_events 的日志工具。

说明：
    - 库代码只通过参数接收 logger，不配置 root logger。
    - 脚本/单测里没有人配置 logging 时，`default_logger()` 给 "trajectory_events"
      挂一个 StreamHandler，避免 warning（例如采样乱序）被静默吞掉。
"""

from __future__ import annotations

import logging

LOGGER_NAME = "trajectory_events"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_logger(level: int | None = None) -> logging.Logger:
    """获取 trajectory_events 的默认 logger。

    Args:
        level: 显式日志级别（例如 CLI 的 --verbose 传 logging.DEBUG）。
            None 时保持现有级别；首次创建时为 INFO。

    Returns:
        名为 "trajectory_events" 的 `logging.Logger`；多次调用只会挂一个 handler。
    """

    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level)
    return logger
