"""轻量日志工具，CLI 入口负责初始化，核心聚类步骤本身不打日志。"""

from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """设置全局日志级别，默认 INFO，可在 CLI 入口覆盖。"""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取模块专属 logger，统一挂在 slidesplit 命名空间下。"""

    return logging.getLogger(name or "slidesplit")
