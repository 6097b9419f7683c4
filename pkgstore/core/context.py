"""通知上下文实现 — 转发到标准 logging"""

from __future__ import annotations

import logging
from typing import Any

from pkgstore.core.models import MessageLevel

_LEVELS = {
    MessageLevel.DEBUG: logging.DEBUG,
    MessageLevel.INFO: logging.INFO,
    MessageLevel.WARNING: logging.WARNING,
    MessageLevel.ERROR: logging.ERROR,
}


class LoggingProjectContext:
    """把包存储的通知写入 logger

    handler 出错由 logging 自身处理（Handler.handleError），不会中断安装/卸载。
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("pkgstore.project")

    def log(self, level: MessageLevel, message: str, *args: Any) -> None:
        self.logger.log(_LEVELS.get(level, logging.INFO), message, *args)
