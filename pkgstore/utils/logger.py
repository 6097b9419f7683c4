"""pkgstore 日志配置

CLI 与 gunicorn worker 都通过 setup_logging_from_env() 初始化：
  PKGSTORE_LOG_LEVEL  日志级别，默认 INFO
  PKGSTORE_LOG_JSON   1/true/yes 时输出单行 JSON，供日志采集使用
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from datetime import datetime, timezone

ENV_LEVEL = "PKGSTORE_LOG_LEVEL"
ENV_JSON = "PKGSTORE_LOG_JSON"

TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


class JSONFormatter(logging.Formatter):
    """单行 JSON 日志

    字段: timestamp / level / logger / message / process / thread，
    有异常时附带 exception。并发安装时靠 thread 区分同一进程内的请求。
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "process": record.process,
            "thread": record.threadName,
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def reset_logging() -> None:
    """清理根日志器上已注册的 handlers"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器，输出到 stderr；重复调用不会叠加 handler

    非法级别回退到 INFO。
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def setup_logging_from_env(environ: Mapping[str, str] | None = None) -> None:
    env = os.environ if environ is None else environ
    setup_logging(
        level=env.get(ENV_LEVEL, "INFO"),
        json_output=env.get(ENV_JSON, "").strip().lower() in _TRUTHY,
    )
