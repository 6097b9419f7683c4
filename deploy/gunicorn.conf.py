"""Gunicorn 生产配置

用法:
  gunicorn --config deploy/gunicorn.conf.py pkgstore.web.app:app

同一包的并发安装只在单进程内按包串行，多 worker 部署时
上传安装请交给单个 worker（PKGSTORE_WORKERS=1）或在前面加外部锁。
"""

import os

# ---------- 网络 ----------
bind = os.getenv("PKGSTORE_BIND", "0.0.0.0:8888")

# ---------- 并发 ----------
workers = int(os.getenv("PKGSTORE_WORKERS", "1"))
threads = int(os.getenv("PKGSTORE_THREADS", "4"))
worker_class = "gthread"
timeout = 300  # 大包上传 + 解压

# ---------- 日志 ----------
accesslog = os.getenv("PKGSTORE_ACCESS_LOG", "-")
errorlog = os.getenv("PKGSTORE_ERROR_LOG", "-")
loglevel = os.getenv("PKGSTORE_LOG_LEVEL", "info").lower()

# ---------- 进程管理 ----------
graceful_timeout = 30
keepalive = 5


def post_worker_init(worker):
    """worker 内按 PKGSTORE_LOG_LEVEL / PKGSTORE_LOG_JSON 配置应用日志"""
    from pkgstore.utils.logger import setup_logging_from_env
    setup_logging_from_env()
