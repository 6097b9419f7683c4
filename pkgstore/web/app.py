"""包存储 HTTP API（基于 Flask）

提供：包安装状态查询、上传安装、卸载、还原配置求值。

启动方式: pkgstore serve --port 8888
生产部署: gunicorn --config deploy/gunicorn.conf.py pkgstore.web.app:app
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from pkgstore.core.config import get_config
from pkgstore.core.exceptions import PkgStoreError
from pkgstore.web.blueprints.packages_bp import packages_bp
from pkgstore.web.blueprints.restore_bp import restore_bp
from pkgstore.web.responses import from_http_exception, from_pkgstore_error, internal_error

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = get_config().max_upload_size

app.register_blueprint(packages_bp)
app.register_blueprint(restore_bp)


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return from_http_exception(exc)


@app.errorhandler(PkgStoreError)
def handle_pkgstore_error(exc):
    """参数 / 前置条件 / 配置错误 → 400"""
    logger.warning("请求被拒绝 [%s]: %s", exc.code, exc)
    return from_pkgstore_error(exc)


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常（含 IO 错误），返回 500 JSON"""
    logger.exception("未处理的异常")
    return internal_error()


@app.route("/api/health")
def health():
    from pkgstore import __version__
    return jsonify(status="ok", version=__version__)


def run_server(port: int = 8888, debug: bool = False, host: str = "127.0.0.1") -> None:
    logger.info("pkgstore API 已启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
