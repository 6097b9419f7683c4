"""Web 层响应构造

失败响应统一为 {"error": 描述, "code": 错误码}。业务异常沿用
PkgStoreError.code，HTTP 异常由状态名转换（如 METHOD_NOT_ALLOWED）。
"""

from __future__ import annotations

from flask import Response, jsonify
from werkzeug.exceptions import HTTPException

from pkgstore.core.exceptions import PkgStoreError
from pkgstore.core.models import PackageIdentity

JSONResponse = tuple[Response, int]


def ok(data: dict, status: int = 200) -> JSONResponse:
    return jsonify(data), status


def error(message: str, status: int, code: str) -> JSONResponse:
    return jsonify(error=message, code=code), status


def bad_request(message: str, code: str = "BAD_REQUEST") -> JSONResponse:
    return error(message, 400, code)


def package_not_found(identity: PackageIdentity) -> JSONResponse:
    return error(f"包 {identity} 不存在", 404, "PACKAGE_NOT_FOUND")


def from_pkgstore_error(exc: PkgStoreError) -> JSONResponse:
    """参数 / 前置条件 / 配置错误都是调用方的问题，一律 400"""
    return bad_request(str(exc), exc.code)


def from_http_exception(exc: HTTPException) -> JSONResponse:
    code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
    return error(exc.description or "", exc.code or 500, code)


def internal_error() -> JSONResponse:
    return error("服务器内部错误", 500, "INTERNAL_ERROR")
