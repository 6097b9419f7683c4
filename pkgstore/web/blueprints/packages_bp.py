"""包存储 API Blueprint

包名 / 版本非法时抛 InvalidArgumentError，由全局处理器转成 400。
"""

from __future__ import annotations

import re

from flask import Blueprint, request

from pkgstore.core.exceptions import InvalidArgumentError
from pkgstore.core.models import PackageIdentity
from pkgstore.web.responses import JSONResponse, bad_request, ok, package_not_found

packages_bp = Blueprint("packages", __name__, url_prefix="/api/packages")

_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_.\-+]+$")


def _container():  # type: ignore[no-untyped-def]
    from pkgstore.services.container import get_container
    return get_container()


def _identity(name: str, version: str) -> PackageIdentity:
    """校验 URL 中的包名/版本只含安全字符，防止路径穿越"""
    for field, value in (("name", name), ("version", version)):
        if not _SAFE_NAME_RE.match(value) or value.startswith("."):
            raise InvalidArgumentError(field, f"参数 '{field}' 包含非法字符: {value}")
    return PackageIdentity(name, version)


def _describe(identity: PackageIdentity) -> dict:
    store = _container().store
    return {
        "name": identity.name,
        "version": identity.normalized_version,
        "installed": store.package_exists(identity),
        "install_path": str(store.path_resolver.get_install_path(identity)),
        "file_name": store.path_resolver.get_package_file_name(identity),
    }


@packages_bp.route("", methods=["GET"])
def list_installed() -> JSONResponse:
    refs = _container().store.get_installed_packages()
    return ok({"packages": [r.to_dict() for r in refs]})


@packages_bp.route("/<name>/<version>", methods=["GET"])
def get(name: str, version: str) -> JSONResponse:
    return ok({"package": _describe(_identity(name, version))})


@packages_bp.route("/<name>/<version>", methods=["PUT"])
def install(name: str, version: str) -> JSONResponse:
    identity = _identity(name, version)
    file = request.files.get("file")
    if file is None:
        return bad_request("需要以 multipart 字段 file 上传包文件")

    c = _container()
    if c.store.install_package(identity, file.stream, c.context):
        return ok({"message": f"已安装 {identity}", "package": _describe(identity)}, 201)
    return ok({"message": f"已存在，跳过 {identity}", "package": _describe(identity)})


@packages_bp.route("/<name>/<version>", methods=["DELETE"])
def uninstall(name: str, version: str) -> JSONResponse:
    identity = _identity(name, version)
    c = _container()
    if c.store.uninstall_package(identity, c.context):
        return ok({"message": f"已卸载 {identity}"})
    return package_not_found(identity)
