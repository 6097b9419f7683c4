"""还原配置 API Blueprint"""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, request

from pkgstore.web.responses import JSONResponse, bad_request, ok

restore_bp = Blueprint("restore", __name__, url_prefix="/api/restore-settings")


@restore_bp.route("", methods=["POST"])
def resolve() -> JSONResponse:
    """请求体结构不对时由 from_dict 抛 InvalidArgumentError，全局处理为 400"""
    from pkgstore.services.container import get_container
    from pkgstore.services.restore_settings_service import RestoreSettingsRequest

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return bad_request("请求体必须是 JSON 对象")
    result = get_container().restore_settings.resolve(RestoreSettingsRequest.from_dict(body))
    return ok({"settings": asdict(result)})
