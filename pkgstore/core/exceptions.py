"""统一异常体系

所有业务异常继承 PkgStoreError。
Web 层据此映射 HTTP 状态码，CLI 层据此输出友好提示。
IO 错误（OSError 及其子类）不在此体系内，原样向上抛出。
"""

from __future__ import annotations


class PkgStoreError(Exception):
    """pkgstore 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidArgumentError(PkgStoreError, ValueError):
    """必填参数为空或取值非法，在任何副作用之前抛出"""

    code = "INVALID_ARGUMENT"

    def __init__(self, param_name: str, message: str = "") -> None:
        super().__init__(message or f"参数 '{param_name}' 不能为空")
        self.param_name = param_name


class PreconditionError(PkgStoreError):
    """调用前置条件不满足（如包流不可 seek、归档条目越界）"""

    code = "PRECONDITION_FAILED"


class ConfigError(PkgStoreError):
    """配置文件内容无效"""

    code = "CONFIG_ERROR"
