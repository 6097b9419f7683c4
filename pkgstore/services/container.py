"""服务容器 — CLI 与 Web 层统一从这里获取包存储和还原配置服务

同一容器内的实例共享，首次访问时创建。

用法:
    container = ServiceContainer()
    container.store.install_package(identity, stream, container.context)

    # 全局单例（Web 多请求共享）
    from pkgstore.services.container import get_container
    svc = get_container().restore_settings
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkgstore.core.config import Config
    from pkgstore.core.context import LoggingProjectContext
    from pkgstore.core.folder_store import FolderPackageStore
    from pkgstore.services.restore_settings_service import RestoreSettingsService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器，显式接受 Config，未提供时取全局 get_config()"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from pkgstore.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def store(self) -> FolderPackageStore:
        if "store" not in self._instances:
            from pkgstore.core.folder_store import FolderPackageStore
            self._instances["store"] = FolderPackageStore(
                self._config.packages_dir,
                save_mode=self._config.save_mode,
            )
        return self._instances["store"]  # type: ignore[return-value]

    @property
    def context(self) -> LoggingProjectContext:
        if "context" not in self._instances:
            from pkgstore.core.context import LoggingProjectContext
            self._instances["context"] = LoggingProjectContext()
        return self._instances["context"]  # type: ignore[return-value]

    @property
    def restore_settings(self) -> RestoreSettingsService:
        if "restore_settings" not in self._instances:
            from pkgstore.services.restore_settings_service import RestoreSettingsService
            self._instances["restore_settings"] = RestoreSettingsService(config=self._config)
        return self._instances["restore_settings"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
            logger.debug("服务容器已创建")
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
