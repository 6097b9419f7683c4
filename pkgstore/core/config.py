"""集中配置管理

包存储根目录、保存模式、分层配置文件的查找规则统一从这里取。
支持从 YAML 文件加载 + 编程式覆盖，未知配置项记 WARNING 后忽略。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from pkgstore.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """pkgstore 全局配置"""

    # 包存储
    packages_dir: str = "packages"
    save_mode: str = "archive"  # "archive" / "archive_and_files" / "files"

    # 分层还原配置
    settings_file_name: str = "pkgstore.yml"
    solution_settings_folder: str = ".pkgstore"
    user_config_dir: str = ""           # 为空时不加载用户级配置
    machine_wide_config_dir: str = ""   # 为空时不加载机器级配置

    # Web
    max_upload_size: int = 100 * 1024 * 1024

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = [str(k) for k in data if k not in known]
        if unknown:
            logger.warning("忽略未知配置项: %s (%s)", ", ".join(unknown), path)
        return cls(**{k: v for k, v in data.items() if k in known})


# 全局单例，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
