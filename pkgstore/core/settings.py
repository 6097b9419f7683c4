"""分层还原配置

配置文件（默认 pkgstore.yml）按位置分层，优先级从高到低:

  1. 项目目录及其各级父目录中的配置文件（越近越优先）
  2. 解决方案目录下的 <solution_settings_folder>/<settings_file_name>
  3. 用户级配置目录中的配置文件
  4. 机器级配置（全部放在最后）

显式指定配置文件时只加载这一个文件，其余层全部忽略。

文件格式（每个顶层键是一个 section，section 内为 key: value）:

    config:
      globalPackagesFolder: ../packages
    packageSources:
      _clear: true          # 不再继承更低优先级层的同名 section
      local: ./feed
      remote: https://example.com/v3/index.json
    fallbackPackageFolders:
      shared: /opt/shared-packages
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pkgstore.core.config import Config, get_config
from pkgstore.core.exceptions import ConfigError
from pkgstore.core.protocols import MachineWideSettings
from pkgstore.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

CLEAR_KEY = "_clear"
CONFIG_SECTION = "config"
PACKAGE_SOURCES_SECTION = "packageSources"
FALLBACK_FOLDERS_SECTION = "fallbackPackageFolders"
GLOBAL_PACKAGES_FOLDER_KEY = "globalPackagesFolder"


@dataclass(frozen=True)
class SettingValue:
    key: str
    value: str
    origin: Path  # 定义该值的配置文件


@dataclass
class SettingsFile:
    """单个配置文件（一层）"""

    path: Path
    data: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> SettingsFile:
        p = Path(path).resolve()
        try:
            data = load_yaml(p)
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件格式错误: {p}: {e}") from e

        for name, section in data.items():
            if section is None:
                data[name] = {}
            elif not isinstance(section, dict):
                raise ConfigError(f"配置文件 {p} 中的 section '{name}' 必须是映射")
        return cls(path=p, data=data)

    def section(self, name: str) -> dict[str, str]:
        raw = self.data.get(name) or {}
        return {str(k): str(v) for k, v in raw.items() if k != CLEAR_KEY and v is not None}

    def clears(self, name: str) -> bool:
        return bool((self.data.get(name) or {}).get(CLEAR_KEY))


class HierarchicalSettings:
    """按优先级排列的配置层集合（files[0] 优先级最高）"""

    def __init__(self, files: list[SettingsFile]) -> None:
        self.files = list(files)

    def get_value(self, section: str, key: str) -> str | None:
        for f in self.files:
            values = f.section(section)
            if key in values:
                return values[key]
            if f.clears(section):
                break
        return None

    def get_section_values(self, section: str) -> list[SettingValue]:
        """合并各层 section，高优先级层覆盖同名 key，结果按优先级从高到低排列"""
        merged: dict[str, SettingValue] = {}
        for f in self.files:
            for key, value in f.section(section).items():
                if key not in merged:
                    merged[key] = SettingValue(key=key, value=value, origin=f.path)
            if f.clears(section):
                break
        return list(merged.values())

    def get_config_file_paths(self) -> list[Path]:
        return [f.path for f in self.files]


class DirectoryMachineWideSettings:
    """机器级配置: 目录下的全部 *.yml 文件，按文件名排序，首次访问时加载"""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._settings: list[SettingsFile] | None = None

    @property
    def settings(self) -> list[SettingsFile]:
        if self._settings is None:
            if self.directory.is_dir():
                self._settings = [
                    SettingsFile.load(p) for p in sorted(self.directory.glob("*.yml"))
                ]
            else:
                self._settings = []
            logger.debug("机器级配置: %s (%d 层)", self.directory, len(self._settings))
        return self._settings


def _ancestor_config_files(start: Path, file_name: str) -> list[Path]:
    """从 start 向上逐级查找配置文件，越近越靠前"""
    found: list[Path] = []
    for d in (start, *start.parents):
        candidate = d / file_name
        if candidate.is_file():
            found.append(candidate)
    return found


def read_settings(
    solution_directory: str | Path | None,
    project_directory: str | Path | None,
    config_file: str | Path | None = None,
    machine_wide: MachineWideSettings | None = None,
    config: Config | None = None,
) -> HierarchicalSettings:
    """按查找规则加载分层配置"""
    cfg = config or get_config()

    if config_file:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigError(f"指定的配置文件不存在: {path}")
        logger.info("使用显式配置文件: %s", path)
        return HierarchicalSettings([SettingsFile.load(path)])

    paths: list[Path] = []
    if project_directory:
        paths.extend(_ancestor_config_files(Path(project_directory).resolve(), cfg.settings_file_name))
    if solution_directory:
        paths.append(
            Path(solution_directory).resolve()
            / cfg.solution_settings_folder / cfg.settings_file_name
        )
    if cfg.user_config_dir:
        paths.append(Path(cfg.user_config_dir).expanduser().resolve() / cfg.settings_file_name)

    files: list[SettingsFile] = []
    seen: set[Path] = set()
    for p in paths:
        resolved = p.resolve()
        if resolved in seen or not resolved.is_file():
            continue
        seen.add(resolved)
        files.append(SettingsFile.load(resolved))

    if machine_wide is not None:
        for mw in machine_wide.settings:
            if mw.path not in seen:
                seen.add(mw.path)
                files.append(mw)

    logger.debug("已加载 %d 个配置文件: %s", len(files), [str(f.path) for f in files])
    return HierarchicalSettings(files)


# =========================================================================
# 常用配置读取
# =========================================================================


def _resolve_local(value: str, origin: Path) -> str:
    """相对本地路径按定义它的配置文件所在目录解析，URI 原样返回"""
    if "://" in value:
        return value
    p = Path(value).expanduser()
    if not p.is_absolute():
        p = (origin.parent / p).resolve()
    return str(p)


def get_package_sources(settings: HierarchicalSettings) -> list[str]:
    return [
        _resolve_local(v.value, v.origin)
        for v in settings.get_section_values(PACKAGE_SOURCES_SECTION)
    ]


def get_fallback_folders(settings: HierarchicalSettings) -> list[str]:
    return [
        _resolve_local(v.value, v.origin)
        for v in settings.get_section_values(FALLBACK_FOLDERS_SECTION)
    ]


def get_global_packages_folder(settings: HierarchicalSettings) -> str | None:
    for v in settings.get_section_values(CONFIG_SECTION):
        if v.key == GLOBAL_PACKAGES_FOLDER_KEY:
            return _resolve_local(v.value, v.origin)
    return None
