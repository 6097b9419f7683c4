"""还原配置服务

把项目元数据给出的显式值、分层配置文件、全局 Config 默认值按优先级合并，
再叠加各目标框架的追加/排除项，得到一次还原操作的有效配置:

  packages_path:    显式值 → 配置文件 config.globalPackagesFolder → Config.packages_dir
  sources:          显式值 → 配置文件 packageSources，再追加各目标框架的额外来源
  fallback_folders: 显式值 → 配置文件 fallbackPackageFolders，再追加/排除各目标框架的回退目录

显式值为空列表时视为"明确不要"，不会回落到配置文件。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pkgstore.core.config import Config
from pkgstore.core.exceptions import InvalidArgumentError
from pkgstore.core.models import FrameworkSettings
from pkgstore.core.protocols import MachineWideSettings
from pkgstore.core.restore_settings import (
    ADDITIONAL_FALLBACK_FOLDERS_EXCLUDES_KEY,
    ADDITIONAL_FALLBACK_FOLDERS_KEY,
    ADDITIONAL_SOURCES_KEY,
    aggregate_sources,
    get_value,
)
from pkgstore.core.settings import (
    DirectoryMachineWideSettings,
    get_fallback_folders,
    get_global_packages_folder,
    get_package_sources,
    read_settings,
)

logger = logging.getLogger(__name__)


@dataclass
class RestoreSettingsRequest:
    """一次还原配置求值的输入，列表字段为 None 表示未提供"""

    project_unique_name: str = ""
    project_directory: str = ""
    solution_directory: str = ""
    restore_config_file: str = ""
    restore_packages_path: str | None = None
    restore_sources: list[str] | None = None
    restore_fallback_folders: list[str] | None = None
    settings_per_framework: list[FrameworkSettings] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RestoreSettingsRequest:
        """从 JSON/YAML 结构构造，frameworks 为 {框架名: {元数据键: 值}}

        元数据值为 null（YAML 中留空）时视为未设置。

        异常:
            InvalidArgumentError: 列表字段不是字符串列表，或 frameworks 结构不对
        """
        return cls(
            project_unique_name=data.get("project_unique_name") or "",
            project_directory=data.get("project_directory") or "",
            solution_directory=data.get("solution_directory") or "",
            restore_config_file=data.get("restore_config_file") or "",
            restore_packages_path=data.get("restore_packages_path"),
            restore_sources=_string_list(data, "restore_sources"),
            restore_fallback_folders=_string_list(data, "restore_fallback_folders"),
            settings_per_framework=_framework_settings(data.get("frameworks")),
        )


def _string_list(data: dict[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidArgumentError(key, f"参数 '{key}' 必须是字符串列表")
    return value


def _framework_settings(frameworks: Any) -> list[FrameworkSettings] | None:
    if frameworks is None:
        return None
    if not isinstance(frameworks, dict):
        raise InvalidArgumentError("frameworks", "frameworks 必须是 {框架名: {元数据键: 值}} 形式")

    result: list[FrameworkSettings] = []
    for name, meta in frameworks.items():
        if meta is None:
            meta = {}
        elif not isinstance(meta, dict):
            raise InvalidArgumentError("frameworks", f"目标框架 '{name}' 的元数据必须是映射")
        result.append(FrameworkSettings(
            item_spec=str(name),
            metadata={str(k): str(v) for k, v in meta.items() if v is not None},
        ))
    return result


@dataclass
class RestoreSettingsResult:
    packages_path: str = ""
    sources: list[str] = field(default_factory=list)
    fallback_folders: list[str] = field(default_factory=list)
    config_file_paths: list[str] = field(default_factory=list)


class RestoreSettingsService:
    """还原配置求值服务

    机器级配置作为依赖注入；未注入时按 Config.machine_wide_config_dir
    在首次使用时创建并缓存。
    """

    def __init__(
        self,
        config: Config | None = None,
        machine_wide: MachineWideSettings | None = None,
    ) -> None:
        if config is None:
            from pkgstore.core.config import get_config
            config = get_config()
        self.config = config
        self._machine_wide = machine_wide

    @property
    def machine_wide(self) -> MachineWideSettings | None:
        if self._machine_wide is None and self.config.machine_wide_config_dir:
            self._machine_wide = DirectoryMachineWideSettings(
                self.config.machine_wide_config_dir,
            )
        return self._machine_wide

    def resolve(self, request: RestoreSettingsRequest) -> RestoreSettingsResult:
        logger.debug(
            "(in) project=%s project_dir=%s solution_dir=%s config_file=%s",
            request.project_unique_name, request.project_directory,
            request.solution_directory, request.restore_config_file,
        )
        logger.debug(
            "(in) sources=%s fallback_folders=%s packages_path=%s frameworks=%s",
            request.restore_sources, request.restore_fallback_folders,
            request.restore_packages_path,
            [f.item_spec for f in request.settings_per_framework or []],
        )

        settings = read_settings(
            request.solution_directory or None,
            request.project_directory or None,
            request.restore_config_file or None,
            machine_wide=self.machine_wide,
            config=self.config,
        )
        frameworks = request.settings_per_framework

        packages_path = get_value(
            lambda: request.restore_packages_path,
            lambda: get_global_packages_folder(settings),
            lambda: self.config.packages_dir,
        )

        base_sources = get_value(
            lambda: request.restore_sources,
            lambda: get_package_sources(settings),
        )
        sources = aggregate_sources(base_sources, frameworks, ADDITIONAL_SOURCES_KEY)

        base_fallback = get_value(
            lambda: request.restore_fallback_folders,
            lambda: get_fallback_folders(settings),
        )
        fallback_folders = aggregate_sources(
            base_fallback, frameworks,
            ADDITIONAL_FALLBACK_FOLDERS_KEY,
            ADDITIONAL_FALLBACK_FOLDERS_EXCLUDES_KEY,
        )

        result = RestoreSettingsResult(
            packages_path=packages_path or "",
            sources=sources,
            fallback_folders=fallback_folders,
            config_file_paths=[str(p) for p in settings.get_config_file_paths()],
        )
        logger.info(
            "还原配置: %s -> %d 个来源, %d 个回退目录",
            request.project_unique_name or "-",
            len(result.sources), len(result.fallback_folders),
        )
        return result
