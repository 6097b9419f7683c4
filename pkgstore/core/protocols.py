"""领域协议定义

包存储依赖的三个协作者：路径解析、归档解压、通知上下文；
还原配置合并依赖的目标框架条目与机器级配置来源。

使用 typing.Protocol 而非 ABC，测试替身与第三方实现无需继承即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol

if TYPE_CHECKING:
    from pkgstore.core.models import MessageLevel, PackageIdentity, PackageSaveMode
    from pkgstore.core.settings import SettingsFile


# =========================================================================
# 包存储协作者
# =========================================================================

class PathResolver(Protocol):
    """包身份 → 安装目录 / 规范包文件名

    必须是 (root, identity) 的纯函数，不做任何 IO。
    """

    def get_install_path(self, identity: PackageIdentity) -> Path:
        ...

    def get_package_file_name(self, identity: PackageIdentity) -> str:
        ...


class ArchiveExtractor(Protocol):
    """把包流解压到解析器给出的安装目录，返回写入的文件路径

    格式错误、磁盘写满、权限不足时直接抛异常，调用方不做吞并。
    """

    def extract_package(
        self,
        stream: BinaryIO,
        identity: PackageIdentity,
        resolver: PathResolver,
        save_mode: PackageSaveMode,
    ) -> list[Path]:
        ...


class ProjectContext(Protocol):
    """通知上下文 — 调用方观察安装/卸载进度的唯一旁路"""

    def log(self, level: MessageLevel, message: str, *args: Any) -> None:
        ...


# =========================================================================
# 还原配置协作者
# =========================================================================

class SettingsItem(Protocol):
    """按名称读取元数据的配置条目（每个目标框架一个）"""

    def get_metadata(self, name: str) -> str | None:
        ...


class MachineWideSettings(Protocol):
    """机器级配置层，优先级最低"""

    @property
    def settings(self) -> list[SettingsFile]:
        ...
