"""核心数据模型

包身份（名称 + 版本）、包引用、保存模式、通知级别集中定义，
存储层、解析器、解压器、CLI 与 Web 层统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering

import semver

from pkgstore.core.exceptions import InvalidArgumentError

ANY_FRAMEWORK = "any"


class MessageLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class PackageSaveMode(str, Enum):
    """解压时保存哪些内容

    ARCHIVE: 只保存规范包文件（<name>.<version>.nupkg）
    FILES:   只解出包内文件，不保留规范包文件
    ARCHIVE_AND_FILES: 两者都保存
    """

    ARCHIVE = "archive"
    ARCHIVE_AND_FILES = "archive_and_files"
    FILES = "files"

    @property
    def saves_archive(self) -> bool:
        return self in (PackageSaveMode.ARCHIVE, PackageSaveMode.ARCHIVE_AND_FILES)

    @property
    def saves_files(self) -> bool:
        return self in (PackageSaveMode.FILES, PackageSaveMode.ARCHIVE_AND_FILES)
@total_ordering
@dataclass(frozen=True, eq=False)
class PackageIdentity:
    """包身份 — 名称与预发布标签不区分大小写，版本按 SemVer 2.0 比较

    version 可传字符串，构造时解析为 semver.Version；允许省略次版本号和修订号，
    "1.0" 与 "1.0.0" 是同一个版本。构建元数据（+ 之后的部分）不参与比较。
    """

    name: str
    version: semver.Version

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise InvalidArgumentError("name", "包名不能为空")
        object.__setattr__(self, "name", name)

        if self.version is None:
            raise InvalidArgumentError("version")
        if not isinstance(self.version, semver.Version):
            try:
                parsed = semver.Version.parse(
                    str(self.version).strip(), optional_minor_and_patch=True,
                )
            except ValueError as e:
                raise InvalidArgumentError(
                    "version", f"版本号不合法: {self.version}",
                ) from e
            object.__setattr__(self, "version", parsed)

    @property
    def normalized_version(self) -> str:
        """规范版本文本: 补齐三段、去掉构建元数据、预发布标签转小写"""
        v = self.version
        text = f"{v.major}.{v.minor}.{v.patch}"
        if v.prerelease:
            text += f"-{v.prerelease.lower()}"
        return text

    @property
    def _key(self) -> tuple[str, str]:
        return (self.name.lower(), self.normalized_version)

    def _sort_key(self) -> tuple[str, semver.Version]:
        return (self.name.lower(), semver.Version.parse(self.normalized_version))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: PackageIdentity) -> bool:
        if not isinstance(other, PackageIdentity):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass
class PackageReference:
    """项目对某个包的引用"""

    identity: PackageIdentity
    target_framework: str = ANY_FRAMEWORK

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.identity.name,
            "version": self.identity.normalized_version,
            "target_framework": self.target_framework,
        }


@dataclass
class FrameworkSettings:
    """单个目标框架的还原配置条目

    metadata 中的追加/排除字段均为 ';' 分隔的字符串，
    例如 {"RestoreAdditionalProjectSources": "a;b"}。
    """

    item_spec: str
    metadata: dict[str, str] = field(default_factory=dict)

    def get_metadata(self, name: str) -> str | None:
        return self.metadata.get(name)
