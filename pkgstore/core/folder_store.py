"""目录式包存储

以一个根目录作为包仓库，按包身份幂等地安装/卸载。

核心约定:
  - "已安装" 的唯一依据是规范包文件存在:
        <root>/<name>.<version>/<name>.<version>.nupkg
    只有目录、没有规范包文件视为未安装
  - 不维护内存索引，每次都重新查询文件系统
  - 已存在 / 不存在 不是错误: 返回 False 并记一条 WARNING
  - 解压和删除的 IO 异常原样抛给调用方，不重试、不回滚

并发:
  同一进程内，对同一 (root, identity) 的安装/卸载按键串行，
  同一包被并发安装时只有一个返回 True。跨进程不做互斥。

用法:
    from pkgstore.core.folder_store import FolderPackageStore

    store = FolderPackageStore("packages")
    with open("Foo.1.0.0.nupkg", "rb") as f:
        store.install_package(PackageIdentity("Foo", "1.0.0"), f, context)
    store.uninstall_package(PackageIdentity("Foo", "1.0.0"), context)
"""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import BinaryIO

from pkgstore.core.exceptions import InvalidArgumentError, PreconditionError
from pkgstore.core.extractor import PackageExtractor
from pkgstore.core.models import (
    ANY_FRAMEWORK,
    MessageLevel,
    PackageIdentity,
    PackageReference,
    PackageSaveMode,
)
from pkgstore.core.path_resolver import PackagePathResolver
from pkgstore.core.protocols import ArchiveExtractor, PathResolver, ProjectContext

logger = logging.getLogger(__name__)

MSG_ALREADY_EXISTS = "包 '%s' 已存在于目录 '%s'"
MSG_ADDING = "正在添加包 '%s' 到目录 '%s'"
MSG_ADDED = "已添加包 '%s' 到目录 '%s'"
MSG_NOT_EXISTS = "包 '%s' 不存在于目录 '%s'"
MSG_REMOVING = "正在从目录 '%s' 移除包 '%s'"
MSG_REMOVED = "已从目录 '%s' 移除包 '%s'"


# ---- 按 (root, identity) 分配的进程级锁 ----

_identity_locks: dict[tuple[str, PackageIdentity], threading.Lock] = {}
_identity_locks_guard = threading.Lock()


def _lock_for(root: Path, identity: PackageIdentity) -> threading.Lock:
    key = (str(root), identity)
    with _identity_locks_guard:
        lock = _identity_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _identity_locks[key] = lock
        return lock


class FolderPackageStore:
    """目录式包存储，生命周期与一次还原/安装会话相同"""

    def __init__(
        self,
        root: str | Path,
        save_mode: PackageSaveMode | str = PackageSaveMode.ARCHIVE,
        *,
        resolver: PathResolver | None = None,
        extractor: ArchiveExtractor | None = None,
    ) -> None:
        if root is None or str(root) == "":
            raise InvalidArgumentError("root")
        self._root = Path(root).resolve()
        self.path_resolver: PathResolver = resolver or PackagePathResolver(self._root)
        self.extractor: ArchiveExtractor = extractor or PackageExtractor()
        # 保存模式允许外部修改
        self.save_mode = PackageSaveMode(save_mode)
        self.metadata: dict[str, str] = {
            "name": str(self._root),
            "target_framework": ANY_FRAMEWORK,
        }
        logger.debug("包存储已创建: %s (save_mode=%s)", self._root, self.save_mode.value)

    @property
    def root(self) -> Path:
        return self._root

    def get_installed_packages(self) -> list[PackageReference]:
        """目录存储不记录项目级引用信息，始终为空"""
        return []

    def package_exists(self, identity: PackageIdentity) -> bool:
        """规范包文件存在即视为已安装"""
        package_file = (
            self.path_resolver.get_install_path(identity)
            / self.path_resolver.get_package_file_name(identity)
        )
        return package_file.is_file()

    def install_package(
        self,
        identity: PackageIdentity,
        package_stream: BinaryIO,
        context: ProjectContext,
    ) -> bool:
        """安装包，已存在时返回 False

        异常:
            InvalidArgumentError: 参数为空
            PreconditionError: 包流不支持 seek
            OSError / zipfile.BadZipFile: 解压失败，原样抛出
        """
        if identity is None:
            raise InvalidArgumentError("identity")
        if package_stream is None:
            raise InvalidArgumentError("package_stream")
        if context is None:
            raise InvalidArgumentError("context")
        if not package_stream.seekable():
            raise PreconditionError("包流必须支持 seek")

        with _lock_for(self._root, identity):
            if self.package_exists(identity):
                context.log(MessageLevel.WARNING, MSG_ALREADY_EXISTS, identity, self._root)
                return False

            context.log(MessageLevel.INFO, MSG_ADDING, identity, self._root)
            package_stream.seek(0)
            self.extractor.extract_package(
                package_stream, identity, self.path_resolver, self.save_mode,
            )
            context.log(MessageLevel.INFO, MSG_ADDED, identity, self._root)
            return True

    def uninstall_package(
        self,
        identity: PackageIdentity,
        context: ProjectContext,
    ) -> bool:
        """卸载包（递归删除安装目录），不存在时返回 False

        删除时的 PermissionError 与"不存在"是两种不同结果，前者直接抛出。
        """
        if identity is None:
            raise InvalidArgumentError("identity")
        if context is None:
            raise InvalidArgumentError("context")

        with _lock_for(self._root, identity):
            if not self.package_exists(identity):
                context.log(MessageLevel.WARNING, MSG_NOT_EXISTS, identity, self._root)
                return False

            context.log(MessageLevel.INFO, MSG_REMOVING, self._root, identity)
            shutil.rmtree(self.path_resolver.get_install_path(identity))
            context.log(MessageLevel.INFO, MSG_REMOVED, self._root, identity)
            return True
