"""包解压器

包文件是 zip 归档。按保存模式:
  - saves_files:   解出包内文件到安装目录（跳过包格式自身的元数据条目）
  - saves_archive: 把整个包流拷贝为规范包文件

规范包文件最后写入且走原子替换，解压中途失败不会留下规范包文件，
存储层因此不会把半成品当作"已安装"。
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from pkgstore.core.exceptions import PreconditionError
from pkgstore.core.models import PackageIdentity, PackageSaveMode
from pkgstore.core.protocols import PathResolver
from pkgstore.utils.fs_io import atomic_write_stream

logger = logging.getLogger(__name__)

# 包格式自身的元数据，不属于包内容
_EXCLUDED_FILES = frozenset({"[Content_Types].xml"})
_EXCLUDED_DIRS = ("_rels/", "package/")


def _is_package_metadata(entry: str) -> bool:
    return entry in _EXCLUDED_FILES or entry.startswith(_EXCLUDED_DIRS)


def _safe_target(install_dir: Path, entry: str) -> Path:
    """计算条目的落盘路径，拒绝绝对路径和 .. 越界"""
    parts = PurePosixPath(entry.replace("\\", "/")).parts
    if not parts or parts[0] == "/" or ".." in parts:
        raise PreconditionError(f"归档条目路径不合法: {entry}")
    target = install_dir.joinpath(*parts)
    if install_dir.resolve() not in target.resolve().parents:
        raise PreconditionError(f"归档条目越出安装目录: {entry}")
    return target


class PackageExtractor:
    """zip 包解压器"""

    def extract_package(
        self,
        stream: BinaryIO,
        identity: PackageIdentity,
        resolver: PathResolver,
        save_mode: PackageSaveMode,
    ) -> list[Path]:
        install_dir = resolver.get_install_path(identity)
        install_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []

        if save_mode.saves_files:
            written.extend(self._extract_files(stream, install_dir))

        if save_mode.saves_archive:
            stream.seek(0)
            package_file = install_dir / resolver.get_package_file_name(identity)
            size = atomic_write_stream(package_file, stream)
            logger.debug("规范包文件已写入: %s (%d 字节)", package_file, size)
            written.append(package_file)

        logger.info("解压完成: %s -> %s (%d 个文件)", identity, install_dir, len(written))
        return written

    def _extract_files(self, stream: BinaryIO, install_dir: Path) -> list[Path]:
        written: list[Path] = []
        stream.seek(0)
        with zipfile.ZipFile(stream) as zf:
            for info in zf.infolist():
                if info.is_dir() or _is_package_metadata(info.filename):
                    continue
                target = _safe_target(install_dir, info.filename)
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                written.append(target)
        return written
