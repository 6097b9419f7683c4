"""包路径解析器

目录布局:
    <root>/<name>.<version>/<name>.<version>.nupkg

名称转小写，版本使用 PackageIdentity.normalized_version，
与身份相等的判定一致: "Foo 1.0" 和 "foo 1.0.0" 落到同一个目录。
"""

from __future__ import annotations

from pathlib import Path

from pkgstore.core.models import PackageIdentity

PACKAGE_EXTENSION = ".nupkg"


class PackagePathResolver:
    """绑定到某个存储根目录的路径解析器，不做任何 IO"""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def get_package_directory_name(self, identity: PackageIdentity) -> str:
        return f"{identity.name.lower()}.{identity.normalized_version}"

    def get_package_file_name(self, identity: PackageIdentity) -> str:
        return self.get_package_directory_name(identity) + PACKAGE_EXTENSION

    def get_install_path(self, identity: PackageIdentity) -> Path:
        return self.root / self.get_package_directory_name(identity)

    def get_installed_package_file_path(self, identity: PackageIdentity) -> Path:
        """规范包文件的完整路径，存在即视为已安装"""
        return self.get_install_path(identity) / self.get_package_file_name(identity)
