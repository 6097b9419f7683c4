"""CLI — 包存储命令（安装 / 卸载 / 状态）"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pkgstore.cli import _cli_errors, _svc
from pkgstore.core.models import PackageIdentity, PackageSaveMode

if TYPE_CHECKING:
    from pkgstore.core.folder_store import FolderPackageStore

_SAVE_MODES = [m.value for m in PackageSaveMode]


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(uninstall)
    group.add_command(status)


def _store(root: str | None, save_mode: str | None) -> FolderPackageStore:
    """未指定 root / save_mode 时复用容器里的存储，否则按参数新建"""
    if root is None and save_mode is None:
        return _svc().store
    from pkgstore.core.folder_store import FolderPackageStore
    cfg = _svc().config
    return FolderPackageStore(root or cfg.packages_dir, save_mode=save_mode or cfg.save_mode)


@click.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", required=True, help="包名")
@click.option("--version", "version", required=True, help="包版本")
@click.option("--root", default=None, help="包存储根目录（默认取配置 packages_dir）")
@click.option("--save-mode", type=click.Choice(_SAVE_MODES), default=None, help="保存模式")
def install(archive: str, name: str, version: str, root: str | None, save_mode: str | None) -> None:
    """把包文件安装到存储目录（已存在则跳过）"""
    with _cli_errors():
        identity = PackageIdentity(name, version)
        store = _store(root, save_mode)
        with open(archive, "rb") as f:
            installed = store.install_package(identity, f, _svc().context)
    if installed:
        click.echo(f"已安装: {identity} -> {store.path_resolver.get_install_path(identity)}")
    else:
        click.echo(f"已存在，跳过: {identity}")


@click.command()
@click.argument("name")
@click.argument("version")
@click.option("--root", default=None, help="包存储根目录（默认取配置 packages_dir）")
def uninstall(name: str, version: str, root: str | None) -> None:
    """从存储目录卸载包（不存在则跳过）"""
    with _cli_errors():
        identity = PackageIdentity(name, version)
        removed = _store(root, None).uninstall_package(identity, _svc().context)
    click.echo(f"已卸载: {identity}" if removed else f"不存在，跳过: {identity}")


@click.command()
@click.argument("name")
@click.argument("version")
@click.option("--root", default=None, help="包存储根目录（默认取配置 packages_dir）")
@click.pass_context
def status(ctx: click.Context, name: str, version: str, root: str | None) -> None:
    """查看包是否已安装（退出码 0 已安装 / 1 未安装）"""
    with _cli_errors():
        identity = PackageIdentity(name, version)
        store = _store(root, None)
        installed = store.package_exists(identity)
        path = store.path_resolver.get_install_path(identity)
    if not installed:
        click.echo(f"未安装: {identity}")
        ctx.exit(1)
    click.echo(f"已安装: {identity} -> {path}")
