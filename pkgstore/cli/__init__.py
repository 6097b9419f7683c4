"""pkgstore 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from pkgstore import __version__
from pkgstore.core.exceptions import PkgStoreError
from pkgstore.services.container import ServiceContainer, get_container, reset_container
from pkgstore.utils.logger import setup_logging_from_env


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


@contextmanager
def _cli_errors() -> Iterator[None]:
    """业务异常转成 click 的友好错误输出（退出码 1）"""
    try:
        yield
    except PkgStoreError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default="", help="配置文件路径（YAML）")
def main(config_path: str) -> None:
    """pkgstore - 目录式包存储与还原配置合并"""
    setup_logging_from_env()
    if config_path:
        from pkgstore.core.config import init_config
        init_config(config_path)
        reset_container()


# 注册各领域子命令
from pkgstore.cli.cmd_store import register as _reg_store  # noqa: E402
from pkgstore.cli.cmd_restore import register as _reg_restore  # noqa: E402
from pkgstore.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_store(main)
_reg_restore(main)
_reg_misc(main)
