"""CLI — 还原配置求值"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import click

from pkgstore.cli import _cli_errors, _svc


def register(group: click.Group) -> None:
    group.add_command(restore_settings)


@click.command(name="restore-settings")
@click.option("--project-name", default="", help="项目唯一名称（仅用于日志）")
@click.option("--project-dir", default="", help="项目目录，从这里向上查找配置文件")
@click.option("--solution-dir", default="", help="解决方案目录")
@click.option("--config-file", default="", help="显式配置文件（忽略其余各层）")
@click.option("--source", "sources", multiple=True, help="显式包来源（可多次指定）")
@click.option("--fallback-folder", "fallback_folders", multiple=True, help="显式回退目录（可多次指定）")
@click.option("--packages-path", default=None, help="显式包目录")
@click.option(
    "--frameworks", "frameworks_file", default="",
    type=click.Path(dir_okay=False), help="目标框架配置 YAML（frameworks: {名称: {元数据键: 值}}）",
)
@click.option("--json", "as_json", is_flag=True, help="以 JSON 输出")
def restore_settings(
    project_name: str, project_dir: str, solution_dir: str, config_file: str,
    sources: tuple[str, ...], fallback_folders: tuple[str, ...],
    packages_path: str | None, frameworks_file: str, as_json: bool,
) -> None:
    """计算有效的包目录、包来源与回退目录"""
    from pkgstore.services.restore_settings_service import RestoreSettingsRequest
    from pkgstore.utils.yaml_io import load_yaml

    body: dict[str, Any] = {
        "project_unique_name": project_name,
        "project_directory": project_dir,
        "solution_directory": solution_dir,
        "restore_config_file": config_file,
        "restore_packages_path": packages_path,
        # 未指定时为 None，交给配置文件决定
        "restore_sources": list(sources) if sources else None,
        "restore_fallback_folders": list(fallback_folders) if fallback_folders else None,
    }
    if frameworks_file:
        body["frameworks"] = load_yaml(frameworks_file).get("frameworks") or {}

    with _cli_errors():
        result = _svc().restore_settings.resolve(RestoreSettingsRequest.from_dict(body))

    if as_json:
        click.echo(json.dumps(asdict(result), ensure_ascii=False, indent=2))
        return

    click.echo(f"包目录: {result.packages_path}")
    click.echo("包来源:")
    for s in result.sources:
        click.echo(f"  {s}")
    click.echo("回退目录:")
    for f in result.fallback_folders:
        click.echo(f"  {f}")
    click.echo("配置文件:")
    for p in result.config_file_paths:
        click.echo(f"  {p}")
