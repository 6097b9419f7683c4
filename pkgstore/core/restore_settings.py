"""还原配置合并算法

两个纯函数，无 IO、无共享状态:

  aggregate_sources: 基础列表 + 各目标框架追加项，去重保序，再剔除排除项
  get_value:         按优先级依次求值，取第一个非 None 的结果

get_value 中空字符串、空列表都算"有值"。某一层显式配置为"无来源"时，
不能被低优先级层的非空默认值覆盖。
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from pkgstore.core.protocols import SettingsItem

T = TypeVar("T")

ITEM_SEPARATOR = ";"

# 目标框架条目上的元数据字段名
ADDITIONAL_SOURCES_KEY = "RestoreAdditionalProjectSources"
ADDITIONAL_FALLBACK_FOLDERS_KEY = "RestoreAdditionalProjectFallbackFolders"
ADDITIONAL_FALLBACK_FOLDERS_EXCLUDES_KEY = "RestoreAdditionalProjectFallbackFoldersExcludes"


def split_items(value: str | None) -> list[str]:
    """';' 分隔字符串 → 列表，逐项去空白并丢弃空项"""
    if not value:
        return []
    return [t for t in (part.strip() for part in value.split(ITEM_SEPARATOR)) if t]


def _read_items(item: SettingsItem, key: str) -> list[str]:
    return split_items(item.get_metadata(key))


def aggregate_sources(
    base: Iterable[str] | None,
    per_framework: Iterable[SettingsItem] | None,
    addition_key: str,
    exclusion_key: str | None = None,
) -> list[str]:
    """合并基础列表与各目标框架的追加项

    结果按首次出现的顺序去重（先 base，再按条目迭代顺序）；
    排除项对全部结果生效，不论该值来自 base 还是哪个目标框架。
    比较是逐字节的，不做大小写或路径分隔符归一化。
    """
    # dict 保留插入顺序，用作有序集合
    merged: dict[str, None] = dict.fromkeys(base or ())
    items = list(per_framework or ())

    for item in items:
        for token in _read_items(item, addition_key):
            merged.setdefault(token, None)

    if exclusion_key:
        excluded = {t for item in items for t in _read_items(item, exclusion_key)}
        for token in excluded:
            merged.pop(token, None)

    return list(merged)


def get_value(*providers: Callable[[], T | None]) -> T | None:
    """按顺序调用 providers，返回第一个非 None 的结果；全部为 None 时返回 None"""
    for provider in providers:
        value = provider()
        if value is not None:
            return value
    return None
