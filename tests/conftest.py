"""测试共享 fixture — 包文件构造 + 记录型通知上下文"""

from __future__ import annotations

import io
import zipfile
from typing import Any

import pytest

from pkgstore.core.models import MessageLevel

DEFAULT_CONTENT = {
    "Foo.nuspec": b"<package><metadata><id>Foo</id></metadata></package>",
    "lib/net8.0/Foo.dll": b"\x00\x01fake-dll",
    "content/readme.txt": "说明".encode(),
}


class RecordingContext:
    """把 log() 调用记下来，供断言级别和消息"""

    def __init__(self) -> None:
        self.messages: list[tuple[MessageLevel, str]] = []

    def log(self, level: MessageLevel, message: str, *args: Any) -> None:
        self.messages.append((level, message % args if args else message))

    def levels(self) -> list[MessageLevel]:
        return [level for level, _ in self.messages]


def _build_package(files: dict[str, bytes] | None = None) -> bytes:
    """构造一个 zip 包，带上包格式自身的元数据条目"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", "<Types/>")
        zf.writestr("_rels/.rels", "<Relationships/>")
        zf.writestr("package/services/metadata/core-properties/1.psmdcp", "<coreProperties/>")
        for name, data in (DEFAULT_CONTENT if files is None else files).items():
            zf.writestr(name, data)
    return buf.getvalue()


@pytest.fixture()
def context() -> RecordingContext:
    return RecordingContext()


@pytest.fixture()
def make_package():
    """包构造工厂: make_package() 或 make_package({"a.txt": b"..."})"""
    return _build_package
