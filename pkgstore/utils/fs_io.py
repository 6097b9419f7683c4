"""文件系统写入工具

原子写入：先写同目录临时文件，再 os.replace 覆盖目标，
中途崩溃不会留下半截文件。包存储依赖这一点判定"已安装"。
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

COPY_CHUNK_SIZE = 64 * 1024


def atomic_write_stream(path: Path, stream: BinaryIO) -> int:
    """把二进制流从当前位置拷贝到 path（原子替换），返回写入字节数

    异常:
        OSError: 写入或替换失败，临时文件已清理
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            shutil.copyfileobj(stream, f, COPY_CHUNK_SIZE)
            written = f.tell()
        os.replace(tmp, str(path))
    except Exception:
        # 只捕获普通异常，不拦截 KeyboardInterrupt/SystemExit
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    return written
