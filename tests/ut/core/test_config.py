"""配置 / 异常 / YAML 读写 / 日志 / 通知上下文测试"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

import pkgstore.core.config as cfgmod
from pkgstore.core.config import Config
from pkgstore.core.context import LoggingProjectContext
from pkgstore.core.exceptions import (
    ConfigError,
    InvalidArgumentError,
    PkgStoreError,
    PreconditionError,
)
from pkgstore.core.models import MessageLevel
from pkgstore.utils.fs_io import atomic_write_stream
from pkgstore.utils.logger import JSONFormatter, reset_logging, setup_logging, setup_logging_from_env
from pkgstore.utils.yaml_io import MAX_YAML_SIZE, load_yaml


class TestConfig:
    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.packages_dir == "packages"
        assert cfg.save_mode == "archive"
        assert cfg.settings_file_name == "pkgstore.yml"

    def test_from_file(self, tmp_path: Path) -> None:
        p = tmp_path / "cfg.yml"
        p.write_text("packages_dir: /srv/packages\nsave_mode: files\n", encoding="utf-8")
        cfg = Config.from_file(str(p))
        assert cfg.packages_dir == "/srv/packages"
        assert cfg.save_mode == "files"

    def test_unknown_keys_warned_and_ignored(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        p = tmp_path / "cfg.yml"
        p.write_text("packages_dir: pkgs\nteam: infra\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="pkgstore.core.config"):
            cfg = Config.from_file(str(p))
        assert cfg == Config(packages_dir="pkgs")
        assert "忽略未知配置项: team" in caplog.text

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert Config.from_file(str(tmp_path / "none.yml")) == Config()

    def test_init_and_get(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cfgmod, "_current", None)
        assert cfgmod.get_config() == Config()

        p = tmp_path / "cfg.yml"
        p.write_text("packages_dir: pkgs\n", encoding="utf-8")
        cfgmod.init_config(str(p))
        assert cfgmod.get_config().packages_dir == "pkgs"


class TestExceptions:
    @pytest.mark.parametrize(("exc", "code"), [
        (InvalidArgumentError("root"), "INVALID_ARGUMENT"),
        (PreconditionError("x"), "PRECONDITION_FAILED"),
        (ConfigError("x"), "CONFIG_ERROR"),
    ])
    def test_codes(self, exc: PkgStoreError, code: str) -> None:
        assert isinstance(exc, PkgStoreError)
        assert exc.code == code

    def test_invalid_argument_is_value_error(self) -> None:
        e = InvalidArgumentError("identity")
        assert isinstance(e, ValueError)
        assert "identity" in str(e)


class TestYamlIO:
    def test_keeps_unicode_and_order(self, tmp_path: Path) -> None:
        p = tmp_path / "a.yml"
        p.write_text("b: 说明\na: 1\n", encoding="utf-8")
        data = load_yaml(p)
        assert list(data) == ["b", "a"]
        assert data["b"] == "说明"

    @pytest.mark.parametrize("content", ["", "- a\n- b\n"])
    def test_non_mapping_is_empty(self, tmp_path: Path, content: str) -> None:
        p = tmp_path / "a.yml"
        p.write_text(content, encoding="utf-8")
        assert load_yaml(p) == {}

    def test_too_large(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = tmp_path / "big.yml"
        p.write_text("a: 1\n", encoding="utf-8")
        monkeypatch.setattr("pkgstore.utils.yaml_io.MAX_YAML_SIZE", 2)
        with pytest.raises(ValueError, match="过大"):
            load_yaml(p)
        assert MAX_YAML_SIZE > 2


class TestAtomicWrite:
    def test_stream_copied(self, tmp_path: Path) -> None:
        import io
        target = tmp_path / "sub" / "f.bin"
        n = atomic_write_stream(target, io.BytesIO(b"x" * 100_000))
        assert n == 100_000
        assert target.read_bytes() == b"x" * 100_000
        assert [p.name for p in target.parent.iterdir()] == ["f.bin"]

    def test_failure_leaves_nothing(self, tmp_path: Path) -> None:
        class Broken:
            def read(self, size: int = -1) -> bytes:
                raise OSError("disk gone")

        target = tmp_path / "f.bin"
        with pytest.raises(OSError, match="disk gone"):
            atomic_write_stream(target, Broken())  # type: ignore[arg-type]
        assert list(tmp_path.iterdir()) == []


class TestLogging:
    def test_json_formatter(self) -> None:
        record = logging.LogRecord("pkgstore.test", logging.WARNING, __file__, 10, "包 %s", ("Foo",), None)
        data = json.loads(JSONFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["message"] == "包 Foo"
        assert data["logger"] == "pkgstore.test"
        assert data["thread"]

    def test_setup_is_idempotent(self) -> None:
        try:
            setup_logging("DEBUG", json_output=True)
            setup_logging("bogus")
            root = logging.getLogger()
            assert len(root.handlers) == 1
            assert root.level == logging.INFO
        finally:
            reset_logging()

    @pytest.mark.parametrize(("flag", "is_json"), [("1", True), ("TRUE", True), ("", False), ("0", False)])
    def test_from_env(self, flag: str, is_json: bool) -> None:
        try:
            setup_logging_from_env({"PKGSTORE_LOG_LEVEL": "warning", "PKGSTORE_LOG_JSON": flag})
            root = logging.getLogger()
            assert root.level == logging.WARNING
            assert isinstance(root.handlers[0].formatter, JSONFormatter) is is_json
        finally:
            reset_logging()

    def test_from_env_defaults(self) -> None:
        try:
            setup_logging_from_env({})
            assert logging.getLogger().level == logging.INFO
        finally:
            reset_logging()


class TestLoggingProjectContext:
    def test_levels_forwarded(self, caplog: pytest.LogCaptureFixture) -> None:
        ctx = LoggingProjectContext(logging.getLogger("pkgstore.project.test"))
        with caplog.at_level(logging.DEBUG, logger="pkgstore.project.test"):
            ctx.log(MessageLevel.WARNING, "包 '%s' 已存在", "Foo 1.0.0")
            ctx.log(MessageLevel.DEBUG, "细节")
        assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.DEBUG]
        assert caplog.records[0].getMessage() == "包 'Foo 1.0.0' 已存在"
