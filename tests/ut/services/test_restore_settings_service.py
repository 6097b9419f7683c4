"""RestoreSettingsService 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgstore.core.config import Config
from pkgstore.core.exceptions import InvalidArgumentError
from pkgstore.core.models import FrameworkSettings
from pkgstore.core.settings import DirectoryMachineWideSettings, SettingsFile
from pkgstore.services.restore_settings_service import (
    RestoreSettingsRequest,
    RestoreSettingsService,
)

SOURCES = "RestoreAdditionalProjectSources"
FALLBACK = "RestoreAdditionalProjectFallbackFolders"
EXCLUDES = "RestoreAdditionalProjectFallbackFoldersExcludes"


@pytest.fixture()
def service(tmp_path: Path) -> RestoreSettingsService:
    return RestoreSettingsService(config=Config(packages_dir=str(tmp_path / "packages")))


def _request(**kwargs) -> RestoreSettingsRequest:  # type: ignore[no-untyped-def]
    kwargs.setdefault("project_unique_name", "a.csproj")
    return RestoreSettingsRequest(**kwargs)


class TestFrameworkAggregation:
    def test_additional_sources_appended(self, service: RestoreSettingsService) -> None:
        result = service.resolve(_request(
            restore_sources=["sourceA", "sourceB"],
            settings_per_framework=[FrameworkSettings("a", {SOURCES: "sourceC"})],
        ))
        assert result.sources == ["sourceA", "sourceB", "sourceC"]

    def test_additional_fallback_folders_appended(self, service: RestoreSettingsService) -> None:
        result = service.resolve(_request(
            restore_fallback_folders=["sourceA", "sourceB"],
            settings_per_framework=[FrameworkSettings("a", {FALLBACK: "sourceC"})],
        ))
        assert result.fallback_folders == ["sourceA", "sourceB", "sourceC"]

    def test_excluded_fallback_folder_not_added(self, service: RestoreSettingsService) -> None:
        result = service.resolve(_request(
            restore_fallback_folders=["sourceA", "sourceB"],
            settings_per_framework=[
                FrameworkSettings("a", {FALLBACK: "sourceC"}),
                FrameworkSettings("b", {EXCLUDES: "sourceC"}),
            ],
        ))
        assert result.fallback_folders == ["sourceA", "sourceB"]

    def test_aggregation_across_frameworks(self, service: RestoreSettingsService) -> None:
        result = service.resolve(_request(
            restore_sources=["base"],
            restore_fallback_folders=["base"],
            settings_per_framework=[
                FrameworkSettings("a", {SOURCES: "a;b", FALLBACK: "m;n"}),
                FrameworkSettings("b", {SOURCES: "c", FALLBACK: "s"}),
                FrameworkSettings("c", {SOURCES: "d"}),
                FrameworkSettings("d", {FALLBACK: "t"}),
                FrameworkSettings("e"),
            ],
        ))
        assert result.sources == ["base", "a", "b", "c", "d"]
        assert result.fallback_folders == ["base", "m", "n", "s", "t"]

    @pytest.mark.parametrize("per_framework", [None, []])
    def test_no_framework_settings(
        self, service: RestoreSettingsService, per_framework: list | None,
    ) -> None:
        result = service.resolve(_request(
            restore_sources=["base"],
            restore_fallback_folders=["base"],
            settings_per_framework=per_framework,
        ))
        assert result.sources == ["base"]
        assert result.fallback_folders == ["base"]


class TestLayering:
    @pytest.fixture()
    def project(self, tmp_path: Path) -> Path:
        proj = tmp_path / "proj"
        proj.mkdir()
        (proj / "pkgstore.yml").write_text(
            "config:\n"
            "  globalPackagesFolder: ./gpf\n"
            "packageSources:\n"
            "  feed: https://feed/\n"
            "fallbackPackageFolders:\n"
            "  shared: /opt/shared\n",
            encoding="utf-8",
        )
        return proj

    def test_values_from_config_files(self, service: RestoreSettingsService, project: Path) -> None:
        result = service.resolve(_request(project_directory=str(project)))
        assert result.packages_path == str((project / "gpf").resolve())
        assert result.sources == ["https://feed/"]
        assert result.fallback_folders == ["/opt/shared"]
        assert result.config_file_paths == [str((project / "pkgstore.yml").resolve())]

    def test_explicit_values_win(self, service: RestoreSettingsService, project: Path) -> None:
        result = service.resolve(_request(
            project_directory=str(project),
            restore_packages_path="/explicit",
            restore_sources=["https://explicit/"],
        ))
        assert result.packages_path == "/explicit"
        assert result.sources == ["https://explicit/"]
        assert result.fallback_folders == ["/opt/shared"]

    def test_explicit_empty_list_is_not_overridden(
        self, service: RestoreSettingsService, project: Path,
    ) -> None:
        result = service.resolve(_request(
            project_directory=str(project),
            restore_sources=[],
            settings_per_framework=[FrameworkSettings("net8.0", {SOURCES: "extra"})],
        ))
        assert result.sources == ["extra"]

    def test_config_default_packages_path(self, service: RestoreSettingsService, tmp_path: Path) -> None:
        result = service.resolve(_request())
        assert result.packages_path == str(tmp_path / "packages")
        assert result.sources == []
        assert result.config_file_paths == []


class TestMachineWide:
    def test_injected(self, tmp_path: Path) -> None:
        class Fixed:
            settings = [SettingsFile(tmp_path / "mw.yml", {"packageSources": {"mw": "https://mw/"}})]

        svc = RestoreSettingsService(config=Config(), machine_wide=Fixed())
        assert svc.resolve(_request()).sources == ["https://mw/"]

    def test_created_lazily_from_config(self, tmp_path: Path) -> None:
        svc = RestoreSettingsService(config=Config(machine_wide_config_dir=str(tmp_path)))
        assert svc._machine_wide is None
        mw = svc.machine_wide
        assert isinstance(mw, DirectoryMachineWideSettings)
        assert svc.machine_wide is mw

    def test_absent_when_not_configured(self) -> None:
        assert RestoreSettingsService(config=Config()).machine_wide is None


class TestRequestFromDict:
    def test_frameworks(self) -> None:
        req = RestoreSettingsRequest.from_dict({
            "project_unique_name": "a.csproj",
            "restore_sources": ["x"],
            "frameworks": {"net8.0": {SOURCES: "a;b"}, "net472": None},
        })
        assert req.restore_sources == ["x"]
        assert req.restore_fallback_folders is None
        assert [f.item_spec for f in req.settings_per_framework or []] == ["net8.0", "net472"]
        assert req.settings_per_framework[1].metadata == {}  # type: ignore[index]

    def test_missing_frameworks(self) -> None:
        assert RestoreSettingsRequest.from_dict({}).settings_per_framework is None

    def test_null_metadata_adds_nothing(self, service: RestoreSettingsService) -> None:
        req = RestoreSettingsRequest.from_dict({
            "restore_sources": ["base"],
            "frameworks": {"net8.0": {SOURCES: None, FALLBACK: "m"}},
        })
        assert req.settings_per_framework[0].metadata == {FALLBACK: "m"}  # type: ignore[index]
        result = service.resolve(req)
        assert result.sources == ["base"]
        assert result.fallback_folders == ["m"]

    @pytest.mark.parametrize("key", ["restore_sources", "restore_fallback_folders"])
    @pytest.mark.parametrize("value", ["a;b", ["a", 1], {"a": "b"}])
    def test_list_fields_must_be_string_lists(self, key: str, value: object) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            RestoreSettingsRequest.from_dict({key: value})
        assert exc_info.value.param_name == key

    @pytest.mark.parametrize("frameworks", [["net8.0"], {"net8.0": "a;b"}])
    def test_frameworks_shape(self, frameworks: object) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            RestoreSettingsRequest.from_dict({"frameworks": frameworks})
        assert exc_info.value.param_name == "frameworks"
