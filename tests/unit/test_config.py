"""
配置模块测试：Schema 默认值与校验、YAML 加载、运行时覆盖。
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from token_studio.config.defaults import (
    DEFAULT_MODEL,
    list_models,
    resolve_delimiter,
    supported_models,
)
from token_studio.config.loader import load_settings, validate_settings_file
from token_studio.config.schema import ServerConfig, SettingsFile, StudioConfig
from token_studio.convert import ConvertOptions, FormatKind, ViewMode
from token_studio.errors import ConfigValidationError, SettingsLoadError


class TestDefaults:
    """模型注册表与分隔符。"""

    def test_only_cl100k_supported(self) -> None:
        assert supported_models() == ["cl100k_base"]
        assert DEFAULT_MODEL == "cl100k_base"

    def test_reserved_models_listed(self) -> None:
        assert {"cl100k_base", "o200k_base", "p50k_base", "r50k_base"} == set(list_models())

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("comma", ","), ("TAB", "\t"), ("pipe", "|"), (",", ","), ("\t", "\t"), ("|", "|")],
    )
    def test_resolve_delimiter(self, value: str, expected: str) -> None:
        assert resolve_delimiter(value) == expected

    def test_resolve_unknown_delimiter(self) -> None:
        with pytest.raises(ValueError):
            resolve_delimiter(";")


class TestStudioConfig:
    """展示配置。"""

    def test_defaults(self, default_config: StudioConfig) -> None:
        assert default_config.show_counts
        assert not default_config.show_tokens
        assert not default_config.token_aware
        assert default_config.model == "cl100k_base"
        assert default_config.toon_delimiter == ","
        assert default_config.toon_key_folding == "off"
        assert all(mode is ViewMode.TEXT for mode in default_config.view_modes.values())
        assert set(default_config.view_modes) == set(FormatKind)

    def test_frozen(self, default_config: StudioConfig) -> None:
        with pytest.raises(ValidationError):
            default_config.show_tokens = True  # type: ignore[misc]

    def test_model_copy(self, default_config: StudioConfig) -> None:
        updated = default_config.model_copy(update={"show_tokens": True})
        assert updated.show_tokens
        assert not default_config.show_tokens

    def test_wants_tokenization(self) -> None:
        assert StudioConfig().wants_tokenization
        assert StudioConfig(show_counts=False, show_tokens=True).wants_tokenization
        assert not StudioConfig(show_counts=False, show_tokens=False).wants_tokenization

    def test_delimiter_names(self) -> None:
        assert StudioConfig(toon_delimiter="tab").toon_delimiter == "\t"

    @pytest.mark.parametrize("value", [";", 1])
    def test_bad_delimiter(self, value: object) -> None:
        with pytest.raises(ValidationError):
            StudioConfig(toon_delimiter=value)

    def test_bad_key_folding(self) -> None:
        with pytest.raises(ValidationError):
            StudioConfig(toon_key_folding="aggressive")

    def test_empty_model_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StudioConfig(model="")

    def test_partial_view_modes_filled(self) -> None:
        config = StudioConfig(view_modes={"toml": "ids"})
        assert config.view_mode(FormatKind.TOML) is ViewMode.IDS
        assert config.view_mode(FormatKind.PRETTY) is ViewMode.TEXT

    def test_convert_options(self) -> None:
        config = StudioConfig(token_aware=True, toon_delimiter="pipe", toon_key_folding="safe")
        assert config.convert_options() == ConvertOptions(
            token_aware=True, toon_delimiter="|", toon_key_folding="safe"
        )


class TestServerConfig:
    def test_local_tokenize_url(self) -> None:
        assert ServerConfig().local_tokenize_url == "http://127.0.0.1:8000/api/tokenize"

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=port)


class TestLoader:
    """YAML 加载与合并。"""

    def test_load_file(self, settings_yaml: Path) -> None:
        settings = load_settings(settings_yaml)
        assert settings.studio.show_tokens
        assert settings.studio.token_aware
        assert settings.studio.toon_delimiter == "|"
        assert settings.server.port == 8080

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_settings() == SettingsFile()

    def test_auto_discovery(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "token_studio.yaml").write_text("studio:\n  token_aware: true\n", encoding="utf-8")
        assert load_settings().studio.token_aware

    def test_overrides_merge_deeply(self, settings_yaml: Path) -> None:
        settings = load_settings(settings_yaml, overrides={"studio": {"show_tokens": False}})
        assert not settings.studio.show_tokens
        assert settings.studio.token_aware

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == SettingsFile()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsLoadError) as exc_info:
            load_settings(tmp_path / "missing.yaml")
        assert exc_info.value.file_path.endswith("missing.yaml")

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("studio: [unclosed\n", encoding="utf-8")
        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SettingsLoadError) as exc_info:
            load_settings(path)
        assert "list" in exc_info.value.why

    def test_validation_error_names_field(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.yaml"
        path.write_text("studio:\n  toon_delimiter: ';'\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(path)
        assert exc_info.value.field_path == "studio.toon_delimiter"

    def test_validate_settings_file(self, settings_yaml: Path, tmp_path: Path) -> None:
        assert validate_settings_file(settings_yaml) == []
        errors = validate_settings_file(tmp_path / "missing.yaml")
        assert len(errors) == 1
        assert "不存在" in errors[0]
