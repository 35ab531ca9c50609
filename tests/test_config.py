"""Tests for textra.config -- XDG paths, atomic writes, precedence, credentials."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from textra.config import (
    _atomic_write,
    config_path,
    get_config_dir,
    get_data_dir,
    load_global_config,
    resolve_config,
    resolve_credential,
    resolve_credentials,
    save_global_config,
    set_config_value,
)
from textra.exceptions import ConfigError
from textra.exit_codes import EXIT_GENERIC_FAILURE
from textra.models import DEFAULT_BASE_URL, GlobalConfig


# ---------------------------------------------------------------------------
# XDG paths
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("textra.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))

        result = get_config_dir()
        assert result == tmp_path / "cfg" / "textra"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("textra.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "textra"

    def test_data_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("textra.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

        assert get_data_dir() == tmp_path / "data" / "textra"

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("textra.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".textra"
        assert get_data_dir() == tmp_path / ".textra" / "logs"

    def test_config_path(self, isolated_config: Path) -> None:
        assert config_path() == isolated_config / "config" / "textra" / "config.json"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "config.json"
        _atomic_write(target, "{}")
        assert target.read_text(encoding="utf-8") == "{}"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        _atomic_write(target, "{}")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        with patch("textra.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "{}")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout is None

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(name="alice", timeout=30, default_api_param="generalNT_en_ja"))
        loaded = load_global_config()
        assert loaded.name == "alice"
        assert loaded.timeout == 30
        assert loaded.default_api_param == "generalNT_en_ja"

    def test_saved_file_holds_no_secrets(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(name="alice"))
        data = json.loads(config_path().read_text(encoding="utf-8"))
        assert data["key_source"] == "env:TEXTRA_KEY"
        assert "secret" not in data

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        config_path().write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config") as exc_info:
            load_global_config()
        assert exc_info.value.exit_code == EXIT_GENERIC_FAILURE

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        config_path().write_text(json.dumps({"timeout": "forever"}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_global_config()


class TestSetConfigValue:
    def test_set_string(self, isolated_config: Path) -> None:
        set_config_value("name", "alice")
        assert load_global_config().name == "alice"

    def test_set_number(self, isolated_config: Path) -> None:
        set_config_value("timeout", "30")
        assert load_global_config().timeout == 30.0

    def test_set_null(self, isolated_config: Path) -> None:
        set_config_value("timeout", "30")
        set_config_value("timeout", "null")
        assert load_global_config().timeout is None

    def test_digit_name_kept_as_string(self, isolated_config: Path) -> None:
        set_config_value("name", "12345")
        assert load_global_config().name == "12345"

    def test_unknown_key(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown config key"):
            set_config_value("colour", "blue")

    def test_invalid_value(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="verify_ssl"):
            set_config_value("verify_ssl", "maybe")


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.name is None
        assert config.base_url == DEFAULT_BASE_URL

    def test_env_name_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_global_config(GlobalConfig(name="from-file"))
        monkeypatch.setenv("TEXTRA_NAME", "from-env")
        assert resolve_config().name == "from-env"

    def test_env_base_url_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_global_config(GlobalConfig(base_url="https://file.test"))
        monkeypatch.setenv("TEXTRA_BASE_URL", "https://env.test")
        assert resolve_config().base_url == "https://env.test"

    def test_cli_base_url_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEXTRA_BASE_URL", "https://env.test")
        assert resolve_config(cli_base_url="https://cli.test").base_url == "https://cli.test"

    def test_to_settings(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(base_url="https://file.test/", timeout=5, verify_ssl=False))
        settings = resolve_config().to_settings()
        assert settings.api_url == "https://file.test/api/"
        assert settings.timeout == 5
        assert settings.verify_ssl is False


# ---------------------------------------------------------------------------
# Credential resolution
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env_source(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_KEY", "key123")
        assert resolve_credential("env:MY_KEY") == "key123"

    def test_env_source_missing_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR", raising=False)
        with pytest.raises(ConfigError, match="not set"):
            resolve_credential("env:NONEXISTENT_VAR")

    def test_file_source(self, tmp_path: Path) -> None:
        cred_file = tmp_path / "secret.txt"
        cred_file.write_text("  my-secret  \n", encoding="utf-8")
        assert resolve_credential(f"file:{cred_file}") == "my-secret"

    def test_file_source_missing_raises(self) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential("file:/nonexistent/path/secret.txt")

    def test_prompt_source_with_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: True)
        monkeypatch.setattr("getpass.getpass", lambda prompt: "typed-secret")
        assert resolve_credential("prompt") == "typed-secret"

    def test_prompt_source_non_tty_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: False)
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_source_raises(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("magic:wand")


class TestResolveCredentials:
    def test_from_environment(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEXTRA_NAME", "alice")
        monkeypatch.setenv("TEXTRA_KEY", "k")
        monkeypatch.setenv("TEXTRA_SECRET", "s")

        creds = resolve_credentials(resolve_config())
        assert (creds.name, creds.key, creds.secret) == ("alice", "k", "s")

    def test_from_configured_sources(self, isolated_config: Path) -> None:
        (isolated_config / "key.txt").write_text("file-key\n", encoding="utf-8")
        (isolated_config / "secret.txt").write_text("file-secret\n", encoding="utf-8")
        config = GlobalConfig(
            name="alice",
            key_source=f"file:{isolated_config / 'key.txt'}",
            secret_source=f"file:{isolated_config / 'secret.txt'}",
        )

        creds = resolve_credentials(config)
        assert creds.key == "file-key"
        assert creds.secret == "file-secret"

    def test_missing_name(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="TEXTRA_NAME"):
            resolve_credentials(GlobalConfig())

    def test_missing_secret(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEXTRA_KEY", "k")
        with pytest.raises(ConfigError, match="TEXTRA_SECRET"):
            resolve_credentials(GlobalConfig(name="alice"))

    def test_empty_value_rejected(self, isolated_config: Path, tmp_path: Path) -> None:
        empty = tmp_path / "empty.txt"
        empty.write_text("\n", encoding="utf-8")
        config = GlobalConfig(
            name="alice", key_source=f"file:{empty}", secret_source=f"file:{empty}"
        )
        with pytest.raises(ConfigError, match="Incomplete credentials"):
            resolve_credentials(config)
