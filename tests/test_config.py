"""Tests for SiteConfig defaults and environment parsing."""

from pathlib import Path

import pytest

from gardensite.config import APP_NAME, SiteConfig
from gardensite.errors import ConfigurationError


class TestDefaults:
    def test_defaults(self) -> None:
        config = SiteConfig()
        assert config.port == 3000
        assert config.env == "development"
        assert config.app_name == APP_NAME == "Knowledge Garden CLI - Web Dashboard"
        assert config.version == "dev"
        assert config.rate_limit_requests == 120
        assert config.rate_limit_window == 60.0
        assert config.page_cache is False

    def test_frozen(self) -> None:
        config = SiteConfig()
        with pytest.raises(AttributeError):
            config.port = 8080  # type: ignore[misc]

    def test_debug_only_in_development(self) -> None:
        assert SiteConfig().debug is True
        assert SiteConfig(env="production").debug is False

    def test_resolve_paths(self, tmp_path: Path) -> None:
        static_root, templates_root = SiteConfig().resolve_paths(tmp_path)
        assert static_root == (tmp_path / "static").resolve()
        assert templates_root == (tmp_path / "templates").resolve()


class TestFromEnv:
    def test_empty_environment_uses_defaults(self) -> None:
        config = SiteConfig.from_env({})
        assert config.port == 3000
        assert config.env == "development"
        assert config.version == "dev"
        assert config.log_level == "info"

    def test_reads_variables(self) -> None:
        config = SiteConfig.from_env(
            {
                "PORT": "8080",
                "ENV": "production",
                "APP_VERSION": "1.4.0",
                "LOG_LEVEL": "DEBUG",
                "PAGE_CACHE": "yes",
            }
        )
        assert config.port == 8080
        assert config.env == "production"
        assert config.version == "1.4.0"
        assert config.log_level == "debug"
        assert config.page_cache is True

    def test_empty_values_count_as_unset(self) -> None:
        config = SiteConfig.from_env({"PORT": "", "ENV": ""})
        assert config.port == 3000
        assert config.env == "development"

    @pytest.mark.parametrize("value", ["abc", "0", "65536", "-1"])
    def test_invalid_port(self, value: str) -> None:
        with pytest.raises(ConfigurationError, match="PORT"):
            SiteConfig.from_env({"PORT": value})

    def test_page_cache_falsy_values(self) -> None:
        assert SiteConfig.from_env({"PAGE_CACHE": "off"}).page_cache is False
        assert SiteConfig.from_env({"PAGE_CACHE": "0"}).page_cache is False

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "4321")
        monkeypatch.delenv("ENV", raising=False)
        config = SiteConfig.from_env()
        assert config.port == 4321
        assert config.env == "development"
