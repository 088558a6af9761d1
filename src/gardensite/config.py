"""Site configuration.

SiteConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``SiteConfig.from_env()`` builds one from the
process environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from gardensite.errors import ConfigurationError

APP_NAME = "Knowledge Garden CLI - Web Dashboard"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Site configuration. Immutable after creation.

    All fields have defaults matching the deployed service. Override what you
    need::

        config = SiteConfig(port=8080, env="production")
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    env: str = "development"

    # Identity (reported by /health and X-Application-Version)
    app_name: str = APP_NAME
    version: str = "dev"

    # Filesystem, relative to the working directory
    template_dir: str | Path = "templates"
    static_dir: str | Path = "static"
    static_url: str = "/static"
    static_cache_control: str = "public, max-age=3600"

    # Re-read pages on every request unless enabled (mtime-validated cache)
    page_cache: bool = False

    # Rate limiting: fixed window per client IP
    rate_limit_requests: int = 120
    rate_limit_window: float = 60.0

    # Compression
    compression_level: int = 1  # best speed
    compression_min_size: int = 256

    # Logging
    log_level: str = "info"

    @property
    def debug(self) -> bool:
        """True in development mode. Only affects startup diagnostics."""
        return self.env == "development"

    def resolve_paths(self, workdir: str | Path) -> tuple[Path, Path]:
        """Return absolute ``(static_root, templates_root)`` under *workdir*."""
        base = Path(workdir)
        return (base / self.static_dir).resolve(), (base / self.template_dir).resolve()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SiteConfig:
        """Build a config from environment variables.

        Reads ``PORT``, ``ENV``, ``APP_VERSION``, ``LOG_LEVEL`` and
        ``PAGE_CACHE``. Empty values count as unset.

        Raises:
            ConfigurationError: If ``PORT`` is not a valid TCP port.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        raw_port = _get(env, "PORT", str(defaults.port))
        try:
            port = int(raw_port)
        except ValueError:
            msg = f"PORT must be an integer, got {raw_port!r}"
            raise ConfigurationError(msg) from None
        if not 0 < port < 65536:
            msg = f"PORT must be between 1 and 65535, got {port}"
            raise ConfigurationError(msg)

        return cls(
            port=port,
            env=_get(env, "ENV", defaults.env),
            version=_get(env, "APP_VERSION", defaults.version),
            log_level=_get(env, "LOG_LEVEL", defaults.log_level).lower(),
            page_cache=_get(env, "PAGE_CACHE", "").lower() in _TRUTHY,
        )


def _get(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key, "")
    return value if value else default
