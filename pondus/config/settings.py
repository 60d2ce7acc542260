"""
Runtime settings and API keys.

Usage:
    from pondus.config.settings import load_settings

    settings = load_settings()
    key = settings.aa_api_key()   # None when not configured

Config file: $XDG_CONFIG_HOME/pondus/config.yaml (default ~/.config/pondus/config.yaml)

    cache:
      ttl_hours: 24
      dir: ~/.cache/pondus
    alias:
      path: ~/.config/pondus/models.yaml
    browser: agent-browser        # or: playwright
    max_workers: 4
    http_timeout: 30
    sources:
      artificial-analysis:
        api_key: "..."
      seal:
        agent_browser_path: /usr/local/bin/agent-browser

AA_API_KEY in the environment (or a .env file) overrides the configured key.

CLI check:
    pondus sources --check-keys
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ..collect.browser import DEFAULT_AGENT_BROWSER
from ..collect.cache import DEFAULT_TTL_HOURS

logger = logging.getLogger(__name__)

AA_API_KEY_ENV = "AA_API_KEY"
DEFAULT_BROWSER = "agent-browser"
BROWSER_BACKENDS = ("agent-browser", "playwright")
DEFAULT_MAX_WORKERS = 4
DEFAULT_HTTP_TIMEOUT = 30


class ConfigError(Exception):
    """Raised when the config file exists but cannot be used."""
    pass


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".config"
    return root / "pondus" / "config.yaml"


@dataclass
class SourceSettings:
    """Per-provider prerequisites."""
    api_key: Optional[str] = None
    agent_browser_path: Optional[str] = None


@dataclass
class Settings:
    """Read-only runtime context handed to adapters."""
    sources: Dict[str, SourceSettings] = field(default_factory=dict)
    cache_ttl_hours: float = DEFAULT_TTL_HOURS
    cache_dir: Optional[Path] = None
    alias_path: Optional[Path] = None
    browser: str = DEFAULT_BROWSER
    max_workers: int = DEFAULT_MAX_WORKERS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    env_aa_api_key: Optional[str] = None

    def source(self, *names: str) -> Optional[SourceSettings]:
        """First configured entry among ``names``."""
        for name in names:
            if name in self.sources:
                return self.sources[name]
        return None

    def aa_api_key(self) -> Optional[str]:
        """Artificial Analysis key: environment first, then config."""
        if self.env_aa_api_key:
            return self.env_aa_api_key
        cfg = self.source("artificial-analysis", "artificial_analysis")
        if cfg and cfg.api_key and cfg.api_key.strip():
            return cfg.api_key.strip()
        return None

    def agent_browser_path(self) -> str:
        for name in ("seal", "swe-rebench"):
            cfg = self.sources.get(name)
            if cfg and cfg.agent_browser_path:
                return cfg.agent_browser_path
        return DEFAULT_AGENT_BROWSER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """
        Build settings from a decoded config file.

        Raises:
            ConfigError: If a section has the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError("config root must be a mapping")

        sources = {}
        raw_sources = data.get("sources") or {}
        if not isinstance(raw_sources, dict):
            raise ConfigError("'sources' must be a mapping")
        for name, entry in raw_sources.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ConfigError(f"sources.{name} must be a mapping")
            sources[str(name)] = SourceSettings(
                api_key=entry.get("api_key"),
                agent_browser_path=entry.get("agent_browser_path"),
            )

        cache = data.get("cache") or {}
        alias = data.get("alias") or {}
        if not isinstance(cache, dict) or not isinstance(alias, dict):
            raise ConfigError("'cache' and 'alias' must be mappings")

        try:
            ttl_hours = float(cache.get("ttl_hours", DEFAULT_TTL_HOURS))
            max_workers = int(data.get("max_workers", DEFAULT_MAX_WORKERS))
            http_timeout = float(data.get("http_timeout", DEFAULT_HTTP_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if ttl_hours < 0 or max_workers < 1 or http_timeout <= 0:
            raise ConfigError("ttl_hours must be >= 0, max_workers >= 1, http_timeout > 0")

        browser = str(data.get("browser", DEFAULT_BROWSER))
        if browser not in BROWSER_BACKENDS:
            raise ConfigError(f"browser must be one of {', '.join(BROWSER_BACKENDS)}, got {browser!r}")

        cache_dir = cache.get("dir")
        alias_path = alias.get("path")

        return cls(
            sources=sources,
            cache_ttl_hours=ttl_hours,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
            alias_path=Path(alias_path).expanduser() if alias_path else None,
            browser=browser,
            max_workers=max_workers,
            http_timeout=http_timeout,
        )


def load_env() -> None:
    """Load .env from the working directory, if present."""
    load_dotenv()


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from the config file and environment.

    Args:
        path: Config file (default: $XDG_CONFIG_HOME/pondus/config.yaml)

    Returns:
        Settings; defaults when the file does not exist

    Raises:
        ConfigError: If the file exists but is not valid YAML or has bad values
    """
    load_env()
    path = Path(path) if path else default_config_path()

    settings = Settings()
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        settings = Settings.from_dict(data)
        logger.debug(f"Loaded config from {path}")

    env_key = os.environ.get(AA_API_KEY_ENV, "").strip()
    if env_key:
        settings.env_aa_api_key = env_key

    return settings


def check_keys(settings: Settings) -> Dict[str, str]:
    """
    Check which credentials and tools are configured.

    Returns:
        dict: Status of each prerequisite ("OK" or "MISSING")
    """
    browser_path = settings.agent_browser_path()
    return {
        AA_API_KEY_ENV: "OK" if settings.aa_api_key() else "MISSING",
        browser_path: "OK" if shutil.which(browser_path) else "MISSING",
    }
