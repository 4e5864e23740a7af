#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import yaml

from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)  # stdout is reserved for JSON-RPC / JSONL
    ]
)
logger = logging.getLogger("aztecmirror")

DEFAULT_VERSION = "v3.0.0-devnet.6-patch.1"

ENV_PREFIX = "AZTECMIRROR_"
REPOS_DIR_ENV = "AZTEC_MCP_REPOS_DIR"
DEFAULT_VERSION_ENV = "AZTEC_MCP_DEFAULT_VERSION"


def get_base_dir() -> Path:
    """Directory holding the config file and the mirror root."""
    return Path.home() / '.aztec-mcp'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. AZTECMIRROR_CONFIG environment variable
    2. ~/.aztec-mcp/config.{json,toml,yaml,yml}
    """
    if 'AZTECMIRROR_CONFIG' in os.environ:
        path = Path(os.environ['AZTECMIRROR_CONFIG'])
        if path.exists():
            return path

    base_dir = get_base_dir()
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = base_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    return base_dir / 'config.json'


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "general": {
            "repos_dir": "",          # empty: ~/.aztec-mcp/repos
            "default_version": DEFAULT_VERSION,
        },
        "git": {
            "timeout_seconds": 600,
        },
        "search": {
            "timeout_seconds": 30,
            "max_output_bytes": 10 * 1024 * 1024,
        },
        "logging": {
            "level": "INFO",
        },
    }


def load_config() -> Dict[str, Any]:
    """Load configuration from file, then apply environment overrides."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)
    return config


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce(raw: str, current: Any) -> Any:
    """Convert an environment string to the type of the value it replaces."""
    if isinstance(current, bool):
        return raw.lower() in ('true', '1', 'yes', 'on')
    if isinstance(current, int) and raw.strip().isdigit():
        return int(raw)
    return raw


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.

    Generic overrides are AZTECMIRROR_<SECTION>_<KEY>, for example
    AZTECMIRROR_SEARCH_TIMEOUT_SECONDS=10; variables naming no known key
    are ignored. AZTEC_MCP_REPOS_DIR and AZTEC_MCP_DEFAULT_VERSION are
    applied last and win over everything.
    """
    for env_key, raw in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == 'AZTECMIRROR_CONFIG':
            continue

        name = env_key[len(ENV_PREFIX):].lower()
        for section, values in config.items():
            if not isinstance(values, dict) or not name.startswith(section + '_'):
                continue
            key = name[len(section) + 1:]
            if key in values:
                values[key] = _coerce(raw, values[key])
            break

    if os.environ.get(REPOS_DIR_ENV):
        config["general"]["repos_dir"] = str(Path(os.environ[REPOS_DIR_ENV]) / "repos")
    if os.environ.get(DEFAULT_VERSION_ENV):
        config["general"]["default_version"] = os.environ[DEFAULT_VERSION_ENV]

    return config


@dataclass(frozen=True)
class Settings:
    """
    Process-wide settings, resolved once and passed to every service.

    Nothing below this layer reads the environment or the config file.
    """
    repos_dir: Path
    default_version: str = DEFAULT_VERSION
    git_timeout: int = 600
    search_timeout: int = 30
    search_max_output_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'Settings':
        config = config if config is not None else load_config()
        general = config.get("general", {})
        repos_dir = general.get("repos_dir") or str(get_base_dir() / "repos")

        try:
            return cls(
                repos_dir=Path(repos_dir).expanduser(),
                default_version=general.get("default_version") or DEFAULT_VERSION,
                git_timeout=int(config.get("git", {}).get("timeout_seconds", 600)),
                search_timeout=int(config.get("search", {}).get("timeout_seconds", 30)),
                search_max_output_bytes=int(
                    config.get("search", {}).get("max_output_bytes", 10 * 1024 * 1024)
                ),
                log_level=str(config.get("logging", {}).get("level", "INFO")).upper(),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repos_dir': str(self.repos_dir),
            'default_version': self.default_version,
            'git_timeout': self.git_timeout,
            'search_timeout': self.search_timeout,
            'search_max_output_bytes': self.search_max_output_bytes,
            'log_level': self.log_level,
        }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Resolve settings on first use and keep them for the process lifetime."""
    global _settings
    if _settings is None:
        _settings = Settings.from_config()
        logging.getLogger().setLevel(_settings.log_level)
    return _settings
