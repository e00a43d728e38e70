"""
Configuration

Cloud settings and sync policy. The public read config is the one baked
into the deployed site and used by every anonymous visitor, so only a
read-only access key belongs in it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .logging_setup import get_service_logger

logger = get_service_logger("config")

DEFAULT_STATE_DIR = Path.home() / ".showroom" / "state"


@dataclass(frozen=True)
class CloudSettings:
    """Endpoint and key for one remote catalog document"""
    enabled: bool = False
    endpoint_url: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        """Enabled and pointing somewhere"""
        return self.enabled and bool(self.endpoint_url)

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "endpointUrl": self.endpoint_url,
            "apiKey": self.api_key,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CloudSettings":
        """
        Build settings from the stored JSON form.

        Raises:
            ConfigError: if data is not an object or has wrongly typed fields
        """
        if not isinstance(data, dict):
            raise ConfigError("cloud settings must be an object")

        enabled = data.get("enabled", False)
        endpoint_url = data.get("endpointUrl", data.get("endpoint_url", "")) or ""
        api_key = data.get("apiKey", data.get("api_key", "")) or ""

        if not isinstance(enabled, bool):
            raise ConfigError("'enabled' must be a boolean")
        if not isinstance(endpoint_url, str) or not isinstance(api_key, str):
            raise ConfigError("'endpointUrl' and 'apiKey' must be strings")

        return cls(enabled=enabled, endpoint_url=endpoint_url.strip(), api_key=api_key.strip())


# Public read config shipped with the site. Point it at the same document
# the admin publishes to, with a read-only access key.
PUBLIC_READ_CONFIG = CloudSettings(enabled=False, endpoint_url="", api_key="")


@dataclass(frozen=True)
class SyncPolicy:
    """Tunable guardrails for fetch and publish"""
    size_warning_kb: float = 500.0
    fetch_timeout_s: float = 10.0
    publish_timeout_s: float = 30.0


@dataclass
class ShowroomConfig:
    """Everything loaded from config.yaml and the environment"""
    public_read: CloudSettings = field(default_factory=lambda: PUBLIC_READ_CONFIG)
    sync: SyncPolicy = field(default_factory=SyncPolicy)
    state_dir: Path = DEFAULT_STATE_DIR


def find_config_path() -> Path | None:
    """Find configuration file"""
    env_path = os.environ.get("SHOWROOM_CONFIG")
    possible_paths = [
        Path(env_path) if env_path else None,
        Path("/etc/showroom/config.yaml"),
        Path.cwd() / "config.yaml",
    ]

    for path in possible_paths:
        if path is not None and path.exists():
            return path

    return None


def _load_yaml(path: Path) -> dict:
    """Load YAML file, empty dict on error"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {path}")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Config file {path} is not a mapping, ignoring")
        return {}
    return data


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: str | Path | None = None) -> ShowroomConfig:
    """
    Load configuration from YAML with environment overrides.

    Args:
        path: Explicit config file; searched for when omitted

    Returns:
        ShowroomConfig (defaults for anything missing)
    """
    config_path = Path(path) if path else find_config_path()
    data = _load_yaml(config_path) if config_path else {}

    public_data = data.get("public_read") or {}
    try:
        public_read = CloudSettings.from_dict({
            "enabled": public_data.get("enabled", PUBLIC_READ_CONFIG.enabled),
            "endpointUrl": public_data.get("endpoint_url", PUBLIC_READ_CONFIG.endpoint_url),
            "apiKey": public_data.get("api_key", PUBLIC_READ_CONFIG.api_key),
        })
    except ConfigError as e:
        logger.error(f"Invalid public_read section, using built-in config: {e}")
        public_read = PUBLIC_READ_CONFIG

    # Environment overrides (deploy-time injection)
    endpoint = os.environ.get("SHOWROOM_PUBLIC_ENDPOINT")
    api_key = os.environ.get("SHOWROOM_PUBLIC_API_KEY")
    enabled = os.environ.get("SHOWROOM_PUBLIC_ENABLED")
    if endpoint is not None or api_key is not None or enabled is not None:
        public_read = CloudSettings(
            enabled=_env_bool(enabled) if enabled is not None else (public_read.enabled or bool(endpoint)),
            endpoint_url=endpoint.strip() if endpoint is not None else public_read.endpoint_url,
            api_key=api_key.strip() if api_key is not None else public_read.api_key,
        )

    sync_data = data.get("sync") or {}
    sync = SyncPolicy(
        size_warning_kb=float(sync_data.get("size_warning_kb", 500.0)),
        fetch_timeout_s=float(sync_data.get("fetch_timeout_s", 10.0)),
        publish_timeout_s=float(sync_data.get("publish_timeout_s", 30.0)),
    )

    state_dir = os.environ.get("SHOWROOM_STATE_DIR") or data.get("state_dir")

    return ShowroomConfig(
        public_read=public_read,
        sync=sync,
        state_dir=Path(state_dir).expanduser() if state_dir else DEFAULT_STATE_DIR,
    )
