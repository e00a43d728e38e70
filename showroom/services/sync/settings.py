"""
Settings Resolver

Picks which cloud settings govern the startup load: a locally saved
admin override when it is enabled and has an endpoint, otherwise the
public read config. No network access.
"""

import json

from showroom.common.config import CloudSettings
from showroom.common.exceptions import ConfigError
from showroom.common.logging_setup import get_service_logger
from showroom.common.state import CLOUD_SETTINGS_KEY, LocalStore

logger = get_service_logger("sync.settings")


class SettingsResolver:
    """Admin override vs. public read config"""

    def __init__(self, store: LocalStore, public_config: CloudSettings):
        self.store = store
        self.public_config = public_config

    def load_admin_settings(self) -> CloudSettings | None:
        """
        Load the admin's saved settings.

        Returns:
            CloudSettings, or None if absent or unreadable
        """
        try:
            raw = self.store.get(CLOUD_SETTINGS_KEY)
            if raw is None:
                return None
            return CloudSettings.from_dict(json.loads(raw))
        except (ValueError, OSError, ConfigError) as e:
            logger.error(f"Invalid local settings: {e}")
            return None

    def save_admin_settings(self, settings: CloudSettings) -> None:
        """Persist admin settings under the cloudSettings key"""
        self.store.set(CLOUD_SETTINGS_KEY, json.dumps(settings.to_dict()))
        logger.info(
            "Admin cloud settings saved",
            extra={"enabled": settings.enabled, "endpoint": settings.endpoint_url},
        )

    def resolve(self) -> CloudSettings:
        """Settings for this session's initial load"""
        admin = self.load_admin_settings()
        if admin is not None and admin.is_configured:
            logger.debug(f"Using admin override endpoint {admin.endpoint_url}")
            return admin
        return self.public_config

    def endpoint_mismatch(self, admin: CloudSettings) -> bool:
        """True when admin publishes somewhere visitors do not read from"""
        return admin.endpoint_url.rstrip("/") != self.public_config.endpoint_url.rstrip("/")
