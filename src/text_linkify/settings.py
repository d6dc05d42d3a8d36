"""Persistent user settings: global switches and per-site blacklists."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from text_linkify.config import DEFAULT_SETTINGS_PATH, dump_toml, load_toml
from text_linkify.errors import SettingsError

logger = logging.getLogger(__name__)


class SettingKey(str, Enum):
    """Keys of the persisted settings."""

    GLOBAL_LINKIFY = "tm_linkify_global_enabled"
    GLOBAL_DRIVE = "tm_linkify_drive_global_enabled"
    BLACKLIST_LINKIFY = "tm_linkify_blacklist"
    BLACKLIST_DRIVE = "tm_linkify_drive_blacklist"


class Settings(BaseModel):
    """Snapshot of the persisted settings."""

    global_linkify_enabled: bool = True
    global_drive_enabled: bool = True
    linkify_blacklist: list[str] = Field(default_factory=list)
    drive_blacklist: list[str] = Field(default_factory=list)

    def linkify_enabled_for(self, host: str) -> bool:
        return self.global_linkify_enabled and host not in self.linkify_blacklist

    def drive_enabled_for(self, host: str) -> bool:
        return self.global_drive_enabled and host not in self.drive_blacklist


@dataclass(frozen=True)
class SiteSettings:
    """Feature switches for one page, computed once per page load."""

    host: str = ""
    linkify_enabled: bool = True
    drive_enabled: bool = True


_FIELDS: dict[SettingKey, str] = {
    SettingKey.GLOBAL_LINKIFY: "global_linkify_enabled",
    SettingKey.GLOBAL_DRIVE: "global_drive_enabled",
    SettingKey.BLACKLIST_LINKIFY: "linkify_blacklist",
    SettingKey.BLACKLIST_DRIVE: "drive_blacklist",
}


class SettingsStore:
    """Key/value settings persisted as a TOML file.

    Reads never fail: an unreadable or malformed file falls back to the
    defaults (everything enabled, empty blacklists).
    """

    def __init__(self, path: Path = DEFAULT_SETTINGS_PATH):
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "rb") as f:
                data = load_toml(f)
        except (OSError, ValueError) as e:
            # tomllib.TOMLDecodeError is a ValueError
            raise SettingsError(f"Cannot read settings from {self.path}: {e}") from e
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dump_toml(data), encoding="utf-8")

    def get(self, key: SettingKey | str, default: Any = None) -> Any:
        key = SettingKey(key)
        try:
            data = self._read()
        except SettingsError:
            logger.warning("Settings unavailable, using default for %s", key.value, exc_info=True)
            return default
        return data.get(key.value, default)

    def set(self, key: SettingKey | str, value: Any) -> None:
        key = SettingKey(key)
        try:
            data = self._read()
        except SettingsError:
            logger.warning("Overwriting unreadable settings file %s", self.path)
            data = {}
        data[key.value] = value
        self._write(data)

    def load(self) -> Settings:
        """Read all settings, falling back to defaults on any problem."""
        try:
            data = self._read()
            values = {_FIELDS[key]: data[key.value] for key in SettingKey if key.value in data}
            return Settings.model_validate(values)
        except (SettingsError, ValidationError):
            logger.warning("Settings unavailable, falling back to defaults", exc_info=True)
            return Settings()

    def site_settings(self, host: str) -> SiteSettings:
        settings = self.load()
        return SiteSettings(
            host=host,
            linkify_enabled=settings.linkify_enabled_for(host),
            drive_enabled=settings.drive_enabled_for(host),
        )

    # --- Toggles; each returns the new enabled state ---

    def toggle_global_linkify(self) -> bool:
        value = not self.load().global_linkify_enabled
        self.set(SettingKey.GLOBAL_LINKIFY, value)
        return value

    def toggle_global_drive(self) -> bool:
        value = not self.load().global_drive_enabled
        self.set(SettingKey.GLOBAL_DRIVE, value)
        return value

    def toggle_site_linkify(self, host: str) -> bool:
        return self._toggle_blacklist(SettingKey.BLACKLIST_LINKIFY, host)

    def toggle_site_drive(self, host: str) -> bool:
        return self._toggle_blacklist(SettingKey.BLACKLIST_DRIVE, host)

    def _toggle_blacklist(self, key: SettingKey, host: str) -> bool:
        blacklist = list(getattr(self.load(), _FIELDS[key]))
        if host in blacklist:
            blacklist.remove(host)
            enabled = True
        else:
            blacklist.append(host)
            enabled = False
        self.set(key, blacklist)
        return enabled
