"""
Bot configuration.

Values come from the environment (optionally a .env file), then from an
optional JSON bot config file, then from keyword options given to the bot.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "private-integration"
DEFAULT_DB_PATH = Path("data") / "lychii.db"


@dataclass
class StorageConfig:
    """Optional SQLite store for plugins."""
    enable: bool = False
    path: Path = DEFAULT_DB_PATH


@dataclass
class BotConfig:
    """Options recognized by the bot."""
    token: str = ""
    app_token: str = ""
    default_channel: str = DEFAULT_CHANNEL
    auto_reconnect: bool = True
    plugin_dir_path: Optional[Path] = None
    env: str = "development"
    storage: StorageConfig = field(default_factory=StorageConfig)

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    def with_options(self, **options) -> "BotConfig":
        """Return a copy with the given options applied on top."""
        known = {f.name for f in fields(self)}
        unknown = set(options) - known
        if unknown:
            raise TypeError(f"Unknown bot options: {', '.join(sorted(unknown))}")
        if isinstance(options.get("storage"), dict):
            options["storage"] = _storage_from_dict(options["storage"])
        if options.get("plugin_dir_path") is not None:
            options["plugin_dir_path"] = Path(options["plugin_dir_path"])
        return replace(self, **options)


def _storage_from_dict(data: dict) -> StorageConfig:
    return StorageConfig(
        enable=bool(data.get("enable", False)),
        path=Path(data.get("path", DEFAULT_DB_PATH)),
    )


def load_config(
    config_path: Union[str, Path, None] = None,
    env_file: Union[str, Path, None] = None
) -> BotConfig:
    """
    Load the bot configuration.

    Args:
        config_path: Optional JSON bot config (e.g. bots/lychii.json)
        env_file: Optional .env file; falls back to the bot config's
            "env_file" entry, then ./.env

    Returns:
        BotConfig with environment values and file overrides applied
    """
    data = {}
    if config_path:
        with open(config_path) as f:
            data = json.load(f)
        logger.info(f"Loaded bot config: {data.get('name', config_path)}")

    env_file = env_file or data.get("env_file")
    load_dotenv(env_file if env_file else Path.cwd() / ".env")

    config = BotConfig(
        token=os.getenv("SLACK_BOT_TOKEN", ""),
        app_token=os.getenv("SLACK_APP_TOKEN", ""),
        env=os.getenv("LYCHII_ENV", "development"),
        storage=StorageConfig(
            enable=os.getenv("LYCHII_STORAGE_ENABLE", "").lower() in ("1", "true", "yes"),
            path=Path(os.getenv("LYCHII_DB_PATH", str(DEFAULT_DB_PATH))),
        ),
    )
    if os.getenv("LYCHII_PLUGIN_DIR"):
        config.plugin_dir_path = Path(os.environ["LYCHII_PLUGIN_DIR"])

    overrides = {
        key: data[key]
        for key in ("default_channel", "auto_reconnect", "plugin_dir_path", "env", "storage")
        if key in data
    }
    return config.with_options(**overrides)
