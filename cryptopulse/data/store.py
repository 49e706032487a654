"""
CryptoPulse — Local Settings Store
Persists the Telegram target and provider API keys as two JSON files.
Unreadable or malformed files fall back to defaults.
"""
import json
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import ApiKeys, TelegramConfig
from cryptopulse.utils.logger import get_logger

logger = get_logger("settings_store")

TELEGRAM_CONFIG_FILE = "telegram_config.json"
API_KEYS_FILE = "api_keys.json"

ModelT = TypeVar("ModelT", bound=BaseModel)


class LocalSettingsStore:
    """File-backed store for user credentials."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or get_settings().storage.storage_dir)

    def _load(self, filename: str, model: Type[ModelT]) -> ModelT:
        path = self.directory / filename
        if not path.exists():
            return model()
        try:
            raw: Any = json.loads(path.read_text(encoding="utf-8"))
            return model.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("stored_settings_ignored", file=filename, error=str(e))
            return model()

    def _write(self, filename: str, value: BaseModel) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_text(value.model_dump_json(by_alias=True), encoding="utf-8")

    def load_telegram_config(self) -> TelegramConfig:
        return self._load(TELEGRAM_CONFIG_FILE, TelegramConfig)

    def load_api_keys(self) -> ApiKeys:
        return self._load(API_KEYS_FILE, ApiKeys)

    def save(self, telegram_config: TelegramConfig, api_keys: ApiKeys) -> None:
        self._write(TELEGRAM_CONFIG_FILE, telegram_config)
        self._write(API_KEYS_FILE, api_keys)
        logger.info("settings_saved", directory=str(self.directory),
                    telegram_enabled=telegram_config.enabled)
