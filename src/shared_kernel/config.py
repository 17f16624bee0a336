"""
Настройки реестра номеров.

Читаются из переменных окружения с префиксом HOTEL_LEDGER_ (и из .env).
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class LedgerSettings(BaseSettings):
    """Настройки приложения."""

    # Допустимый диапазон оценки при выезде
    MIN_RATING: int = 1
    MAX_RATING: int = 5

    # Запрет повторного бронирования и бронирования ненастроенных номеров
    STRICT_BOOKING: bool = False

    LOG_LEVEL: str = "INFO"

    # Подпись для сумм в логах
    CURRENCY: str = "ETH"

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_LEDGER_", env_file=".env", extra="ignore"
    )

    @model_validator(mode="after")
    def check_ranges(self) -> "LedgerSettings":
        if self.MIN_RATING > self.MAX_RATING:
            raise ValueError("MIN_RATING не может быть больше MAX_RATING")
        if self.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL должен быть одним из {LOG_LEVELS}")
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self


@lru_cache
def get_settings() -> LedgerSettings:
    """Возвращает общий экземпляр настроек."""
    return LedgerSettings()
