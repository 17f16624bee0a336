"""
Конфигурация тестов для pytest.
Добавляет каталог src в PYTHONPATH и предоставляет общие фикстуры.
"""
import sys
from pathlib import Path
from typing import Any, List, Tuple

import pytest

# Добавляем каталог с исходниками в PYTHONPATH
src_dir = str(Path(__file__).parent.parent / "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from bootstrap import bootstrap_app  # noqa: E402
from shared_kernel import LedgerSettings, generate_identity  # noqa: E402


class RecordingLogger:
    """Логгер, запоминающий сообщения вместо вывода в консоль."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, dict]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        self.records.append((level, message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


@pytest.fixture
def owner() -> str:
    return generate_identity()


@pytest.fixture
def customer() -> str:
    return generate_identity()


@pytest.fixture
def stranger() -> str:
    return generate_identity()


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def settings() -> LedgerSettings:
    """Настройки по умолчанию, не зависящие от окружения."""
    return LedgerSettings(
        _env_file=None, MIN_RATING=1, MAX_RATING=5, STRICT_BOOKING=False, LOG_LEVEL="INFO"
    )


@pytest.fixture
def app(owner, settings, logger) -> dict:
    """Полностью собранное приложение с реестром, учетом и шиной событий."""
    return bootstrap_app(owner, settings=settings, logger=logger)


@pytest.fixture
def ledger_service(app):
    return app["ledger_service"]


@pytest.fixture
def accounting_service(app):
    return app["accounting_service"]
