"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

# Общие типы идентификаторов
EntityId = UUID

# Идентичность участника (адрес аккаунта владельца или клиента)
Identity = str


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


def generate_identity() -> Identity:
    """Генерирует новый адрес аккаунта в формате 0x + 40 hex-символов."""
    return "0x" + (uuid4().hex + uuid4().hex)[:40]


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=lambda: now())

    model_config = ConfigDict(frozen=True)

    @property
    def event_type(self) -> str:
        """Имя типа события."""
        return type(self).__name__


class AggregateRoot(BaseModel):
    """Базовый класс корня агрегата с накоплением доменных событий."""

    id: EntityId = Field(default_factory=generate_id)
    version: int = 0
    _domain_events: List[DomainEvent] = PrivateAttr(default_factory=list)

    @property
    def domain_events(self) -> List[DomainEvent]:
        """Возвращает список доменных событий."""
        return list(self._domain_events)

    def clear_events(self) -> None:
        """Очищает список доменных событий."""
        self._domain_events = []

    def pull_domain_events(self) -> List[DomainEvent]:
        """Извлекает события и очищает список."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def _record(self, event: DomainEvent) -> None:
        self._domain_events.append(event)


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class ConcurrencyException(DomainException):
    """Исключение при конфликте версий."""

    pass


class BusinessRuleValidationException(DomainException):
    """Исключение при нарушении бизнес-правил (некорректные входные данные)."""

    pass


class AuthorizationError(DomainException):
    """Операцию владельца попытался выполнить кто-то другой."""

    pass


class PaymentError(DomainException):
    """Сумма оплаты не совпадает с тарифом номера."""

    pass


class InsufficientFundsError(PaymentError):
    """Недостаточно средств для платежа или вывода."""

    pass


class StateError(DomainException):
    """Операция недопустима в текущем состоянии номера или для этого вызывающего."""

    pass


# Общие утилиты
def now() -> datetime:
    """Возвращает текущую дату и время (UTC)."""
    return datetime.now(timezone.utc)
