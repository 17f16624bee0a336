"""
Общее ядро (Shared Kernel) реестра номеров отеля.

Содержит общие типы данных, исключения, настройки и утилиты,
используемые в различных ограниченных контекстах.
"""

from .config import LedgerSettings, get_settings
from .domain import (
    AggregateRoot,
    AuthorizationError,
    BusinessRuleValidationException,
    ConcurrencyException,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    Identity,
    InsufficientFundsError,
    PaymentError,
    StateError,
    generate_id,
    generate_identity,
    # Утилиты
    now,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "Identity",
    "generate_id",
    "generate_identity",
    # Основные классы
    "AggregateRoot",
    "DomainEvent",
    # Исключения
    "DomainException",
    "ConcurrencyException",
    "BusinessRuleValidationException",
    "AuthorizationError",
    "PaymentError",
    "InsufficientFundsError",
    "StateError",
    # Настройки
    "LedgerSettings",
    "get_settings",
    # Утилиты
    "now",
]
