"""
Интерфейсы (порты) для контекста реестра номеров.
"""

from __future__ import annotations

from typing import Any, Protocol

from shared_kernel import EntityId, Identity
from shared_kernel.interfaces import IEventBus, ILogger

from .domain import RoomLedger

__all__ = [
    "IEventBus",
    "ILogger",
    "IPaymentGateway",
    "IRoomLedgerRepository",
    "IRoomLedgerUnitOfWork",
]


class IRoomLedgerRepository(Protocol):
    """Интерфейс репозитория для реестров номеров."""

    def add(self, ledger: RoomLedger) -> None: ...
    def get_by_id(self, ledger_id: EntityId) -> RoomLedger: ...
    def save(self, ledger: RoomLedger) -> None: ...


class IPaymentGateway(Protocol):
    """Перевод средств, сопровождающий бронирование.

    hold() забирает сумму у плательщика до решения по брони,
    capture() передает ее владельцу, release() возвращает плательщику.
    """

    def hold(self, payer: Identity, amount: int) -> EntityId: ...
    def capture(self, hold_id: EntityId) -> None: ...
    def release(self, hold_id: EntityId) -> None: ...


class IRoomLedgerUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста реестра."""

    @property
    def ledgers(self) -> IRoomLedgerRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IRoomLedgerUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
