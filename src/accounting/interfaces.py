"""
Интерфейсы (порты) для контекста учета.
"""

from __future__ import annotations

from typing import Any, Protocol

from shared_kernel import EntityId
from shared_kernel.interfaces import IEventBus

from .domain import CustodyAccount


class ICustodyAccountRepository(Protocol):
    """Интерфейс репозитория для счетов хранения."""

    def add(self, account: CustodyAccount) -> None: ...
    def get_by_id(self, account_id: EntityId) -> CustodyAccount: ...
    def save(self, account: CustodyAccount) -> None: ...


class IAccountingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста учета."""

    @property
    def accounts(self) -> ICustodyAccountRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IAccountingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
