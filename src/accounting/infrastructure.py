"""
Инфраструктурный слой контекста учета.

Содержит реализации репозиториев, единицы работы
и платежного шлюза поверх счета хранения.
"""

from typing import Dict, Optional

from room_ledger.interfaces import IPaymentGateway
from shared_kernel import EntityId, Identity
from shared_kernel.infrastructure import (
    InMemoryAggregateRepository,
    InMemoryEventBus,
    InMemoryUnitOfWork,
    TransactionScope,
)
from shared_kernel.interfaces import ILogger, ISnapshotRepository

from .domain import CustodyAccount
from .interfaces import IAccountingUnitOfWork, ICustodyAccountRepository


class InMemoryCustodyAccountRepository(
    InMemoryAggregateRepository[CustodyAccount], ICustodyAccountRepository
):
    """In-memory реализация репозитория счетов хранения."""

    def get_by_id(self, account_id) -> CustodyAccount:
        try:
            return super().get_by_id(account_id)
        except KeyError:
            raise KeyError(f"CustodyAccount with id {account_id} not found") from None


class AccountingUnitOfWork(InMemoryUnitOfWork, IAccountingUnitOfWork):
    """Единица работы (Unit of Work) для контекста учета."""

    def __init__(
        self,
        accounts_repo: Optional[InMemoryCustodyAccountRepository] = None,
        event_bus: Optional[InMemoryEventBus] = None,
        logger: Optional[ILogger] = None,
        scope: Optional[TransactionScope] = None,
    ):
        super().__init__(event_bus=event_bus, logger=logger, scope=scope)
        self._accounts = accounts_repo or InMemoryCustodyAccountRepository()

    @property
    def accounts(self) -> InMemoryCustodyAccountRepository:
        return self._accounts

    def _repositories(self) -> Dict[str, ISnapshotRepository]:
        return {"accounts": self._accounts}


class CustodyPaymentGateway(IPaymentGateway):
    """Платежный шлюз реестра номеров поверх счета хранения.

    Каждая операция - отдельная транзакция контекста учета. В общей
    области сериализации с реестром она выполняется внутри транзакции
    бронирования, а ее события публикуются после выхода из нее.
    """

    def __init__(self, uow: IAccountingUnitOfWork, account_id: EntityId):
        self._uow = uow
        self._account_id = account_id

    def hold(self, payer: Identity, amount: int) -> EntityId:
        with self._uow:
            account = self._uow.accounts.get_by_id(self._account_id)
            hold_id = account.hold(payer, amount)
            self._uow.accounts.save(account)
        return hold_id

    def capture(self, hold_id: EntityId) -> None:
        with self._uow:
            account = self._uow.accounts.get_by_id(self._account_id)
            account.capture(hold_id)
            self._uow.accounts.save(account)

    def release(self, hold_id: EntityId) -> None:
        with self._uow:
            account = self._uow.accounts.get_by_id(self._account_id)
            account.release(hold_id)
            self._uow.accounts.save(account)
