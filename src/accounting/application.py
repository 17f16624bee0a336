"""
Прикладной слой контекста учета.

Содержит DTO и прикладные сервисы для работы со средствами.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, StrictInt
from shared_kernel import DomainException, EntityId, Identity
from shared_kernel.infrastructure import ConsoleLogger
from shared_kernel.interfaces import ILogger

from .domain import CustodyAccount, Transaction, TransactionType
from .infrastructure import AccountingUnitOfWork, CustodyPaymentGateway
from .interfaces import IAccountingUnitOfWork

# ===================================================================
# DTO (Data Transfer Objects)
# ===================================================================


class DepositRequest(BaseModel):
    """Запрос на пополнение кошелька."""

    identity: Identity
    amount: StrictInt


class WithdrawRequest(BaseModel):
    """Запрос владельца на вывод средств."""

    caller: Identity
    amount: StrictInt


class TransactionDTO(BaseModel):
    """DTO для записи журнала."""

    id: EntityId
    type: TransactionType
    identity: Identity
    amount: int
    hold_id: Optional[EntityId] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionDTO":
        return cls(**transaction.model_dump())


# ===================================================================
# Прикладные сервисы
# ===================================================================


class AccountingApplicationService:
    """Прикладной сервис учета средств."""

    def __init__(
        self,
        uow: IAccountingUnitOfWork,
        account_id: EntityId,
        logger: Optional[ILogger] = None,
    ):
        self._uow = uow
        self._account_id = account_id
        self._logger = logger or ConsoleLogger()

    @property
    def account_id(self) -> EntityId:
        return self._account_id

    def payment_gateway(self) -> CustodyPaymentGateway:
        """Платежный шлюз для реестра номеров."""
        return CustodyPaymentGateway(self._uow, self._account_id)

    def deposit(self, request: DepositRequest) -> int:
        """Пополняет кошелек и возвращает новый баланс."""
        try:
            with self._uow:
                account = self._uow.accounts.get_by_id(self._account_id)
                account.deposit(request.identity, request.amount)
                self._uow.accounts.save(account)
        except DomainException as e:
            self._reject("deposit", e, identity=request.identity, amount=request.amount)
            raise

        self._logger.info(
            "Funds deposited", identity=request.identity, amount=request.amount
        )
        return account.balance_of(request.identity)

    def withdraw(self, request: WithdrawRequest) -> int:
        """Выводит средства владельца и возвращает остаток к выводу."""
        try:
            with self._uow:
                account = self._uow.accounts.get_by_id(self._account_id)
                account.withdraw(request.caller, request.amount)
                self._uow.accounts.save(account)
        except DomainException as e:
            self._reject("withdraw", e, caller=request.caller, amount=request.amount)
            raise

        self._logger.info("Funds withdrawn", amount=request.amount)
        return account.withdrawable

    def balance_of(self, identity: Identity) -> int:
        """Баланс кошелька участника."""
        return self._account().balance_of(identity)

    def withdrawable_balance(self) -> int:
        """Сумма, доступная владельцу для вывода."""
        return self._account().withdrawable

    def escrowed_balance(self) -> int:
        """Сумма открытых удержаний."""
        return self._account().escrowed

    def list_transactions(
        self, identity: Optional[Identity] = None
    ) -> List[TransactionDTO]:
        """Журнал движения средств, при необходимости по одному участнику."""
        transactions = self._account().transactions
        if identity is not None:
            transactions = [t for t in transactions if t.identity == identity]
        return [TransactionDTO.from_domain(t) for t in transactions]

    def _reject(self, operation: str, error: DomainException, **context) -> None:
        self._logger.warning(
            f"{operation} rejected: {type(error).__name__}", reason=str(error), **context
        )

    def _account(self) -> CustodyAccount:
        with self._uow:
            return self._uow.accounts.get_by_id(self._account_id)


def create_accounting_service(
    owner: Identity,
    uow: Optional[IAccountingUnitOfWork] = None,
    logger: Optional[ILogger] = None,
) -> AccountingApplicationService:
    """Открывает счет хранения владельца и создает прикладной сервис учета."""
    if uow is None:
        uow = AccountingUnitOfWork(logger=logger)

    account = CustodyAccount.open(owner)
    with uow:
        uow.accounts.add(account)

    return AccountingApplicationService(uow=uow, account_id=account.id, logger=logger)
