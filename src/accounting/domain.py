"""
Доменная модель контекста учета.

Хранит средства участников: кошельки клиентов, удержания платежей
за бронирование и баланс владельца, доступный для вывода.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from shared_kernel import (
    AggregateRoot,
    AuthorizationError,
    BusinessRuleValidationException,
    DomainEvent,
    EntityId,
    Identity,
    InsufficientFundsError,
    PaymentError,
    StateError,
    generate_id,
    now,
)


class TransactionType(str, Enum):
    """Типы транзакций."""
    DEPOSIT = "deposit"        # Пополнение кошелька
    HOLD = "hold"              # Удержание под бронирование
    CAPTURE = "capture"        # Передача удержания владельцу
    REFUND = "refund"          # Возврат удержания плательщику
    WITHDRAWAL = "withdrawal"  # Вывод средств владельцем


class Transaction(BaseModel):
    """Запись журнала движения средств."""
    id: EntityId = Field(default_factory=generate_id)
    type: TransactionType
    identity: Identity
    amount: int = Field(..., ge=0)
    hold_id: Optional[EntityId] = None
    created_at: datetime = Field(default_factory=now)


class PaymentHold(BaseModel):
    """Сумма, списанная с плательщика до решения по бронированию."""
    id: EntityId = Field(default_factory=generate_id)
    payer: Identity
    amount: int = Field(..., ge=0)
    created_at: datetime = Field(default_factory=now)


class FundsDeposited(DomainEvent):
    """Событие пополнения кошелька."""
    identity: Identity
    amount: int


class PaymentCaptured(DomainEvent):
    """Событие зачисления платежа владельцу."""
    hold_id: EntityId
    payer: Identity
    amount: int


class PaymentRefunded(DomainEvent):
    """Событие возврата платежа плательщику."""
    hold_id: EntityId
    payer: Identity
    amount: int


class FundsWithdrawn(DomainEvent):
    """Событие вывода средств владельцем."""
    identity: Identity
    amount: int


class CustodyAccount(AggregateRoot):
    """Счет хранения средств - корень агрегата."""

    owner: Identity = Field(..., frozen=True)
    balances: Dict[Identity, int] = Field(default_factory=dict)
    withdrawable: int = Field(0, ge=0)
    holds: Dict[EntityId, PaymentHold] = Field(default_factory=dict)
    transactions: List[Transaction] = Field(default_factory=list)

    @classmethod
    def open(cls, owner: Identity) -> "CustodyAccount":
        """Открывает счет хранения для владельца реестра."""
        if not owner:
            raise BusinessRuleValidationException("Владелец счета должен быть указан")
        return cls(owner=owner)

    def balance_of(self, identity: Identity) -> int:
        """Баланс кошелька участника."""
        return self.balances.get(identity, 0)

    @property
    def escrowed(self) -> int:
        """Сумма открытых удержаний."""
        return sum(hold.amount for hold in self.holds.values())

    def deposit(self, identity: Identity, amount: int) -> None:
        """Пополняет кошелек участника."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise BusinessRuleValidationException(
                "Сумма пополнения должна быть положительным целым числом"
            )
        self.balances[identity] = self.balance_of(identity) + amount
        self._journal(TransactionType.DEPOSIT, identity, amount)
        self._record(FundsDeposited(identity=identity, amount=amount))

    def hold(self, payer: Identity, amount: int) -> EntityId:
        """Списывает сумму с плательщика в удержание."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise PaymentError(f"Некорректная сумма оплаты: {amount!r}")
        if self.balance_of(payer) < amount:
            raise InsufficientFundsError(
                f"Недостаточно средств: баланс {self.balance_of(payer)}, "
                f"требуется {amount}"
            )

        hold = PaymentHold(payer=payer, amount=amount)
        self.balances[payer] = self.balance_of(payer) - amount
        self.holds[hold.id] = hold
        self._journal(TransactionType.HOLD, payer, amount, hold.id)
        return hold.id

    def capture(self, hold_id: EntityId) -> None:
        """Передает удержанную сумму на баланс владельца."""
        hold = self._close_hold(hold_id)
        self.withdrawable += hold.amount
        self._journal(TransactionType.CAPTURE, self.owner, hold.amount, hold.id)
        self._record(
            PaymentCaptured(hold_id=hold.id, payer=hold.payer, amount=hold.amount)
        )

    def release(self, hold_id: EntityId) -> None:
        """Возвращает удержанную сумму плательщику."""
        hold = self._close_hold(hold_id)
        self.balances[hold.payer] = self.balance_of(hold.payer) + hold.amount
        self._journal(TransactionType.REFUND, hold.payer, hold.amount, hold.id)
        self._record(
            PaymentRefunded(hold_id=hold.id, payer=hold.payer, amount=hold.amount)
        )

    def withdraw(self, caller: Identity, amount: int) -> None:
        """Выводит средства владельца со счета хранения."""
        if caller != self.owner:
            raise AuthorizationError("Выводить средства может только владелец")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise BusinessRuleValidationException(
                "Сумма вывода должна быть положительным целым числом"
            )
        if amount > self.withdrawable:
            raise InsufficientFundsError(
                f"Недостаточно средств для вывода: доступно {self.withdrawable}"
            )

        self.withdrawable -= amount
        self._journal(TransactionType.WITHDRAWAL, caller, amount)
        self._record(FundsWithdrawn(identity=caller, amount=amount))

    def _close_hold(self, hold_id: EntityId) -> PaymentHold:
        # Закрытые удержания остаются только в журнале
        hold = self.holds.pop(hold_id, None)
        if hold is None:
            raise StateError(f"Удержание {hold_id} не найдено или уже закрыто")
        return hold

    def _journal(
        self,
        type: TransactionType,
        identity: Identity,
        amount: int,
        hold_id: Optional[EntityId] = None,
    ) -> None:
        self.transactions.append(
            Transaction(type=type, identity=identity, amount=amount, hold_id=hold_id)
        )
