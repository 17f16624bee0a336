"""
Инфраструктурный слой контекста реестра номеров.

Содержит реализации репозиториев и единицы работы в памяти.
"""
import threading
from typing import Dict, Optional

from shared_kernel.infrastructure import (
    InMemoryAggregateRepository,
    InMemoryEventBus,
    InMemoryUnitOfWork,
    TransactionScope,
)
from shared_kernel.interfaces import ILogger, ISnapshotRepository

from . import interfaces as ports
from .domain import CheckedOut, RoomLedger


class InMemoryRoomLedgerRepository(
    InMemoryAggregateRepository[RoomLedger], ports.IRoomLedgerRepository
):
    """Реализация репозитория реестров в памяти."""

    def get_by_id(self, ledger_id) -> RoomLedger:
        try:
            return super().get_by_id(ledger_id)
        except KeyError:
            raise KeyError(f"RoomLedger with id {ledger_id} not found") from None


class RoomLedgerUnitOfWork(InMemoryUnitOfWork, ports.IRoomLedgerUnitOfWork):
    """Единица работы для контекста реестра номеров."""

    def __init__(
        self,
        ledgers_repo: Optional[InMemoryRoomLedgerRepository] = None,
        event_bus: Optional[InMemoryEventBus] = None,
        logger: Optional[ILogger] = None,
        scope: Optional[TransactionScope] = None,
    ):
        super().__init__(event_bus=event_bus, logger=logger, scope=scope)
        self._ledgers = ledgers_repo or InMemoryRoomLedgerRepository()

    @property
    def ledgers(self) -> InMemoryRoomLedgerRepository:
        return self._ledgers

    def _repositories(self) -> Dict[str, ISnapshotRepository]:
        return {"ledgers": self._ledgers}


class RoomReviewsProjection:
    """Модель чтения: сводка оценок по номерам, строится по событиям CheckedOut."""

    def __init__(self) -> None:
        self._counts: Dict[int, int] = {}
        self._totals: Dict[int, int] = {}
        self._last: Dict[int, int] = {}
        self._lock = threading.Lock()

    def apply(self, event: CheckedOut) -> None:
        with self._lock:
            self._counts[event.room_no] = self._counts.get(event.room_no, 0) + 1
            self._totals[event.room_no] = (
                self._totals.get(event.room_no, 0) + event.rating
            )
            self._last[event.room_no] = event.rating

    def summary(self, room_no: int) -> dict:
        with self._lock:
            count = self._counts.get(room_no, 0)
            total = self._totals.get(room_no, 0)
            return {
                "room_no": room_no,
                "reviews": count,
                "last_rating": self._last.get(room_no, 0),
                "average_rating": round(total / count, 2) if count else 0.0,
            }
