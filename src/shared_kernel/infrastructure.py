"""
Общие инфраструктурные компоненты: логгер, шина событий,
репозиторий агрегатов в памяти и единица работы со снимками состояния.
"""
import json
import sys
import threading
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from .domain import AggregateRoot, ConcurrencyException, DomainEvent, EntityId
from .interfaces import IEventBus, ILogger, ISnapshotRepository

T = TypeVar("T", bound=AggregateRoot)

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class ConsoleLogger(ILogger):
    """Простая реализация логгера, выводящая сообщения в консоль."""

    def __init__(self, level: str = "INFO"):
        self._threshold = _LEVELS[level.upper()]

    def _emit(self, level: str, message: str, to_stderr: bool, **kwargs: Any) -> None:
        if _LEVELS[level] < self._threshold:
            return
        stream = sys.stderr if to_stderr else sys.stdout
        print(f"[{level}] {message}", file=stream, flush=True)
        if kwargs:
            print(
                "  Context:",
                json.dumps(kwargs, default=str, indent=2, ensure_ascii=False),
                file=stream,
                flush=True,
            )

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("DEBUG", message, False, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("INFO", message, False, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("WARNING", message, True, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("ERROR", message, True, **kwargs)


class InMemoryEventBus(IEventBus):
    """Реализация шины событий в памяти."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._logger = logger or ConsoleLogger()

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие."""
        event_type = type(event)
        if event_type not in self._subscribers:
            self._logger.debug(f"No subscribers for event type {event_type.__name__}")
            return

        self._logger.info(
            f"Publishing event: {event_type.__name__}", event=event.model_dump()
        )

        for handler in self._subscribers[event_type]:
            try:
                handler(event)
            except Exception as e:
                # Транзакция уже зафиксирована, ошибка обработчика ее не отменяет
                self._logger.error(
                    f"Error in event handler for {event_type.__name__}",
                    error=str(e),
                    event=event.model_dump(),
                )

    def publish_all(self, events: List[DomainEvent]) -> None:
        """Публикует список событий в исходном порядке."""
        for event in events:
            self.publish(event)

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable) -> None:
        """Подписывает обработчик на события указанного типа."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        self._logger.debug(f"Subscribed handler to {event_type.__name__} events")


class InMemoryAggregateRepository(ISnapshotRepository, Generic[T]):
    """Хранилище агрегатов в памяти.

    Наружу отдаются только копии: изменения попадают в хранилище
    лишь через save(), поэтому неудачная операция не оставляет следов.
    События агрегата забираются в момент сохранения, так что сколько
    копий ни было выдано, публикуются только события сохраненных изменений.
    """

    def __init__(self) -> None:
        self._items: Dict[EntityId, T] = {}
        self._pending: List[DomainEvent] = []

    def get_by_id(self, aggregate_id: EntityId) -> T:
        if aggregate_id not in self._items:
            raise KeyError(f"Aggregate with id {aggregate_id} not found")
        return self._items[aggregate_id].model_copy(deep=True)

    def add(self, aggregate: T) -> None:
        if aggregate.id in self._items:
            raise ValueError(f"Aggregate with id {aggregate.id} already exists")
        self._store(aggregate)

    def save(self, aggregate: T) -> None:
        stored = self._items.get(aggregate.id)
        if stored is None:
            raise KeyError(f"Aggregate with id {aggregate.id} not found")
        if stored.version != aggregate.version:
            raise ConcurrencyException(
                f"Версия агрегата {aggregate.id} устарела: "
                f"{aggregate.version} != {stored.version}"
            )
        aggregate.version += 1
        self._store(aggregate)

    def _store(self, aggregate: T) -> None:
        self._pending.extend(aggregate.pull_domain_events())
        self._items[aggregate.id] = aggregate.model_copy(deep=True)

    def snapshot(self) -> Dict[EntityId, T]:
        return dict(self._items)

    def restore(self, state: Dict[EntityId, T]) -> None:
        self._items = dict(state)

    def collect_events(self) -> List[DomainEvent]:
        events, self._pending = self._pending, []
        return events

    def forget(self) -> None:
        self._pending = []


class TransactionScope:
    """Общая точка сериализации для единиц работы нескольких контекстов.

    Держит повторно входимую блокировку. События зафиксированных
    транзакций копятся, пока не завершится самая внешняя из них,
    и только затем публикуются.
    """

    def __init__(
        self,
        event_bus: Optional[InMemoryEventBus] = None,
        lock: Optional[threading.RLock] = None,
    ):
        self._event_bus = event_bus or InMemoryEventBus()
        self._lock = lock or threading.RLock()
        self._depth = 0
        self._pending: List[DomainEvent] = []

    @property
    def event_bus(self) -> InMemoryEventBus:
        return self._event_bus

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def active(self) -> bool:
        return self._depth > 0

    def enter(self) -> None:
        self._lock.acquire()
        self._depth += 1

    def exit(self) -> None:
        try:
            self._depth -= 1
            if self._depth == 0:
                self._flush()
        finally:
            self._lock.release()

    def publish(self, events: List[DomainEvent]) -> None:
        """Публикует события сразу или после выхода из внешней транзакции."""
        self._pending.extend(events)
        if not self.active:
            self._flush()

    def _flush(self) -> None:
        # Обработчики могут открыть новые транзакции и добавить события
        while self._pending:
            events, self._pending = self._pending, []
            self._event_bus.publish_all(events)


class InMemoryUnitOfWork:
    """Единица работы: одна транзакция в общей области сериализации.

    При входе снимает снимок всех репозиториев, при ошибке восстанавливает его.
    Повторный вход в ту же единицу работы присоединяется к открытой
    транзакции: фиксирует или откатывает только самый внешний выход.
    Ошибка во вложенном блоке откатывает всю транзакцию.
    """

    def __init__(
        self,
        event_bus: Optional[InMemoryEventBus] = None,
        logger: Optional[ILogger] = None,
        scope: Optional[TransactionScope] = None,
    ):
        self._logger = logger or ConsoleLogger()
        self._scope = scope or TransactionScope(
            event_bus or InMemoryEventBus(self._logger)
        )
        self._snapshots: Dict[str, Dict[Any, Any]] = {}
        self._depth = 0
        self._failed = False
        self._committed = True

    @property
    def event_bus(self) -> InMemoryEventBus:
        return self._scope.event_bus

    @property
    def lock(self) -> threading.RLock:
        return self._scope.lock

    @property
    def scope(self) -> TransactionScope:
        return self._scope

    def _repositories(self) -> Dict[str, ISnapshotRepository]:
        raise NotImplementedError

    def __enter__(self):
        self._scope.enter()
        self._depth += 1
        if self._depth == 1:
            self._snapshots = {
                name: repo.snapshot() for name, repo in self._repositories().items()
            }
            self._failed = False
            self._committed = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self._depth -= 1
            if exc_type is not None:
                self._failed = True
            if self._depth == 0:
                if self._failed:
                    self.rollback()
                else:
                    self.commit()
        finally:
            self._scope.exit()
        return False  # Пробрасываем исключение дальше, если оно было

    def commit(self) -> None:
        """Фиксирует все изменения и передает накопленные события на публикацию."""
        if self._committed or self._depth > 0:
            return
        events: List[DomainEvent] = []
        for repo in self._repositories().values():
            events.extend(repo.collect_events())
        self._committed = True
        self._snapshots = {}
        self._logger.debug(f"{type(self).__name__} committed", events=len(events))
        self._scope.publish(events)

    def rollback(self) -> None:
        """Откатывает все изменения к снимку, сделанному при входе."""
        if self._committed:
            return
        for name, repo in self._repositories().items():
            repo.restore(self._snapshots.get(name, {}))
            repo.forget()
        self._committed = True
        self._snapshots = {}
        self._logger.warning(f"{type(self).__name__} rolled back")
