from functools import partial
from typing import Any, Dict, Optional

from accounting.application import DepositRequest, create_accounting_service
from accounting.infrastructure import AccountingUnitOfWork
from room_ledger.application import (
    CheckInRequest,
    CheckOutRequest,
    ConfigureRoomRequest,
    PayToBookRequest,
    deploy_room_ledger,
)
from room_ledger.domain import CheckedIn, CheckedOut, RoomBooked
from room_ledger.event_handlers import on_checked_out, on_room_lifecycle_event
from room_ledger.infrastructure import RoomLedgerUnitOfWork, RoomReviewsProjection
from shared_kernel import Identity, LedgerSettings, generate_identity, get_settings
from shared_kernel.infrastructure import (
    ConsoleLogger,
    InMemoryEventBus,
    TransactionScope,
)
from shared_kernel.interfaces import ILogger


def bootstrap_app(
    owner: Identity,
    settings: Optional[LedgerSettings] = None,
    logger: Optional[ILogger] = None,
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or get_settings()
    logger = logger or ConsoleLogger(settings.LOG_LEVEL)

    # 1. Общая шина событий и общая область транзакций: все операции
    #    обоих контекстов выполняются через одну точку сериализации
    event_bus = InMemoryEventBus(logger)
    scope = TransactionScope(event_bus)

    # 2. Единицы работы контекстов
    accounting_uow = AccountingUnitOfWork(logger=logger, scope=scope)
    ledger_uow = RoomLedgerUnitOfWork(logger=logger, scope=scope)

    # 3. Сервисы; реестр платит через счет хранения владельца
    accounting_service = create_accounting_service(
        owner, uow=accounting_uow, logger=logger
    )
    ledger_service = deploy_room_ledger(
        owner,
        uow=ledger_uow,
        payment_gateway=accounting_service.payment_gateway(),
        settings=settings,
        logger=logger,
    )

    # 4. Подписываем обработчики на события
    reviews = RoomReviewsProjection()
    event_bus.subscribe(CheckedOut, partial(on_checked_out, projection=reviews))
    for event_type in (RoomBooked, CheckedIn, CheckedOut):
        event_bus.subscribe(event_type, partial(on_room_lifecycle_event, logger=logger))

    return {
        "ledger_service": ledger_service,
        "accounting_service": accounting_service,
        "reviews": reviews,
        "event_bus": event_bus,
        "ledger_uow": ledger_uow,
        "accounting_uow": accounting_uow,
        "scope": scope,
    }


def main() -> None:
    """Разворачивает реестр и прогоняет один полный цикл бронирования."""
    owner = generate_identity()
    customer = generate_identity()

    print("Deploying RoomLedger...")
    app = bootstrap_app(owner)
    ledger = app["ledger_service"]
    accounting = app["accounting_service"]
    print(f"RoomLedger deployed with id: {ledger.ledger_id}")
    print(f"Owner: {ledger.owner}")

    ledger.set_hotel_room(
        ConfigureRoomRequest(room_no=1, category_name="Royal", tariff=10, caller=owner)
    )
    accounting.deposit(DepositRequest(identity=customer, amount=10))
    ledger.pay_to_book(PayToBookRequest(room_no=1, payment_amount=10, customer=customer))
    ledger.check_in(CheckInRequest(room_no=1, caller=customer))
    room = ledger.check_out(CheckOutRequest(room_no=1, rating=5, caller=customer))

    print(f"Room 1: {room.model_dump()}")
    print(f"Owner withdrawable balance: {accounting.withdrawable_balance()}")
    print(f"Reviews: {app['reviews'].summary(1)}")


if __name__ == "__main__":
    main()
