"""
Прикладной слой контекста реестра номеров.

Содержит DTO и сервис приложения, который выполняет каждую операцию
как одну транзакцию: загрузка реестра, доменная операция, сохранение.
"""

from typing import Optional

from pydantic import BaseModel, StrictInt
from shared_kernel import DomainException, EntityId, Identity, LedgerSettings
from shared_kernel.infrastructure import ConsoleLogger

from . import interfaces as ports
from .domain import BookingPolicy, ReviewPolicy, Room, RoomLedger

# DTO (Data Transfer Objects) для входящих данных


class ConfigureRoomRequest(BaseModel):
    """Запрос владельца на настройку номера."""

    room_no: StrictInt
    category_name: str
    tariff: StrictInt
    caller: Identity


class PayToBookRequest(BaseModel):
    """Запрос на оплату и бронирование номера."""

    room_no: StrictInt
    payment_amount: StrictInt
    customer: Identity


class CheckInRequest(BaseModel):
    """Запрос на заезд."""

    room_no: StrictInt
    caller: Identity


class CheckOutRequest(BaseModel):
    """Запрос на выезд с оценкой."""

    room_no: StrictInt
    rating: StrictInt
    caller: Identity


# DTO для исходящих данных


class RoomDTO(BaseModel):
    """DTO для представления номера."""

    room_no: int
    category_name: str
    tariff: int
    booked: bool
    customer_booked: Optional[Identity]
    occupied: bool
    review: int
    review_no: int

    @classmethod
    def from_domain(cls, room_no: int, room: Room) -> "RoomDTO":
        """Создает DTO из доменной модели."""
        return cls(room_no=room_no, **room.model_dump())


# Сервисы приложения


class RoomLedgerApplicationService:
    """Сервис приложения для работы с реестром номеров."""

    def __init__(
        self,
        uow: ports.IRoomLedgerUnitOfWork,
        ledger_id: EntityId,
        payment_gateway: ports.IPaymentGateway,
        booking_policy: Optional[BookingPolicy] = None,
        review_policy: Optional[ReviewPolicy] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._ledger_id = ledger_id
        self._payments = payment_gateway
        self._booking_policy = booking_policy or BookingPolicy()
        self._review_policy = review_policy or ReviewPolicy()
        self._logger = logger or ConsoleLogger()

    @property
    def ledger_id(self) -> EntityId:
        return self._ledger_id

    @property
    def owner(self) -> Identity:
        """Владелец реестра."""
        with self._uow:
            return self._uow.ledgers.get_by_id(self._ledger_id).owner

    def set_hotel_room(self, request: ConfigureRoomRequest) -> RoomDTO:
        """Настраивает категорию и тариф номера."""
        try:
            with self._uow:
                ledger = self._uow.ledgers.get_by_id(self._ledger_id)
                ledger.set_hotel_room(
                    request.room_no, request.category_name, request.tariff, request.caller
                )
                self._uow.ledgers.save(ledger)
        except DomainException as e:
            self._reject("set_hotel_room", request, e)
            raise

        self._logger.info(
            f"Room {request.room_no} configured",
            category_name=request.category_name,
            tariff=request.tariff,
        )
        return RoomDTO.from_domain(request.room_no, ledger.hotel_room_details(request.room_no))

    def pay_to_book(self, request: PayToBookRequest) -> RoomDTO:
        """Бронирует номер.

        Сумма сначала удерживается у клиента. Если бронь отклонена,
        удержание возвращается клиенту, иначе переходит владельцу.
        """
        try:
            with self._uow:
                ledger = self._uow.ledgers.get_by_id(self._ledger_id)
                hold_id = self._payments.hold(request.customer, request.payment_amount)
                try:
                    ledger.pay_to_book(
                        request.room_no,
                        request.payment_amount,
                        request.customer,
                        self._booking_policy,
                    )
                    self._uow.ledgers.save(ledger)
                    self._payments.capture(hold_id)
                except Exception:
                    self._payments.release(hold_id)
                    raise
        except DomainException as e:
            self._reject("pay_to_book", request, e)
            raise

        self._logger.info(
            f"Room {request.room_no} booked",
            customer=request.customer,
            amount=request.payment_amount,
        )
        return RoomDTO.from_domain(request.room_no, ledger.hotel_room_details(request.room_no))

    def check_in(self, request: CheckInRequest) -> RoomDTO:
        """Заселяет держателя брони."""
        try:
            with self._uow:
                ledger = self._uow.ledgers.get_by_id(self._ledger_id)
                ledger.check_in(request.room_no, request.caller)
                self._uow.ledgers.save(ledger)
        except DomainException as e:
            self._reject("check_in", request, e)
            raise

        return RoomDTO.from_domain(request.room_no, ledger.hotel_room_details(request.room_no))

    def check_out(self, request: CheckOutRequest) -> RoomDTO:
        """Выселяет держателя брони и сохраняет оценку."""
        try:
            with self._uow:
                ledger = self._uow.ledgers.get_by_id(self._ledger_id)
                ledger.check_out(
                    request.room_no, request.rating, request.caller, self._review_policy
                )
                self._uow.ledgers.save(ledger)
        except DomainException as e:
            self._reject("check_out", request, e)
            raise

        return RoomDTO.from_domain(request.room_no, ledger.hotel_room_details(request.room_no))

    def hotel_room_details(self, room_no: int) -> RoomDTO:
        """Возвращает информацию о номере."""
        with self._uow:
            ledger = self._uow.ledgers.get_by_id(self._ledger_id)
            return RoomDTO.from_domain(room_no, ledger.hotel_room_details(room_no))

    def _reject(self, operation: str, request: BaseModel, error: DomainException) -> None:
        self._logger.warning(
            f"{operation} rejected: {type(error).__name__}",
            reason=str(error),
            request=request.model_dump(),
        )


def deploy_room_ledger(
    owner: Identity,
    uow: ports.IRoomLedgerUnitOfWork,
    payment_gateway: ports.IPaymentGateway,
    settings: Optional[LedgerSettings] = None,
    logger: Optional[ports.ILogger] = None,
) -> RoomLedgerApplicationService:
    """Развертывает новый реестр и возвращает сервис для работы с ним."""
    settings = settings or LedgerSettings()
    logger = logger or ConsoleLogger(settings.LOG_LEVEL)

    ledger = RoomLedger.deploy(owner)
    with uow:
        uow.ledgers.add(ledger)

    logger.info("RoomLedger deployed", ledger_id=ledger.id, owner=owner)
    return RoomLedgerApplicationService(
        uow=uow,
        ledger_id=ledger.id,
        payment_gateway=payment_gateway,
        booking_policy=BookingPolicy(strict=settings.STRICT_BOOKING),
        review_policy=ReviewPolicy(settings.MIN_RATING, settings.MAX_RATING),
        logger=logger,
    )
