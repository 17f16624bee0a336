"""
Доменная модель реестра номеров.

Реестр принадлежит владельцу отеля: только он настраивает номера.
Каждый номер независимо проходит цикл
Свободен -> Забронирован -> Занят -> Свободен,
а при выезде гость оставляет оценку.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field
from shared_kernel import (
    AggregateRoot,
    AuthorizationError,
    BusinessRuleValidationException,
    DomainEvent,
    Identity,
    PaymentError,
    StateError,
)


class Room(BaseModel):
    """Номер в отеле."""

    category_name: str = ""  # Категория (например, "Royal")
    tariff: int = Field(0, ge=0)  # Точная сумма, необходимая для бронирования
    booked: bool = False
    customer_booked: Optional[Identity] = None  # Держатель брони, пока booked
    occupied: bool = False
    review: int = 0  # Последняя оценка
    review_no: int = Field(0, ge=0)  # Сколько всего оценок получено

    @property
    def is_configured(self) -> bool:
        """Номер без категории и с нулевым тарифом считается ненастроенным."""
        return bool(self.category_name) or self.tariff > 0


class RoomConfigured(DomainEvent):
    """Событие настройки номера владельцем."""

    room_no: int
    category_name: str
    tariff: int


class RoomBooked(DomainEvent):
    """Событие бронирования номера."""

    room_no: int
    customer: Identity


class CheckedIn(DomainEvent):
    """Событие заезда гостя."""

    room_no: int
    customer: Identity


class CheckedOut(DomainEvent):
    """Событие выезда гостя с оценкой."""

    room_no: int
    customer: Identity
    rating: int


class BookingPolicy:
    """Правила допуска к бронированию.

    По умолчанию повторное бронирование поверх действующей брони
    и бронирование ненастроенного номера разрешены.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def validate(self, room_no: int, room: Room) -> None:
        if not self.strict:
            return
        if room.booked:
            raise StateError(f"Номер {room_no} уже забронирован")
        if not room.is_configured:
            raise StateError(f"Номер {room_no} не настроен владельцем")


class ReviewPolicy:
    """Допустимый диапазон оценки при выезде."""

    MIN_RATING = 1
    MAX_RATING = 5

    def __init__(self, min_rating: int = MIN_RATING, max_rating: int = MAX_RATING):
        if min_rating > max_rating:
            raise ValueError("min_rating не может быть больше max_rating")
        self.min_rating = min_rating
        self.max_rating = max_rating

    def validate(self, rating: int) -> None:
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise BusinessRuleValidationException("Оценка должна быть целым числом")
        if not self.min_rating <= rating <= self.max_rating:
            raise BusinessRuleValidationException(
                f"Оценка должна быть в диапазоне "
                f"{self.min_rating}-{self.max_rating}, получено {rating}"
            )


def validate_room_no(room_no: int) -> None:
    """Номер комнаты - положительное целое число."""
    if isinstance(room_no, bool) or not isinstance(room_no, int) or room_no <= 0:
        raise BusinessRuleValidationException(
            f"Номер комнаты должен быть положительным целым числом, получено {room_no!r}"
        )


class RoomLedger(AggregateRoot):
    """Реестр номеров отеля - корень агрегата.

    Все проверки выполняются до изменения состояния:
    операция либо применяется целиком, либо не меняет ничего.
    """

    owner: Identity = Field(..., frozen=True)
    rooms: Dict[int, Room] = Field(default_factory=dict)

    @classmethod
    def deploy(cls, owner: Identity) -> "RoomLedger":
        """Создает реестр; владельцем становится развертывающий."""
        if not owner:
            raise BusinessRuleValidationException("Владелец реестра должен быть указан")
        return cls(owner=owner)

    def hotel_room_details(self, room_no: int) -> Room:
        """Возвращает копию записи номера (или запись по умолчанию)."""
        validate_room_no(room_no)
        room = self.rooms.get(room_no)
        return room.model_copy() if room is not None else Room()

    def set_hotel_room(
        self, room_no: int, category_name: str, tariff: int, caller: Identity
    ) -> None:
        """Настраивает категорию и тариф номера. Только для владельца."""
        if caller != self.owner:
            raise AuthorizationError("Настраивать номера может только владелец")
        validate_room_no(room_no)
        if not isinstance(category_name, str) or not category_name.strip():
            raise BusinessRuleValidationException("Категория номера не может быть пустой")
        if isinstance(tariff, bool) or not isinstance(tariff, int) or tariff < 0:
            raise BusinessRuleValidationException(
                "Тариф должен быть неотрицательным целым числом"
            )

        # Состояние бронирования при настройке не меняется
        room = self.hotel_room_details(room_no)
        room.category_name = category_name
        room.tariff = tariff
        self.rooms[room_no] = room
        self._record(
            RoomConfigured(room_no=room_no, category_name=category_name, tariff=tariff)
        )

    def pay_to_book(
        self,
        room_no: int,
        payment_amount: int,
        customer: Identity,
        policy: Optional[BookingPolicy] = None,
    ) -> None:
        """Бронирует номер при оплате, точно равной тарифу."""
        room = self.hotel_room_details(room_no)
        (policy or BookingPolicy()).validate(room_no, room)
        if payment_amount != room.tariff:
            raise PaymentError(
                f"Неверная сумма оплаты: требуется {room.tariff}, "
                f"получено {payment_amount}"
            )

        room.booked = True
        room.customer_booked = customer
        self._commit_room(room_no, room)
        self._record(RoomBooked(room_no=room_no, customer=customer))

    def check_in(self, room_no: int, caller: Identity) -> None:
        """Заселяет держателя брони."""
        room = self.hotel_room_details(room_no)
        if not room.booked:
            raise StateError(f"Номер {room_no} не забронирован")
        if room.customer_booked != caller:
            raise StateError(f"Номер {room_no} забронирован не вызывающим")

        room.occupied = True
        self._commit_room(room_no, room)
        self._record(CheckedIn(room_no=room_no, customer=caller))

    def check_out(
        self,
        room_no: int,
        rating: int,
        caller: Identity,
        policy: Optional[ReviewPolicy] = None,
    ) -> None:
        """Выселяет держателя брони и сохраняет его оценку."""
        room = self.hotel_room_details(room_no)
        if not room.occupied:
            raise StateError(f"Номер {room_no} не занят")
        if room.customer_booked != caller:
            raise StateError(f"Номер {room_no} занят не вызывающим")
        (policy or ReviewPolicy()).validate(rating)

        room.occupied = False
        room.booked = False
        room.customer_booked = None
        room.review = rating
        room.review_no += 1
        self._commit_room(room_no, room)
        self._record(CheckedOut(room_no=room_no, customer=caller, rating=rating))

    def _commit_room(self, room_no: int, room: Room) -> None:
        # occupied => booked; держатель брони есть только у забронированного номера
        assert not room.occupied or room.booked
        assert room.booked == (room.customer_booked is not None)
        self.rooms[room_no] = room
