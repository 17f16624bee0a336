"""
Тесты для доменной модели контекста реестра номеров.
"""
import random

import pytest
from pydantic import ValidationError

from room_ledger.domain import (
    BookingPolicy,
    CheckedIn,
    CheckedOut,
    ReviewPolicy,
    Room,
    RoomBooked,
    RoomConfigured,
    RoomLedger,
)
from shared_kernel import (
    AuthorizationError,
    BusinessRuleValidationException,
    DomainException,
    PaymentError,
    StateError,
)


@pytest.fixture
def ledger(owner) -> RoomLedger:
    """Реестр с настроенным номером 1 категории Royal за 10."""
    ledger = RoomLedger.deploy(owner)
    ledger.set_hotel_room(1, "Royal", 10, owner)
    ledger.clear_events()
    return ledger


def assert_room_invariants(ledger: RoomLedger) -> None:
    for room in ledger.rooms.values():
        assert not room.occupied or room.booked
        assert room.booked == (room.customer_booked is not None)


class TestDeployment:
    """Тесты создания реестра."""

    def test_sets_the_right_owner(self, owner):
        ledger = RoomLedger.deploy(owner)

        assert ledger.owner == owner
        assert ledger.rooms == {}

    def test_owner_cannot_be_reassigned(self, owner, stranger):
        ledger = RoomLedger.deploy(owner)

        with pytest.raises(ValidationError):
            ledger.owner = stranger

        assert ledger.owner == owner

    def test_owner_is_required(self):
        with pytest.raises(BusinessRuleValidationException):
            RoomLedger.deploy("")


class TestSetHotelRoom:
    """Тесты настройки номера владельцем."""

    def test_owner_sets_category_and_tariff(self, owner):
        ledger = RoomLedger.deploy(owner)

        ledger.set_hotel_room(1, "Royal", 10, owner)

        room = ledger.hotel_room_details(1)
        assert room.category_name == "Royal"
        assert room.tariff == 10
        events = ledger.pull_domain_events()
        assert events == [
            RoomConfigured(
                event_id=events[0].event_id,
                occurred_on=events[0].occurred_on,
                room_no=1,
                category_name="Royal",
                tariff=10,
            )
        ]

    def test_fails_if_not_owner(self, ledger, stranger):
        with pytest.raises(AuthorizationError, match="только владелец"):
            ledger.set_hotel_room(1, "Budget", 1, stranger)

        room = ledger.hotel_room_details(1)
        assert room.category_name == "Royal"
        assert room.tariff == 10
        assert ledger.domain_events == []

    def test_non_owner_cannot_create_a_room(self, ledger, stranger):
        with pytest.raises(AuthorizationError):
            ledger.set_hotel_room(7, "Suite", 50, stranger)

        assert 7 not in ledger.rooms

    def test_reconfiguring_booked_room_keeps_lifecycle_state(
        self, ledger, owner, customer
    ):
        ledger.pay_to_book(1, 10, customer)
        ledger.check_in(1, customer)

        ledger.set_hotel_room(1, "Presidential", 99, owner)

        room = ledger.hotel_room_details(1)
        assert room.category_name == "Presidential"
        assert room.tariff == 99
        assert room.booked and room.occupied
        assert room.customer_booked == customer

    @pytest.mark.parametrize(
        "room_no, category_name, tariff",
        [
            (0, "Royal", 10),
            (-3, "Royal", 10),
            (1, "", 10),
            (1, "   ", 10),
            (1, "Royal", -1),
        ],
    )
    def test_rejects_malformed_input(self, ledger, owner, room_no, category_name, tariff):
        with pytest.raises(BusinessRuleValidationException):
            ledger.set_hotel_room(room_no, category_name, tariff, owner)

        assert ledger.hotel_room_details(1).tariff == 10

    def test_zero_tariff_is_allowed(self, ledger, owner):
        ledger.set_hotel_room(2, "Free", 0, owner)

        assert ledger.hotel_room_details(2).tariff == 0


class TestPayToBook:
    """Тесты бронирования с оплатой."""

    def test_books_room_if_correct_payment_is_made(self, ledger, customer):
        ledger.pay_to_book(1, 10, customer)

        room = ledger.hotel_room_details(1)
        assert room.booked is True
        assert room.customer_booked == customer
        events = ledger.pull_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], RoomBooked)
        assert (events[0].room_no, events[0].customer) == (1, customer)

    @pytest.mark.parametrize("amount", [1, 9, 11, 0, -10])
    def test_fails_if_incorrect_payment_is_made(self, ledger, customer, amount):
        before = ledger.hotel_room_details(1)

        with pytest.raises(PaymentError, match="Неверная сумма оплаты"):
            ledger.pay_to_book(1, amount, customer)

        assert ledger.hotel_room_details(1) == before
        assert ledger.domain_events == []

    def test_unconfigured_room_can_be_booked_for_zero(self, ledger, customer):
        ledger.pay_to_book(42, 0, customer)

        room = ledger.hotel_room_details(42)
        assert room.booked is True
        assert room.category_name == ""

    def test_rebooking_overwrites_the_holder(self, ledger, customer, stranger):
        ledger.pay_to_book(1, 10, customer)
        ledger.pay_to_book(1, 10, stranger)

        assert ledger.hotel_room_details(1).customer_booked == stranger
        with pytest.raises(StateError):
            ledger.check_in(1, customer)

    def test_strict_policy_rejects_rebooking(self, ledger, customer, stranger):
        policy = BookingPolicy(strict=True)
        ledger.pay_to_book(1, 10, customer, policy)

        with pytest.raises(StateError, match="уже забронирован"):
            ledger.pay_to_book(1, 10, stranger, policy)

        assert ledger.hotel_room_details(1).customer_booked == customer

    def test_strict_policy_rejects_unconfigured_room(self, ledger, customer):
        with pytest.raises(StateError, match="не настроен"):
            ledger.pay_to_book(42, 0, customer, BookingPolicy(strict=True))

        assert 42 not in ledger.rooms

    def test_failed_booking_does_not_create_room(self, ledger, customer):
        with pytest.raises(PaymentError):
            ledger.pay_to_book(5, 3, customer)

        assert 5 not in ledger.rooms


class TestCheckIn:
    """Тесты заезда."""

    def test_holder_checks_in(self, ledger, customer):
        ledger.pay_to_book(1, 10, customer)
        ledger.clear_events()

        ledger.check_in(1, customer)

        assert ledger.hotel_room_details(1).occupied is True
        events = ledger.pull_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], CheckedIn)
        assert events[0].customer == customer

    def test_fails_if_room_not_booked(self, ledger, customer):
        with pytest.raises(StateError, match="не забронирован"):
            ledger.check_in(1, customer)

        assert ledger.hotel_room_details(1).occupied is False

    def test_fails_for_anyone_but_the_holder(self, ledger, customer, owner, stranger):
        ledger.pay_to_book(1, 10, customer)

        for caller in (owner, stranger):
            with pytest.raises(StateError):
                ledger.check_in(1, caller)

        assert ledger.hotel_room_details(1).occupied is False


class TestCheckOut:
    """Тесты выезда с оценкой."""

    def test_full_cycle(self, ledger, customer):
        ledger.pay_to_book(1, 10, customer)
        ledger.check_in(1, customer)
        ledger.clear_events()

        ledger.check_out(1, 5, customer)

        room = ledger.hotel_room_details(1)
        assert room.occupied is False
        assert room.booked is False
        assert room.customer_booked is None
        assert room.review == 5
        assert room.review_no == 1
        events = ledger.pull_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], CheckedOut)
        assert (events[0].room_no, events[0].customer, events[0].rating) == (
            1,
            customer,
            5,
        )

    def test_second_cycle_counts_reviews(self, ledger, customer, stranger):
        for guest, rating in ((customer, 5), (stranger, 3)):
            ledger.pay_to_book(1, 10, guest)
            ledger.check_in(1, guest)
            ledger.check_out(1, rating, guest)

        room = ledger.hotel_room_details(1)
        assert room.review_no == 2
        assert room.review == 3

    def test_fails_if_only_booked(self, ledger, customer):
        ledger.pay_to_book(1, 10, customer)

        with pytest.raises(StateError, match="не занят"):
            ledger.check_out(1, 5, customer)

        room = ledger.hotel_room_details(1)
        assert room.booked is True
        assert room.review_no == 0

    def test_fails_for_anyone_but_the_holder(self, ledger, customer, stranger):
        ledger.pay_to_book(1, 10, customer)
        ledger.check_in(1, customer)

        with pytest.raises(StateError, match="не вызывающим"):
            ledger.check_out(1, 5, stranger)

        assert ledger.hotel_room_details(1).occupied is True

    @pytest.mark.parametrize("rating", [0, 6, -1, 100])
    def test_rejects_rating_out_of_range(self, ledger, customer, rating):
        ledger.pay_to_book(1, 10, customer)
        ledger.check_in(1, customer)

        with pytest.raises(BusinessRuleValidationException, match="диапазоне 1-5"):
            ledger.check_out(1, rating, customer)

        room = ledger.hotel_room_details(1)
        assert room.occupied is True
        assert room.review_no == 0

    def test_custom_review_policy(self, ledger, customer):
        ledger.pay_to_book(1, 10, customer)
        ledger.check_in(1, customer)

        ledger.check_out(1, 10, customer, ReviewPolicy(1, 10))

        assert ledger.hotel_room_details(1).review == 10


class TestHotelRoomDetails:
    """Тесты запроса сведений о номере."""

    def test_unknown_room_returns_default_record(self, ledger):
        room = ledger.hotel_room_details(99)

        assert room == Room()
        assert 99 not in ledger.rooms

    def test_returns_a_copy(self, ledger):
        room = ledger.hotel_room_details(1)
        room.tariff = 1

        assert ledger.hotel_room_details(1).tariff == 10

    def test_rejects_invalid_room_number(self, ledger):
        with pytest.raises(BusinessRuleValidationException):
            ledger.hotel_room_details(0)


class TestRoomInvariants:
    """Инварианты номера сохраняются после любой последовательности операций."""

    def test_random_operations_keep_invariants(self, owner, customer, stranger):
        rng = random.Random(1337)
        ledger = RoomLedger.deploy(owner)
        callers = [owner, customer, stranger]

        for _ in range(500):
            room_no = rng.randint(1, 3)
            caller = rng.choice(callers)
            operation = rng.choice(["configure", "book", "check_in", "check_out"])
            try:
                if operation == "configure":
                    ledger.set_hotel_room(room_no, "Royal", rng.randint(0, 3), caller)
                elif operation == "book":
                    ledger.pay_to_book(room_no, rng.randint(0, 3), caller)
                elif operation == "check_in":
                    ledger.check_in(room_no, caller)
                else:
                    ledger.check_out(room_no, rng.randint(0, 6), caller)
            except DomainException:
                pass
            assert_room_invariants(ledger)

    def test_review_count_never_decreases(self, ledger, customer):
        counts = []
        for rating in (1, 2, 3):
            ledger.pay_to_book(1, 10, customer)
            counts.append(ledger.hotel_room_details(1).review_no)
            ledger.check_in(1, customer)
            ledger.check_out(1, rating, customer)
            counts.append(ledger.hotel_room_details(1).review_no)

        assert counts == sorted(counts)
        assert counts[-1] == 3
