from shared_kernel.interfaces import ILogger

from .domain import CheckedIn, CheckedOut, RoomBooked
from .infrastructure import RoomReviewsProjection


def on_checked_out(event: CheckedOut, projection: RoomReviewsProjection) -> None:
    """Обработчик события выезда: обновляет сводку оценок."""
    projection.apply(event)


def on_room_lifecycle_event(
    event: RoomBooked | CheckedIn | CheckedOut, logger: ILogger
) -> None:
    """Журналирует переходы номера для внешних наблюдателей."""
    logger.info(
        f"Room {event.room_no}: {event.event_type}",
        customer=event.customer,
        occurred_on=event.occurred_on,
    )
