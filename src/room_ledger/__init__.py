"""
Модуль контекста реестра номеров (Room Ledger Context).

Отвечает за номера отеля и их жизненный цикл, включая:
- Настройку категории и тарифа номера владельцем
- Бронирование при оплате, точно равной тарифу
- Заезд и выезд держателя брони с оценкой
"""

from . import application, domain, event_handlers, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "event_handlers",
    "infrastructure",
    "interfaces",
]
