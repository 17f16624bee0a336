"""
Модуль контекста учета (Accounting Context).

Отвечает за хранение средств участников, включая:
- Кошельки клиентов, из которых оплачиваются бронирования
- Удержание платежа до решения по брони и его возврат при отказе
- Баланс владельца, доступный для вывода
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
