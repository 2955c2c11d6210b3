# vgosti/booking.py
"""Price formatting and the WhatsApp deep link that stands in for real booking."""

import math
from datetime import date, datetime
from typing import Optional, Union
from urllib.parse import quote

from vgosti.site_content import phone_digits

WHATSAPP_SEND_URL = "https://api.whatsapp.com/send/"
NBSP = "\u00a0"

DateLike = Union[date, datetime]


def format_price(amount: int) -> str:
    """ru-RU style grouping: 8500 -> '8 500 ₽'."""
    grouped = f"{int(amount):,}".replace(",", NBSP)
    return f"{grouped}{NBSP}₽"


def booking_message(cabin_name: str, price_per_night: int) -> str:
    return (
        f'Здравствуйте! Хочу забронировать домик "{cabin_name}". '
        f"Цена: {format_price(price_per_night)} за ночь"
    )


def whatsapp_booking_url(cabin_name: str, price_per_night: int, phone: str) -> str:
    text = quote(booking_message(cabin_name, price_per_night), safe="")
    return f"{WHATSAPP_SEND_URL}?phone={phone_digits(phone)}&text={text}&type=phone_number&app_absent=0"


def whatsapp_chat_url(phone: str) -> str:
    return f"https://wa.me/{phone_digits(phone)}"


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Whole nights between two dates, partial days rounded up, order-insensitive."""
    seconds = abs((_as_datetime(check_out) - _as_datetime(check_in)).total_seconds())
    return math.ceil(seconds / 86400)


def calculate_total_price(price_per_night: int, check_in: Optional[DateLike],
                          check_out: Optional[DateLike]) -> int:
    if not check_in or not check_out:
        return 0
    return price_per_night * calculate_nights(check_in, check_out)


def is_date_in_past(value: DateLike, today: Optional[date] = None) -> bool:
    today = today or date.today()
    day = value.date() if isinstance(value, datetime) else value
    return day < today
