# vgosti/templating.py
import os
from datetime import datetime

from fastapi.templating import Jinja2Templates

from vgosti.booking import format_price

PACKAGE_DIR = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(PACKAGE_DIR, "templates")
STATIC_DIR = os.path.join(PACKAGE_DIR, "static")

RU_MONTHS = [
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
]


def format_date_ru(value) -> str:
    """'5 мая 2025 г.' for a datetime; empty string for None."""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return f"{value.day} {RU_MONTHS[value.month - 1]} {value.year} г."


templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["price"] = format_price
templates.env.filters["date_ru"] = format_date_ru
templates.env.globals["now"] = datetime.now
