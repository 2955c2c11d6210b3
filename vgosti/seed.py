# vgosti/seed.py
"""Default rows that make an empty database usable."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from vgosti import models
from vgosti.auth import get_password_hash
from vgosti.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CABINS = [
    {
        "name": "Морской бриз",
        "description": (
            "Уютный домик с видом на Каспийское море, идеальный для романтического отдыха. "
            "Просторная терраса, собственный выход к пляжу, полностью оборудованная кухня и барбекю-зона."
        ),
        "price_per_night": 5000,
        "location": "Побережье Каспийского моря",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 2,
        "amenities": ["Wi-Fi", "Кондиционер", "Терраса", "Барбекю", "Прямой выход к морю"],
        "images": [
            "https://images.pexels.com/photos/2351649/pexels-photo-2351649.jpeg",
            "https://images.pexels.com/photos/2119713/pexels-photo-2119713.jpeg",
            "https://images.pexels.com/photos/1329711/pexels-photo-1329711.jpeg",
        ],
        "featured": True,
    },
    {
        "name": "Семейный причал",
        "description": (
            "Просторный двухэтажный домик для всей семьи. Три спальни, большая гостиная "
            "с панорамными окнами и потрясающим видом на Каспийское море."
        ),
        "price_per_night": 8500,
        "location": "Побережье Каспийского моря",
        "bedrooms": 3,
        "bathrooms": 2,
        "max_guests": 6,
        "amenities": ["Wi-Fi", "Кондиционер", "Стиральная машина", "Парковка", "Детская площадка"],
        "images": [
            "https://images.pexels.com/photos/2119714/pexels-photo-2119714.jpeg",
            "https://images.pexels.com/photos/2725675/pexels-photo-2725675.jpeg",
            "https://images.pexels.com/photos/4450337/pexels-photo-4450337.jpeg",
        ],
        "featured": True,
    },
]


def _is_empty(session: Session, model) -> bool:
    return session.query(func.count(model.id)).scalar() == 0


def seed_defaults(session: Session) -> None:
    """Insert each default set only when its table has no rows. Caller owns the transaction."""
    if _is_empty(session, models.AdminCredential):
        session.add(models.AdminCredential(
            username=settings.DEFAULT_ADMIN_USERNAME,
            password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        ))
        logger.info("Seeded default admin credentials")

    if _is_empty(session, models.AdminPath):
        session.add(models.AdminPath(path=settings.DEFAULT_ADMIN_PATH))
        logger.info("Seeded default admin path")

    if _is_empty(session, models.Cabin):
        for cabin in DEFAULT_CABINS:
            session.add(models.Cabin(**cabin))
        logger.info(f"Seeded {len(DEFAULT_CABINS)} default cabins")

    session.flush()
