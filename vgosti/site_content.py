# vgosti/site_content.py
"""
Site settings store and the typed content shapes the pages read from it.

The store is an open key -> JSON mapping. Pages never read raw keys: they go
through load_site_content(), which maps each known key onto a pydantic model
and falls back to the default copy per key when the key is missing, malformed
or the store is unreachable.
"""

import json
import logging
import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import models

logger = logging.getLogger(__name__)


# ============================================================================
# STORE
# ============================================================================

def read_settings(db: Session) -> Dict[str, Any]:
    """Full mapping; values that are not valid JSON come back as raw strings."""
    result = {}
    for row in db.query(models.SiteSetting).all():
        try:
            result[row.key] = json.loads(row.value) if row.value is not None else None
        except ValueError:
            result[row.key] = row.value
    return result


# One INSERT .. ON CONFLICT per key: concurrent first writes of a key never hit the unique constraint.
UPSERT_INSERTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def save_settings(db: Session, values: Dict[str, Any]) -> None:
    """
    Upsert every pair in one transaction. A value that cannot be serialized or
    a failing statement rolls back the whole batch and re-raises.
    """
    if not values:
        return
    insert = UPSERT_INSERTS[db.get_bind().dialect.name]
    try:
        for key, value in values.items():
            encoded = json.dumps(value, ensure_ascii=False)
            stmt = insert(models.SiteSetting).values(key=key, value=encoded)
            db.execute(stmt.on_conflict_do_update(
                index_elements=[models.SiteSetting.key],
                set_={"value": stmt.excluded.value, "updated_at": func.now()},
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise


# ============================================================================
# TYPED SHAPES
# ============================================================================

class _Content(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Feature(_Content):
    title: str
    description: str


class TeamMember(_Content):
    name: str
    position: str = ""
    description: str = ""
    image: str = ""


class AboutStats(_Content):
    years_experience: int = Field(5, alias="yearsExperience")
    happy_guests: int = Field(1200, alias="happyGuests")
    properties: int = 15
    locations: int = 3


class AboutContent(_Content):
    title: str = "О нас"
    subtitle: str = "Ваш идеальный отдых на берегу Каспийского моря"
    description: str = (
        "Мы предлагаем уникальные возможности для отдыха в живописных местах на побережье "
        "Каспийского моря. Наша компания специализируется на предоставлении комфортабельного "
        "жилья для незабываемого отдыха."
    )
    mission: str = (
        "Наша миссия - создавать незабываемые впечатления для наших гостей, предоставляя им "
        "комфортное и качественное размещение в самых красивых уголках побережья."
    )
    vision: str = (
        "Мы стремимся стать ведущей компанией в сфере краткосрочной аренды жилья, известной "
        "своим высоким уровнем сервиса и заботой о каждом госте."
    )
    values: List[str] = [
        "Качество и комфорт",
        "Индивидуальный подход",
        "Честность и прозрачность",
        "Забота об окружающей среде",
    ]
    stats: AboutStats = AboutStats()
    team: List[TeamMember] = [
        TeamMember(
            name="Анна Петрова",
            position="Основатель и директор",
            description="Более 10 лет опыта в сфере гостеприимства",
            image="https://images.pexels.com/photos/415829/pexels-photo-415829.jpeg",
        ),
        TeamMember(
            name="Михаил Сидоров",
            position="Менеджер по развитию",
            description="Отвечает за развитие новых направлений",
            image="https://images.pexels.com/photos/220453/pexels-photo-220453.jpeg",
        ),
    ]


class SocialMedia(_Content):
    facebook: str = "https://facebook.com/vgosti"
    instagram: str = "https://instagram.com/vgosti"
    vk: str = "https://vk.com/vgosti"


class OfficeHours(_Content):
    weekdays: str = "Пн-Пт: 9:00 - 18:00"
    weekends: str = "Сб-Вс: 10:00 - 16:00"


class ContactInfo(_Content):
    title: str = "Контакты"
    subtitle: str = "Свяжитесь с нами любым удобным способом"
    phone: str = "+7 965 411-15-55"
    email: str = "info@vgosti.ru"
    address: str = "Приморский бульвар, 123, Морской город, Россия"
    working_hours: str = Field("Ежедневно с 9:00 до 21:00", alias="workingHours")
    telegram: str = "@vgosti_support"
    social_media: SocialMedia = Field(SocialMedia(), alias="socialMedia")
    office_hours: OfficeHours = Field(OfficeHours(), alias="officeHours")

    @property
    def whatsapp(self) -> str:
        return phone_digits(self.phone)


class SiteInfo(_Content):
    site_name: str = "В гости"
    phone: str = "+7 965 411-15-55"
    email: str = "info@vgosti.ru"
    address: str = "Приморский бульвар, 123, Морской город, Россия"


class HeroContent(_Content):
    title: str = "Уютные домики и квартиры на берегу каспия"
    subtitle: str = (
        "Отдохните от городской суеты в наших комфортабельных объектах "
        "с живописным видом на Каспийское море"
    )


class FooterContent(_Content):
    description: str = (
        "Уютные домики и современные квартиры на берегу моря для незабываемого отдыха. "
        "Идеальное место для спокойного отдыха и наслаждения морским пейзажем."
    )
    phone: str = "+7 (999) 123-45-67"
    email: str = "info@vgosti.ru"
    address: str = "Приморский бульвар, 123, Морской город, Россия"


DEFAULT_GALLERY_IMAGES = [
    "https://images.pexels.com/photos/3754595/pexels-photo-3754595.jpeg",
    "https://images.pexels.com/photos/4846293/pexels-photo-4846293.jpeg",
    "https://images.pexels.com/photos/4846265/pexels-photo-4846265.jpeg",
    "https://images.pexels.com/photos/4846437/pexels-photo-4846437.jpeg",
    "https://images.pexels.com/photos/4846436/pexels-photo-4846436.jpeg",
]

DEFAULT_FEATURES = [
    Feature(
        title="Лучшая локация",
        description="Все наши объекты расположены в живописных местах с прямым доступом "
                    "к Каспийскому морю и потрясающими видами.",
    ),
    Feature(
        title="Близость к морю",
        description="Дорога до пляжа занимает не более 5 минут пешком от любого нашего объекта недвижимости.",
    ),
    Feature(
        title="Комфорт и уют",
        description="Каждый домик и квартира полностью оборудованы всем необходимым для комфортного отдыха.",
    ),
    Feature(
        title="Безопасное бронирование",
        description="Гарантированное бронирование без скрытых платежей и дополнительных комиссий.",
    ),
]

DEFAULT_ACCOMMODATION_RULES = [
    "Заезд после 14:00, выезд до 12:00",
    "Курение запрещено",
    "Без вечеринок и мероприятий",
    "Разрешено проживание с домашними животными",
]


class SiteContent(_Content):
    site: SiteInfo = SiteInfo()
    hero: HeroContent = HeroContent()
    footer: FooterContent = FooterContent()
    gallery_images: List[str] = list(DEFAULT_GALLERY_IMAGES)
    features: List[Feature] = list(DEFAULT_FEATURES)
    accommodation_rules: List[str] = list(DEFAULT_ACCOMMODATION_RULES)
    contact: ContactInfo = ContactInfo()
    about: AboutContent = AboutContent()


# ============================================================================
# DEFAULTING
# ============================================================================

def phone_digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def _text(raw: Dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key)
    return value if isinstance(value, str) and value.strip() else default


def _string_list(raw: Dict[str, Any], key: str, default: List[str]) -> List[str]:
    value = raw.get(key)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    return list(default)


def _features(raw: Dict[str, Any]) -> List[Feature]:
    value = raw.get("whyChooseUs")
    if not isinstance(value, list) or not value:
        return list(DEFAULT_FEATURES)
    try:
        return [Feature.model_validate(item) for item in value]
    except ValidationError:
        logger.warning("Malformed whyChooseUs setting, using defaults")
        return list(DEFAULT_FEATURES)


def _merged(model_cls, raw: Dict[str, Any], key: str):
    """Stored object laid over the defaults, key by key."""
    default = model_cls()
    value = raw.get(key)
    if not isinstance(value, dict):
        return default
    try:
        return model_cls.model_validate({**default.model_dump(by_alias=True), **value})
    except ValidationError:
        logger.warning(f"Malformed {key} setting, using defaults")
        return default


def build_site_content(raw: Dict[str, Any]) -> SiteContent:
    site_defaults = SiteInfo()
    site = SiteInfo(
        site_name=_text(raw, "siteName", site_defaults.site_name),
        phone=_text(raw, "phone", site_defaults.phone),
        email=_text(raw, "email", site_defaults.email),
        address=_text(raw, "address", site_defaults.address),
    )

    hero_defaults = HeroContent()
    hero = HeroContent(
        title=_text(raw, "heroTitle", hero_defaults.title),
        subtitle=_text(raw, "heroSubtitle", hero_defaults.subtitle),
    )

    footer_defaults = FooterContent()
    footer = FooterContent(
        description=_text(raw, "footerDescription", footer_defaults.description),
        phone=_text(raw, "footerPhone", footer_defaults.phone),
        email=_text(raw, "footerEmail", footer_defaults.email),
        address=_text(raw, "footerAddress", footer_defaults.address),
    )

    contact = _merged(ContactInfo, raw, "contactInfo")
    # Top-level keys predate contactInfo and still win over it.
    for key in ("phone", "email", "address"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            contact = contact.model_copy(update={key: value})

    return SiteContent(
        site=site,
        hero=hero,
        footer=footer,
        gallery_images=_string_list(raw, "galleryImages", DEFAULT_GALLERY_IMAGES),
        features=_features(raw),
        accommodation_rules=_string_list(raw, "accommodationRules", DEFAULT_ACCOMMODATION_RULES),
        contact=contact,
        about=_merged(AboutContent, raw, "aboutContent"),
    )


def load_site_content(db: Session) -> SiteContent:
    """Never raises: a settings outage degrades the site to its default copy."""
    try:
        raw = read_settings(db)
    except SQLAlchemyError as e:
        logger.warning(f"Settings unavailable, using default content: {e}")
        db.rollback()
        raw = {}
    return build_site_content(raw)
