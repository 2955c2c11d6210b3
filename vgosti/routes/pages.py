# vgosti/routes/pages.py
"""
Public pages. Each page loads what it needs per request; listings are primary
content (failure shows an inline error with a retry link), settings are
decorative (failure falls back to the default copy).
"""

import logging
import math
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import captcha, crud, database, schemas
from vgosti.booking import (
    calculate_nights,
    calculate_total_price,
    is_date_in_past,
    whatsapp_booking_url,
    whatsapp_chat_url,
)
from vgosti.config import settings
from vgosti.rate_limiting import limiter, REVIEW_LIMIT
from vgosti.site_content import load_site_content
from vgosti.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)

CABINS_PER_PAGE = 12
MAX_VISIBLE_PAGES = 5
LISTING_ERROR = "Не удалось загрузить список домиков. Попробуйте обновить страницу."

# Shown on the home page until the first review is approved.
DEFAULT_TESTIMONIALS = [
    {
        "name": "Анна Петрова",
        "rating": 5,
        "comment": "Чудесный отдых! Домик \"Морской бриз\" превзошел все наши ожидания. Прекрасный вид "
                   "на море, уютная обстановка и все необходимое для комфортного пребывания.",
    },
    {
        "name": "Иван Сидоров",
        "rating": 5,
        "comment": "Отличное место для семейного отдыха! Дети были в восторге от близости к морю. "
                   "Домик очень просторный и чистый.",
    },
    {
        "name": "Екатерина Смирнова",
        "rating": 4,
        "comment": "Уютно, комфортно и очень красиво! Идеальное место для романтического отдыха вдвоем.",
    },
]


@dataclass
class Page:
    items: List[Any]
    number: int
    total_pages: int
    page_numbers: List[int] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def paginate(items: List[Any], page: int, per_page: int = CABINS_PER_PAGE,
             window: int = MAX_VISIBLE_PAGES) -> Page:
    """Slice one page out of the full list; out-of-range page numbers clamp."""
    total_pages = max(1, math.ceil(len(items) / per_page))
    number = min(max(1, page), total_pages)
    start = (number - 1) * per_page

    start_page = max(1, number - window // 2)
    end_page = min(total_pages, start_page + window - 1)
    if end_page - start_page + 1 < window:
        start_page = max(1, end_page - window + 1)

    return Page(items[start:start + per_page], number, total_pages, list(range(start_page, end_page + 1)))


def render(request: Request, name: str, db: Session, status_code: int = 200, **context):
    context.setdefault("content", load_site_content(db))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _cabins(db: Session, featured: Optional[bool] = None):
    """(cabins, error) - the error is the message to show, never an exception."""
    try:
        return [schemas.CabinOut.from_model(c) for c in crud.list_cabins(db, featured=featured)], None
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error fetching cabins for page", exc_info=True)
        return [], LISTING_ERROR


def _approved_reviews(db: Session) -> List[schemas.ReviewOut]:
    try:
        return [schemas.ReviewOut.model_validate(r) for r in crud.list_reviews(db, approved_only=True)]
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Reviews unavailable for page", exc_info=True)
        return []


def not_found(request: Request, db: Session, message: str = "Страница не найдена"):
    return render(request, "not_found.html", db, status_code=404, message=message)


def frontend_fallback(request: Request, db: Session):
    """Unknown paths: a built frontend's index.html when one is deployed, else the 404 page."""
    index = os.path.join(settings.FRONTEND_DIR, "index.html")
    if os.path.isfile(index):
        return FileResponse(index)
    return not_found(request, db)


@router.get("/")
def home(request: Request, db: Session = Depends(database.get_db)):
    featured, error = _cabins(db, featured=True)
    reviews = _approved_reviews(db)[:3]
    return render(
        request, "home.html", db,
        featured=featured,
        error=error,
        testimonials=reviews or DEFAULT_TESTIMONIALS,
    )


@router.get("/cabins")
def cabins_list(request: Request, page: int = 1, db: Session = Depends(database.get_db)):
    cabins, error = _cabins(db)
    return render(
        request, "cabins.html", db,
        status_code=503 if error else 200,
        page=paginate(cabins, page),
        total=len(cabins),
        error=error,
    )


def stay_estimate(price_per_night: int, check_in: str, check_out: str,
                  today: Optional[date] = None):
    """(estimate, error) for the dates picked on the detail page; both None until both dates are set."""
    if not check_in or not check_out:
        return None, None
    try:
        start, end = date.fromisoformat(check_in), date.fromisoformat(check_out)
    except ValueError:
        return None, "Укажите даты в формате ГГГГ-ММ-ДД"
    if is_date_in_past(start, today):
        return None, "Дата заезда уже прошла"
    if end <= start:
        return None, "Дата выезда должна быть позже даты заезда"
    return {
        "nights": calculate_nights(start, end),
        "total": calculate_total_price(price_per_night, start, end),
    }, None


@router.get("/cabin/{cabin_id}")
def cabin_detail(request: Request, cabin_id: str, check_in: str = "", check_out: str = "",
                 db: Session = Depends(database.get_db)):
    try:
        cabin = crud.get_cabin(db, cabin_id)
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Error fetching cabin {cabin_id} for page", exc_info=True)
        return render(request, "cabin_detail.html", db, status_code=503, cabin=None, error=LISTING_ERROR)
    if cabin is None:
        return not_found(request, db, "Домик не найден")

    cabin = schemas.CabinOut.from_model(cabin)
    content = load_site_content(db)
    phone = content.contact.whatsapp or settings.WHATSAPP_PHONE
    estimate, stay_error = stay_estimate(cabin.price_per_night, check_in, check_out)
    return render(
        request, "cabin_detail.html", db,
        content=content,
        cabin=cabin,
        error=None,
        stay={"check_in": check_in, "check_out": check_out},
        estimate=estimate,
        stay_error=stay_error,
        whatsapp_url=whatsapp_booking_url(cabin.name, cabin.price_per_night, phone),
    )


@router.get("/about")
def about(request: Request, db: Session = Depends(database.get_db)):
    return render(request, "about.html", db)


@router.get("/contacts")
def contacts(request: Request, db: Session = Depends(database.get_db)):
    content = load_site_content(db)
    return render(request, "contacts.html", db, content=content,
                  whatsapp_url=whatsapp_chat_url(content.contact.phone), sent=False, form={})


@router.post("/contacts")
def contacts_submit(request: Request, name: str = Form(""), email: str = Form(""),
                    phone: str = Form(""), message: str = Form(""),
                    db: Session = Depends(database.get_db)):
    # Delivery is out of scope; the message is only acknowledged and logged.
    content = load_site_content(db)
    form = {"name": name, "email": email, "phone": phone, "message": message}
    error = None
    if not name.strip() or not message.strip():
        error = "Пожалуйста, укажите имя и сообщение"
    else:
        logger.info(f"Contact request from '{name.strip()}' <{email.strip()}>")
    return render(request, "contacts.html", db, status_code=400 if error else 200, content=content,
                  whatsapp_url=whatsapp_chat_url(content.contact.phone),
                  sent=error is None, error=error, form={} if error is None else form)


def _reviews_page(request: Request, db: Session, status_code: int = 200,
                  form: Optional[Dict[str, Any]] = None, errors: Optional[List[str]] = None,
                  submitted: bool = False):
    challenge = captcha.generate_challenge()
    return render(
        request, "reviews.html", db,
        status_code=status_code,
        reviews=_approved_reviews(db),
        challenge=challenge,
        captcha_token=captcha.issue_token(challenge),
        form=form or {"name": "", "email": "", "rating": 5, "comment": ""},
        errors=errors or [],
        submitted=submitted,
        comment_max_length=schemas.REVIEW_COMMENT_MAX_LENGTH,
    )


@router.get("/reviews")
def reviews(request: Request, db: Session = Depends(database.get_db)):
    # every render draws a new challenge; ?refresh=1 is just a re-render
    return _reviews_page(request, db)


@router.post("/reviews")
@limiter.limit(REVIEW_LIMIT)
def reviews_submit(request: Request, name: str = Form(""), email: str = Form(""),
                   rating: int = Form(5), comment: str = Form(""),
                   captcha_token: str = Form(""), captcha_answer: str = Form(""),
                   db: Session = Depends(database.get_db)):
    form = {"name": name, "email": email, "rating": rating, "comment": comment}

    if not name.strip() or not email.strip() or not comment.strip():
        return _reviews_page(request, db, 400, form, ["Пожалуйста, заполните все обязательные поля"])
    if not captcha.verify_challenge(captcha_token, captcha_answer):
        return _reviews_page(request, db, 400, form, ["Пожалуйста, подтвердите, что вы не робот"])

    try:
        review = schemas.ReviewCreate(name=name, email=email, rating=rating, comment=comment)
    except ValidationError as e:
        messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return _reviews_page(request, db, 400, form, messages)

    try:
        crud.create_review(db, review)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error saving review from page", exc_info=True)
        return _reviews_page(request, db, 500, form, ["Ошибка при отправке отзыва. Попробуйте еще раз."])

    logger.info(f"Review from '{review.name}' submitted for moderation")
    return _reviews_page(request, db, submitted=True)
