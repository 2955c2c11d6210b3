# vgosti/routes/console.py
"""
Admin console, served under the current admin path.

Logged-out requests see the login form; a successful login sets the same
signed admin token the API accepts, as an http-only cookie. Every tab posts
its own form and nothing is saved until that form is submitted.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import auth, crud, database, models, schemas
from vgosti.config import settings
from vgosti.rate_limiting import limiter, LOGIN_LIMIT
from vgosti.routes.admin import normalize_admin_path, set_admin_cookie
from vgosti.routes.pages import frontend_fallback, render
from vgosti.site_content import load_site_content, read_settings, save_settings
from vgosti.uploads import CheckedImage, UploadRejected, discard_images, read_image, write_image

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Console"], include_in_schema=False)

TABS = ("cabins", "gallery", "content", "settings", "reviews", "identity")


def current_admin_path(db: Session) -> str:
    return crud.get_admin_path(db, settings.DEFAULT_ADMIN_PATH)


def is_logged_in(request: Request) -> bool:
    return auth.is_admin_token(request.cookies.get(auth.ADMIN_COOKIE))


def console_url(console_path: str, tab: str = "cabins", **params) -> str:
    query = {"tab": tab, **{k: v for k, v in params.items() if v}}
    return f"/{console_path}?{urlencode(query)}"


def require_console(console_path: str, request: Request, db: Session = Depends(database.get_db)) -> str:
    """Guard for console POSTs: wrong path is a 404, no session goes back to the login form."""
    if console_path != current_admin_path(db):
        raise HTTPException(status_code=404, detail="Not Found")
    if not is_logged_in(request):
        raise HTTPException(status_code=303, headers={"Location": f"/{console_path}"})
    return console_path


def lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _read_uploads(files: Optional[List[UploadFile]]) -> List[CheckedImage]:
    """Every file is checked before any is written, so one bad file rejects the whole batch."""
    return [read_image(upload) for upload in files or [] if upload is not None and upload.filename]


# ============================================================================
# VIEW
# ============================================================================

@router.get("/{console_path}")
def console(request: Request, console_path: str, tab: str = "cabins", edit: Optional[str] = None,
            notice: str = "", error: str = "", db: Session = Depends(database.get_db)):
    try:
        admin_path = current_admin_path(db)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error resolving admin path", exc_info=True)
        admin_path = settings.DEFAULT_ADMIN_PATH
    if console_path != admin_path:
        return frontend_fallback(request, db)

    if not is_logged_in(request):
        return render(request, "admin/login.html", db, console_path=console_path, error=error)

    tab = tab if tab in TABS else "cabins"
    context: Dict[str, Any] = {
        "console_path": console_path,
        "tab": tab,
        "tabs": TABS,
        "notice": notice,
        "error": error,
    }
    try:
        context["raw_settings"] = read_settings(db)
        context["cabins"] = [schemas.CabinOut.from_model(c) for c in crud.list_cabins(db)]
        context["reviews"] = [schemas.AdminReviewOut.model_validate(r) for r in crud.list_reviews(db, False)]
        credential = db.query(models.AdminCredential).order_by(models.AdminCredential.id).first()
        context["admin_username"] = credential.username if credential else ""
        editing = crud.get_cabin(db, edit) if edit else None
        context["editing"] = schemas.CabinOut.from_model(editing) if editing else None
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error loading console data", exc_info=True)
        return render(request, "admin/console.html", db, status_code=503, unavailable=True, **context)

    return render(request, "admin/console.html", db, unavailable=False, **context)


# ============================================================================
# SESSION
# ============================================================================

@router.post("/{console_path}/login")
@limiter.limit(LOGIN_LIMIT)
def console_login(request: Request, console_path: str, username: str = Form(""), password: str = Form(""),
                  db: Session = Depends(database.get_db)):
    if console_path != current_admin_path(db):
        raise HTTPException(status_code=404, detail="Not Found")

    admin = auth.authenticate_admin(db, username, password)
    if not admin:
        logger.warning(f"Failed console login for '{username}'")
        return render(request, "admin/login.html", db, status_code=401,
                      console_path=console_path, error="Неверный логин или пароль")

    response = RedirectResponse(console_url(console_path), status_code=303)
    set_admin_cookie(response, auth.create_admin_token(admin.username))
    logger.info(f"Admin '{admin.username}' logged in to console")
    return response


@router.post("/{console_path}/logout")
def console_logout(console_path: str = Depends(require_console)):
    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(auth.ADMIN_COOKIE)
    return response


# ============================================================================
# CABINS TAB
# ============================================================================

def _cabin_from_form(name, description, price_per_night, location, bedrooms, bathrooms, max_guests,
                     amenities, images, featured) -> schemas.CabinCreate:
    return schemas.CabinCreate.model_validate({
        "name": name,
        "description": description,
        "pricePerNight": price_per_night,
        "location": location,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "maxGuests": max_guests,
        "amenities": lines(amenities),
        "images": lines(images),
        "featured": bool(featured),
    })


def _validation_message(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


@router.post("/{console_path}/cabins")
@router.post("/{console_path}/cabins/{cabin_id}")
def save_cabin(
    cabin_id: Optional[str] = None,
    name: str = Form(""),
    description: str = Form(""),
    price_per_night: str = Form("0"),
    location: str = Form(""),
    bedrooms: str = Form("1"),
    bathrooms: str = Form("1"),
    max_guests: str = Form("2"),
    amenities: str = Form(""),
    images: str = Form(""),
    featured: Optional[str] = Form(None),
    new_images: List[UploadFile] = File([]),
    console_path: str = Depends(require_console),
    db: Session = Depends(database.get_db),
):
    try:
        checked = _read_uploads(new_images)
        data = _cabin_from_form(name, description, price_per_night, location, bedrooms, bathrooms,
                                max_guests, amenities, images, featured)
    except UploadRejected as e:
        return RedirectResponse(console_url(console_path, "cabins", edit=cabin_id, error=e.message), 303)
    except ValidationError as e:
        return RedirectResponse(
            console_url(console_path, "cabins", edit=cabin_id, error=_validation_message(e)), 303
        )

    uploaded = [write_image(image) for image in checked]
    data = data.model_copy(update={"images": data.images + uploaded})
    try:
        if cabin_id:
            cabin = crud.update_cabin(db, cabin_id, data)
            notice = "Домик обновлен"
        else:
            cabin = crud.create_cabin(db, data)
            notice = "Домик добавлен"
    except SQLAlchemyError:
        db.rollback()
        discard_images(uploaded)
        logger.error("Error saving cabin from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "cabins", error="Не удалось сохранить домик"), 303)
    if cabin is None:
        discard_images(uploaded)
        raise HTTPException(status_code=404, detail="Cabin not found")

    logger.info(f"Cabin {cabin.id} saved from console")
    return RedirectResponse(console_url(console_path, "cabins", notice=notice), 303)


@router.post("/{console_path}/cabins/{cabin_id}/delete")
def delete_cabin(cabin_id: str, console_path: str = Depends(require_console),
                 db: Session = Depends(database.get_db)):
    try:
        deleted = crud.delete_cabin(db, cabin_id)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error deleting cabin from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "cabins", error="Не удалось удалить домик"), 303)
    if not deleted:
        raise HTTPException(status_code=404, detail="Cabin not found")
    logger.info(f"Cabin {cabin_id} deleted from console")
    return RedirectResponse(console_url(console_path, "cabins", notice="Домик удален"), 303)


# ============================================================================
# SETTINGS-BACKED TABS
# ============================================================================

def _save(db: Session, console_path: str, tab: str, values: Dict[str, Any],
          uploaded: Optional[List[str]] = None) -> RedirectResponse:
    try:
        save_settings(db, values)
    except SQLAlchemyError:
        discard_images(uploaded or [])
        logger.error(f"Error saving {tab} settings from console", exc_info=True)
        return RedirectResponse(console_url(console_path, tab, error="Не удалось сохранить настройки"), 303)
    logger.info(f"Console saved {tab} settings: {', '.join(sorted(values))}")
    return RedirectResponse(console_url(console_path, tab, notice="Настройки сохранены"), 303)


@router.post("/{console_path}/gallery")
def save_gallery(gallery_images: str = Form(""), new_images: List[UploadFile] = File([]),
                 console_path: str = Depends(require_console), db: Session = Depends(database.get_db)):
    try:
        checked = _read_uploads(new_images)
    except UploadRejected as e:
        return RedirectResponse(console_url(console_path, "gallery", error=e.message), 303)
    uploaded = [write_image(image) for image in checked]
    return _save(db, console_path, "gallery", {"galleryImages": lines(gallery_images) + uploaded}, uploaded)


@router.post("/{console_path}/content")
def save_content(
    feature_title: List[str] = Form([]),
    feature_description: List[str] = Form([]),
    about_title: str = Form(""),
    about_subtitle: str = Form(""),
    about_description: str = Form(""),
    about_mission: str = Form(""),
    about_vision: str = Form(""),
    about_values: str = Form(""),
    console_path: str = Depends(require_console),
    db: Session = Depends(database.get_db),
):
    features = [
        {"title": title.strip(), "description": description.strip()}
        for title, description in zip(feature_title, feature_description)
        if title.strip()
    ]
    about = load_site_content(db).about.model_dump(by_alias=True)
    about.update({
        "title": about_title.strip() or about["title"],
        "subtitle": about_subtitle.strip() or about["subtitle"],
        "description": about_description.strip() or about["description"],
        "mission": about_mission.strip() or about["mission"],
        "vision": about_vision.strip() or about["vision"],
        "values": lines(about_values) or about["values"],
    })
    return _save(db, console_path, "content", {"whyChooseUs": features, "aboutContent": about})


@router.post("/{console_path}/settings")
def save_site_settings(
    site_name: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    address: str = Form(""),
    hero_title: str = Form(""),
    hero_subtitle: str = Form(""),
    footer_description: str = Form(""),
    footer_phone: str = Form(""),
    footer_email: str = Form(""),
    footer_address: str = Form(""),
    accommodation_rules: str = Form(""),
    working_hours: str = Form(""),
    telegram: str = Form(""),
    console_path: str = Depends(require_console),
    db: Session = Depends(database.get_db),
):
    contact = load_site_content(db).contact.model_dump(by_alias=True)
    contact.update({
        "phone": phone.strip() or contact["phone"],
        "email": email.strip() or contact["email"],
        "address": address.strip() or contact["address"],
        "workingHours": working_hours.strip() or contact["workingHours"],
        "telegram": telegram.strip() or contact["telegram"],
    })
    values = {
        "siteName": site_name.strip(),
        "phone": phone.strip(),
        "email": email.strip(),
        "address": address.strip(),
        "heroTitle": hero_title.strip(),
        "heroSubtitle": hero_subtitle.strip(),
        "footerDescription": footer_description.strip(),
        "footerPhone": footer_phone.strip(),
        "footerEmail": footer_email.strip(),
        "footerAddress": footer_address.strip(),
        "accommodationRules": lines(accommodation_rules),
        "contactInfo": contact,
    }
    return _save(db, console_path, "settings", values)


# ============================================================================
# REVIEWS TAB
# ============================================================================

@router.post("/{console_path}/reviews/{review_id}/approve")
def approve_review(review_id: str, console_path: str = Depends(require_console),
                   db: Session = Depends(database.get_db)):
    try:
        review = crud.approve_review(db, review_id)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error approving review from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "reviews", error="Не удалось одобрить отзыв"), 303)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return RedirectResponse(console_url(console_path, "reviews", notice="Отзыв опубликован"), 303)


@router.post("/{console_path}/reviews/{review_id}/delete")
def delete_review(review_id: str, console_path: str = Depends(require_console),
                  db: Session = Depends(database.get_db)):
    try:
        deleted = crud.delete_review(db, review_id)
    except SQLAlchemyError:
        db.rollback()
        logger.error("Error deleting review from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "reviews", error="Не удалось удалить отзыв"), 303)
    if not deleted:
        raise HTTPException(status_code=404, detail="Review not found")
    return RedirectResponse(console_url(console_path, "reviews", notice="Отзыв удален"), 303)


# ============================================================================
# IDENTITY TAB
# ============================================================================

@router.post("/{console_path}/credentials")
def save_credentials(username: str = Form(""), password: str = Form(""), password_confirm: str = Form(""),
                     console_path: str = Depends(require_console), db: Session = Depends(database.get_db)):
    if not username.strip() or not password:
        return RedirectResponse(console_url(console_path, "identity", error="Укажите логин и пароль"), 303)
    if password != password_confirm:
        return RedirectResponse(console_url(console_path, "identity", error="Пароли не совпадают"), 303)
    try:
        crud.replace_credentials(db, username.strip(), auth.get_password_hash(password))
    except SQLAlchemyError:
        logger.error("Error updating credentials from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "identity", error="Не удалось сохранить"), 303)
    logger.info("Admin credentials updated from console")
    return RedirectResponse(console_url(console_path, "identity", notice="Учетные данные сохранены"), 303)


@router.post("/{console_path}/path")
def save_admin_path(path: str = Form(""), console_path: str = Depends(require_console),
                    db: Session = Depends(database.get_db)):
    try:
        new_path = normalize_admin_path(path)
    except ValueError as e:
        return RedirectResponse(console_url(console_path, "identity", error=str(e)), 303)
    try:
        crud.replace_admin_path(db, new_path)
    except SQLAlchemyError:
        logger.error("Error updating admin path from console", exc_info=True)
        return RedirectResponse(console_url(console_path, "identity", error="Не удалось сохранить"), 303)
    logger.info(f"Admin path changed to '/{new_path}' from console")
    return RedirectResponse(console_url(new_path, "identity", notice="Адрес панели изменен"), 303)
