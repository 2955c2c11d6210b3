# vgosti/crud.py
"""
Data access shared by the JSON API, the public pages and the admin console.
Functions raise SQLAlchemy errors; callers decide how to report them.
"""

from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from vgosti import models, schemas


def parse_id(raw) -> Optional[int]:
    """Wire ids are strings; anything that is not a positive integer cannot exist."""
    try:
        value = int(str(raw))
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


# Cabins

def list_cabins(db: Session, featured: Optional[bool] = None) -> List[models.Cabin]:
    query = db.query(models.Cabin)
    if featured is not None:
        query = query.filter(models.Cabin.featured == featured)
    return query.order_by(models.Cabin.created_at.desc(), models.Cabin.id.desc()).all()


def get_cabin(db: Session, cabin_id) -> Optional[models.Cabin]:
    pk = parse_id(cabin_id)
    if pk is None:
        return None
    return db.query(models.Cabin).filter(models.Cabin.id == pk).first()


def _apply_cabin(cabin: models.Cabin, data: schemas.CabinCreate) -> None:
    cabin.name = data.name
    cabin.description = data.description
    cabin.price_per_night = data.price_per_night
    cabin.location = data.location
    cabin.bedrooms = data.bedrooms
    cabin.bathrooms = data.bathrooms
    cabin.max_guests = data.max_guests
    cabin.amenities = list(data.amenities)
    cabin.images = list(data.images)
    cabin.featured = data.featured


def create_cabin(db: Session, data: schemas.CabinCreate) -> models.Cabin:
    cabin = models.Cabin()
    _apply_cabin(cabin, data)
    db.add(cabin)
    db.commit()
    db.refresh(cabin)
    return cabin


def update_cabin(db: Session, cabin_id, data: schemas.CabinCreate) -> Optional[models.Cabin]:
    """Full replace of every field; None when the cabin does not exist."""
    cabin = get_cabin(db, cabin_id)
    if cabin is None:
        return None
    _apply_cabin(cabin, data)
    cabin.updated_at = func.now()
    db.commit()
    db.refresh(cabin)
    return cabin


def delete_cabin(db: Session, cabin_id) -> bool:
    cabin = get_cabin(db, cabin_id)
    if cabin is None:
        return False
    db.delete(cabin)
    db.commit()
    return True


# Admin identity

def get_admin_path(db: Session, default: str) -> str:
    row = db.query(models.AdminPath).order_by(models.AdminPath.id.desc()).first()
    return row.path if row else default


def replace_admin_path(db: Session, path: str) -> None:
    """Delete-then-insert inside one transaction, so readers never see zero rows committed."""
    try:
        db.execute(delete(models.AdminPath))
        db.add(models.AdminPath(path=path))
        db.commit()
    except Exception:
        db.rollback()
        raise


def replace_credentials(db: Session, username: str, password_hash: str) -> None:
    """Overwrite the singleton credentials row (created if the table is empty)."""
    try:
        credential = db.query(models.AdminCredential).order_by(models.AdminCredential.id).first()
        if credential is None:
            db.add(models.AdminCredential(username=username, password_hash=password_hash))
        else:
            # extra rows would make the singleton ambiguous
            db.query(models.AdminCredential).filter(
                models.AdminCredential.id != credential.id
            ).delete(synchronize_session=False)
            credential.username = username
            credential.password_hash = password_hash
            credential.updated_at = func.now()
        db.commit()
    except Exception:
        db.rollback()
        raise


# Reviews

def list_reviews(db: Session, approved_only: bool = True) -> List[models.Review]:
    query = db.query(models.Review)
    if approved_only:
        query = query.filter(models.Review.approved.is_(True))
    return query.order_by(models.Review.created_at.desc(), models.Review.id.desc()).all()


def create_review(db: Session, data: schemas.ReviewCreate) -> models.Review:
    review = models.Review(
        name=data.name,
        email=str(data.email),
        rating=data.rating,
        comment=data.comment,
        approved=False,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def get_review(db: Session, review_id) -> Optional[models.Review]:
    pk = parse_id(review_id)
    if pk is None:
        return None
    return db.query(models.Review).filter(models.Review.id == pk).first()


def approve_review(db: Session, review_id) -> Optional[models.Review]:
    review = get_review(db, review_id)
    if review is None:
        return None
    review.approved = True
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, review_id) -> bool:
    review = get_review(db, review_id)
    if review is None:
        return False
    db.delete(review)
    db.commit()
    return True
