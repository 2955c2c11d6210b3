# vgosti/models.py
import json

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Index, func
from sqlalchemy.types import TypeDecorator

from vgosti.database import Base


class JSONEncodedList(TypeDecorator):
    """List of strings stored as a JSON text column; NULL or garbage reads back as []."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return json.dumps(list(value or []), ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if not value:
            return []
        try:
            decoded = json.loads(value)
        except ValueError:
            return []
        return decoded if isinstance(decoded, list) else []


class Cabin(Base):
    __tablename__ = "cabins"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="")
    price_per_night = Column(Integer, nullable=False)
    location = Column(String, default="")
    bedrooms = Column(Integer, default=1)
    bathrooms = Column(Integer, default=1)
    max_guests = Column(Integer, default=2)
    amenities = Column(JSONEncodedList, default=list)
    images = Column(JSONEncodedList, default=list)
    featured = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_cabins_featured", "featured"),
        Index("idx_cabins_created_at", "created_at"),
    )


class SiteSetting(Base):
    __tablename__ = "site_settings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, unique=True, nullable=False)
    value = Column(Text)  # JSON document
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_site_settings_key", "key"),)


class AdminCredential(Base):
    __tablename__ = "admin_credentials"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class AdminPath(Base):
    __tablename__ = "admin_path"
    id = Column(Integer, primary_key=True, autoincrement=True)
    path = Column(String, nullable=False)
    updated_at = Column(DateTime, server_default=func.now())


class Review(Base):
    __tablename__ = "reviews"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, default="")
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (Index("idx_reviews_approved", "approved"),)
