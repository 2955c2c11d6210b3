# vgosti/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime


class CabinCreate(BaseModel):
    """Full cabin payload (camelCase on the wire). Used for both create and full replace."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    price_per_night: int = Field(..., ge=0, alias="pricePerNight")
    location: str = ""
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    max_guests: int = Field(2, ge=1, alias="maxGuests")
    amenities: List[str] = []
    images: List[str] = []
    featured: bool = False

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("amenities", "images", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return [] if value is None else value

    @field_validator("amenities")
    @classmethod
    def unique_amenities(cls, value: List[str]) -> List[str]:
        seen = []
        for amenity in value:
            amenity = amenity.strip()
            if amenity and amenity not in seen:
                seen.append(amenity)
        return seen


class CabinOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str
    price_per_night: int = Field(alias="pricePerNight")
    location: str
    bedrooms: int
    bathrooms: int
    max_guests: int = Field(alias="maxGuests")
    amenities: List[str]
    images: List[str]
    featured: bool
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @classmethod
    def from_model(cls, cabin) -> "CabinOut":
        return cls(
            id=str(cabin.id),
            name=cabin.name,
            description=cabin.description or "",
            price_per_night=cabin.price_per_night,
            location=cabin.location or "",
            bedrooms=cabin.bedrooms or 0,
            bathrooms=cabin.bathrooms or 0,
            max_guests=cabin.max_guests or 0,
            amenities=list(cabin.amenities or []),
            images=list(cabin.images or []),
            featured=bool(cabin.featured),
            created_at=cabin.created_at,
            updated_at=cabin.updated_at,
        )

    @property
    def cover_image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class AdminLogin(BaseModel):
    username: str
    password: str


class CredentialsUpdate(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminPathUpdate(BaseModel):
    path: str


class AdminPathResponse(BaseModel):
    path: str


class MessageResponse(BaseModel):
    success: bool
    message: str


class LoginResponse(MessageResponse):
    access_token: Optional[str] = None
    token_type: Optional[str] = None


class UploadResponse(BaseModel):
    imageUrl: str


REVIEW_COMMENT_MAX_LENGTH = 1000


class ReviewCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    rating: int = Field(5, ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=REVIEW_COMMENT_MAX_LENGTH)

    @field_validator("name", "comment")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    rating: int
    comment: str
    approved: bool
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, value) -> str:
        return str(value)


class AdminReviewOut(ReviewOut):
    email: str = ""
