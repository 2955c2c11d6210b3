# vgosti/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from vgosti import models
from vgosti.config import settings

# Load Security Configurations
SECRET_KEY = settings.JWT_SECRET_KEY
ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

ADMIN_COOKIE = "admin_token"
ADMIN_SUBJECT = "admin"

# Salted password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer token; the console sends the same token as a cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/admin/login", auto_error=False)

# Password Hashing Functions
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False

# JWT Token Creation
def create_access_token(data: dict, expires_minutes: Optional[float] = None) -> str:
    """
    Creates a signed token with an expiry claim.
    """
    to_encode = data.copy()
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

def authenticate_admin(db: Session, username: str, password: str) -> Optional[models.AdminCredential]:
    """Exact (case-sensitive) username match, then hash verification."""
    credential = db.query(models.AdminCredential).filter(
        models.AdminCredential.username == username
    ).first()
    if credential is None or credential.username != username:
        return None
    if not verify_password(password, credential.password_hash):
        return None
    return credential

def create_admin_token(username: str) -> str:
    return create_access_token({"sub": ADMIN_SUBJECT, "username": username})

def is_admin_token(token: Optional[str]) -> bool:
    if not token:
        return False
    payload = decode_token(token)
    return bool(payload) and payload.get("sub") == ADMIN_SUBJECT

# Admin Verification Dependency
def verify_admin(
    token: Optional[str] = Depends(oauth2_scheme),
    admin_token: Optional[str] = Cookie(None),
):
    if is_admin_token(token) or is_admin_token(admin_token):
        return True
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Admin authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )
