# vgosti/routes/admin.py
import logging
import re
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import auth, crud, database, schemas
from vgosti.config import settings
from vgosti.rate_limiting import limiter, LOGIN_LIMIT
from vgosti.routes import server_error

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"]
)

ADMIN_PATH_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
RESERVED_PATHS = {"api", "uploads", "static", "assets", "cabins", "cabin", "about", "contacts", "reviews"}


def normalize_admin_path(raw: str) -> str:
    """Single URL segment, no slashes; raises ValueError when unusable."""
    path = (raw or "").strip().strip("/")
    if not path or not ADMIN_PATH_PATTERN.match(path):
        raise ValueError("Admin path must be a single segment of letters, digits, '-' or '_'")
    if path.lower() in RESERVED_PATHS:
        raise ValueError(f"'{path}' is reserved by the public site")
    return path


def set_admin_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        auth.ADMIN_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        max_age=int(settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60),
    )


# Admin Login (bad credentials are a normal answer, not a fault)
@router.post("/login", response_model=schemas.LoginResponse)
@limiter.limit(LOGIN_LIMIT)
def admin_login(request: Request, response: Response, credentials: schemas.AdminLogin,
                db: Session = Depends(database.get_db)):
    try:
        admin = auth.authenticate_admin(db, credentials.username, credentials.password)
    except SQLAlchemyError:
        raise server_error(db, logger, "during login")

    if not admin:
        logger.warning(f"Failed admin login for '{credentials.username}'")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "message": "Invalid credentials"},
        )

    token = auth.create_admin_token(admin.username)
    set_admin_cookie(response, token)
    logger.info(f"Admin '{admin.username}' logged in")
    return {
        "success": True,
        "message": "Login successful",
        "access_token": token,
        "token_type": "bearer",
    }

# Admin Only - Replace Credentials
@router.put("/credentials", response_model=schemas.MessageResponse, dependencies=[Depends(auth.verify_admin)])
def update_credentials(credentials: schemas.CredentialsUpdate, db: Session = Depends(database.get_db)):
    try:
        crud.replace_credentials(db, credentials.username, auth.get_password_hash(credentials.password))
    except SQLAlchemyError:
        raise server_error(db, logger, "updating credentials")
    logger.info("Admin credentials updated")
    return {"success": True, "message": "Credentials updated successfully"}

# Public - Current Admin Path
@router.get("/path", response_model=schemas.AdminPathResponse)
def get_admin_path(db: Session = Depends(database.get_db)):
    try:
        path = crud.get_admin_path(db, settings.DEFAULT_ADMIN_PATH)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching admin path")
    return {"path": path}

# Admin Only - Replace Admin Path
@router.put("/path", response_model=schemas.MessageResponse, dependencies=[Depends(auth.verify_admin)])
def update_admin_path(payload: schemas.AdminPathUpdate, db: Session = Depends(database.get_db)):
    try:
        path = normalize_admin_path(payload.path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        crud.replace_admin_path(db, path)
    except SQLAlchemyError:
        raise server_error(db, logger, "updating admin path")
    logger.info(f"Admin path changed to '/{path}'")
    return {"success": True, "message": "Admin path updated successfully"}

# Admin Only - Every Cabin (console listing)
@router.get("/cabins", response_model=List[schemas.CabinOut], dependencies=[Depends(auth.verify_admin)])
def list_all_cabins(db: Session = Depends(database.get_db)):
    try:
        cabins = crud.list_cabins(db)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching cabins")
    return [schemas.CabinOut.from_model(c) for c in cabins]
