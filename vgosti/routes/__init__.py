# vgosti/routes/__init__.py
import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session


def server_error(db: Session, logger: logging.Logger, action: str) -> HTTPException:
    """Roll back, log the detail, hand the caller a generic 500."""
    db.rollback()
    logger.error(f"Error {action}", exc_info=True)
    return HTTPException(status_code=500, detail="Internal server error")
