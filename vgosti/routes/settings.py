# vgosti/routes/settings.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import auth, database, schemas
from vgosti.routes import server_error
from vgosti.site_content import read_settings, save_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/settings",
    tags=["Settings"]
)


# Public - Full Settings Mapping
@router.get("", response_model=Dict[str, Any])
def get_settings(db: Session = Depends(database.get_db)):
    try:
        return read_settings(db)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching settings")

# Admin Only - Upsert a Batch (all or nothing)
@router.put("", response_model=schemas.MessageResponse, dependencies=[Depends(auth.verify_admin)])
def update_settings(values: Dict[str, Any] = Body(...), db: Session = Depends(database.get_db)):
    try:
        save_settings(db, values)
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected settings batch: {e}")
        raise HTTPException(status_code=400, detail="Settings values must be JSON-serializable")
    except SQLAlchemyError:
        raise server_error(db, logger, "updating settings")
    logger.info(f"Settings updated: {', '.join(sorted(values)) or 'nothing'}")
    return {"success": True, "message": "Settings updated successfully"}
