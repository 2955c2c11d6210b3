# vgosti/routes/cabins.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import auth, crud, database, schemas
from vgosti.routes import server_error

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cabins",
    tags=["Cabins"]
)


# Public - List All Cabins (newest first)
@router.get("", response_model=List[schemas.CabinOut])
def list_cabins(featured: Optional[bool] = None, db: Session = Depends(database.get_db)):
    try:
        cabins = crud.list_cabins(db, featured=featured)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching cabins")
    return [schemas.CabinOut.from_model(c) for c in cabins]

# Public - Get One Cabin
@router.get("/{cabin_id}", response_model=schemas.CabinOut)
def get_cabin(cabin_id: str, db: Session = Depends(database.get_db)):
    try:
        cabin = crud.get_cabin(db, cabin_id)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching cabin")
    if not cabin:
        raise HTTPException(status_code=404, detail="Cabin not found")
    return schemas.CabinOut.from_model(cabin)

# Admin Only - Create a Cabin
@router.post("", response_model=schemas.CabinOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(auth.verify_admin)])
def create_cabin(cabin: schemas.CabinCreate, db: Session = Depends(database.get_db)):
    try:
        new_cabin = crud.create_cabin(db, cabin)
    except SQLAlchemyError:
        raise server_error(db, logger, "creating cabin")
    logger.info(f"Cabin {new_cabin.id} created: {new_cabin.name}")
    return schemas.CabinOut.from_model(new_cabin)

# Admin Only - Replace a Cabin
@router.put("/{cabin_id}", response_model=schemas.CabinOut, dependencies=[Depends(auth.verify_admin)])
def update_cabin(cabin_id: str, cabin: schemas.CabinCreate, db: Session = Depends(database.get_db)):
    try:
        updated = crud.update_cabin(db, cabin_id, cabin)
    except SQLAlchemyError:
        raise server_error(db, logger, "updating cabin")
    if not updated:
        raise HTTPException(status_code=404, detail="Cabin not found")
    logger.info(f"Cabin {updated.id} updated")
    return schemas.CabinOut.from_model(updated)

# Admin Only - Delete a Cabin
@router.delete("/{cabin_id}", dependencies=[Depends(auth.verify_admin)])
def delete_cabin(cabin_id: str, db: Session = Depends(database.get_db)):
    try:
        deleted = crud.delete_cabin(db, cabin_id)
    except SQLAlchemyError:
        raise server_error(db, logger, "deleting cabin")
    if not deleted:
        raise HTTPException(status_code=404, detail="Cabin not found")
    logger.info(f"Cabin {cabin_id} deleted")
    return {"message": "Cabin deleted successfully"}
