# vgosti/routes/upload.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from vgosti import auth, schemas
from vgosti.uploads import UploadRejected, store_image

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/upload",
    tags=["Upload"]
)


# Admin Only - Single Image Upload (multipart field "image")
@router.post("", response_model=schemas.UploadResponse, dependencies=[Depends(auth.verify_admin)])
def upload_image(image: Optional[UploadFile] = File(None)):
    try:
        image_url = store_image(image)
    except UploadRejected as e:
        logger.warning(f"Upload rejected: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except OSError:
        logger.error("Error uploading file", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"imageUrl": image_url}
