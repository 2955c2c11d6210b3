# vgosti/routes/reviews.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vgosti import auth, crud, database, schemas
from vgosti.rate_limiting import limiter, REVIEW_LIMIT
from vgosti.routes import server_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reviews"])


# Public - Approved Reviews Only
@router.get("/api/reviews", response_model=List[schemas.ReviewOut])
def list_reviews(db: Session = Depends(database.get_db)):
    try:
        return crud.list_reviews(db, approved_only=True)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching reviews")

# Public - Submit a Review (held for moderation)
@router.post("/api/reviews", response_model=schemas.ReviewOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(REVIEW_LIMIT)
def create_review(request: Request, review: schemas.ReviewCreate, db: Session = Depends(database.get_db)):
    try:
        new_review = crud.create_review(db, review)
    except SQLAlchemyError:
        raise server_error(db, logger, "creating review")
    logger.info(f"Review {new_review.id} submitted for moderation")
    return new_review

# Admin Only - Every Review, Pending Included
@router.get("/api/admin/reviews", response_model=List[schemas.AdminReviewOut],
            dependencies=[Depends(auth.verify_admin)])
def list_all_reviews(db: Session = Depends(database.get_db)):
    try:
        return crud.list_reviews(db, approved_only=False)
    except SQLAlchemyError:
        raise server_error(db, logger, "fetching reviews")

# Admin Only - Approve
@router.put("/api/admin/reviews/{review_id}/approve", response_model=schemas.AdminReviewOut,
            dependencies=[Depends(auth.verify_admin)])
def approve_review(review_id: str, db: Session = Depends(database.get_db)):
    try:
        review = crud.approve_review(db, review_id)
    except SQLAlchemyError:
        raise server_error(db, logger, "approving review")
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    logger.info(f"Review {review.id} approved")
    return review

# Admin Only - Delete
@router.delete("/api/admin/reviews/{review_id}", dependencies=[Depends(auth.verify_admin)])
def delete_review(review_id: str, db: Session = Depends(database.get_db)):
    try:
        deleted = crud.delete_review(db, review_id)
    except SQLAlchemyError:
        raise server_error(db, logger, "deleting review")
    if not deleted:
        raise HTTPException(status_code=404, detail="Review not found")
    logger.info(f"Review {review_id} deleted")
    return {"message": "Review deleted successfully"}
