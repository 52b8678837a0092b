from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List

from salonbook.core.auth import get_current_user
from salonbook.db.salons import get_salon_by_id
from salonbook.db.reviews import get_salon_reviews
from salonbook.schemas.review import ReviewCreate, ReviewResponse
from salonbook.services.review_service import submit_review

router = APIRouter()

@router.get("/{salon_id}/reviews", response_model=List[ReviewResponse])
async def list_salon_reviews(
    salon_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100)
):
    """
    Get reviews of a salon, newest first
    
    - **skip**: Number of records to skip for pagination
    - **limit**: Maximum number of records to return (1-100)
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await get_salon_reviews(salon_id, skip=skip, limit=limit)

@router.post("/{salon_id}/reviews", response_model=ReviewResponse)
async def review_salon(
    salon_id: str,
    review_in: ReviewCreate,
    current_user: dict = Depends(get_current_user)
):
    """
    Review a salon; posting again replaces the caller's earlier review
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await submit_review(salon_id, str(current_user["_id"]), review_in)
