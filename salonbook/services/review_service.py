from typing import Dict, Any

from salonbook.db import reviews as reviews_db
from salonbook.db import salons as salons_db
from salonbook.schemas.review import ReviewCreate

async def submit_review(salon_id: str, user_id: str, review_in: ReviewCreate) -> Dict[str, Any]:
    """
    Create or update the caller's review of a salon and refresh the salon rating
    """
    review = await reviews_db.upsert_review(salon_id, user_id, review_in.rating, review_in.comment)
    await update_salon_rating(salon_id)
    return review

async def update_salon_rating(salon_id: str) -> None:
    """
    Calculate and store the average rating and review count of a salon
    """
    summary = await reviews_db.get_salon_rating_and_review_count(salon_id)
    await salons_db.update_salon_rating(salon_id, summary["rating"], summary["reviewCount"])
