from typing import List, Dict, Any
from datetime import datetime
from pymongo import DESCENDING, ReturnDocument

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

@store_operation("upsert_review")
async def upsert_review(salon_id: str, user_id: str, rating: int, comment: str) -> Dict[str, Any]:
    """
    Create the review of a user for a salon, or update it if one exists
    """
    now = datetime.utcnow()
    review = await get_collection("reviews").find_one_and_update(
        {"salonId": salon_id, "userId": user_id},
        {
            "$set": {"rating": rating, "comment": comment, "updatedAt": now},
            "$setOnInsert": {"createdAt": now},
        },
        upsert=True,
        return_document=ReturnDocument.AFTER
    )
    return serialize_id(review)

@store_operation("get_salon_reviews")
async def get_salon_reviews(salon_id: str, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
    """
    Get reviews of a salon, newest first
    """
    cursor = get_collection("reviews").find({"salonId": salon_id})\
                                     .sort("createdAt", DESCENDING)\
                                     .skip(skip)\
                                     .limit(limit)
    reviews = await cursor.to_list(length=limit)
    return [serialize_id(r) for r in reviews]

@store_operation("get_salon_rating_and_review_count")
async def get_salon_rating_and_review_count(salon_id: str) -> Dict[str, Any]:
    """
    Get the average rating and review count of a salon
    """
    pipeline = [
        {"$match": {"salonId": salon_id}},
        {"$group": {
            "_id": "$salonId",
            "averageRating": {"$avg": "$rating"},
            "reviewCount": {"$sum": 1}
        }}
    ]
    result = await get_collection("reviews").aggregate(pipeline).to_list(length=1)
    
    if result:
        return {
            "salonId": salon_id,
            "rating": round(float(result[0]["averageRating"]), 1),
            "reviewCount": result[0]["reviewCount"]
        }
    return {"salonId": salon_id, "rating": 0.0, "reviewCount": 0}

@store_operation("remove_salon_reviews")
async def remove_salon_reviews(salon_id: str) -> int:
    result = await get_collection("reviews").delete_many({"salonId": salon_id})
    return result.deleted_count
