from typing import List, Dict, Any, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
import re

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

def _to_object_id(salon_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(salon_id)
    except (InvalidId, TypeError):
        return None

@store_operation("create_salon")
async def create_salon(user_id: str, salon_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a salon owned by a partner
    """
    salon_data = dict(salon_data)
    salon_data["userId"] = user_id
    salon_data["rating"] = 0
    salon_data["reviewsCount"] = 0
    salon_data["createdAt"] = datetime.utcnow()
    
    collection = get_collection("salons")
    result = await collection.insert_one(salon_data)
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("get_salon_by_id")
async def get_salon_by_id(salon_id: str) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(salon_id)
    if object_id is None:
        return None
    salon = await get_collection("salons").find_one({"_id": object_id})
    return serialize_id(salon)

@store_operation("get_salon_by_user_id")
async def get_salon_by_user_id(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get the salon owned by a partner
    """
    salon = await get_collection("salons").find_one({"userId": user_id})
    return serialize_id(salon)

@store_operation("find_salons")
async def find_salons(
    city: Optional[str] = None,
    salon_ids: Optional[List[str]] = None,
    skip: int = 0,
    limit: int = 20
) -> List[Dict[str, Any]]:
    """
    Get salons, optionally filtered by a partial city match and a set of ids
    """
    query: Dict[str, Any] = {}
    
    # Location filtering - case insensitive partial match
    if city is not None and city.strip():
        query["city"] = {"$regex": re.escape(city.strip()), "$options": "i"}
    
    if salon_ids is not None:
        object_ids = [oid for oid in (_to_object_id(s) for s in salon_ids) if oid is not None]
        query["_id"] = {"$in": object_ids}
    
    cursor = get_collection("salons").find(query).sort("rating", DESCENDING).skip(skip).limit(limit)
    salons = await cursor.to_list(length=limit)
    return [serialize_id(s) for s in salons]

@store_operation("update_salon")
async def update_salon(salon_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(salon_id)
    if object_id is None:
        return None
    
    if update_data:
        update_data = dict(update_data)
        update_data["updatedAt"] = datetime.utcnow()
        await get_collection("salons").update_one({"_id": object_id}, {"$set": update_data})
    
    return await get_salon_by_id(salon_id)

@store_operation("update_salon_rating")
async def update_salon_rating(salon_id: str, rating: float, reviews_count: int) -> None:
    object_id = _to_object_id(salon_id)
    if object_id is None:
        return
    await get_collection("salons").update_one(
        {"_id": object_id},
        {"$set": {"rating": rating, "reviewsCount": reviews_count}}
    )

@store_operation("delete_salon")
async def delete_salon(salon_id: str) -> bool:
    object_id = _to_object_id(salon_id)
    if object_id is None:
        return False
    result = await get_collection("salons").delete_one({"_id": object_id})
    return result.deleted_count > 0
