from typing import List, Dict, Any, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

def _to_object_id(image_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(image_id)
    except (InvalidId, TypeError):
        return None

@store_operation("get_salon_images")
async def get_salon_images(salon_id: str) -> List[Dict[str, Any]]:
    """
    Get the gallery of a salon, primary image first, then in upload order
    """
    cursor = get_collection("salon_images").find({"salonId": salon_id})\
        .sort([("isPrimary", DESCENDING), ("createdAt", ASCENDING)])
    images = await cursor.to_list(length=None)
    return [serialize_id(i) for i in images]

@store_operation("add_salon_image")
async def add_salon_image(salon_id: str, image_url: str, is_primary: bool = False) -> Dict[str, Any]:
    """
    Record an uploaded image in the gallery. Adding a primary image demotes
    the previous one.
    """
    collection = get_collection("salon_images")
    if is_primary:
        await collection.update_many({"salonId": salon_id}, {"$set": {"isPrimary": False}})
    
    result = await collection.insert_one({
        "salonId": salon_id,
        "imageUrl": image_url,
        "isPrimary": is_primary,
        "createdAt": datetime.utcnow(),
    })
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("set_primary_image")
async def set_primary_image(salon_id: str, image_id: str) -> Optional[Dict[str, Any]]:
    """
    Make one image the salon's only primary image.
    Returns None when the image is not in the salon's gallery.
    """
    object_id = _to_object_id(image_id)
    if object_id is None:
        return None
    
    collection = get_collection("salon_images")
    image = await collection.find_one({"_id": object_id, "salonId": salon_id})
    if image is None:
        return None
    
    await collection.update_many(
        {"salonId": salon_id, "_id": {"$ne": object_id}},
        {"$set": {"isPrimary": False}}
    )
    await collection.update_one({"_id": object_id}, {"$set": {"isPrimary": True}})
    
    updated = await collection.find_one({"_id": object_id})
    return serialize_id(updated)

@store_operation("delete_salon_image")
async def delete_salon_image(salon_id: str, image_id: str) -> bool:
    object_id = _to_object_id(image_id)
    if object_id is None:
        return False
    result = await get_collection("salon_images").delete_one({"_id": object_id, "salonId": salon_id})
    return result.deleted_count > 0

@store_operation("remove_salon_images")
async def remove_salon_images(salon_id: str) -> int:
    result = await get_collection("salon_images").delete_many({"salonId": salon_id})
    return result.deleted_count
