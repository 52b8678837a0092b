from typing import List, Dict, Any, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

def _to_object_id(stylist_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(stylist_id)
    except (InvalidId, TypeError):
        return None

@store_operation("get_salon_stylists")
async def get_salon_stylists(salon_id: str) -> List[Dict[str, Any]]:
    """
    Get all stylists working at a salon
    """
    cursor = get_collection("stylists").find({"salonId": salon_id}).sort("name", ASCENDING)
    stylists = await cursor.to_list(length=None)
    return [serialize_id(s) for s in stylists]

@store_operation("get_stylist_by_id")
async def get_stylist_by_id(stylist_id: str) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(stylist_id)
    if object_id is None:
        return None
    stylist = await get_collection("stylists").find_one({"_id": object_id})
    return serialize_id(stylist)

@store_operation("add_stylist")
async def add_stylist(salon_id: str, stylist_data: Dict[str, Any]) -> Dict[str, Any]:
    stylist = dict(stylist_data)
    stylist["salonId"] = salon_id
    stylist["createdAt"] = datetime.utcnow()
    
    collection = get_collection("stylists")
    result = await collection.insert_one(stylist)
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("update_stylist")
async def update_stylist(salon_id: str, stylist_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(stylist_id)
    if object_id is None:
        return None
    
    update_data = dict(update_data)
    update_data["updatedAt"] = datetime.utcnow()
    result = await get_collection("stylists").update_one(
        {"_id": object_id, "salonId": salon_id},
        {"$set": update_data}
    )
    if result.matched_count == 0:
        return None
    return await get_stylist_by_id(stylist_id)

@store_operation("remove_stylist")
async def remove_stylist(salon_id: str, stylist_id: str) -> bool:
    object_id = _to_object_id(stylist_id)
    if object_id is None:
        return False
    result = await get_collection("stylists").delete_one({"_id": object_id, "salonId": salon_id})
    return result.deleted_count > 0

@store_operation("remove_salon_stylists")
async def remove_salon_stylists(salon_id: str) -> List[str]:
    """
    Remove every stylist of a salon, returning the removed ids
    """
    collection = get_collection("stylists")
    stylist_ids = [str(s["_id"]) for s in await collection.find({"salonId": salon_id}, {"_id": 1}).to_list(length=None)]
    await collection.delete_many({"salonId": salon_id})
    return stylist_ids

@store_operation("remove_service_from_stylists")
async def remove_service_from_stylists(salon_id: str, service_id: str) -> int:
    """
    Unassign a service from every stylist of a salon
    """
    result = await get_collection("stylists").update_many(
        {"salonId": salon_id, "serviceIds": service_id},
        {"$pull": {"serviceIds": service_id}}
    )
    return result.modified_count
