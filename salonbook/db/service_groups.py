from typing import List, Dict, Any, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

def _to_object_id(group_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(group_id)
    except (InvalidId, TypeError):
        return None

@store_operation("get_salon_service_groups")
async def get_salon_service_groups(salon_id: str) -> List[Dict[str, Any]]:
    """
    Get the service groups (menu sections) of a salon
    """
    cursor = get_collection("service_groups").find({"salonId": salon_id}).sort("name", ASCENDING)
    groups = await cursor.to_list(length=None)
    return [serialize_id(g) for g in groups]

@store_operation("get_service_group")
async def get_service_group(salon_id: str, group_id: str) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(group_id)
    if object_id is None:
        return None
    group = await get_collection("service_groups").find_one({"_id": object_id, "salonId": salon_id})
    return serialize_id(group)

@store_operation("add_service_group")
async def add_service_group(salon_id: str, group_data: Dict[str, Any]) -> Dict[str, Any]:
    group = dict(group_data)
    group["salonId"] = salon_id
    group["createdAt"] = datetime.utcnow()
    
    collection = get_collection("service_groups")
    result = await collection.insert_one(group)
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("update_service_group")
async def update_service_group(salon_id: str, group_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(group_id)
    if object_id is None:
        return None
    
    update_data = dict(update_data)
    update_data["updatedAt"] = datetime.utcnow()
    result = await get_collection("service_groups").update_one(
        {"_id": object_id, "salonId": salon_id},
        {"$set": update_data}
    )
    if result.matched_count == 0:
        return None
    return await get_service_group(salon_id, group_id)

@store_operation("remove_service_group")
async def remove_service_group(salon_id: str, group_id: str) -> bool:
    object_id = _to_object_id(group_id)
    if object_id is None:
        return False
    result = await get_collection("service_groups").delete_one({"_id": object_id, "salonId": salon_id})
    return result.deleted_count > 0

@store_operation("remove_salon_service_groups")
async def remove_salon_service_groups(salon_id: str) -> int:
    result = await get_collection("service_groups").delete_many({"salonId": salon_id})
    return result.deleted_count
