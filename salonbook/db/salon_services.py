from typing import List, Dict, Any, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING
import re

from salonbook.db.mongodb import get_collection, store_operation, serialize_id

def _to_object_id(service_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(service_id)
    except (InvalidId, TypeError):
        return None

@store_operation("get_salon_services")
async def get_salon_services(salon_id: str) -> List[Dict[str, Any]]:
    """
    Get all services offered by a salon
    """
    cursor = get_collection("services").find({"salonId": salon_id}).sort("name", ASCENDING)
    services = await cursor.to_list(length=None)
    return [serialize_id(s) for s in services]

@store_operation("get_service")
async def get_service(salon_id: str, service_id: str) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(service_id)
    if object_id is None:
        return None
    service = await get_collection("services").find_one({"_id": object_id, "salonId": salon_id})
    return serialize_id(service)

@store_operation("find_salon_ids_by_service_name")
async def find_salon_ids_by_service_name(name: str) -> List[str]:
    """
    Get ids of salons offering a service whose name contains `name`, ignoring case
    """
    salon_ids = await get_collection("services").distinct(
        "salonId", {"name": {"$regex": re.escape(name.strip()), "$options": "i"}}
    )
    return [str(s) for s in salon_ids]

@store_operation("add_service")
async def add_service(salon_id: str, service_data: Dict[str, Any]) -> Dict[str, Any]:
    service = dict(service_data)
    service["salonId"] = salon_id
    service["createdAt"] = datetime.utcnow()
    
    collection = get_collection("services")
    result = await collection.insert_one(service)
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("update_service")
async def update_service(salon_id: str, service_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(service_id)
    if object_id is None:
        return None
    
    update_data = dict(update_data)
    update_data["updatedAt"] = datetime.utcnow()
    result = await get_collection("services").update_one(
        {"_id": object_id, "salonId": salon_id},
        {"$set": update_data}
    )
    if result.matched_count == 0:
        return None
    return await get_service(salon_id, service_id)

@store_operation("remove_service")
async def remove_service(salon_id: str, service_id: str) -> bool:
    object_id = _to_object_id(service_id)
    if object_id is None:
        return False
    result = await get_collection("services").delete_one({"_id": object_id, "salonId": salon_id})
    return result.deleted_count > 0

@store_operation("remove_salon_services")
async def remove_salon_services(salon_id: str) -> int:
    result = await get_collection("services").delete_many({"salonId": salon_id})
    return result.deleted_count

@store_operation("find_salon_service_ids")
async def find_salon_service_ids(salon_id: str, service_ids: List[str]) -> List[str]:
    """
    Get which of the given service ids belong to a salon
    """
    object_ids = [oid for oid in (_to_object_id(s) for s in service_ids) if oid is not None]
    if not object_ids:
        return []
    cursor = get_collection("services").find({"_id": {"$in": object_ids}, "salonId": salon_id}, {"_id": 1})
    services = await cursor.to_list(length=None)
    return [str(s["_id"]) for s in services]

@store_operation("count_group_services")
async def count_group_services(salon_id: str, group_id: str) -> int:
    return await get_collection("services").count_documents({"salonId": salon_id, "groupId": group_id})
