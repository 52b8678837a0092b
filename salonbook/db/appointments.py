from typing import List, Dict, Any, Iterable, Optional
from datetime import date, datetime
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING
import logging

from salonbook.db.mongodb import get_collection, store_operation, serialize_id
from salonbook.schemas.appointment import AppointmentStatus, ACTIVE_STATUSES
from salonbook.schemas.availability import BookedInterval

logger = logging.getLogger(__name__)

def _status_values(statuses: Iterable[AppointmentStatus]) -> List[str]:
    return [AppointmentStatus(s).value for s in statuses]

def _to_object_id(appointment_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(appointment_id)
    except (InvalidId, TypeError):
        return None

@store_operation("get_booked_intervals")
async def get_booked_intervals(
    stylist_id: str,
    target_date: date,
    statuses: Iterable[AppointmentStatus] = ACTIVE_STATUSES
) -> List[BookedInterval]:
    """
    Get the booked time spans of a stylist on one calendar date,
    limited to appointments in the given statuses
    """
    cursor = get_collection("appointments").find(
        {
            "stylistId": stylist_id,
            "appointmentDate": target_date.isoformat(),
            "status": {"$in": _status_values(statuses)},
        },
        {"startTime": 1, "endTime": 1}
    ).sort("startTime", ASCENDING)
    documents = await cursor.to_list(length=None)
    
    intervals = []
    for doc in documents:
        try:
            intervals.append(BookedInterval(startTime=doc.get("startTime"), endTime=doc.get("endTime")))
        except ValidationError as e:
            logger.warning(f"Skipping appointment {doc.get('_id')} with unreadable times: {e}")
    
    return intervals

@store_operation("find_overlapping_appointments")
async def find_overlapping_appointments(
    stylist_id: str,
    target_date: date,
    start_time: str,
    end_time: str
) -> List[Dict[str, Any]]:
    """
    Get slot-blocking appointments of a stylist that intersect [start_time, end_time).
    HH:MM strings are zero-padded, so they compare in time order.
    """
    cursor = get_collection("appointments").find({
        "stylistId": stylist_id,
        "appointmentDate": target_date.isoformat(),
        "blocksSlot": True,
        "startTime": {"$lt": end_time},
        "endTime": {"$gt": start_time},
    })
    appointments = await cursor.to_list(length=None)
    return [serialize_id(a) for a in appointments]

@store_operation("insert_appointment")
async def insert_appointment(appointment_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert an appointment. A DuplicateKeyError from the unique active-start
    index is left to the caller.
    """
    appointment_data = dict(appointment_data)
    appointment_data["blocksSlot"] = appointment_data["status"] in _status_values(ACTIVE_STATUSES)
    
    collection = get_collection("appointments")
    result = await collection.insert_one(appointment_data)
    
    created = await collection.find_one({"_id": result.inserted_id})
    return serialize_id(created)

@store_operation("get_appointment_by_id")
async def get_appointment_by_id(appointment_id: str) -> Optional[Dict[str, Any]]:
    object_id = _to_object_id(appointment_id)
    if object_id is None:
        return None
    appointment = await get_collection("appointments").find_one({"_id": object_id})
    return serialize_id(appointment)

@store_operation("update_appointment_status")
async def update_appointment_status(
    appointment_id: str,
    expected_status: AppointmentStatus,
    new_status: AppointmentStatus,
    extra: Optional[Dict[str, Any]] = None
) -> Optional[Dict[str, Any]]:
    """
    Move an appointment from expected_status to new_status.
    Returns None when the appointment is no longer in expected_status.
    """
    object_id = _to_object_id(appointment_id)
    if object_id is None:
        return None
    
    update_data = dict(extra or {})
    update_data["status"] = new_status.value
    update_data["blocksSlot"] = new_status in ACTIVE_STATUSES
    update_data["updatedAt"] = datetime.utcnow()
    
    collection = get_collection("appointments")
    result = await collection.update_one(
        {"_id": object_id, "status": expected_status.value},
        {"$set": update_data}
    )
    if result.matched_count == 0:
        return None
    
    updated = await collection.find_one({"_id": object_id})
    return serialize_id(updated)

@store_operation("get_user_appointments")
async def get_user_appointments(
    user_id: str,
    status: Optional[AppointmentStatus] = None,
    skip: int = 0,
    limit: int = 20
) -> List[Dict[str, Any]]:
    """
    Get appointments booked by a user, newest date first
    """
    query = {"userId": user_id}
    if status:
        query["status"] = status.value
    
    cursor = get_collection("appointments").find(query)\
        .sort([("appointmentDate", DESCENDING), ("startTime", DESCENDING)])\
        .skip(skip)\
        .limit(limit)
    appointments = await cursor.to_list(length=limit)
    return [serialize_id(a) for a in appointments]

@store_operation("get_salon_appointments")
async def get_salon_appointments(
    salon_id: str,
    target_date: Optional[date] = None,
    stylist_id: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Dict[str, Any]]:
    """
    Get appointments of a salon for the partner schedule view
    """
    query = {"salonId": salon_id}
    if target_date:
        query["appointmentDate"] = target_date.isoformat()
    if stylist_id:
        query["stylistId"] = stylist_id
    if status:
        query["status"] = status.value
    
    cursor = get_collection("appointments").find(query)\
        .sort([("appointmentDate", ASCENDING), ("startTime", ASCENDING)])\
        .skip(skip)\
        .limit(limit)
    appointments = await cursor.to_list(length=limit)
    return [serialize_id(a) for a in appointments]

@store_operation("cancel_stylist_appointments")
async def cancel_stylist_appointments(stylist_id: str, reason: str) -> int:
    """
    Cancel every pending or confirmed appointment of a stylist, releasing the
    held time. Returns the number of appointments cancelled.
    """
    result = await get_collection("appointments").update_many(
        {"stylistId": stylist_id, "status": {"$in": _status_values(ACTIVE_STATUSES)}},
        {"$set": {
            "status": AppointmentStatus.CANCELLED.value,
            "blocksSlot": False,
            "cancellationReason": reason,
            "updatedAt": datetime.utcnow(),
        }}
    )
    return result.modified_count
