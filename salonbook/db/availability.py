from typing import List, Dict, Any, Optional
from datetime import datetime
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError
import logging

from salonbook.db.mongodb import get_collection, store_operation, serialize_id
from salonbook.schemas.availability import AvailabilityRule, DAY_NAMES

logger = logging.getLogger(__name__)

@store_operation("get_availability_rule")
async def get_availability_rule(stylist_id: str, day_of_week: int) -> Optional[AvailabilityRule]:
    """
    Get the active weekly rule of a stylist for one weekday (0 = Sunday).

    The unique index allows a single rule per weekday; if older data still
    holds duplicates the most recently updated active rule wins.
    """
    cursor = get_collection("availability").find(
        {"stylistId": stylist_id, "dayOfWeek": day_of_week, "isAvailable": True}
    ).sort("updatedAt", DESCENDING).limit(2)
    rules = await cursor.to_list(length=2)
    
    if not rules:
        return None
    
    if len(rules) > 1:
        logger.warning(
            f"Duplicate availability rules for stylist {stylist_id} on day {day_of_week}, "
            f"using most recently updated {rules[0].get('_id')}"
        )
    
    try:
        return AvailabilityRule(**{k: v for k, v in rules[0].items() if k != "_id"})
    except ValidationError as e:
        logger.warning(f"Unreadable availability rule {rules[0].get('_id')} for stylist {stylist_id}: {e}")
        return None

@store_operation("get_stylist_availability")
async def get_stylist_availability(stylist_id: str) -> List[Dict[str, Any]]:
    """
    Get all weekly rules of a stylist ordered by weekday
    """
    cursor = get_collection("availability").find({"stylistId": stylist_id}).sort("dayOfWeek", ASCENDING)
    rules = await cursor.to_list(length=None)
    
    for rule in rules:
        serialize_id(rule)
        rule["dayName"] = DAY_NAMES[rule["dayOfWeek"]]
    
    return rules

@store_operation("upsert_availability_rule")
async def upsert_availability_rule(stylist_id: str, day_of_week: int, rule_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create or replace the rule of a stylist for one weekday
    """
    now = datetime.utcnow()
    collection = get_collection("availability")
    selector = {"stylistId": stylist_id, "dayOfWeek": day_of_week}
    update = {
        "$set": {**rule_data, "updatedAt": now},
        "$setOnInsert": {"createdAt": now},
    }
    
    try:
        await collection.update_one(selector, update, upsert=True)
    except DuplicateKeyError:
        # A concurrent upsert inserted the rule first; this attempt now matches it
        logger.info(f"Retrying availability upsert for stylist {stylist_id} on day {day_of_week}")
        await collection.update_one(selector, update, upsert=True)
    
    rule = await collection.find_one(selector)
    serialize_id(rule)
    rule["dayName"] = DAY_NAMES[day_of_week]
    return rule

@store_operation("delete_availability_rule")
async def delete_availability_rule(stylist_id: str, day_of_week: int) -> bool:
    """Remove the rule of a stylist for one weekday"""
    result = await get_collection("availability").delete_one(
        {"stylistId": stylist_id, "dayOfWeek": day_of_week}
    )
    return result.deleted_count > 0

@store_operation("delete_stylist_availability")
async def delete_stylist_availability(stylist_id: str) -> int:
    result = await get_collection("availability").delete_many({"stylistId": stylist_id})
    return result.deleted_count
