from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from typing import List, Dict, Any
from datetime import date

from salonbook.api.deps import get_owned_stylist
from salonbook.core.auth import get_current_partner
from salonbook.db.availability import (
    get_stylist_availability, upsert_availability_rule, delete_availability_rule
)
from salonbook.db.stylists import get_stylist_by_id
from salonbook.schemas.availability import (
    AvailabilityRuleResponse, AvailabilityRuleUpdate, TimeSlotsResponse, SlotsStatus
)
from salonbook.services.availability_service import get_available_time_slots, day_of_week

router = APIRouter()

@router.get("/stylists/{stylist_id}/slots", response_model=TimeSlotsResponse)
async def get_stylist_time_slots(
    stylist_id: str,
    slot_date: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
    include_unavailable: bool = Query(False, description="Also list booked slots with available=false")
):
    """
    Get the bookable time slots of a stylist on a date.

    An empty list means no availability that day. A store failure returns
    503 and should be retried rather than shown as fully booked.
    """
    stylist = await get_stylist_by_id(stylist_id)
    if not stylist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    
    slots = await get_available_time_slots(
        stylist_id, slot_date, include_unavailable=include_unavailable
    )
    
    has_free_slot = any(slot.available for slot in slots)
    return {
        "stylistId": stylist_id,
        "date": slot_date,
        "dayOfWeek": day_of_week(slot_date),
        "status": SlotsStatus.AVAILABLE if has_free_slot else SlotsStatus.EMPTY,
        "slots": slots,
    }

@router.get("/stylists/{stylist_id}", response_model=List[AvailabilityRuleResponse])
async def get_stylist_weekly_availability(stylist_id: str):
    """
    Get a stylist's weekly availability rules, Sunday (0) first
    """
    stylist = await get_stylist_by_id(stylist_id)
    if not stylist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    
    return await get_stylist_availability(stylist_id)

@router.put("/stylists/{stylist_id}/days/{day}", response_model=AvailabilityRuleResponse)
async def update_stylist_day_availability(
    rule_in: AvailabilityRuleUpdate,
    stylist_id: str,
    day: int = Path(..., ge=0, le=6, description="Day of week, 0 = Sunday"),
    current_user: dict = Depends(get_current_partner)
):
    """
    Set the working window of a stylist for one weekday
    """
    await get_owned_stylist(stylist_id, current_user)
    return await upsert_availability_rule(stylist_id, day, rule_in.model_dump())

@router.delete("/stylists/{stylist_id}/days/{day}", response_model=Dict[str, Any])
async def delete_stylist_day_availability(
    stylist_id: str,
    day: int = Path(..., ge=0, le=6, description="Day of week, 0 = Sunday"),
    current_user: dict = Depends(get_current_partner)
):
    """
    Remove the working window of a stylist for one weekday
    """
    await get_owned_stylist(stylist_id, current_user)
    
    deleted = await delete_availability_rule(stylist_id, day)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No availability set for this day"
        )
    return {"message": "Availability removed successfully"}
