from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from datetime import date

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_user, get_current_partner
from salonbook.db.appointments import get_appointment_by_id, get_user_appointments, get_salon_appointments
from salonbook.db.salons import get_salon_by_id
from salonbook.db.salon_services import get_service
from salonbook.db.stylists import get_stylist_by_id
from salonbook.schemas.appointment import (
    AppointmentCreate, AppointmentResponse, AppointmentStatus, AppointmentStatusUpdate
)
from salonbook.services.appointment_service import create_appointment, change_appointment_status

router = APIRouter()

@router.post("/", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_in: AppointmentCreate,
    current_user: dict = Depends(get_current_user)
):
    """
    Book an appointment with a stylist.
    Returns 409 when the requested time is no longer free.
    """
    salon = await get_salon_by_id(appointment_in.salonId)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    service = await get_service(appointment_in.salonId, appointment_in.serviceId)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    
    stylist = await get_stylist_by_id(appointment_in.stylistId)
    if not stylist or stylist.get("salonId") != appointment_in.salonId:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    
    try:
        return await create_appointment(
            appointment_in,
            str(current_user["_id"]),
            service["duration"],
            stylist.get("serviceIds", [])
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.get("/me", response_model=List[AppointmentResponse])
async def get_my_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(get_current_user)
):
    """
    Get the current user's appointments, newest first
    """
    return await get_user_appointments(
        str(current_user["_id"]), status=status_filter, skip=skip, limit=limit
    )

@router.get("/salon/{salon_id}", response_model=List[AppointmentResponse])
async def get_appointments_for_salon(
    salon_id: str,
    appointment_date: Optional[date] = Query(None, alias="date"),
    stylist_id: Optional[str] = Query(None),
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: dict = Depends(get_current_partner)
):
    """
    Get the appointments of an owned salon for the schedule view
    """
    await get_owned_salon(salon_id, current_user)
    return await get_salon_appointments(
        salon_id,
        target_date=appointment_date,
        stylist_id=stylist_id,
        status=status_filter,
        skip=skip,
        limit=limit
    )

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: str,
    status_update: AppointmentStatusUpdate,
    current_user: dict = Depends(get_current_user)
):
    """
    Confirm, complete or cancel an appointment.
    Clients may only cancel their own appointments; the salon partner may
    make any allowed change.
    """
    appointment = await get_appointment_by_id(appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    
    user_id = str(current_user["_id"])
    salon = await get_salon_by_id(appointment["salonId"])
    is_salon_owner = salon is not None and salon.get("userId") == user_id
    
    if not is_salon_owner:
        if appointment["userId"] != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have access to this appointment"
            )
        if status_update.status != AppointmentStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Clients can only cancel appointments"
            )
    
    return await change_appointment_status(appointment, status_update.status, status_update.reason)
