from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional, Dict, Any

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_partner
from salonbook.db.salons import create_salon, get_salon_by_id, get_salon_by_user_id, update_salon
from salonbook.schemas.salon import SalonCreate, SalonUpdate, SalonResponse
from salonbook.services.salon_service import search_salons, delete_salon_with_children

router = APIRouter()

@router.get("/", response_model=List[SalonResponse])
async def list_salons(
    location: Optional[str] = Query(None, description="Partial city name"),
    service: Optional[str] = Query(None, description="Partial service name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100)
):
    """
    Search salons by city and offered service
    """
    return await search_salons(location=location, service=service, skip=skip, limit=limit)

@router.post("/", response_model=SalonResponse, status_code=status.HTTP_201_CREATED)
async def create_salon_profile(
    salon_in: SalonCreate,
    current_user: dict = Depends(get_current_partner)
):
    """
    Create the salon of the current partner
    """
    existing_salon = await get_salon_by_user_id(str(current_user["_id"]))
    if existing_salon:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Salon already exists for this partner"
        )
    
    return await create_salon(str(current_user["_id"]), salon_in.model_dump())

@router.get("/me", response_model=SalonResponse)
async def get_my_salon(current_user: dict = Depends(get_current_partner)):
    """
    Get the salon of the current partner
    """
    salon = await get_salon_by_user_id(str(current_user["_id"]))
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    return salon

@router.get("/{salon_id}", response_model=SalonResponse)
async def get_salon(salon_id: str):
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    return salon

@router.put("/{salon_id}", response_model=SalonResponse)
async def update_salon_profile(
    salon_id: str,
    salon_update: SalonUpdate,
    current_user: dict = Depends(get_current_partner)
):
    """
    Update the details of an owned salon
    """
    await get_owned_salon(salon_id, current_user)
    return await update_salon(salon_id, salon_update.model_dump(exclude_unset=True))

@router.delete("/{salon_id}", response_model=Dict[str, Any])
async def delete_salon_profile(
    salon_id: str,
    current_user: dict = Depends(get_current_partner)
):
    """
    Delete an owned salon with its services, stylists and reviews
    """
    await get_owned_salon(salon_id, current_user)
    
    deleted = await delete_salon_with_children(salon_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    return {"message": "Salon deleted successfully"}
