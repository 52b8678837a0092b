from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_partner
from salonbook.db.salons import get_salon_by_id
from salonbook.db.stylists import get_salon_stylists, add_stylist, update_stylist
from salonbook.schemas.stylist import StylistCreate, StylistUpdate, StylistResponse
from salonbook.services.salon_service import check_stylist_services, delete_stylist_with_schedule

router = APIRouter()

@router.get("/{salon_id}/stylists", response_model=List[StylistResponse])
async def get_stylists_by_salon(salon_id: str):
    """
    Get the stylists working at a salon
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await get_salon_stylists(salon_id)

@router.post("/{salon_id}/stylists", response_model=StylistResponse, status_code=status.HTTP_201_CREATED)
async def add_salon_stylist(
    salon_id: str,
    stylist_in: StylistCreate,
    current_user: dict = Depends(get_current_partner)
):
    """
    Add a stylist; serviceIds must be services of the same salon
    """
    await get_owned_salon(salon_id, current_user)
    
    stylist_data = stylist_in.model_dump()
    try:
        stylist_data["serviceIds"] = await check_stylist_services(salon_id, stylist_data["serviceIds"])
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    return await add_stylist(salon_id, stylist_data)

@router.put("/{salon_id}/stylists/{stylist_id}", response_model=StylistResponse)
async def update_salon_stylist(
    salon_id: str,
    stylist_id: str,
    stylist_update: StylistUpdate,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    update_data = stylist_update.model_dump(exclude_unset=True)
    if "serviceIds" in update_data:
        try:
            update_data["serviceIds"] = await check_stylist_services(salon_id, update_data["serviceIds"])
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )
    
    updated = await update_stylist(salon_id, stylist_id, update_data)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    return updated

@router.delete("/{salon_id}/stylists/{stylist_id}", response_model=Dict[str, Any])
async def delete_salon_stylist(
    salon_id: str,
    stylist_id: str,
    current_user: dict = Depends(get_current_partner)
):
    """
    Remove a stylist and the stylist's weekly schedule
    """
    await get_owned_salon(salon_id, current_user)
    
    success = await delete_stylist_with_schedule(salon_id, stylist_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    return {"message": "Stylist removed successfully"}
