from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_partner
from salonbook.db.salons import get_salon_by_id
from salonbook.db.service_groups import get_salon_service_groups, add_service_group, update_service_group
from salonbook.schemas.service_group import ServiceGroupCreate, ServiceGroupUpdate, ServiceGroupResponse
from salonbook.services.salon_service import delete_empty_service_group

router = APIRouter()

@router.get("/{salon_id}/service-groups", response_model=List[ServiceGroupResponse])
async def get_service_groups_by_salon(salon_id: str):
    """
    Get the sections a salon groups its services into
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await get_salon_service_groups(salon_id)

@router.post("/{salon_id}/service-groups", response_model=ServiceGroupResponse, status_code=status.HTTP_201_CREATED)
async def add_salon_service_group(
    salon_id: str,
    group_in: ServiceGroupCreate,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    return await add_service_group(salon_id, group_in.model_dump())

@router.put("/{salon_id}/service-groups/{group_id}", response_model=ServiceGroupResponse)
async def update_salon_service_group(
    salon_id: str,
    group_id: str,
    group_update: ServiceGroupUpdate,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    updated = await update_service_group(salon_id, group_id, group_update.model_dump(exclude_unset=True))
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service group not found"
        )
    return updated

@router.delete("/{salon_id}/service-groups/{group_id}", response_model=Dict[str, Any])
async def delete_salon_service_group(
    salon_id: str,
    group_id: str,
    current_user: dict = Depends(get_current_partner)
):
    """
    Delete a service group; it must not contain any services
    """
    await get_owned_salon(salon_id, current_user)
    
    try:
        deleted = await delete_empty_service_group(salon_id, group_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service group not found"
        )
    return {"message": "Service group deleted successfully"}
