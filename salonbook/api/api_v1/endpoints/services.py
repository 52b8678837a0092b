from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_partner
from salonbook.db.salons import get_salon_by_id
from salonbook.db.salon_services import get_salon_services, add_service, update_service
from salonbook.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse
from salonbook.services.salon_service import check_service_group, delete_service_with_assignments

router = APIRouter()

@router.get("/{salon_id}/services", response_model=List[ServiceResponse])
async def get_services_by_salon(salon_id: str):
    """
    Get all services offered by a salon
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await get_salon_services(salon_id)

@router.post("/{salon_id}/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def add_salon_service(
    salon_id: str,
    service: ServiceCreate,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    try:
        await check_service_group(salon_id, service.groupId)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    return await add_service(salon_id, service.model_dump())

@router.put("/{salon_id}/services/{service_id}", response_model=ServiceResponse)
async def update_salon_service(
    salon_id: str,
    service_id: str,
    service: ServiceUpdate,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    update_data = service.model_dump(exclude_unset=True)
    try:
        await check_service_group(salon_id, update_data.get("groupId"))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    updated = await update_service(salon_id, service_id, update_data)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found"
        )
    return updated

@router.delete("/{salon_id}/services/{service_id}", response_model=Dict[str, Any])
async def delete_salon_service(
    salon_id: str,
    service_id: str,
    current_user: dict = Depends(get_current_partner)
):
    """
    Delete a service and unassign it from the salon's stylists
    """
    await get_owned_salon(salon_id, current_user)
    
    success = await delete_service_with_assignments(salon_id, service_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found or delete failed"
        )
    return {"message": "Service deleted successfully"}
