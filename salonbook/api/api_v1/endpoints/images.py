from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from salonbook.api.deps import get_owned_salon
from salonbook.core.auth import get_current_partner
from salonbook.db.salons import get_salon_by_id
from salonbook.db.salon_images import get_salon_images, add_salon_image, set_primary_image, delete_salon_image
from salonbook.schemas.salon_image import SalonImageCreate, SalonImageResponse

router = APIRouter()

@router.get("/{salon_id}/images", response_model=List[SalonImageResponse])
async def get_salon_gallery(salon_id: str):
    """
    Get the gallery of a salon, primary image first
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    return await get_salon_images(salon_id)

@router.post("/{salon_id}/images", response_model=SalonImageResponse, status_code=status.HTTP_201_CREATED)
async def add_gallery_image(
    salon_id: str,
    image_in: SalonImageCreate,
    current_user: dict = Depends(get_current_partner)
):
    """
    Add an already uploaded image to the gallery by URL
    """
    await get_owned_salon(salon_id, current_user)
    return await add_salon_image(salon_id, image_in.imageUrl, image_in.isPrimary)

@router.put("/{salon_id}/images/{image_id}/primary", response_model=SalonImageResponse)
async def make_primary_image(
    salon_id: str,
    image_id: str,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    image = await set_primary_image(salon_id, image_id)
    if not image:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    return image

@router.delete("/{salon_id}/images/{image_id}", response_model=Dict[str, Any])
async def delete_gallery_image(
    salon_id: str,
    image_id: str,
    current_user: dict = Depends(get_current_partner)
):
    await get_owned_salon(salon_id, current_user)
    
    deleted = await delete_salon_image(salon_id, image_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    return {"message": "Image removed from gallery"}
