from typing import Any, Dict, Tuple
from fastapi import HTTPException, status

from salonbook.db.salons import get_salon_by_id
from salonbook.db.stylists import get_stylist_by_id

async def get_owned_salon(salon_id: str, current_user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get a salon that the current partner owns, or fail with 404 / 403
    """
    salon = await get_salon_by_id(salon_id)
    if not salon:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    
    if salon.get("userId") != str(current_user["_id"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't manage this salon"
        )
    
    return salon

async def get_owned_stylist(stylist_id: str, current_user: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Get a stylist working at a salon the current partner owns
    """
    stylist = await get_stylist_by_id(stylist_id)
    if not stylist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stylist not found"
        )
    
    salon = await get_owned_salon(stylist["salonId"], current_user)
    return stylist, salon
