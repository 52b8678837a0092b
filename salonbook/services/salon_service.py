from typing import Dict, Any, List, Optional
import logging

from salonbook.db import salons as salons_db
from salonbook.db import salon_services as salon_services_db
from salonbook.db import service_groups as service_groups_db
from salonbook.db import salon_images as salon_images_db
from salonbook.db import stylists as stylists_db
from salonbook.db import availability as availability_db
from salonbook.db import appointments as appointments_db
from salonbook.db import reviews as reviews_db

logger = logging.getLogger(__name__)

STYLIST_REMOVED_REASON = "Stylist is no longer available at this salon"
SALON_CLOSED_REASON = "Salon has closed"

async def search_salons(
    location: Optional[str] = None,
    service: Optional[str] = None,
    skip: int = 0,
    limit: int = 20
) -> List[Dict[str, Any]]:
    """
    Search salons by city and by offered service name.
    Both filters are case-insensitive partial matches; a service filter that
    matches nothing returns no salons.
    """
    salon_ids = None
    if service is not None and service.strip():
        salon_ids = await salon_services_db.find_salon_ids_by_service_name(service)
        if not salon_ids:
            return []
    
    return await salons_db.find_salons(city=location, salon_ids=salon_ids, skip=skip, limit=limit)

async def delete_salon_with_children(salon_id: str) -> bool:
    """
    Delete a salon together with its services, service groups, gallery,
    stylists, stylist schedules and reviews. Appointments are kept as booking
    history; the ones still pending or confirmed are cancelled.
    """
    deleted = await salons_db.delete_salon(salon_id)
    if not deleted:
        return False
    
    await salon_services_db.remove_salon_services(salon_id)
    await service_groups_db.remove_salon_service_groups(salon_id)
    await salon_images_db.remove_salon_images(salon_id)
    stylist_ids = await stylists_db.remove_salon_stylists(salon_id)
    for stylist_id in stylist_ids:
        await availability_db.delete_stylist_availability(stylist_id)
        await appointments_db.cancel_stylist_appointments(stylist_id, SALON_CLOSED_REASON)
    await reviews_db.remove_salon_reviews(salon_id)
    
    logger.info(f"Deleted salon {salon_id} with {len(stylist_ids)} stylists")
    return True

async def delete_stylist_with_schedule(salon_id: str, stylist_id: str) -> bool:
    """
    Remove a stylist from a salon along with the stylist's weekly rules.
    Pending and confirmed appointments with the stylist are cancelled.
    """
    removed = await stylists_db.remove_stylist(salon_id, stylist_id)
    if removed:
        await availability_db.delete_stylist_availability(stylist_id)
        cancelled = await appointments_db.cancel_stylist_appointments(stylist_id, STYLIST_REMOVED_REASON)
        if cancelled:
            logger.info(f"Cancelled {cancelled} appointments of removed stylist {stylist_id}")
    return removed

async def check_stylist_services(salon_id: str, service_ids: List[str]) -> List[str]:
    """
    Check that every service assigned to a stylist is offered by the salon.
    Returns the ids without duplicates, in the given order.

    Raises:
        ValueError: some ids are not services of the salon
    """
    unique_ids = list(dict.fromkeys(service_ids))
    if not unique_ids:
        return []
    
    known = set(await salon_services_db.find_salon_service_ids(salon_id, unique_ids))
    unknown = [s for s in unique_ids if s not in known]
    if unknown:
        raise ValueError(f"Unknown services for this salon: {', '.join(unknown)}")
    return unique_ids

async def check_service_group(salon_id: str, group_id: Optional[str]) -> None:
    """
    Raises ValueError unless group_id is None or a group of the salon
    """
    if group_id is None:
        return
    group = await service_groups_db.get_service_group(salon_id, group_id)
    if not group:
        raise ValueError("Service group not found in this salon")

async def delete_service_with_assignments(salon_id: str, service_id: str) -> bool:
    """
    Delete a service and unassign it from the salon's stylists
    """
    removed = await salon_services_db.remove_service(salon_id, service_id)
    if removed:
        await stylists_db.remove_service_from_stylists(salon_id, service_id)
    return removed

async def delete_empty_service_group(salon_id: str, group_id: str) -> bool:
    """
    Delete a service group that no service belongs to.

    Raises:
        ValueError: the group still holds services
    """
    in_group = await salon_services_db.count_group_services(salon_id, group_id)
    if in_group:
        raise ValueError("Remove all services from this group first")
    return await service_groups_db.remove_service_group(salon_id, group_id)
