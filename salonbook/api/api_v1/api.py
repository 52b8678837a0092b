from fastapi import APIRouter
from salonbook.api.api_v1.endpoints import (
    salons, services, service_groups, stylists, images, reviews, availability, appointments
)

router = APIRouter()

# Include all routers
router.include_router(salons.router, prefix="/salons", tags=["Salons"])
router.include_router(services.router, prefix="/salons", tags=["Services"])
router.include_router(service_groups.router, prefix="/salons", tags=["Service Groups"])
router.include_router(stylists.router, prefix="/salons", tags=["Stylists"])
router.include_router(images.router, prefix="/salons", tags=["Gallery"])
router.include_router(reviews.router, prefix="/salons", tags=["Reviews"])
router.include_router(availability.router, prefix="/availability", tags=["Availability"])
router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
