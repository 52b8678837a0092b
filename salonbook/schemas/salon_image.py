from pydantic import BaseModel, Field
from datetime import datetime

class SalonImageCreate(BaseModel):
    imageUrl: str = Field(..., min_length=1)  # already uploaded to the media host
    isPrimary: bool = False

class SalonImageResponse(BaseModel):
    id: str
    salonId: str
    imageUrl: str
    isPrimary: bool = False
    createdAt: datetime
