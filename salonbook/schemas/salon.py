from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

class SalonCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    address: str
    city: str
    state: str = ""
    zip: str = ""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: str = ""
    website: str = ""
    hours: str = ""
    imageUrl: str = ""

class SalonUpdate(BaseModel):
    """Partial update; only the fields sent are changed.

    latitude and longitude may be cleared with null, every other field
    must carry a value when present.
    """
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = None
    website: Optional[str] = None
    hours: Optional[str] = None
    imageUrl: Optional[str] = None

    @field_validator(
        "name", "description", "address", "city", "state", "zip",
        "phone", "website", "hours", "imageUrl",
        mode="before"
    )
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

class SalonResponse(BaseModel):
    id: str
    userId: str
    name: str
    description: str = ""
    address: str
    city: str
    state: str = ""
    zip: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: str = ""
    website: str = ""
    hours: str = ""
    imageUrl: str = ""
    rating: float = 0
    reviewsCount: int = 0
    createdAt: datetime
