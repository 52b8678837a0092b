from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

class StylistCreate(BaseModel):
    name: str = Field(..., min_length=1)
    specialty: str = ""
    experience: str = ""  # free text, e.g. "5 years"
    bio: str = ""
    imageUrl: str = ""
    serviceIds: List[str] = []  # salon services this stylist performs

class StylistUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    specialty: Optional[str] = None
    experience: Optional[str] = None
    bio: Optional[str] = None
    imageUrl: Optional[str] = None
    serviceIds: Optional[List[str]] = None

    @field_validator("name", "specialty", "experience", "bio", "imageUrl", "serviceIds", mode="before")
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

class StylistResponse(BaseModel):
    id: str
    salonId: str
    name: str
    specialty: str = ""
    experience: str = ""
    bio: str = ""
    imageUrl: str = ""
    serviceIds: List[str] = []
    createdAt: datetime
