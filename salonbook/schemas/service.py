from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    duration: int = Field(..., gt=0)  # Duration in minutes
    groupId: Optional[str] = None

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    groupId: Optional[str] = None  # null moves the service out of its group

    @field_validator("name", "description", "price", "duration", mode="before")
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

class ServiceResponse(BaseModel):
    id: str
    salonId: str
    groupId: Optional[str] = None
    name: str
    description: str = ""
    price: float
    duration: int
    createdAt: datetime
    updatedAt: Optional[datetime] = None
