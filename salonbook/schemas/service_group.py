from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

class ServiceGroupCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""

    @field_validator("name", "description", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class ServiceGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def _reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value.strip() if isinstance(value, str) else value

class ServiceGroupResponse(BaseModel):
    id: str
    salonId: str
    name: str
    description: str = ""
    createdAt: datetime
    updatedAt: Optional[datetime] = None
