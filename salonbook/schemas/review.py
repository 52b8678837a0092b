from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=2000)

class ReviewResponse(BaseModel):
    id: str
    salonId: str
    userId: str
    rating: int
    comment: str = ""
    createdAt: datetime
    updatedAt: Optional[datetime] = None
