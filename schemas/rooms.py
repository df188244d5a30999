from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, constr, model_validator, ConfigDict


class RoomBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    capacity: int = Field(2, ge=1, description="Maximum number of guests")
    category: constr(strip_whitespace=True, min_length=1, max_length=50) = "Standard"


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    capacity: Optional[int] = Field(None, ge=1)
    category: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None

    @model_validator(mode="before")
    def validate_data(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for the update")


class RoomRead(RoomBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
