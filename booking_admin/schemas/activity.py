from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from booking_admin.core.enums import ActivityKind


class ActivityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    booking_id: Optional[str] = Field(None, alias="bookingId")
    driver_id: Optional[str] = Field(None, alias="driverId")
    action: Optional[str] = None
    details: Optional[dict] = Field(default_factory=dict)


class ActivityLogOut(BaseModel):
    id: str
    kind: ActivityKind
    subject_id: str
    actor_id: str
    action: str
    details: dict
    created_at: datetime


class ActivityCreateResponse(BaseModel):
    success: bool = True
    data: ActivityLogOut
