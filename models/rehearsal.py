from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

class RehearsalSchedule(BaseModel):
    id: str
    verse_id: str
    user_id: str
    reference: str
    scheduled_date: datetime
    completed: bool = False
    completed_at: Optional[datetime] = None
    accuracy: Optional[int] = None
    next_rehearsal_date: Optional[datetime] = None
    frequency_days: Optional[int] = None
    recurring_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @validator('frequency_days')
    def validate_frequency_days(cls, v):
        if v is not None and v <= 0:
            raise ValueError("frequency_days must be a positive number of days")
        return v

    class Config:
        from_attributes = True

class ScheduleCreate(BaseModel):
    user_id: str
    verse_id: str
    reference: str
    is_initial: bool = True
    custom_date: Optional[datetime] = None
    frequency_days: Optional[int] = Field(default=None, ge=0)

class RehearsalComplete(BaseModel):
    user_id: str
    accuracy: int = Field(ge=0, le=100)

class RehearsalAttempt(BaseModel):
    user_id: str
    candidate: str
    reference_text: str

class FrequencyOption(BaseModel):
    label: str
    value: int
