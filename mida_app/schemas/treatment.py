from datetime import date, datetime, time
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

from mida_app.schemas.certificate import TreatmentType
from mida_app.schemas.common import NonEmptyStr

LocationType = Literal["puerto", "fuera_puerto"]
ScheduleStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
Priority = Literal["low", "normal", "high", "urgent"]


class ScheduleBase(BaseModel):
    treatment_type: TreatmentType
    location_type: LocationType
    location_name: NonEmptyStr
    chemical_name: NonEmptyStr
    quantity_planned: float = Field(ge=0)
    unit: NonEmptyStr
    scheduled_date: date
    scheduled_time: time
    responsible_person: NonEmptyStr
    area_size: float | None = Field(default=None, ge=0)
    area_unit: str | None = None
    priority: Priority = "normal"
    notes: str | None = None


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleUpdate(ScheduleBase):
    """
    PUT: sobrescribe todos los campos editables (el estado va por /status).
    """
    pass


class ScheduleStatusUpdate(BaseModel):
    status: ScheduleStatus


class ScheduleOut(ScheduleBase):
    id: int
    schedule_number: str
    status: ScheduleStatus
    created_by: int | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    completed_by: int | None = None
    completed_by_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ScheduleEnvelope(BaseModel):
    message: str
    treatment: ScheduleOut


class TreatmentStats(BaseModel):
    total_treatments: int = 0
    scheduled_treatments: int = 0
    in_progress_treatments: int = 0
    completed_treatments: int = 0
    cancelled_treatments: int = 0
    overdue_treatments: int = 0
