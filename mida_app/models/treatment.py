from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, Date, Time, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from mida_app.db.base import Base

LOCATION_TYPES = ("puerto", "fuera_puerto")
SCHEDULE_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")
PRIORITIES = ("low", "normal", "high", "urgent")


class TreatmentSchedule(Base):
    __tablename__ = "treatment_schedules"

    id = Column(Integer, primary_key=True, index=True)
    schedule_number = Column(String(50), unique=True, index=True, nullable=False)
    treatment_type = Column(String(100), nullable=False)
    # puerto, fuera_puerto
    location_type = Column(String(20), nullable=False)
    location_name = Column(String(200), nullable=False)
    chemical_name = Column(String(200), nullable=False)
    quantity_planned = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    unit = Column(String(50), nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(Time, nullable=False)
    responsible_person = Column(String(100), nullable=False)
    area_size = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    area_unit = Column(String(20), nullable=True)
    # scheduled, in_progress, completed, cancelled
    status = Column(String(20), nullable=False, default="scheduled", index=True)
    # low, normal, high, urgent
    priority = Column(String(20), nullable=False, default="normal")
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
    completed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_by_user = relationship("User", foreign_keys=[created_by])
    completed_by_user = relationship("User", foreign_keys=[completed_by])

    @property
    def created_by_name(self) -> str | None:
        return self.created_by_user.full_name if self.created_by_user else None

    @property
    def completed_by_name(self) -> str | None:
        return self.completed_by_user.full_name if self.completed_by_user else None
