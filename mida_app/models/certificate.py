from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, Date, Time, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from mida_app.db.base import Base

TREATMENT_TYPES = (
    "Fumigación",
    "Aspersión",
    "Nebulización",
    "Termonebulización",
    "Inmersión",
    "Desinfección",
    "Otro",
)


class TreatmentCertificate(Base):
    __tablename__ = "treatment_certificates"

    id = Column(Integer, primary_key=True, index=True)
    certificate_number = Column(String(50), unique=True, index=True, nullable=False)
    treatment_type = Column(String(100), nullable=False)
    product_name = Column(String(200), nullable=False)
    application_location = Column(String(200), nullable=False)
    responsible_person = Column(String(100), nullable=False)
    application_date = Column(Date, nullable=False, index=True)
    application_time = Column(Time, nullable=False)
    chemical_used = Column(String(200), nullable=True)
    concentration_used = Column(String(100), nullable=True)
    quantity_used = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    unit_used = Column(String(50), nullable=True)
    weather_conditions = Column(String(100), nullable=True)
    temperature = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    humidity = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    observations = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    created_by_user = relationship("User", foreign_keys=[created_by])

    @property
    def created_by_name(self) -> str | None:
        return self.created_by_user.full_name if self.created_by_user else None
