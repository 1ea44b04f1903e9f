from datetime import date, datetime, time
from typing import Dict, Literal
from pydantic import BaseModel, ConfigDict, Field

from mida_app.schemas.common import NonEmptyStr

TreatmentType = Literal[
    "Fumigación",
    "Aspersión",
    "Nebulización",
    "Termonebulización",
    "Inmersión",
    "Desinfección",
    "Otro",
]


class CertificateBase(BaseModel):
    treatment_type: TreatmentType
    product_name: NonEmptyStr
    application_location: NonEmptyStr
    responsible_person: NonEmptyStr
    application_date: date
    application_time: time
    chemical_used: str | None = None
    concentration_used: str | None = None
    quantity_used: float | None = Field(default=None, ge=0)
    unit_used: str | None = None
    weather_conditions: str | None = None
    temperature: float | None = None
    humidity: float | None = Field(default=None, ge=0, le=100)
    observations: str | None = None


class CertificateCreate(CertificateBase):
    pass


class CertificateUpdate(CertificateBase):
    """
    PUT: sobrescribe todos los campos (los opcionales omitidos quedan en null).
    """
    pass


class CertificateOut(CertificateBase):
    id: int
    certificate_number: str
    created_by: int | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CertificateEnvelope(BaseModel):
    message: str
    certificate: CertificateOut


class CertificateStats(BaseModel):
    total_certificates: int = 0
    by_treatment_type: Dict[str, int] = {}
