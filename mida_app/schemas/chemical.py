from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

from mida_app.schemas.common import NonEmptyStr

Area = Literal["PPC Balboa", "PSA", "Chiriquí", "Tocumen", "Colón", "Bocas del Toro", "Manzanillo"]
ChemicalStatus = Literal["active", "discarded", "expired"]


# ----- BASE COMÚN -----
class ChemicalBase(BaseModel):
    chemical_name: NonEmptyStr
    quantity: float = Field(ge=0)
    unit: NonEmptyStr
    area: Area = "PPC Balboa"
    concentration: str | None = None
    manufacturer: str | None = None
    lot_number: str | None = None
    expiration_date: date | None = None
    storage_location: str | None = None
    notes: str | None = None


# ----- PARA REGISTRAR QUÍMICO -----
class ChemicalCreate(ChemicalBase):
    area: Area


# ----- PARA ACTUALIZAR (PUT, sobrescribe todos los campos) -----
class ChemicalUpdate(ChemicalBase):
    pass


class ChemicalDiscard(BaseModel):
    notes: str | None = None


# ----- PARA RESPUESTA -----
class ChemicalOut(ChemicalBase):
    id: int
    status: ChemicalStatus
    is_expired: bool = False
    registered_by: int | None = None
    registered_by_name: str | None = None
    registered_at: datetime | None = None
    discarded_by: int | None = None
    discarded_by_name: str | None = None
    discarded_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)  # permite partir de modelos SQLAlchemy


class ChemicalEnvelope(BaseModel):
    message: str
    chemical: ChemicalOut


class InventoryStats(BaseModel):
    total_chemicals: int = 0
    active_chemicals: int = 0
    discarded_chemicals: int = 0
    expired_chemicals: int = 0
    total_quantity: float = 0.0
