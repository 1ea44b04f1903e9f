from datetime import date, datetime
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from mida_app.db.base import Base

AREAS = ("PPC Balboa", "PSA", "Chiriquí", "Tocumen", "Colón", "Bocas del Toro", "Manzanillo")
CHEMICAL_STATUSES = ("active", "discarded", "expired")


class ChemicalInventory(Base):
    __tablename__ = "chemical_inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_chemical_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    chemical_name = Column(String(200), nullable=False)
    quantity = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    unit = Column(String(50), nullable=False)
    concentration = Column(String(100), nullable=True)
    manufacturer = Column(String(200), nullable=True)
    lot_number = Column(String(100), nullable=True)
    expiration_date = Column(Date, nullable=True)
    storage_location = Column(String(200), nullable=True)
    area = Column(String(100), nullable=False, default="PPC Balboa", index=True)
    # active, discarded, expired
    status = Column(String(20), nullable=False, default="active", index=True)
    registered_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    registered_at = Column(DateTime, default=datetime.utcnow, index=True)
    discarded_at = Column(DateTime, nullable=True)
    discarded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    registered_by_user = relationship("User", foreign_keys=[registered_by])
    discarded_by_user = relationship("User", foreign_keys=[discarded_by])

    @property
    def registered_by_name(self) -> str | None:
        return self.registered_by_user.full_name if self.registered_by_user else None

    @property
    def discarded_by_name(self) -> str | None:
        return self.discarded_by_user.full_name if self.discarded_by_user else None

    @property
    def is_expired(self) -> bool:
        # El vencimiento se deriva de la fecha, no se guarda como transición
        if self.status == "discarded":
            return False
        if self.status == "expired":
            return True
        return self.expiration_date is not None and self.expiration_date < date.today()
