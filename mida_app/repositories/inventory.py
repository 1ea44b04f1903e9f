from datetime import date, datetime

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from mida_app.core.exceptions import NotFound
from mida_app.models.chemical import ChemicalInventory
from mida_app.models.user import User
from mida_app.repositories.base import filter_datetime_range, search_pattern
from mida_app.schemas.chemical import ChemicalCreate, ChemicalUpdate, InventoryStats

NOT_FOUND_MESSAGE = "Producto químico no encontrado"


def _expired_condition(today: date):
    return and_(
        ChemicalInventory.status != "discarded",
        or_(
            ChemicalInventory.status == "expired",
            ChemicalInventory.expiration_date < today,
        ),
    )


def list_chemicals(
    db: Session,
    area: str | None = None,
    status: str | None = None,
    search: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[ChemicalInventory]:
    """
    Lista el inventario, más reciente primero.
    - status=expired incluye los activos con fecha de vencimiento pasada
    - status=active excluye esos mismos vencidos
    """
    query = db.query(ChemicalInventory)
    today = date.today()

    if area:
        query = query.filter(ChemicalInventory.area == area)

    if status == "expired":
        query = query.filter(_expired_condition(today))
    elif status == "active":
        query = query.filter(
            ChemicalInventory.status == "active",
            or_(
                ChemicalInventory.expiration_date.is_(None),
                ChemicalInventory.expiration_date >= today,
            ),
        )
    elif status:
        query = query.filter(ChemicalInventory.status == status)

    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                ChemicalInventory.chemical_name.ilike(pattern, escape="\\"),
                ChemicalInventory.manufacturer.ilike(pattern, escape="\\"),
            )
        )

    query = filter_datetime_range(query, ChemicalInventory.registered_at, date_from, date_to)

    return query.order_by(ChemicalInventory.registered_at.desc(), ChemicalInventory.id.desc()).all()


def get_chemical(db: Session, chemical_id: int) -> ChemicalInventory:
    chemical = db.get(ChemicalInventory, chemical_id)
    if not chemical:
        raise NotFound(NOT_FOUND_MESSAGE)
    return chemical


def create_chemical(db: Session, data: ChemicalCreate, current_user: User) -> ChemicalInventory:
    chemical = ChemicalInventory(
        **data.model_dump(),
        status="active",
        registered_by=current_user.id,
    )
    db.add(chemical)
    db.commit()
    db.refresh(chemical)
    return chemical


def update_chemical(db: Session, chemical_id: int, data: ChemicalUpdate) -> ChemicalInventory:
    """
    Sobrescribe todos los campos editables. El estado no se toca aquí.
    """
    chemical = get_chemical(db, chemical_id)

    for field, value in data.model_dump().items():
        setattr(chemical, field, value)

    db.add(chemical)
    db.commit()
    db.refresh(chemical)
    return chemical


def discard_chemical(
    db: Session,
    chemical_id: int,
    current_user: User,
    notes: str | None = None,
) -> ChemicalInventory:
    """
    Descarta un químico activo con un UPDATE condicional.
    Si no existe o ya no está activo se reporta como no encontrado.
    """
    values = {
        ChemicalInventory.status: "discarded",
        ChemicalInventory.discarded_at: datetime.utcnow(),
        ChemicalInventory.discarded_by: current_user.id,
        ChemicalInventory.updated_at: datetime.utcnow(),
    }
    if notes is not None:
        values[ChemicalInventory.notes] = notes

    updated = (
        db.query(ChemicalInventory)
        .filter(ChemicalInventory.id == chemical_id, ChemicalInventory.status == "active")
        .update(values, synchronize_session=False)
    )
    db.commit()

    if not updated:
        raise NotFound("Producto químico no encontrado o ya descartado")

    return get_chemical(db, chemical_id)


def delete_chemical(db: Session, chemical_id: int) -> None:
    chemical = get_chemical(db, chemical_id)
    db.delete(chemical)
    db.commit()


def inventory_stats(
    db: Session,
    date_from: date | None = None,
    date_to: date | None = None,
) -> InventoryStats:
    today = date.today()
    query = db.query(
        func.count(ChemicalInventory.id),
        func.sum(case((ChemicalInventory.status == "active", 1), else_=0)),
        func.sum(case((ChemicalInventory.status == "discarded", 1), else_=0)),
        func.sum(case((_expired_condition(today), 1), else_=0)),
        func.sum(case((ChemicalInventory.status == "active", ChemicalInventory.quantity), else_=0)),
    )
    query = filter_datetime_range(query, ChemicalInventory.registered_at, date_from, date_to)
    total, active, discarded, expired, quantity = query.one()

    return InventoryStats(
        total_chemicals=total or 0,
        active_chemicals=active or 0,
        discarded_chemicals=discarded or 0,
        expired_chemicals=expired or 0,
        total_quantity=float(quantity or 0),
    )
