from datetime import date

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from mida_app.db.session import get_db
from mida_app.core.permissions import require_permission
from mida_app.core.roles import Action, Resource
from mida_app.models.chemical import AREAS
from mida_app.models.user import User
from mida_app.repositories import inventory as repo
from mida_app.schemas.chemical import (
    Area,
    ChemicalCreate,
    ChemicalDiscard,
    ChemicalEnvelope,
    ChemicalOut,
    ChemicalStatus,
    ChemicalUpdate,
    InventoryStats,
)

router = APIRouter(prefix="/inventory", tags=["inventory"])

can_read = require_permission(Resource.INVENTORY, Action.READ)
can_write = require_permission(Resource.INVENTORY, Action.WRITE)
can_delete = require_permission(Resource.INVENTORY, Action.DELETE)


# ------------------ ÁREAS DISPONIBLES ------------------ #
@router.get("/areas", response_model=list[str])
def list_areas(current_user: User = Depends(can_read)):
    return list(AREAS)


# ------------------ ESTADÍSTICAS ------------------ #
@router.get("/stats/overview", response_model=InventoryStats)
def inventory_overview(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.inventory_stats(db, start_date, end_date)


# -------- LISTAR INVENTARIO + filtros ------------- #
@router.get("/", response_model=list[ChemicalOut])
def list_inventory(
    area: Area | None = None,
    status: ChemicalStatus | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    """
    Lista químicos con filtros opcionales:
    - area
    - status (active, discarded, expired)
    - search (nombre del químico o fabricante)
    - rango de fechas de registro
    """
    return repo.list_chemicals(db, area, status, search, start_date, end_date)


# ------ OBTENER QUÍMICO POR ID ------- #
@router.get("/{chemical_id}", response_model=ChemicalOut)
def get_chemical(
    chemical_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.get_chemical(db, chemical_id)


# ------------------ REGISTRAR QUÍMICO ------------------ #
@router.post("/", response_model=ChemicalEnvelope, status_code=status.HTTP_201_CREATED)
def create_chemical(
    chemical_in: ChemicalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    chemical = repo.create_chemical(db, chemical_in, current_user)
    return ChemicalEnvelope(
        message="Producto químico registrado exitosamente",
        chemical=ChemicalOut.model_validate(chemical),
    )


# ---------- ACTUALIZAR QUÍMICO (PUT) -------------------------- #
@router.put("/{chemical_id}", response_model=ChemicalEnvelope)
def update_chemical(
    chemical_id: int,
    chemical_in: ChemicalUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    chemical = repo.update_chemical(db, chemical_id, chemical_in)
    return ChemicalEnvelope(
        message="Producto químico actualizado exitosamente",
        chemical=ChemicalOut.model_validate(chemical),
    )


# ---------- DESCARTAR QUÍMICO -------------------------- #
@router.patch("/{chemical_id}/discard", response_model=ChemicalEnvelope)
def discard_chemical(
    chemical_id: int,
    discard_in: ChemicalDiscard | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    """
    Solo se descartan químicos activos; uno ya descartado responde 404.
    """
    notes = discard_in.notes if discard_in else None
    chemical = repo.discard_chemical(db, chemical_id, current_user, notes)
    return ChemicalEnvelope(
        message="Producto químico descartado exitosamente",
        chemical=ChemicalOut.model_validate(chemical),
    )


# ---------- ELIMINAR QUÍMICO ---------------------------- #
@router.delete("/{chemical_id}")
def delete_chemical(
    chemical_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_delete),
):
    repo.delete_chemical(db, chemical_id)
    return {"message": "Producto químico eliminado exitosamente"}
