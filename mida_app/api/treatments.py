from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mida_app.db.session import get_db
from mida_app.core.permissions import require_permission
from mida_app.core.roles import Action, Resource
from mida_app.models.user import User
from mida_app.repositories import treatments as repo
from mida_app.schemas.treatment import (
    LocationType,
    Priority,
    ScheduleCreate,
    ScheduleEnvelope,
    ScheduleOut,
    ScheduleStatus,
    ScheduleStatusUpdate,
    ScheduleUpdate,
    TreatmentStats,
)

router = APIRouter(prefix="/treatments", tags=["treatments"])

can_read = require_permission(Resource.TREATMENTS, Action.READ)
can_write = require_permission(Resource.TREATMENTS, Action.WRITE)
can_delete = require_permission(Resource.TREATMENTS, Action.DELETE)


@router.get("/stats/overview", response_model=TreatmentStats)
def treatments_overview(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.treatment_stats(db, start_date, end_date)


# ------------------ PRÓXIMOS TRATAMIENTOS ------------------ #
@router.get("/upcoming/list", response_model=list[ScheduleOut])
def upcoming_treatments(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    """
    Programaciones pendientes desde hoy en adelante.
    """
    return repo.upcoming_schedules(db, limit)


# -------- LISTAR PROGRAMACIONES + filtros ------------- #
@router.get("/", response_model=list[ScheduleOut])
def list_treatments(
    status: ScheduleStatus | None = None,
    location_type: LocationType | None = None,
    priority: Priority | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.list_schedules(db, status, location_type, priority, start_date, end_date, search)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_treatment(
    schedule_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.get_schedule(db, schedule_id)


# ------------------ PROGRAMAR TRATAMIENTO ------------------ #
@router.post("/", response_model=ScheduleEnvelope, status_code=status.HTTP_201_CREATED)
def create_treatment(
    schedule_in: ScheduleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    schedule = repo.create_schedule(db, schedule_in, current_user)
    return ScheduleEnvelope(
        message="Tratamiento programado exitosamente",
        treatment=ScheduleOut.model_validate(schedule),
    )


@router.put("/{schedule_id}", response_model=ScheduleEnvelope)
def update_treatment(
    schedule_id: int,
    schedule_in: ScheduleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    schedule = repo.update_schedule(db, schedule_id, schedule_in)
    return ScheduleEnvelope(
        message="Programación actualizada exitosamente",
        treatment=ScheduleOut.model_validate(schedule),
    )


# ------------------ CAMBIO DE ESTADO ------------------ #
@router.patch("/{schedule_id}/status", response_model=ScheduleEnvelope)
def update_treatment_status(
    schedule_id: int,
    status_in: ScheduleStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    """
    Avanza el estado de la programación.
    Al completar se registra quién y cuándo.
    """
    schedule = repo.update_schedule_status(db, schedule_id, status_in.status, current_user)
    return ScheduleEnvelope(
        message="Estado actualizado exitosamente",
        treatment=ScheduleOut.model_validate(schedule),
    )


@router.delete("/{schedule_id}")
def delete_treatment(
    schedule_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_delete),
):
    repo.delete_schedule(db, schedule_id)
    return {"message": "Programación eliminada exitosamente"}
