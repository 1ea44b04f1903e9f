from datetime import date, datetime

from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mida_app.core.exceptions import Conflict, InvalidStatusTransition, NotFound
from mida_app.models.treatment import TreatmentSchedule
from mida_app.models.user import User
from mida_app.repositories.base import filter_date_range, generate_unique_number, search_pattern
from mida_app.schemas.treatment import ScheduleCreate, ScheduleUpdate, TreatmentStats

SCHEDULE_PREFIX = "TRAT"

# Solo se avanza; "cancelled" se permite desde cualquier estado no terminal
ALLOWED_TRANSITIONS = {
    "scheduled": {"in_progress", "completed", "cancelled"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

PENDING_STATUSES = ("scheduled", "in_progress")


def list_schedules(
    db: Session,
    status: str | None = None,
    location_type: str | None = None,
    priority: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
) -> list[TreatmentSchedule]:
    """
    Lista programaciones en orden cronológico (la próxima primero).
    """
    query = db.query(TreatmentSchedule)

    if status:
        query = query.filter(TreatmentSchedule.status == status)

    if location_type:
        query = query.filter(TreatmentSchedule.location_type == location_type)

    if priority:
        query = query.filter(TreatmentSchedule.priority == priority)

    query = filter_date_range(query, TreatmentSchedule.scheduled_date, start_date, end_date)

    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                TreatmentSchedule.location_name.ilike(pattern, escape="\\"),
                TreatmentSchedule.chemical_name.ilike(pattern, escape="\\"),
                TreatmentSchedule.schedule_number.ilike(pattern, escape="\\"),
            )
        )

    return query.order_by(
        TreatmentSchedule.scheduled_date.asc(),
        TreatmentSchedule.scheduled_time.asc(),
        TreatmentSchedule.id.asc(),
    ).all()


def upcoming_schedules(db: Session, limit: int = 10) -> list[TreatmentSchedule]:
    return (
        db.query(TreatmentSchedule)
        .filter(TreatmentSchedule.scheduled_date >= date.today())
        .filter(TreatmentSchedule.status.in_(PENDING_STATUSES))
        .order_by(TreatmentSchedule.scheduled_date.asc(), TreatmentSchedule.scheduled_time.asc())
        .limit(limit)
        .all()
    )


def get_schedule(db: Session, schedule_id: int) -> TreatmentSchedule:
    schedule = db.get(TreatmentSchedule, schedule_id)
    if not schedule:
        raise NotFound("Programación de tratamiento no encontrada")
    return schedule


def create_schedule(db: Session, data: ScheduleCreate, current_user: User) -> TreatmentSchedule:
    schedule = TreatmentSchedule(
        **data.model_dump(),
        schedule_number=generate_unique_number(db, TreatmentSchedule.schedule_number, SCHEDULE_PREFIX),
        status="scheduled",
        created_by=current_user.id,
    )
    db.add(schedule)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("El número de programación ya existe, intente de nuevo")
    db.refresh(schedule)
    return schedule


def update_schedule(db: Session, schedule_id: int, data: ScheduleUpdate) -> TreatmentSchedule:
    """
    Sobrescribe todos los campos editables; el estado se cambia solo con update_schedule_status.
    """
    schedule = get_schedule(db, schedule_id)

    for field, value in data.model_dump().items():
        setattr(schedule, field, value)

    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def update_schedule_status(
    db: Session,
    schedule_id: int,
    new_status: str,
    current_user: User,
) -> TreatmentSchedule:
    schedule = get_schedule(db, schedule_id)

    if new_status not in ALLOWED_TRANSITIONS.get(schedule.status, set()):
        raise InvalidStatusTransition(schedule.status, new_status)

    schedule.status = new_status
    if new_status == "completed":
        schedule.completed_at = datetime.utcnow()
        schedule.completed_by = current_user.id

    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def delete_schedule(db: Session, schedule_id: int) -> None:
    schedule = get_schedule(db, schedule_id)
    db.delete(schedule)
    db.commit()


def treatment_stats(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
) -> TreatmentStats:
    today = date.today()
    status = TreatmentSchedule.status
    query = db.query(
        func.count(TreatmentSchedule.id),
        func.sum(case((status == "scheduled", 1), else_=0)),
        func.sum(case((status == "in_progress", 1), else_=0)),
        func.sum(case((status == "completed", 1), else_=0)),
        func.sum(case((status == "cancelled", 1), else_=0)),
        func.sum(
            case(
                (
                    (TreatmentSchedule.scheduled_date < today) & status.in_(PENDING_STATUSES),
                    1,
                ),
                else_=0,
            )
        ),
    )
    query = filter_date_range(query, TreatmentSchedule.scheduled_date, start_date, end_date)
    total, scheduled, in_progress, completed, cancelled, overdue = query.one()

    return TreatmentStats(
        total_treatments=total or 0,
        scheduled_treatments=scheduled or 0,
        in_progress_treatments=in_progress or 0,
        completed_treatments=completed or 0,
        cancelled_treatments=cancelled or 0,
        overdue_treatments=overdue or 0,
    )
