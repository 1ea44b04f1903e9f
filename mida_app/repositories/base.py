import random
from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy.orm import Query, Session

from mida_app.core.exceptions import Conflict

NUMBER_ATTEMPTS = 10


def day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


def next_day_start(d: date) -> datetime:
    return datetime.combine(d + timedelta(days=1), time.min)


def filter_datetime_range(query: Query, column: Any, date_from: date | None, date_to: date | None) -> Query:
    """
    Filtra una columna DateTime por fechas, ambos extremos inclusive.
    """
    if date_from:
        query = query.filter(column >= day_start(date_from))
    if date_to:
        query = query.filter(column < next_day_start(date_to))
    return query


def filter_date_range(query: Query, column: Any, date_from: date | None, date_to: date | None) -> Query:
    if date_from:
        query = query.filter(column >= date_from)
    if date_to:
        query = query.filter(column <= date_to)
    return query


def generate_number(prefix: str, today: date | None = None) -> str:
    """
    PREFIJO-AAAAMMDD-NNN, con NNN aleatorio de 3 dígitos.
    """
    today = today or date.today()
    return f"{prefix}-{today.strftime('%Y%m%d')}-{random.randint(0, 999):03d}"


def generate_unique_number(db: Session, column: Any, prefix: str) -> str:
    """
    Genera un número que aún no exista en la columna (que además es UNIQUE).
    """
    for _ in range(NUMBER_ATTEMPTS):
        candidate = generate_number(prefix)
        exists = db.query(column).filter(column == candidate).first()
        if not exists:
            return candidate

    raise Conflict(f"No se pudo generar un número único con prefijo {prefix}, intente de nuevo")


def search_pattern(search: str) -> str:
    """
    Patrón para ilike(..., escape="\\"): % y _ del texto se buscan literalmente.
    """
    text = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{text}%"
