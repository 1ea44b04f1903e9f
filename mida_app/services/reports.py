import calendar
from datetime import date, datetime

from sqlalchemy.orm import Session

from mida_app.core.exceptions import ValidationError
from mida_app.repositories.certificates import certificate_stats, list_certificates
from mida_app.repositories.inventory import inventory_stats, list_chemicals
from mida_app.repositories.treatments import list_schedules, treatment_stats
from mida_app.schemas.report import MonthlyCertificates, MonthlyReport, ReportType

REPORT_TYPES = [
    ReportType(
        id="inventory",
        name="Reporte de Inventario",
        description="Reporte detallado del inventario de productos químicos",
        endpoint="/api/reports/inventory",
        filters=["start_date", "end_date", "status", "area"],
    ),
    ReportType(
        id="certificates",
        name="Reporte de Certificados",
        description="Reporte de certificados de tratamiento generados",
        endpoint="/api/reports/certificates",
        filters=["start_date", "end_date", "treatment_type"],
    ),
    ReportType(
        id="treatments",
        name="Reporte de Tratamientos",
        description="Reporte de programación de tratamientos químicos",
        endpoint="/api/reports/treatments",
        filters=["start_date", "end_date", "status", "location_type"],
    ),
    ReportType(
        id="monthly",
        name="Reporte Mensual",
        description="Reporte mensual comprensivo de todas las actividades",
        endpoint="/api/reports/monthly/{year}/{month}",
        filters=["year", "month"],
    ),
]


def report_types() -> list[ReportType]:
    """Catálogo estático para que el cliente arme sus formularios."""
    return REPORT_TYPES


def month_bounds(year: int, month: int) -> tuple[date, date]:
    errors = []
    if not 1 <= month <= 12:
        errors.append({"field": "month", "message": "El mes debe estar entre 1 y 12"})
    if not 2000 <= year <= 2100:
        errors.append({"field": "year", "message": "Año fuera de rango"})
    if errors:
        raise ValidationError(errors)

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def monthly_report(db: Session, year: int, month: int) -> MonthlyReport:
    """
    Mismas estadísticas de cada módulo, limitadas al mes pedido.
    """
    start, end = month_bounds(year, month)

    certificates = certificate_stats(db, start, end)

    return MonthlyReport(
        period=f"{month:02d}/{year}",
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        inventory=inventory_stats(db, start, end),
        certificates=MonthlyCertificates(total_certificates=certificates.total_certificates),
        treatments=treatment_stats(db, start, end),
    )


def list_report(report_type: str, filters: dict, records: list) -> dict:
    return {
        "report_type": report_type,
        "generated_at": datetime.utcnow(),
        "filters": filters,
        "total_records": len(records),
        "data": records,
    }


def _filters(**values) -> dict:
    # solo los filtros que el cliente envió
    return {key: value for key, value in values.items() if value is not None}


def inventory_report(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    status: str | None = None,
    area: str | None = None,
) -> dict:
    records = list_chemicals(db, area=area, status=status, date_from=start_date, date_to=end_date)
    filters = _filters(start_date=start_date, end_date=end_date, status=status, area=area)
    return list_report("inventory", filters, records)


def certificates_report(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    treatment_type: str | None = None,
) -> dict:
    records = list_certificates(db, start_date=start_date, end_date=end_date, treatment_type=treatment_type)
    filters = _filters(start_date=start_date, end_date=end_date, treatment_type=treatment_type)
    return list_report("certificates", filters, records)


def treatments_report(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    status: str | None = None,
    location_type: str | None = None,
) -> dict:
    records = list_schedules(
        db, status=status, location_type=location_type, start_date=start_date, end_date=end_date
    )
    filters = _filters(start_date=start_date, end_date=end_date, status=status, location_type=location_type)
    return list_report("treatments", filters, records)
