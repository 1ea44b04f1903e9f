from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from mida_app.db.session import get_db
from mida_app.core.permissions import require_permission
from mida_app.core.roles import Action, Resource
from mida_app.models.user import User
from mida_app.schemas.certificate import CertificateOut, TreatmentType
from mida_app.schemas.chemical import Area, ChemicalOut, ChemicalStatus
from mida_app.schemas.report import ListReport, MonthlyReportOut, ReportType
from mida_app.schemas.treatment import LocationType, ScheduleOut, ScheduleStatus
from mida_app.services import pdf
from mida_app.services import reports as service

router = APIRouter(prefix="/reports", tags=["reports"])

can_read = require_permission(Resource.REPORTS, Action.READ)

ReportFormat = Literal["pdf", "json"]


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _json_report(report: dict, schema) -> ListReport:
    return ListReport(
        report_type=report["report_type"],
        generated_at=report["generated_at"],
        filters=report["filters"],
        total_records=report["total_records"],
        data=[schema.model_validate(record).model_dump(mode="json") for record in report["data"]],
    )


@router.get("/types", response_model=list[ReportType])
def list_report_types(current_user: User = Depends(can_read)):
    return service.report_types()


# ------------------ REPORTE DE INVENTARIO ------------------ #
@router.get("/inventory")
def inventory_report(
    start_date: date | None = None,
    end_date: date | None = None,
    status: ChemicalStatus | None = None,
    area: Area | None = None,
    format: ReportFormat = "pdf",
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    """
    format=pdf (por defecto) descarga el archivo; format=json devuelve los datos.
    """
    report = service.inventory_report(db, start_date, end_date, status, area)
    if format == "json":
        return _json_report(report, ChemicalOut)

    content = pdf.render_table_report_pdf(
        "REPORTE DE INVENTARIO QUÍMICO",
        report["data"],
        pdf.INVENTORY_COLUMNS,
        start_date,
        end_date,
        count_label="Total de productos",
    )
    return _pdf_response(content, pdf.report_filename("inventario"))


# ------------------ REPORTE DE CERTIFICADOS ------------------ #
@router.get("/certificates")
def certificates_report(
    start_date: date | None = None,
    end_date: date | None = None,
    treatment_type: TreatmentType | None = None,
    format: ReportFormat = "pdf",
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    report = service.certificates_report(db, start_date, end_date, treatment_type)
    if format == "json":
        return _json_report(report, CertificateOut)

    content = pdf.render_table_report_pdf(
        "REPORTE DE CERTIFICADOS DE TRATAMIENTO",
        report["data"],
        pdf.CERTIFICATE_COLUMNS,
        start_date,
        end_date,
        count_label="Total de certificados",
    )
    return _pdf_response(content, pdf.report_filename("certificados"))


# ------------------ REPORTE DE TRATAMIENTOS ------------------ #
@router.get("/treatments")
def treatments_report(
    start_date: date | None = None,
    end_date: date | None = None,
    status: ScheduleStatus | None = None,
    location_type: LocationType | None = None,
    format: ReportFormat = "pdf",
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    report = service.treatments_report(db, start_date, end_date, status, location_type)
    if format == "json":
        return _json_report(report, ScheduleOut)

    content = pdf.render_table_report_pdf(
        "REPORTE DE PROGRAMACIÓN DE TRATAMIENTOS",
        report["data"],
        pdf.TREATMENT_COLUMNS,
        start_date,
        end_date,
        count_label="Total de tratamientos",
    )
    return _pdf_response(content, pdf.report_filename("tratamientos"))


# ------------------ REPORTE MENSUAL ------------------ #
@router.get("/monthly/{year}/{month}")
def monthly_report(
    year: int,
    month: int,
    format: ReportFormat = "pdf",
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    report = service.monthly_report(db, year, month)
    if format == "json":
        return MonthlyReportOut(generated_at=datetime.utcnow(), period=report.period, data=report)

    content = pdf.render_monthly_report_pdf(report, year, month)
    return _pdf_response(content, pdf.monthly_filename(year, month))
