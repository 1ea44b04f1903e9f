"""
Generación de documentos PDF (certificados y reportes) con reportlab.

Todo el documento se arma en memoria y se devuelve como bytes; si algo
falla se lanza DocumentGenerationError y nunca se envía un PDF a medias.
"""

import io
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from mida_app.core.exceptions import DocumentGenerationError
from mida_app.core.logging_config import get_logger

logger = get_logger("pdf")

MINISTRY_NAME = "MINISTERIO DE DESARROLLO AGROPECUARIO"
DEPARTMENT_NAME = "Dirección Ejecutiva de Cuarentena"
SYSTEM_NOTE = "Este documento es generado automáticamente por el Sistema de Inventarios Químicos del MIDA."

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 50
ROW_HEIGHT = 15
# Por debajo de esta altura se empieza una página nueva
BOTTOM_LIMIT = 70

MONTH_NAMES = {
    1: "Enero", 2: "Febrero", 3: "Marzo", 4: "Abril", 5: "Mayo", 6: "Junio",
    7: "Julio", 8: "Agosto", 9: "Septiembre", 10: "Octubre", 11: "Noviembre", 12: "Diciembre",
}


@dataclass(frozen=True)
class ReportColumn:
    """Columna de un reporte tabular: encabezado, ancho en puntos y cómo sacar el valor."""
    header: str
    width: float
    value: Callable[[Any], Any]
    max_chars: int | None = None


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d/%m/%Y")


def format_time(value: time | None) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%H:%M")


def format_number(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:g}"


def truncate(value: Any, max_chars: int | None) -> str:
    text = "N/A" if value is None or value == "" else str(value)
    if max_chars is not None and len(text) > max_chars:
        return text[:max_chars]
    return text


def _now_label() -> str:
    return datetime.now().strftime("%d/%m/%Y %H:%M")


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "ministry": ParagraphStyle("Ministry", parent=base["Title"], fontSize=18, leading=22, spaceAfter=4),
        "department": ParagraphStyle(
            "Department", parent=base["Heading2"], fontSize=14, alignment=TA_CENTER, spaceAfter=14
        ),
        "title": ParagraphStyle(
            "DocTitle", parent=base["Heading1"], fontSize=16, alignment=TA_CENTER, spaceAfter=18
        ),
        "section": ParagraphStyle("Section", parent=base["Heading2"], fontSize=14, spaceBefore=12, spaceAfter=8),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=11, leading=15),
        "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=9, leading=12),
        "center": ParagraphStyle(
            "Center", parent=base["Normal"], fontSize=10, leading=13, alignment=TA_CENTER
        ),
    }


def _letterhead(styles: dict, title: str) -> list:
    return [
        Paragraph(MINISTRY_NAME, styles["ministry"]),
        Paragraph(DEPARTMENT_NAME, styles["department"]),
        Paragraph(escape(title), styles["title"]),
    ]


def _page_number(pdf: canvas.Canvas, _doc: Any = None) -> None:
    pdf.saveState()
    pdf.setFont("Helvetica", 8)
    pdf.drawRightString(PAGE_WIDTH - MARGIN, 30, f"Página {pdf.getPageNumber()}")
    pdf.restoreState()


def _build(flowables: list, title: str) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=title,
        author=MINISTRY_NAME,
    )
    doc.build(flowables, onFirstPage=_page_number, onLaterPages=_page_number)
    return buffer.getvalue()


# ---------------------- CERTIFICADO ---------------------- #

def certificate_filename(certificate: Any) -> str:
    return f"certificado-{certificate.certificate_number}.pdf"


def render_certificate_pdf(certificate: Any) -> bytes:
    """
    Certificado de tratamiento: membrete, lista de campos y pie con
    quién lo generó y cuándo.
    """
    try:
        styles = _styles()
        story = _letterhead(styles, "CERTIFICADO DE TRATAMIENTO")

        fields = [
            ("Número de Certificado", certificate.certificate_number),
            ("Tipo de Tratamiento", certificate.treatment_type),
            ("Producto", certificate.product_name),
            ("Lugar de Aplicación", certificate.application_location),
            ("Responsable", certificate.responsible_person),
            ("Fecha de Aplicación", format_date(certificate.application_date)),
            ("Hora de Aplicación", format_time(certificate.application_time)),
        ]

        # Campos opcionales solo si vienen informados
        if certificate.chemical_used:
            fields.append(("Químico Utilizado", certificate.chemical_used))
        if certificate.concentration_used:
            fields.append(("Concentración", certificate.concentration_used))
        if certificate.quantity_used is not None:
            fields.append(
                ("Cantidad", f"{format_number(certificate.quantity_used)} {certificate.unit_used or ''}".strip())
            )
        if certificate.weather_conditions:
            fields.append(("Condiciones Climáticas", certificate.weather_conditions))
        if certificate.temperature is not None:
            fields.append(("Temperatura", f"{format_number(certificate.temperature)} °C"))
        if certificate.humidity is not None:
            fields.append(("Humedad", f"{format_number(certificate.humidity)} %"))

        table = Table(
            [
                [Paragraph(f"<b>{escape(label)}:</b>", styles["body"]), Paragraph(escape(str(value)), styles["body"])]
                for label, value in fields
            ],
            colWidths=[170, PAGE_WIDTH - 2 * MARGIN - 170],
        )
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.HexColor("#cbd5e0")),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        story.append(table)

        if certificate.observations:
            story.append(Spacer(1, 14))
            story.append(Paragraph("<b>Observaciones:</b>", styles["body"]))
            story.append(Paragraph(escape(certificate.observations), styles["small"]))

        story.append(Spacer(1, 40))
        story.append(Paragraph(escape(SYSTEM_NOTE), styles["center"]))
        story.append(
            Paragraph(f"Generado por: {escape(certificate.created_by_name or 'N/A')}", styles["center"])
        )
        story.append(Paragraph(f"Fecha de generación: {_now_label()}", styles["center"]))

        return _build(story, f"Certificado {certificate.certificate_number}")
    except Exception as exc:
        logger.exception("Error generando el PDF del certificado %s", getattr(certificate, "id", None))
        raise DocumentGenerationError() from exc


# ---------------------- REPORTE TABULAR ---------------------- #

def report_filename(report_type: str, today: date | None = None) -> str:
    return f"reporte-{report_type}-{(today or date.today()).isoformat()}.pdf"


def _draw_table_header(pdf: canvas.Canvas, columns: Sequence[ReportColumn], y: float) -> float:
    pdf.setFont("Helvetica-Bold", 9)
    x = MARGIN
    for column in columns:
        pdf.drawString(x, y, column.header)
        x += column.width
    pdf.setLineWidth(0.5)
    pdf.line(MARGIN, y - 4, PAGE_WIDTH - MARGIN, y - 4)
    pdf.setFont("Helvetica", 9)
    return y - ROW_HEIGHT - 2


def render_table_report_pdf(
    title: str,
    rows: Iterable[Any],
    columns: Sequence[ReportColumn],
    start_date: date | None = None,
    end_date: date | None = None,
    count_label: str = "Total de registros",
) -> bytes:
    """
    Reporte en forma de tabla. Cada celda se recorta a max_chars de su
    columna. Al llegar al límite inferior se abre una página nueva y se
    repite la fila de encabezados.
    """
    rows = list(rows)
    try:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(title)
        pdf.setAuthor(MINISTRY_NAME)

        y = PAGE_HEIGHT - MARGIN
        pdf.setFont("Helvetica-Bold", 16)
        pdf.drawCentredString(PAGE_WIDTH / 2, y, MINISTRY_NAME)
        y -= 22
        pdf.setFont("Helvetica", 13)
        pdf.drawCentredString(PAGE_WIDTH / 2, y, DEPARTMENT_NAME)
        y -= 30
        pdf.setFont("Helvetica-Bold", 14)
        pdf.drawCentredString(PAGE_WIDTH / 2, y, title)
        y -= 30

        pdf.setFont("Helvetica", 10)
        pdf.drawString(MARGIN, y, f"Fecha de generación: {_now_label()}")
        y -= 14
        pdf.drawString(MARGIN, y, f"{count_label}: {len(rows)}")
        y -= 14
        if start_date or end_date:
            start_label = format_date(start_date) if start_date else "Inicio"
            end_label = format_date(end_date) if end_date else "Fin"
            pdf.drawString(MARGIN, y, f"Período: {start_label} - {end_label}")
            y -= 14
        y -= 16

        y = _draw_table_header(pdf, columns, y)

        for row in rows:
            if y < BOTTOM_LIMIT:
                _page_number(pdf)
                pdf.showPage()
                y = _draw_table_header(pdf, columns, PAGE_HEIGHT - MARGIN)

            x = MARGIN
            for column in columns:
                pdf.drawString(x, y, truncate(column.value(row), column.max_chars))
                x += column.width
            y -= ROW_HEIGHT

        if not rows:
            pdf.drawString(MARGIN, y, "No hay registros para los filtros seleccionados.")

        _page_number(pdf)
        pdf.save()
        return buffer.getvalue()
    except Exception as exc:
        logger.exception("Error generando el reporte '%s'", title)
        raise DocumentGenerationError() from exc


INVENTORY_COLUMNS = (
    ReportColumn("Fecha", 70, lambda r: format_date(r.registered_at)),
    ReportColumn("Producto", 100, lambda r: r.chemical_name, max_chars=18),
    ReportColumn("Cantidad", 65, lambda r: f"{format_number(r.quantity)} {r.unit}", max_chars=12),
    ReportColumn("Estado", 60, lambda r: r.status),
    ReportColumn("Área", 70, lambda r: r.area, max_chars=13),
    ReportColumn("Registrado por", 70, lambda r: r.registered_by_name, max_chars=13),
    ReportColumn("Ubicación", 60, lambda r: r.storage_location, max_chars=11),
)

CERTIFICATE_COLUMNS = (
    ReportColumn("Fecha", 70, lambda r: format_date(r.application_date)),
    ReportColumn("Número", 105, lambda r: r.certificate_number),
    ReportColumn("Tipo", 80, lambda r: r.treatment_type, max_chars=15),
    ReportColumn("Producto", 90, lambda r: r.product_name, max_chars=16),
    ReportColumn("Responsable", 80, lambda r: r.responsible_person, max_chars=15),
    ReportColumn("Ubicación", 70, lambda r: r.application_location, max_chars=13),
)

TREATMENT_COLUMNS = (
    ReportColumn("Fecha", 65, lambda r: format_date(r.scheduled_date)),
    ReportColumn("Tipo", 80, lambda r: r.treatment_type, max_chars=14),
    ReportColumn("Estado", 65, lambda r: r.status),
    ReportColumn("Responsable", 85, lambda r: r.responsible_person, max_chars=15),
    ReportColumn("Ubicación", 85, lambda r: r.location_name, max_chars=15),
    ReportColumn("Lugar", 60, lambda r: r.location_type),
    ReportColumn("Prioridad", 55, lambda r: r.priority),
)


# ---------------------- REPORTE MENSUAL ---------------------- #

def monthly_filename(year: int, month: int) -> str:
    return f"reporte-mensual-{year}-{month:02d}.pdf"


def render_monthly_report_pdf(report: Any, year: int, month: int) -> bytes:
    """
    Resumen mensual por secciones (inventario, certificados, tratamientos).
    """
    try:
        styles = _styles()
        story = _letterhead(styles, "REPORTE MENSUAL COMPRENSIVO")
        story.append(Paragraph(f"Período: {MONTH_NAMES[month]} {year}", styles["center"]))
        story.append(Paragraph(f"Fecha de generación: {_now_label()}", styles["center"]))
        story.append(Spacer(1, 16))

        inventory = report.inventory
        story.append(Paragraph("INVENTARIO QUÍMICO", styles["section"]))
        for line in (
            f"Total de productos químicos: {inventory.total_chemicals}",
            f"Productos activos: {inventory.active_chemicals}",
            f"Productos descartados: {inventory.discarded_chemicals}",
            f"Productos vencidos: {inventory.expired_chemicals}",
            f"Cantidad total en inventario: {format_number(inventory.total_quantity)}",
        ):
            story.append(Paragraph(line, styles["body"]))

        story.append(Paragraph("CERTIFICADOS DE TRATAMIENTO", styles["section"]))
        story.append(
            Paragraph(
                f"Total de certificados generados: {report.certificates.total_certificates}",
                styles["body"],
            )
        )

        treatments = report.treatments
        story.append(Paragraph("PROGRAMACIÓN DE TRATAMIENTOS", styles["section"]))
        for line in (
            f"Total de tratamientos programados: {treatments.total_treatments}",
            f"Tratamientos completados: {treatments.completed_treatments}",
            f"Tratamientos pendientes: {treatments.scheduled_treatments}",
            f"Tratamientos en progreso: {treatments.in_progress_treatments}",
            f"Tratamientos cancelados: {treatments.cancelled_treatments}",
        ):
            story.append(Paragraph(line, styles["body"]))

        story.append(Spacer(1, 40))
        story.append(Paragraph(escape(SYSTEM_NOTE.replace("documento", "reporte")), styles["center"]))

        return _build(story, f"Reporte mensual {month:02d}/{year}")
    except Exception as exc:
        logger.exception("Error generando el reporte mensual %s/%s", month, year)
        raise DocumentGenerationError() from exc
