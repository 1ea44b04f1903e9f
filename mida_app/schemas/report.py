from datetime import datetime
from typing import Any, Dict, List
from pydantic import BaseModel

from mida_app.schemas.chemical import InventoryStats
from mida_app.schemas.treatment import TreatmentStats


class ReportType(BaseModel):
    id: str
    name: str
    description: str
    endpoint: str
    filters: List[str]


class MonthlyCertificates(BaseModel):
    total_certificates: int = 0


class MonthlyReport(BaseModel):
    period: str
    start_date: str
    end_date: str
    inventory: InventoryStats
    certificates: MonthlyCertificates
    treatments: TreatmentStats


class ListReport(BaseModel):
    report_type: str
    generated_at: datetime
    filters: Dict[str, Any]
    total_records: int
    data: List[Any]


class MonthlyReportOut(BaseModel):
    report_type: str = "monthly_comprehensive"
    generated_at: datetime
    period: str
    data: MonthlyReport
