from datetime import date

import pytest

from mida_app.core.exceptions import ValidationError
from mida_app.services.reports import month_bounds

TODAY = date.today()


def _seed(client, headers):
    chemical = client.post(
        "/api/inventory/",
        json={"chemical_name": "Cloruro de Sodio", "quantity": 50, "unit": "kg", "area": "PPC Balboa"},
        headers=headers,
    ).json()["chemical"]
    certificate = client.post(
        "/api/certificates/",
        json={
            "treatment_type": "Fumigación",
            "product_name": "Fosfuro de Aluminio",
            "application_location": "Muelle 3",
            "responsible_person": "Carlos Méndez",
            "application_date": TODAY.isoformat(),
            "application_time": "08:30:00",
        },
        headers=headers,
    ).json()["certificate"]
    treatment = client.post(
        "/api/treatments/",
        json={
            "treatment_type": "Aspersión",
            "location_type": "puerto",
            "location_name": "Patio A",
            "chemical_name": "Cipermetrina",
            "quantity_planned": 20,
            "unit": "L",
            "scheduled_date": TODAY.isoformat(),
            "scheduled_time": "23:00:00",
            "responsible_person": "Ana Torres",
        },
        headers=headers,
    ).json()["treatment"]
    return chemical, certificate, treatment


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


@pytest.mark.parametrize("year, month", [(2024, 0), (2024, 13), (1999, 5)])
def test_month_bounds_rejects_invalid_period(year, month):
    with pytest.raises(ValidationError):
        month_bounds(year, month)


def test_report_types_catalog(client, operator_headers):
    response = client.get("/api/reports/types", headers=operator_headers)

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == ["inventory", "certificates", "treatments", "monthly"]


def test_reports_need_read_permission(client, reader_headers):
    assert client.get("/api/reports/types", headers=reader_headers).status_code == 403


def test_inventory_report_json(client, operator_headers):
    chemical, _, _ = _seed(client, operator_headers)

    response = client.get(
        "/api/reports/inventory", params={"format": "json", "area": "PPC Balboa"}, headers=operator_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["report_type"] == "inventory"
    assert body["filters"] == {"area": "PPC Balboa"}
    assert body["total_records"] == 1
    assert body["data"][0]["id"] == chemical["id"]


def test_certificates_report_json_filters_by_type(client, operator_headers):
    _seed(client, operator_headers)

    response = client.get(
        "/api/reports/certificates",
        params={"format": "json", "treatment_type": "Otro"},
        headers=operator_headers,
    )

    assert response.json()["total_records"] == 0


@pytest.mark.parametrize(
    "path, filename",
    [
        ("/api/reports/inventory", "reporte-inventario-"),
        ("/api/reports/certificates", "reporte-certificados-"),
        ("/api/reports/treatments", "reporte-tratamientos-"),
    ],
)
def test_list_reports_default_to_pdf(client, operator_headers, path, filename):
    _seed(client, operator_headers)

    response = client.get(path, headers=operator_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert filename in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_monthly_report_json(client, operator_headers):
    _, _, treatment = _seed(client, operator_headers)
    client.patch(
        f"/api/treatments/{treatment['id']}/status", json={"status": "completed"}, headers=operator_headers
    )

    response = client.get(
        f"/api/reports/monthly/{TODAY.year}/{TODAY.month}", params={"format": "json"}, headers=operator_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["report_type"] == "monthly_comprehensive"
    assert body["period"] == f"{TODAY.month:02d}/{TODAY.year}"
    data = body["data"]
    assert data["inventory"]["total_chemicals"] == 1
    assert data["certificates"]["total_certificates"] == 1
    assert data["treatments"]["total_treatments"] == 1
    assert data["treatments"]["completed_treatments"] == 1


def test_monthly_report_excludes_other_months(client, operator_headers):
    _seed(client, operator_headers)
    year = TODAY.year - 1

    data = client.get(
        f"/api/reports/monthly/{year}/{TODAY.month}", params={"format": "json"}, headers=operator_headers
    ).json()["data"]

    assert data["inventory"]["total_chemicals"] == 0
    assert data["certificates"]["total_certificates"] == 0
    assert data["treatments"]["total_treatments"] == 0


def test_monthly_report_pdf(client, operator_headers):
    _seed(client, operator_headers)

    response = client.get(f"/api/reports/monthly/{TODAY.year}/{TODAY.month}", headers=operator_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"reporte-mensual-{TODAY.year}-{TODAY.month:02d}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_monthly_report_invalid_month(client, operator_headers):
    response = client.get("/api/reports/monthly/2024/13", headers=operator_headers)

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "month"
