import re
from datetime import date

from mida_app.repositories.base import generate_number
from mida_app.services.pdf import certificate_filename

CERTIFICATE = {
    "treatment_type": "Fumigación",
    "product_name": "Fosfuro de Aluminio",
    "application_location": "Muelle 3, Puerto de Balboa",
    "responsible_person": "Carlos Méndez",
    "application_date": "2024-03-15",
    "application_time": "08:30:00",
    "chemical_used": "Fosfina",
    "concentration_used": "2 g/m3",
    "quantity_used": 12.5,
    "unit_used": "kg",
    "weather_conditions": "Soleado",
    "temperature": 31.0,
    "humidity": 70.0,
    "observations": "Contenedor sellado por 72 horas",
}

NUMBER_PATTERN = re.compile(r"^CERT-\d{8}-\d{3}$")


def _create(client, headers, **overrides):
    response = client.post("/api/certificates/", json={**CERTIFICATE, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["certificate"]


def test_generated_number_shape():
    number = generate_number("CERT", date(2024, 3, 15))

    assert NUMBER_PATTERN.match(number)
    assert number.startswith("CERT-20240315-")


def test_create_assigns_number_and_keeps_fields(client, operator_user, operator_headers):
    response = client.post("/api/certificates/", json=CERTIFICATE, headers=operator_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Certificado creado exitosamente"
    certificate = body["certificate"]
    assert NUMBER_PATTERN.match(certificate["certificate_number"])
    assert certificate["created_by"] == operator_user.id
    assert certificate["created_by_name"] == operator_user.full_name
    for field, value in CERTIFICATE.items():
        assert certificate[field] == value


def test_create_then_get_round_trip(client, operator_headers):
    created = _create(client, operator_headers)

    fetched = client.get(f"/api/certificates/{created['id']}", headers=operator_headers)

    assert fetched.status_code == 200
    assert fetched.json() == created


def test_treatment_type_must_be_known(client, operator_headers):
    response = client.post(
        "/api/certificates/",
        json={**CERTIFICATE, "treatment_type": "Magia", "humidity": 140},
        headers=operator_headers,
    )

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert {"treatment_type", "humidity"} <= fields


def test_types_catalog(client, operator_headers):
    response = client.get("/api/certificates/types", headers=operator_headers)

    assert response.status_code == 200
    assert "Fumigación" in response.json()
    assert "Otro" in response.json()


def test_filters(client, operator_headers):
    march = _create(client, operator_headers)
    april = _create(
        client,
        operator_headers,
        treatment_type="Aspersión",
        product_name="Clorpirifos",
        application_date="2024-04-02",
    )

    by_type = client.get(
        "/api/certificates/", params={"treatment_type": "Aspersión"}, headers=operator_headers
    ).json()
    by_range = client.get(
        "/api/certificates/",
        params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
        headers=operator_headers,
    ).json()
    by_search = client.get(
        "/api/certificates/", params={"search": "clorpi"}, headers=operator_headers
    ).json()

    assert [c["id"] for c in by_type] == [april["id"]]
    assert [c["id"] for c in by_range] == [march["id"]]
    assert [c["id"] for c in by_search] == [april["id"]]


def test_date_range_is_inclusive(client, operator_headers):
    created = _create(client, operator_headers)

    listed = client.get(
        "/api/certificates/",
        params={"start_date": "2024-03-15", "end_date": "2024-03-15"},
        headers=operator_headers,
    ).json()

    assert [c["id"] for c in listed] == [created["id"]]


def test_update_keeps_number(client, operator_headers):
    created = _create(client, operator_headers)

    response = client.put(
        f"/api/certificates/{created['id']}",
        json={**CERTIFICATE, "product_name": "Bromuro de Metilo", "observations": None},
        headers=operator_headers,
    )

    assert response.status_code == 200
    updated = response.json()["certificate"]
    assert updated["certificate_number"] == created["certificate_number"]
    assert updated["product_name"] == "Bromuro de Metilo"
    assert updated["observations"] is None


def test_delete(client, operator_headers, admin_headers):
    created = _create(client, operator_headers)

    assert client.delete(f"/api/certificates/{created['id']}", headers=operator_headers).status_code == 403
    response = client.delete(f"/api/certificates/{created['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert client.get(f"/api/certificates/{created['id']}", headers=admin_headers).status_code == 404


def test_certificate_pdf_download(client, operator_headers):
    created = _create(client, operator_headers)

    response = client.get(f"/api/certificates/{created['id']}/pdf", headers=operator_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"certificado-{created['certificate_number']}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")
    assert len(response.content) > 500


def test_pdf_of_unknown_certificate_is_404(client, operator_headers):
    response = client.get("/api/certificates/404/pdf", headers=operator_headers)

    assert response.status_code == 404
    assert response.json()["error"] == "Certificado no encontrado"


def test_certificate_filename():
    class Stub:
        certificate_number = "CERT-20240315-007"

    assert certificate_filename(Stub()) == "certificado-CERT-20240315-007.pdf"


def test_stats_by_type(client, operator_headers):
    _create(client, operator_headers)
    _create(client, operator_headers)
    _create(client, operator_headers, treatment_type="Nebulización")

    stats = client.get("/api/certificates/stats/overview", headers=operator_headers).json()

    assert stats["total_certificates"] == 3
    assert stats["by_treatment_type"] == {"Fumigación": 2, "Nebulización": 1}


def test_search_wildcards_match_literally(client, operator_headers):
    _create(client, operator_headers)

    listed = client.get("/api/certificates/", params={"search": "%"}, headers=operator_headers).json()

    assert listed == []
