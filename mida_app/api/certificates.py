from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mida_app.db.session import get_db
from mida_app.core.permissions import require_permission
from mida_app.core.roles import Action, Resource
from mida_app.models.certificate import TREATMENT_TYPES
from mida_app.models.user import User
from mida_app.repositories import certificates as repo
from mida_app.schemas.certificate import (
    CertificateCreate,
    CertificateEnvelope,
    CertificateOut,
    CertificateStats,
    CertificateUpdate,
    TreatmentType,
)
from mida_app.services.pdf import certificate_filename, render_certificate_pdf

router = APIRouter(prefix="/certificates", tags=["certificates"])

can_read = require_permission(Resource.CERTIFICATES, Action.READ)
can_write = require_permission(Resource.CERTIFICATES, Action.WRITE)
can_delete = require_permission(Resource.CERTIFICATES, Action.DELETE)


# ------------------ TIPOS DE TRATAMIENTO ------------------ #
@router.get("/types", response_model=list[str])
def list_treatment_types(current_user: User = Depends(can_read)):
    return list(TREATMENT_TYPES)


@router.get("/stats/overview", response_model=CertificateStats)
def certificates_overview(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.certificate_stats(db, start_date, end_date)


# -------- LISTAR CERTIFICADOS + filtros ------------- #
@router.get("/", response_model=list[CertificateOut])
def list_certificates(
    start_date: date | None = None,
    end_date: date | None = None,
    treatment_type: TreatmentType | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    """
    Lista certificados, el más reciente primero.
    El rango de fechas se aplica sobre la fecha de aplicación.
    """
    return repo.list_certificates(db, start_date, end_date, treatment_type, search)


@router.get("/{certificate_id}", response_model=CertificateOut)
def get_certificate(
    certificate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.get_certificate(db, certificate_id)


# ------------------ PDF DEL CERTIFICADO ------------------ #
@router.get("/{certificate_id}/pdf")
def download_certificate_pdf(
    certificate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    certificate = repo.get_certificate(db, certificate_id)
    content = render_certificate_pdf(certificate)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{certificate_filename(certificate)}"'
        },
    )


# ------------------ CREAR CERTIFICADO ------------------ #
@router.post("/", response_model=CertificateEnvelope, status_code=status.HTTP_201_CREATED)
def create_certificate(
    certificate_in: CertificateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    """
    El número (CERT-AAAAMMDD-NNN) lo asigna el servidor.
    """
    certificate = repo.create_certificate(db, certificate_in, current_user)
    return CertificateEnvelope(
        message="Certificado creado exitosamente",
        certificate=CertificateOut.model_validate(certificate),
    )


@router.put("/{certificate_id}", response_model=CertificateEnvelope)
def update_certificate(
    certificate_id: int,
    certificate_in: CertificateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    certificate = repo.update_certificate(db, certificate_id, certificate_in)
    return CertificateEnvelope(
        message="Certificado actualizado exitosamente",
        certificate=CertificateOut.model_validate(certificate),
    )


@router.delete("/{certificate_id}")
def delete_certificate(
    certificate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_delete),
):
    repo.delete_certificate(db, certificate_id)
    return {"message": "Certificado eliminado exitosamente"}
