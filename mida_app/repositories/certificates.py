from datetime import date

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mida_app.core.exceptions import Conflict, NotFound
from mida_app.models.certificate import TreatmentCertificate
from mida_app.models.user import User
from mida_app.repositories.base import filter_date_range, generate_unique_number, search_pattern
from mida_app.schemas.certificate import CertificateCreate, CertificateStats, CertificateUpdate

CERTIFICATE_PREFIX = "CERT"


def list_certificates(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    treatment_type: str | None = None,
    search: str | None = None,
) -> list[TreatmentCertificate]:
    query = db.query(TreatmentCertificate)

    query = filter_date_range(query, TreatmentCertificate.application_date, start_date, end_date)

    if treatment_type:
        query = query.filter(TreatmentCertificate.treatment_type == treatment_type)

    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                TreatmentCertificate.product_name.ilike(pattern, escape="\\"),
                TreatmentCertificate.certificate_number.ilike(pattern, escape="\\"),
                TreatmentCertificate.responsible_person.ilike(pattern, escape="\\"),
            )
        )

    return query.order_by(TreatmentCertificate.created_at.desc(), TreatmentCertificate.id.desc()).all()


def get_certificate(db: Session, certificate_id: int) -> TreatmentCertificate:
    certificate = db.get(TreatmentCertificate, certificate_id)
    if not certificate:
        raise NotFound("Certificado no encontrado")
    return certificate


def create_certificate(db: Session, data: CertificateCreate, current_user: User) -> TreatmentCertificate:
    certificate = TreatmentCertificate(
        **data.model_dump(),
        certificate_number=generate_unique_number(
            db, TreatmentCertificate.certificate_number, CERTIFICATE_PREFIX
        ),
        created_by=current_user.id,
    )
    db.add(certificate)
    try:
        db.commit()
    except IntegrityError:
        # otra petición tomó el mismo número entre la verificación y el INSERT
        db.rollback()
        raise Conflict("El número de certificado ya existe, intente de nuevo")
    db.refresh(certificate)
    return certificate


def update_certificate(db: Session, certificate_id: int, data: CertificateUpdate) -> TreatmentCertificate:
    """
    Sobrescribe todos los campos (no es un merge parcial).
    """
    certificate = get_certificate(db, certificate_id)

    for field, value in data.model_dump().items():
        setattr(certificate, field, value)

    db.add(certificate)
    db.commit()
    db.refresh(certificate)
    return certificate


def delete_certificate(db: Session, certificate_id: int) -> None:
    certificate = get_certificate(db, certificate_id)
    db.delete(certificate)
    db.commit()


def certificate_stats(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
) -> CertificateStats:
    query = db.query(TreatmentCertificate.treatment_type, func.count(TreatmentCertificate.id))
    query = filter_date_range(query, TreatmentCertificate.application_date, start_date, end_date)
    rows = query.group_by(TreatmentCertificate.treatment_type).all()

    by_type = {treatment_type: count for treatment_type, count in rows}
    return CertificateStats(
        total_certificates=sum(by_type.values()),
        by_treatment_type=by_type,
    )
