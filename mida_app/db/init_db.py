from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from mida_app.core.config import settings
from mida_app.core.logging_config import get_logger
from mida_app.core.roles import ROLE_ADMIN, default_permissions
from mida_app.core.security import hash_password
from mida_app.db.base import Base
from mida_app.models.user import User

# registra todas las tablas en Base.metadata
import mida_app.models  # noqa: F401

logger = get_logger("db")


def create_tables(engine: Engine) -> None:
    # Para producción conviene migrar con Alembic
    Base.metadata.create_all(bind=engine)


def seed_default_admin(db: Session) -> User | None:
    """
    Crea el administrador inicial si está habilitado y no existe.
    Se puede ejecutar varias veces sin duplicar.
    """
    if not settings.SEED_DEFAULT_ADMIN:
        return None

    if not settings.DEFAULT_ADMIN_PASSWORD:
        logger.warning("SEED_DEFAULT_ADMIN activo pero DEFAULT_ADMIN_PASSWORD está vacío, se omite")
        return None

    existing = db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).first()
    if existing:
        return existing

    admin = User(
        username=settings.DEFAULT_ADMIN_USERNAME,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        full_name=settings.DEFAULT_ADMIN_FULL_NAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        role=ROLE_ADMIN,
        permissions=default_permissions(ROLE_ADMIN),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Administrador inicial '%s' creado", admin.username)
    return admin


def init_db(engine: Engine, db: Session) -> None:
    create_tables(engine)
    seed_default_admin(db)


if __name__ == "__main__":
    from mida_app.db.session import SessionLocal, engine

    session = SessionLocal()
    try:
        init_db(engine, session)
    finally:
        session.close()
