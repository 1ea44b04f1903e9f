from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mida_app.core.exceptions import InactiveAccount, InvalidCredentials, ValidationError
from mida_app.core.logging_config import get_logger
from mida_app.core.security import decode_access_token, hash_password, issue_token, verify_password
from mida_app.models.user import User
from mida_app.repositories.users import get_user_by_username

logger = get_logger("auth")


def authenticate(db: Session, username: str, password: str) -> tuple[str, User]:
    """
    Valida usuario y contraseña y emite el token.
    El mismo mensaje para usuario inexistente y contraseña incorrecta.
    """
    user = get_user_by_username(db, username)

    if not user or not verify_password(password, user.password_hash):
        logger.warning("Login fallido para '%s'", username)
        raise InvalidCredentials()

    if not user.is_active:
        logger.warning("Login de usuario inactivo '%s'", username)
        raise InactiveAccount()

    token = issue_token(user.id, user.username, user.role)
    _touch_last_activity(db, user)
    logger.info("Login exitoso para '%s'", username)
    return token, user


def _touch_last_activity(db: Session, user: User) -> None:
    # Si falla no se bloquea el login
    try:
        user.updated_at = datetime.utcnow()
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("No se pudo actualizar la última actividad de '%s'", user.username)


def verify_token(db: Session, token: str) -> User:
    """
    Decodifica el token y vuelve a leer el usuario para confirmar
    que sigue existiendo y activo.
    """
    claims = decode_access_token(token)

    user = db.get(User, claims.user_id)
    if user is None:
        raise InvalidCredentials("Usuario no encontrado")

    if not user.is_active:
        raise InactiveAccount()

    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError(
            [{"field": "current_password", "message": "Contraseña actual incorrecta"}],
            message="Contraseña actual incorrecta",
        )

    user.password_hash = hash_password(new_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Contraseña actualizada para '%s'", user.username)
    return user
