from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from mida_app.core.exceptions import CannotDeleteSelf, Conflict, NotFound, PermissionDenied
from mida_app.core.roles import ROLE_ADMIN, ROLE_USER, default_permissions
from mida_app.core.security import hash_password
from mida_app.models.certificate import TreatmentCertificate
from mida_app.models.chemical import ChemicalInventory
from mida_app.models.treatment import TreatmentSchedule
from mida_app.models.user import User
from mida_app.repositories.base import search_pattern
from mida_app.schemas.user import (
    PermissionMap,
    ProfileUpdate,
    UserCreate,
    UserStats,
    UserUpdate,
    permissions_to_storage,
)

# Columnas que apuntan a users.id para atribución
ATTRIBUTION_COLUMNS = (
    ChemicalInventory.registered_by,
    ChemicalInventory.discarded_by,
    TreatmentCertificate.created_by,
    TreatmentSchedule.created_by,
    TreatmentSchedule.completed_by,
)


def list_users(
    db: Session,
    search: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
) -> list[User]:
    query = db.query(User)

    if search:
        pattern = search_pattern(search)
        query = query.filter(
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.full_name.ilike(pattern, escape="\\"),
            )
        )

    if role:
        query = query.filter(User.role == role)

    if is_active is not None:
        query = query.filter(User.is_active == is_active)

    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("Usuario no encontrado")
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def _require_admin_for(current_user: User, fields: list[str]) -> None:
    # Rol y permisos solo los asigna un ADMIN
    if fields and current_user.role != ROLE_ADMIN:
        raise PermissionDenied(
            f"Se requiere rol de administrador para asignar: {', '.join(fields)}"
        )


def create_user(db: Session, data: UserCreate, current_user: User) -> User:
    restricted = []
    if data.role != ROLE_USER:
        restricted.append("role")
    if data.permissions is not None:
        restricted.append("permissions")
    _require_admin_for(current_user, restricted)

    if get_user_by_username(db, data.username):
        raise Conflict("El nombre de usuario ya existe")

    if data.permissions is not None:
        permissions = permissions_to_storage(data.permissions)
    else:
        permissions = default_permissions(data.role)

    user = User(
        username=data.username,
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        email=data.email,
        role=data.role,
        permissions=permissions,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate, current_user: User) -> User:
    """
    Actualización parcial: solo cambian los campos enviados.
    Rol y permisos solo los cambia un ADMIN.
    """
    user = get_user(db, user_id)

    changes = data.model_dump(exclude_unset=True)
    _require_admin_for(current_user, [field for field in ("role", "permissions") if field in changes])

    if changes.get("is_active") is False and user.id == current_user.id:
        raise Conflict("No puedes desactivar tu propia cuenta")

    if "permissions" in changes:
        changes["permissions"] = (
            permissions_to_storage(data.permissions) if data.permissions is not None else {}
        )

    for field, value in changes.items():
        if field in ("full_name", "role", "is_active") and value is None:
            continue
        setattr(user, field, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    user.full_name = data.full_name
    user.email = data.email
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def change_user_password(db: Session, user_id: int, new_password: str) -> User:
    user = get_user(db, user_id)
    user.password_hash = hash_password(new_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def toggle_user_status(db: Session, user_id: int, current_user: User) -> User:
    user = get_user(db, user_id)
    if user.id == current_user.id:
        raise Conflict("No puedes desactivar tu propia cuenta")

    user.is_active = not user.is_active
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user_permissions(db: Session, user_id: int, permissions: PermissionMap) -> User:
    user = get_user(db, user_id)
    user.permissions = permissions_to_storage(permissions)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, current_user: User) -> None:
    """
    Borra el usuario. Los registros que lo referencian se conservan
    con la referencia en NULL.
    """
    if user_id == current_user.id:
        raise CannotDeleteSelf()

    user = get_user(db, user_id)

    for column in ATTRIBUTION_COLUMNS:
        db.query(column.class_).filter(column == user_id).update(
            {column: None}, synchronize_session=False
        )

    db.delete(user)
    db.commit()


def user_stats(db: Session) -> UserStats:
    total, active, admins = db.query(
        func.count(User.id),
        func.sum(case((User.is_active.is_(True), 1), else_=0)),
        func.sum(case((User.role == ROLE_ADMIN, 1), else_=0)),
    ).one()

    total = total or 0
    active = active or 0
    return UserStats(
        total_users=total,
        active_users=active,
        inactive_users=total - active,
        admin_users=admins or 0,
    )
