from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mida_app.db.session import get_db
from mida_app.core.permissions import require_admin, require_permission, require_user
from mida_app.core.roles import Action, Resource
from mida_app.models.user import User
from mida_app.repositories import users as repo
from mida_app.schemas.user import (
    PasswordReset,
    PermissionsOut,
    PermissionsUpdate,
    ProfileUpdate,
    UserCreate,
    UserEnvelope,
    UserOut,
    UserStats,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])

can_read = require_permission(Resource.USERS, Action.READ)
can_write = require_permission(Resource.USERS, Action.WRITE)
can_delete = require_permission(Resource.USERS, Action.DELETE)


# ------------------ PERFIL PROPIO ------------------ #
@router.get("/profile/me", response_model=UserOut)
def get_my_profile(current_user: User = Depends(require_user)):
    return current_user


@router.put("/profile/me", response_model=UserEnvelope)
def update_my_profile(
    profile_in: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user),
):
    """
    Cada usuario puede cambiar su nombre y correo, nada más.
    """
    user = repo.update_profile(db, current_user, profile_in)
    return UserEnvelope(message="Perfil actualizado exitosamente", user=UserOut.model_validate(user))


@router.get("/stats/overview", response_model=UserStats)
def users_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.user_stats(db)


# ------------------ LISTAR USUARIOS ------------------ #
@router.get("/", response_model=list[UserOut])
def list_users(
    search: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.list_users(db, search, role, is_active)


# -------------------- OBTENER USUARIO POR ID -------------------- #
@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read),
):
    return repo.get_user(db, user_id)


# ------------------ CREAR USUARIO ------------------ #
@router.post("/", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    """
    Si no se envían permisos se asignan los del rol.
    Rol distinto de user o permisos explícitos solo los asigna un ADMIN.
    """
    user = repo.create_user(db, user_in, current_user)
    return UserEnvelope(message="Usuario creado exitosamente", user=UserOut.model_validate(user))


# -------------------- ACTUALIZAR USUARIO (parcial) -------------------- #
@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    user = repo.update_user(db, user_id, user_in, current_user)
    return UserEnvelope(message="Usuario actualizado exitosamente", user=UserOut.model_validate(user))


@router.patch("/{user_id}/password")
def rechange_user_password(
    user_id: int,
    password_in: PasswordReset,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    repo.change_user_password(db, user_id, password_in.new_password)
    return {"message": "Contraseña actualizada exitosamente"}


@router.patch("/{user_id}/toggle-status", response_model=UserEnvelope)
def toggle_user_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_write),
):
    user = repo.toggle_user_status(db, user_id, current_user)
    message = "Usuario activado exitosamente" if user.is_active else "Usuario desactivado exitosamente"
    return UserEnvelope(message=message, user=UserOut.model_validate(user))


# -------------------- PERMISOS (ADMIN) -------------------- #
@router.get("/{user_id}/permissions", response_model=PermissionsOut)
def get_user_permissions(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = repo.get_user(db, user_id)
    return PermissionsOut(
        user_id=user.id,
        username=user.username,
        role=user.role,
        permissions=user.permissions or {},
    )


@router.put("/{user_id}/permissions", response_model=UserEnvelope)
def update_user_permissions(
    user_id: int,
    permissions_in: PermissionsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = repo.update_user_permissions(db, user_id, permissions_in.permissions)
    return UserEnvelope(message="Permisos actualizados exitosamente", user=UserOut.model_validate(user))


# -------------------- ELIMINAR USUARIO -------------------- #
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_delete),
):
    """
    Nadie puede eliminar su propia cuenta.
    """
    repo.delete_user(db, user_id, current_user)
    return {"message": "Usuario eliminado exitosamente"}
