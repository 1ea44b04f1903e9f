from datetime import datetime
from typing import Dict, List
from pydantic import AliasChoices, BaseModel, EmailStr, ConfigDict, Field, field_validator

from mida_app.core.roles import ALLOWED_ROLES, Action, Resource
from mida_app.schemas.common import NonEmptyStr

# Mapa tipado de permisos: recurso -> acciones (enums cerrados)
PermissionMap = Dict[Resource, List[Action]]

# Alias heredados del cliente
ROLE_ALIASES = {"operativo": "user"}


def normalize_role(v: str) -> str:
    """
    Normaliza y valida el rol.
    - lo pasa a minúsculas
    - Rechaza cualquier valor que no esté en ALLOWED_ROLES
    """
    if not v or not v.strip():
        raise ValueError("El rol no puede estar vacío")

    rol_normalizado = v.strip().lower()
    rol_normalizado = ROLE_ALIASES.get(rol_normalizado, rol_normalizado)

    if rol_normalizado not in ALLOWED_ROLES:
        roles_str = " - ".join(sorted(ALLOWED_ROLES))
        raise ValueError(f"Rol inválido. Debe ser uno de: {roles_str}")

    return rol_normalizado


def permissions_to_storage(permissions: PermissionMap) -> Dict[str, List[str]]:
    """Convierte el mapa tipado al formato JSON guardado en la tabla."""
    stored: Dict[str, List[str]] = {}
    for resource, actions in permissions.items():
        unique = []
        for action in actions:
            if action.value not in unique:
                unique.append(action.value)
        stored[resource.value] = unique
    return stored


def validate_password_length(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("La contraseña no puede estar vacía")
    if len(v) < 6:
        raise ValueError("La contraseña debe tener al menos 6 caracteres")
    return v


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str
    full_name: NonEmptyStr
    email: EmailStr | None = None
    role: str = "user"
    permissions: PermissionMap | None = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Usuario debe tener al menos 3 caracteres")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return normalize_role(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class UserUpdate(BaseModel):
    """
    Todos los campos son opcionales (solo se cambia lo que se envía).
    """
    full_name: NonEmptyStr | None = None
    email: EmailStr | None = None
    role: str | None = None
    permissions: PermissionMap | None = None
    is_active: bool | None = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return normalize_role(v)


class ProfileUpdate(BaseModel):
    full_name: NonEmptyStr
    email: EmailStr | None = None


class PasswordReset(BaseModel):
    new_password: str = Field(validation_alias=AliasChoices("new_password", "newPassword"))

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)


class PasswordChange(PasswordReset):
    current_password: str = Field(
        min_length=1, validation_alias=AliasChoices("current_password", "currentPassword")
    )


class PermissionsUpdate(BaseModel):
    permissions: PermissionMap


class UserOut(BaseModel):
    id: int
    username: str
    full_name: str
    email: str | None = None
    role: str
    permissions: Dict[str, List[str]] = {}
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Para convertir automáticamente desde objetos SQLAlchemy
    model_config = ConfigDict(from_attributes=True)


class UserStats(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int


class UserEnvelope(BaseModel):
    message: str
    user: UserOut


class PermissionsOut(BaseModel):
    user_id: int
    username: str
    role: str
    permissions: Dict[str, List[str]] = {}
