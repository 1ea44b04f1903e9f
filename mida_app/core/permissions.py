from typing import Callable

from fastapi import Depends

from mida_app.api.auth import get_current_user
from mida_app.core.exceptions import PermissionDenied
from mida_app.core.roles import ROLE_ADMIN, Action, Resource
from mida_app.models.user import User


def has_permission(user: User, resource: Resource | str, action: Action | str) -> bool:
    """
    ADMIN siempre tiene acceso.
    Para el resto, la acción debe estar en user.permissions[resource].
    """
    if user.role == ROLE_ADMIN:
        return True

    resource = Resource(resource).value
    action = Action(action).value
    permissions = user.permissions or {}
    return action in (permissions.get(resource) or [])


def authorize(user: User, resource: Resource | str, action: Action | str) -> None:
    if not has_permission(user, resource, action):
        raise PermissionDenied(
            f"Permiso denegado: {Action(action).value} en {Resource(resource).value}"
        )


def require_permission(resource: Resource, action: Action) -> Callable[..., User]:
    """
    Dependencia de FastAPI que exige el permiso (recurso, acción).
    Uso: current_user: User = Depends(require_permission(Resource.INVENTORY, Action.WRITE))
    """

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, resource, action)
        return current_user

    return dependency


def require_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Solo exige que el usuario esté autenticado.
    """
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Solo ADMIN (gestión de permisos de otros usuarios).
    """
    if current_user.role != ROLE_ADMIN:
        raise PermissionDenied("Se requiere rol de administrador")
    return current_user
