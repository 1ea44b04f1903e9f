"""
Excepciones del dominio.

Las rutas y repositorios lanzan estas excepciones; los manejadores
registrados en main.py las traducen a respuestas JSON con la forma
{"error": mensaje, "code": código, "details": [...]}.
"""

from typing import Any, List, Optional


class MidaError(Exception):
    """Base de todos los errores de la aplicación."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "Error interno del servidor",
        details: Optional[List[Any]] = None,
    ):
        self.message = message
        self.details = details or []
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class InternalError(MidaError):
    pass


# ---------- Validación ----------

class ValidationError(MidaError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, details: List[Any], message: str = "Datos de entrada inválidos"):
        super().__init__(message, details)


class Conflict(MidaError):
    status_code = 400
    code = "CONFLICT"


class InvalidStatusTransition(MidaError):
    status_code = 409
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, new: str):
        super().__init__(f"Transición de estado no permitida: {current} -> {new}")
        self.current = current
        self.new = new


# ---------- Autenticación ----------

class InvalidCredentials(MidaError):
    status_code = 401
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Usuario o contraseña incorrectos"):
        super().__init__(message)


class InactiveAccount(MidaError):
    status_code = 401
    code = "INACTIVE_ACCOUNT"

    def __init__(self, message: str = "Usuario inactivo"):
        super().__init__(message)


class TokenMissing(MidaError):
    status_code = 401
    code = "TOKEN_MISSING"

    def __init__(self, message: str = "Token de acceso requerido"):
        super().__init__(message)


class TokenExpired(MidaError):
    status_code = 401
    code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "Token expirado"):
        super().__init__(message)


class TokenInvalid(MidaError):
    status_code = 403
    code = "TOKEN_INVALID"

    def __init__(self, message: str = "Token inválido"):
        super().__init__(message)


# ---------- Autorización ----------

class PermissionDenied(MidaError):
    status_code = 403
    code = "PERMISSION_DENIED"

    def __init__(self, message: str = "Acceso denegado"):
        super().__init__(message)


class CannotDeleteSelf(MidaError):
    status_code = 400
    code = "CANNOT_DELETE_SELF"

    def __init__(self, message: str = "No puedes eliminar tu propia cuenta"):
        super().__init__(message)


# ---------- Recursos ----------

class NotFound(MidaError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Recurso no encontrado"):
        super().__init__(message)


class DocumentGenerationError(MidaError):
    status_code = 500
    code = "DOCUMENT_GENERATION_ERROR"

    def __init__(self, message: str = "Error generando el documento"):
        super().__init__(message)
