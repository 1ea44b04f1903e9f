from pydantic import BaseModel

from mida_app.schemas.common import NonEmptyStr
from mida_app.schemas.user import UserOut


class LoginRequest(BaseModel):
    username: NonEmptyStr
    password: NonEmptyStr


class Token(BaseModel):
    message: str = "Inicio de sesión exitoso"
    token: str
    token_type: str = "bearer"
    user: UserOut


class TokenVerification(BaseModel):
    valid: bool
    user: UserOut
