from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.hash import sha256_crypt

from mida_app.core.config import settings
from mida_app.core.exceptions import TokenExpired, TokenInvalid


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    username: str
    role: str


def hash_password(password: str) -> str:
    """
    Hashea una contraseña usando sha256_crypt (Passlib).
    Incluye sal aleatoria y miles de rondas.
    """
    if not password or not password.strip():
        raise ValueError("La contraseña no puede estar vacía")

    return sha256_crypt.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verifica una contraseña contra su hash (comparación en tiempo constante).
    """
    if not plain or not hashed:
        return False

    try:
        return sha256_crypt.verify(plain, hashed)
    except ValueError:
        # hash corrupto o con otro formato
        return False


def create_access_token(
    data: dict,
    expires_minutes: int | None = None,
) -> str:
    """
    Crea un JWT de acceso.
    """
    to_encode = data.copy()

    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return encoded_jwt


def issue_token(user_id: int, username: str, role: str) -> str:
    return create_access_token({"sub": str(user_id), "username": username, "role": role})


def decode_access_token(token: str) -> TokenClaims:
    """
    Valida firma y expiración del token y devuelve sus claims.
    Lanza TokenExpired o TokenInvalid.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise TokenInvalid()

    sub = payload.get("sub")
    if sub is None or not str(sub).isdigit():
        raise TokenInvalid()

    return TokenClaims(
        user_id=int(sub),
        username=payload.get("username", ""),
        role=payload.get("role", ""),
    )
