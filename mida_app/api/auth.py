from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from mida_app.api import get_db
from mida_app.core.exceptions import TokenMissing
from mida_app.core.logging_config import set_user_id
from mida_app.models.user import User
from mida_app.schemas.token import LoginRequest, Token, TokenVerification
from mida_app.schemas.user import PasswordChange, UserOut
from mida_app.services.auth import authenticate, change_password, verify_token

router = APIRouter(prefix="/auth", tags=["auth"])

# auto_error=False: la falta de token se reporta con nuestro propio error
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


# ---------- OBTENER USUARIO ACTUAL (para endpoints protegidos) ----------

def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise TokenMissing()

    user = verify_token(db, token)
    request.state.user_id = user.id
    set_user_id(str(user.id))
    return user


# ---------- LOGIN ----------

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    token, user = authenticate(db, credentials.username, credentials.password)
    return Token(token=token, user=UserOut.model_validate(user))


# ---------- VERIFICAR TOKEN ----------

@router.get("/verify", response_model=TokenVerification)
def verify(current_user: User = Depends(get_current_user)):
    return TokenVerification(valid=True, user=UserOut.model_validate(current_user))


# ---------- CAMBIAR CONTRASEÑA PROPIA ----------

@router.post("/change-password")
def change_own_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    change_password(db, current_user, data.current_password, data.new_password)
    return {"message": "Contraseña actualizada exitosamente"}
