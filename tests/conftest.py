"""
Fixtures compartidas: base SQLite en memoria, cliente HTTP y usuarios.
"""
import os
from typing import Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Antes de importar la app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "clave-de-pruebas"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEFAULT_ADMIN"] = "false"
os.environ["ENVIRONMENT"] = "testing"

from mida_app.main import app
from mida_app.core.roles import ROLE_ADMIN, ROLE_USER, default_permissions
from mida_app.core.security import hash_password, issue_token
from mida_app.db.base import Base
from mida_app.db.session import get_db
from mida_app.models.user import User

fake = Faker("es_ES")

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)

DEFAULT_PASSWORD = "clave123"


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Base limpia para cada prueba."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    """Crea usuarios directamente en la base."""

    def _make_user(
        username: str | None = None,
        role: str = ROLE_USER,
        permissions: dict | None = None,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
    ) -> User:
        user = User(
            username=username or f"usr_{fake.unique.user_name()}",
            password_hash=hash_password(password),
            full_name=fake.name(),
            email=f"{fake.unique.user_name()}@mida.gob.pa",
            role=role,
            permissions=default_permissions(role) if permissions is None else permissions,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


def auth_headers_for(user: User) -> dict:
    token = issue_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(username="admin", role=ROLE_ADMIN)


@pytest.fixture
def operator_user(make_user) -> User:
    return make_user(username="operador")


@pytest.fixture
def reader_user(make_user) -> User:
    """Solo puede leer inventario."""
    return make_user(username="lector", permissions={"inventory": ["read"]})


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def operator_headers(operator_user: User) -> dict:
    return auth_headers_for(operator_user)


@pytest.fixture
def reader_headers(reader_user: User) -> dict:
    return auth_headers_for(reader_user)
