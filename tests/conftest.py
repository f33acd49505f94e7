"""
Общие фикстуры тестов.

Окружение задаётся до импорта app.*: настройки читаются один раз.
Каждый тест получает чистую in-memory SQLite (StaticPool), подменяющую get_db.
"""

import os

os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import get_settings  # noqa: E402
from app.core.security import Identity, create_access_token, get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import RoleEnum, User  # noqa: E402
from app.repositories.users import UserRepository  # noqa: E402

DEFAULT_PASSWORD = "s3cret-pass"


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: fast tests without external services")


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return UserRepository(db)


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Создаёт пользователя напрямую в БД, минуя регистрацию."""

    def _make_user(
        phone: str = "+22670000001",
        password: str = DEFAULT_PASSWORD,
        role: RoleEnum = RoleEnum.user,
        approved: bool = True,
        is_active: bool = True,
    ) -> User:
        with session_factory() as session:
            user = User(
                first_name="Awa",
                last_name="Ouedraogo",
                phone=phone,
                hashed_password=get_password_hash(password),
                birth_date=date(2010, 5, 4),
                country="Burkina Faso",
                nationality="Burkinabe",
                role=role,
                is_active=is_active,
                approved=approved,
                pending_approval=not approved,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    return _make_user


@pytest.fixture
def auth_headers(settings):
    def _auth_headers(user_id: int, phone: str = "+22670000001", role: str = "user") -> dict:
        token = create_access_token(Identity(id=user_id, phone=phone, role=role), settings)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin_headers(make_user, auth_headers):
    admin = make_user(phone="+22679999999", role=RoleEnum.admin)
    return auth_headers(admin.id, admin.phone, "admin")


def registration_payload(**overrides) -> dict:
    payload = {
        "first_name": "Awa",
        "last_name": "Ouedraogo",
        "phone": "+22670000001",
        "password": DEFAULT_PASSWORD,
        "birth_date": "2010-05-04",
        "country": "Burkina Faso",
        "nationality": "Burkinabe",
    }
    payload.update(overrides)
    return payload
