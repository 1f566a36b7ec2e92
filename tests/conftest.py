import os

# Settings are read at import time, so the test environment must be in place first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leaveflow.constants.constants import ROLE_IDS, RoleName
from leaveflow.core.database import get_db, seed_roles
from leaveflow.core.security import Principal, create_jwt_token
from leaveflow.main import app
from leaveflow.models.base import Base
from leaveflow.services.UserManagementService import UserManagementService

DEFAULT_PASSWORD = "Password123!"
FAR_FUTURE = date.today() + timedelta(days=365)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    seed_roles(session)
    session.commit()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, db_session):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role=RoleName.employee, department="Ops", balance=None, email=None, **kwargs):
        counter["n"] += 1
        return UserManagementService(db_session).add_user(
            firstname=kwargs.get("firstname", f"User{counter['n']}"),
            surname=kwargs.get("surname", "Tester"),
            email=email or f"user{counter['n']}@company.com",
            password=kwargs.get("password", DEFAULT_PASSWORD),
            role_id=ROLE_IDS[role],
            department=department,
            annual_leave_balance=balance,
        )

    return _make_user


@pytest.fixture
def employee(make_user):
    return make_user(RoleName.employee, email="employee1@company.com", firstname="Emma", surname="Employee")


@pytest.fixture
def manager(make_user):
    return make_user(RoleName.manager, email="manager@northbridge.com", firstname="Mark", surname="Manager")


@pytest.fixture
def admin(make_user):
    return make_user(RoleName.admin, email="admin1@company.com", firstname="Ada", surname="Admin")


@pytest.fixture
def team(db_session, employee, manager):
    """``employee`` reports to ``manager`` from today."""
    UserManagementService(db_session).assign_manager(employee.user_id, manager.user_id)
    return employee, manager


def principal_for(user) -> Principal:
    return Principal(user_id=user.user_id, role=user.role_name)


def auth_headers(user) -> dict:
    token = create_jwt_token({"userId": user.user_id, "role": user.role_name.value})
    return {"Authorization": f"Bearer {token}"}


def reload(db_session, obj):
    db_session.expire_all()
    db_session.refresh(obj)
    return obj
