"""Shared fixtures: in-memory database, API client and record factories."""

import os

# Point the application at an in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEPARTMENTS"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from employee_registry.database import get_db
from employee_registry.main import app
from employee_registry.models import Base

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    """Create fresh tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_department(client):
    """Create a department through the API and return its payload."""

    def _make(name="Engineering", description=None):
        r = client.post("/api/v1/departments", json={"name": name, "description": description})
        assert r.status_code == 201, r.json()
        return r.json()["data"]

    return _make


@pytest.fixture
def make_employee(client, make_department):
    """Create an employee through the API, creating a department if none is given."""

    def _make(name="Ann Lee", email="ann@company.com", date_of_birth="1990-01-01", department_id=None):
        if department_id is None:
            department_id = make_department(f"Dept for {email}")["id"]
        r = client.post(
            "/api/v1/employees",
            json={
                "name": name,
                "email": email,
                "dateOfBirth": date_of_birth,
                "departmentId": department_id,
            },
        )
        assert r.status_code == 201, r.json()
        return r.json()["data"]

    return _make
