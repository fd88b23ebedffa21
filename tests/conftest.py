"""Shared fixtures and utilities for tests."""

import os

# Settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-chars-long-for-hs256")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("THROTTLE_ENABLED", "true")
os.environ.setdefault("THROTTLE_LIMIT", "1000")
os.environ.setdefault("AUTH_THROTTLE_LIMIT", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.config.database import Base, get_db
from api.main import app
from api.middleware.security import rate_limiter
from api.models import Agency, Permission, Role, Tenant, User
from api.services.passwords import hash_password
from api.services.token import create_token, user_claims

PASSWORD = "password123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@dataclass
class Account:
    """Seeded user with a ready-made bearer token."""

    id: int
    email: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass
class World:
    tenant_id: int
    other_tenant_id: int
    agency_id: int
    admin: Account
    employee: Account
    other_employee: Account
    agency_user: Account
    other_agency_user: Account
    foreign_admin: Account


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow on purpose; hash once per run."""
    return hash_password(PASSWORD)


@pytest.fixture
def db():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def world(db, password_hash):
    """Two tenants, the three standard roles and one agency."""
    tenant = Tenant(name="Acme", domain="acme.test")
    other_tenant = Tenant(name="Globex", domain="globex.test")
    db.add_all([tenant, other_tenant])
    db.flush()

    roles = {}
    for name in ("Admin", "Employee", "Agency"):
        roles[name] = Role(tenant_id=tenant.id, name=name)
        roles[name].permissions = [Permission(tenant_id=tenant.id, name=f"{name.upper()}_ACCESS")]
    other_admin_role = Role(tenant_id=other_tenant.id, name="Admin")
    db.add_all([*roles.values(), other_admin_role])
    db.flush()

    def add_user(email, role, tenant_id=tenant.id):
        user = User(tenant_id=tenant_id, email=email, full_name=email.split("@")[0], password_hash=password_hash)
        user.roles = [role]
        db.add(user)
        return user

    users = {
        "admin": add_user("admin@acme.test", roles["Admin"]),
        "employee": add_user("employee@acme.test", roles["Employee"]),
        "other_employee": add_user("employee2@acme.test", roles["Employee"]),
        "agency_user": add_user("agency@acme.test", roles["Agency"]),
        "other_agency_user": add_user("agency2@acme.test", roles["Agency"]),
        "foreign_admin": add_user("admin@globex.test", other_admin_role, other_tenant.id),
    }
    db.flush()

    agency = Agency(tenant_id=tenant.id, name="Staffing Co")
    agency.users = [users["agency_user"]]
    db.add(agency)
    db.flush()

    seeded = World(
        tenant_id=tenant.id,
        other_tenant_id=other_tenant.id,
        agency_id=agency.id,
        **{
            key: Account(id=user.id, email=user.email, token=create_token(user_claims(user)))
            for key, user in users.items()
        },
    )
    db.commit()
    return seeded


@pytest.fixture
def client(db):
    """Test client wired to the per-test database."""

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    rate_limiter.reset()



class Factory:
    """Builds records through the API as a given account."""

    def __init__(self, client: TestClient, world: World):
        self.client = client
        self.world = world

    def client_record(self, **overrides) -> dict:
        body = {"name": "Initech", "assignedEmployeeId": self.world.employee.id, **overrides}
        response = self.client.post("/api/v1/clients", json=body, headers=self.world.admin.headers)
        assert response.status_code == 201, response.text
        return response.json()

    def template(self, client_id: int, schema: list = None, **overrides) -> dict:
        if schema is None:
            schema = [
                {"key": "fullName", "type": "text", "required": True},
                {"key": "experience", "type": "number", "required": True},
                {"key": "level", "type": "select", "options": ["Jr", "Sr"]},
            ]
        body = {"name": "Backend Engineer", "clientId": client_id, "candidateDataSchema": schema, **overrides}
        response = self.client.post("/api/v1/job-templates", json=body, headers=self.world.admin.headers)
        assert response.status_code == 201, response.text
        return response.json()

    def vacancy(self, account: Account, client_id: int, template_id: int, **overrides) -> dict:
        body = {"name": "Senior Backend Engineer", "clientId": client_id, "jobTemplateId": template_id, **overrides}
        response = self.client.post("/api/v1/job-vacancies", json=body, headers=account.headers)
        assert response.status_code == 201, response.text
        return response.json()

    def candidate(self, account: Account, vacancy_id: int, data: dict = None) -> dict:
        if data is None:
            data = {"fullName": "Jane Doe", "experience": 5}
        body = {"jobVacancyId": vacancy_id, "data": data}
        response = self.client.post("/api/v1/candidates", json=body, headers=account.headers)
        assert response.status_code == 201, response.text
        return response.json()


@pytest.fixture
def factory(client, world):
    return Factory(client, world)


@pytest.fixture
def pipeline(factory, world):
    """Client -> template -> vacancy assigned to the seeded agency."""
    client_record = factory.client_record()
    template = factory.template(client_record["id"])
    vacancy = factory.vacancy(
        world.employee,
        client_record["id"],
        template["id"],
        assignedAgencyIds=[world.agency_id],
    )
    return {"client": client_record, "template": template, "vacancy": vacancy}
