#!/usr/bin/env python3
"""Seed the database with a default tenant, roles, users and sample data.

Every record is created only if absent, so the script can be re-run safely.

Usage:
    python scripts/seed.py
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import from api
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session

from api.config.database import SessionLocal, init_db
from api.models import Agency, Client, JobTemplate, JobVacancy, Permission, Role, Tenant, User
from api.services.passwords import hash_password
from api.services.template_schema import snapshot_schema

DEFAULT_PASSWORD = "password123"

PERMISSIONS = [
    ("CREATE_JOB", "Permission to create job vacancies"),
    ("UPDATE_JOB", "Permission to update job vacancies"),
    ("DELETE_JOB", "Permission to delete job vacancies"),
    ("VIEW_CANDIDATES", "Permission to view candidates"),
    ("CREATE_CANDIDATE", "Permission to create candidates"),
    ("UPDATE_CANDIDATE", "Permission to update candidates"),
    ("DELETE_CANDIDATE", "Permission to delete candidates"),
    ("MANAGE_CLIENTS", "Permission to manage clients"),
    ("MANAGE_TEMPLATES", "Permission to manage job templates"),
    ("MANAGE_USERS", "Permission to manage users"),
    ("MANAGE_ROLES", "Permission to manage roles and permissions"),
]

# role name -> (description, permission names; None = all)
ROLES = {
    "Admin": ("Administrator with full system access", None),
    "Employee": (
        "Employee managing clients and job vacancies",
        ["CREATE_JOB", "UPDATE_JOB", "VIEW_CANDIDATES", "MANAGE_CLIENTS"],
    ),
    "Agency": (
        "Agency user managing candidates",
        ["VIEW_CANDIDATES", "CREATE_CANDIDATE", "UPDATE_CANDIDATE", "DELETE_CANDIDATE"],
    ),
}

USERS = [
    ("admin@rms.com", "Admin User", "Admin"),
    ("employee@rms.com", "Employee User", "Employee"),
    ("agency@rms.com", "Agency User", "Agency"),
]

SAMPLE_SCHEMA = [
    {"key": "fullName", "type": "text", "required": True, "label": "Full Name"},
    {"key": "email", "type": "email", "required": True, "label": "Email Address"},
    {"key": "phone", "type": "text", "required": False, "label": "Phone Number"},
    {"key": "experience", "type": "number", "required": True, "label": "Years of Experience"},
    {"key": "skills", "type": "textarea", "required": True, "label": "Technical Skills"},
    {
        "key": "level",
        "type": "select",
        "required": False,
        "label": "Seniority",
        "options": ["Junior", "Mid", "Senior"],
    },
]


def seed_tenant(db: Session) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.name == "Default Tenant").first()
    if tenant:
        print(f"  Tenant already exists (id={tenant.id})")
        return tenant

    tenant = Tenant(name="Default Tenant", description="Default tenant for RMS", domain="rms.local")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    print(f"  Created tenant: {tenant.name} (id={tenant.id})")
    return tenant


def seed_permissions(db: Session, tenant: Tenant) -> dict[str, Permission]:
    permissions = {}
    for name, description in PERMISSIONS:
        permission = (
            db.query(Permission)
            .filter(Permission.tenant_id == tenant.id, Permission.name == name)
            .first()
        )
        if not permission:
            permission = Permission(tenant_id=tenant.id, name=name, description=description)
            db.add(permission)
            print(f"  Created permission: {name}")
        permissions[name] = permission
    db.commit()
    return permissions


def seed_roles(db: Session, tenant: Tenant, permissions: dict[str, Permission]) -> dict[str, Role]:
    roles = {}
    for name, (description, permission_names) in ROLES.items():
        role = db.query(Role).filter(Role.tenant_id == tenant.id, Role.name == name).first()
        if not role:
            names = permission_names if permission_names is not None else list(permissions)
            role = Role(tenant_id=tenant.id, name=name, description=description)
            role.permissions = [permissions[n] for n in names]
            db.add(role)
            print(f"  Created role: {name}")
        roles[name] = role
    db.commit()
    return roles


def seed_users(db: Session, tenant: Tenant, roles: dict[str, Role]) -> dict[str, User]:
    users = {}
    password_hash = hash_password(DEFAULT_PASSWORD)
    for email, full_name, role_name in USERS:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(
                tenant_id=tenant.id,
                email=email,
                full_name=full_name,
                password_hash=password_hash,
            )
            user.roles = [roles[role_name]]
            db.add(user)
            print(f"  Created user: {email}")
        users[role_name] = user
    db.commit()
    return users


def seed_sample_data(db: Session, tenant: Tenant, users: dict[str, User]) -> None:
    """Agency, client, job template and vacancy wired together for a quick demo."""
    agency = db.query(Agency).filter(Agency.tenant_id == tenant.id, Agency.name == "Default Agency").first()
    if not agency:
        agency = Agency(
            tenant_id=tenant.id,
            name="Default Agency",
            description="Sample recruitment agency",
            contact_email="agency@rms.com",
        )
        agency.users = [users["Agency"]]
        db.add(agency)
        print("  Created agency: Default Agency")

    client = db.query(Client).filter(Client.tenant_id == tenant.id, Client.name == "TechCorp Solutions").first()
    if not client:
        client = Client(
            tenant_id=tenant.id,
            name="TechCorp Solutions",
            description="Leading technology solutions provider",
            contact_email="contact@techcorp.com",
            contact_phone="+1-555-0101",
            address="123 Tech Street, San Francisco, CA 94105",
            assigned_employee_id=users["Employee"].id,
        )
        db.add(client)
        print("  Created client: TechCorp Solutions")
    db.commit()

    template = (
        db.query(JobTemplate)
        .filter(JobTemplate.client_id == client.id, JobTemplate.name == "Software Developer")
        .first()
    )
    if not template:
        template = JobTemplate(
            tenant_id=tenant.id,
            client_id=client.id,
            name="Software Developer",
            description="Full-stack software developer position",
            candidate_data_schema=snapshot_schema(SAMPLE_SCHEMA),
        )
        db.add(template)
        db.commit()
        print("  Created job template: Software Developer")

    vacancy = (
        db.query(JobVacancy)
        .filter(JobVacancy.client_id == client.id, JobVacancy.name == "Senior Software Developer")
        .first()
    )
    if not vacancy:
        vacancy = JobVacancy(
            tenant_id=tenant.id,
            client_id=client.id,
            job_template_id=template.id,
            created_by_id=users["Employee"].id,
            name="Senior Software Developer",
            description="Looking for experienced full-stack developer",
            candidate_data_schema=snapshot_schema(template.candidate_data_schema),
        )
        vacancy.assigned_agencies = [agency]
        db.add(vacancy)
        db.commit()
        print("  Created job vacancy: Senior Software Developer")


def seed(db: Session) -> None:
    print("Seeding tenant...")
    tenant = seed_tenant(db)
    print("Seeding permissions and roles...")
    permissions = seed_permissions(db, tenant)
    roles = seed_roles(db, tenant, permissions)
    print("Seeding users...")
    users = seed_users(db, tenant, roles)
    print("Seeding sample data...")
    seed_sample_data(db, tenant, users)


def main():
    init_db()
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()

    print("\nDone. Sample credentials:")
    for email, _, role_name in USERS:
        print(f"  {role_name}: {email} / {DEFAULT_PASSWORD}")


if __name__ == "__main__":
    main()
