"""User model for people who sign in to the system."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from api.config.database import Base
from api.models.base import BaseModel


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(BaseModel):
    """
    Admins, employees and agency staff.

    tenant_id is NULL only for global seed accounts.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)

    # Identity
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)

    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    roles = relationship("Role", secondary=user_roles, order_by="Role.id")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
