"""Agency model for external recruitment agencies."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from api.config.database import Base
from api.models.base import BaseModel


agency_users = Table(
    "agency_users",
    Base.metadata,
    Column("agency_id", Integer, ForeignKey("agencies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Agency(BaseModel):
    """
    Recruitment agency. Its member users submit candidates to the
    vacancies the agency is assigned to.
    """

    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)

    # Relationships
    users = relationship("User", secondary=agency_users, order_by="User.id")

    def __repr__(self) -> str:
        return f"<Agency(id={self.id}, name={self.name})>"
