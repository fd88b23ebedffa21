"""Tenant model, the isolation boundary for all business data."""

from sqlalchemy import Column, Integer, String, Text

from api.models.base import BaseModel


class Tenant(BaseModel):
    """
    One customer organization. Created at provisioning/seed time.
    """

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    domain = Column(String(255), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name})>"
