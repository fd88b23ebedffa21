"""Client model for the companies vacancies are recruited for."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from api.models.base import BaseModel


class Client(BaseModel):
    """
    Hiring company, looked after by exactly one employee.
    """

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    # Identity
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)

    # Assignment
    assigned_employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    assigned_employee = relationship("User")
    job_templates = relationship("JobTemplate", back_populates="client")
    job_vacancies = relationship("JobVacancy", back_populates="client")

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name})>"
