"""JobVacancy model for open positions agencies recruit against."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from api.config.database import Base
from api.models.base import BaseModel


vacancy_agencies = Table(
    "vacancy_agencies",
    Base.metadata,
    Column("job_vacancy_id", Integer, ForeignKey("job_vacancies.id", ondelete="CASCADE"), primary_key=True),
    Column("agency_id", Integer, ForeignKey("agencies.id", ondelete="CASCADE"), primary_key=True),
)


class JobVacancy(BaseModel):
    """
    Open position for a client, created from a job template.

    candidate_data_schema is a copy of the template's schema taken at
    creation time; later template edits do not reach it.
    """

    __tablename__ = "job_vacancies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    job_template_id = Column(Integer, ForeignKey("job_templates.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    candidate_data_schema = Column(JSON, nullable=False, default=list)

    # Relationships
    client = relationship("Client", back_populates="job_vacancies")
    job_template = relationship("JobTemplate")
    created_by = relationship("User")
    assigned_agencies = relationship("Agency", secondary=vacancy_agencies, order_by="Agency.id")
    candidates = relationship("Candidate", back_populates="job_vacancy")

    @property
    def assigned_agency_ids(self) -> list[int]:
        return [agency.id for agency in self.assigned_agencies]

    def __repr__(self) -> str:
        return f"<JobVacancy(id={self.id}, name={self.name})>"
