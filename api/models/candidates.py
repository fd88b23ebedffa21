"""Candidate model for people submitted to a vacancy by an agency."""

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from api.models.base import BaseModel


class Candidate(BaseModel):
    """
    Candidate submitted by an agency user.

    data must conform to the owning vacancy's candidate_data_schema.
    """

    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    job_vacancy_id = Column(Integer, ForeignKey("job_vacancies.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    data = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_candidates_vacancy_creator", "job_vacancy_id", "created_by_id"),
    )

    # Relationships
    job_vacancy = relationship("JobVacancy", back_populates="candidates")
    created_by = relationship("User")

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, job_vacancy_id={self.job_vacancy_id})>"
