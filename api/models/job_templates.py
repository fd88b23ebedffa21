"""JobTemplate model, the source of candidate data schemas."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from api.models.base import BaseModel


class JobTemplate(BaseModel):
    """
    Reusable job definition for a client.

    candidate_data_schema is an ordered list of field definitions:
    [{"key": "fullName", "type": "text", "required": true, "label": "Full Name"}, ...]
    """

    __tablename__ = "job_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    candidate_data_schema = Column(JSON, nullable=False, default=list)

    # Relationships
    client = relationship("Client", back_populates="job_templates")

    def __repr__(self) -> str:
        return f"<JobTemplate(id={self.id}, name={self.name})>"
