"""
Evaluation project and vendor models.

These are the collaborator tables the financial analysis engine reads from:
a project groups the vendors under evaluation, and every cost entry, TCO
summary, scenario and ROI calculation hangs off one project.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from app.models import Base


class EvaluationProject(Base):
    """A vendor evaluation project."""
    __tablename__ = "evaluation_projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    vendors = relationship("Vendor", back_populates="project", cascade="all, delete-orphan",
                           order_by="Vendor.id")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Vendor(Base):
    """A vendor under evaluation within one project."""
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)
    vendor_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    project = relationship("EvaluationProject", back_populates="vendors")

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "vendor_name": self.vendor_name,
        }
