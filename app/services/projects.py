"""
Project and vendor lookups shared by the financial services.

Projects and vendors are owned by the wider evaluation workspace; this
module only creates and resolves them so the engine has something to
hang cost data on.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models.evaluation import EvaluationProject, Vendor

logger = get_logger(__name__)


def create_project(db: Session, name: str, description: Optional[str] = None) -> EvaluationProject:
    if not name or not name.strip():
        raise ValidationError("Project name is required")
    project = EvaluationProject(name=name.strip(), description=description)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info(f"Evaluation project created: {project.name} (ID: {project.id})")
    return project


def get_project(db: Session, project_id: int) -> EvaluationProject:
    """Return the project or raise NotFoundError."""
    if project_id is None:
        raise ValidationError("Evaluation project is required")
    project = db.query(EvaluationProject).filter(EvaluationProject.id == project_id).first()
    if not project:
        raise NotFoundError(f"Evaluation project {project_id} not found")
    return project


def create_vendor(db: Session, project_id: int, vendor_name: str) -> Vendor:
    get_project(db, project_id)
    if not vendor_name or not vendor_name.strip():
        raise ValidationError("Vendor name is required")
    vendor = Vendor(evaluation_project_id=project_id, vendor_name=vendor_name.strip())
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    logger.info(f"Vendor added: {vendor.vendor_name} (ID: {vendor.id}) to project {project_id}")
    return vendor


def list_vendors(db: Session, project_id: int) -> List[Vendor]:
    """Vendors of a project in insertion order."""
    return db.query(Vendor).filter(
        Vendor.evaluation_project_id == project_id
    ).order_by(Vendor.id).all()


def get_vendor(db: Session, project_id: int, vendor_id: int) -> Vendor:
    """Return a vendor belonging to the project or raise NotFoundError."""
    if vendor_id is None:
        raise ValidationError("Vendor is required")
    vendor = db.query(Vendor).filter(
        Vendor.id == vendor_id,
        Vendor.evaluation_project_id == project_id
    ).first()
    if not vendor:
        raise NotFoundError(f"Vendor {vendor_id} not found in project {project_id}")
    return vendor
