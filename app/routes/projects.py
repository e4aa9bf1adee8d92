"""
Project and vendor routes.

Minimal endpoints for the evaluation projects and vendors that financial
data is attached to.

Routes:
    POST /api/projects                    - Create a project
    GET  /api/projects/{id}               - Get a project
    POST /api/projects/{id}/vendors       - Add a vendor
    GET  /api/projects/{id}/vendors       - List vendors
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db import get_db
from app.logging_config import get_logger
from app.services import projects as project_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


class ProjectRequest(BaseModel):
    """Request model for creating a project."""
    name: str
    description: Optional[str] = None


class VendorRequest(BaseModel):
    """Request model for adding a vendor."""
    vendor_name: str


@router.post("/projects")
def create_project(data: ProjectRequest, db: Session = Depends(get_db)):
    project = project_service.create_project(db, data.name, data.description)
    return JSONResponse(project.to_dict(), status_code=201)


@router.get("/projects/{project_id}")
def get_project(project_id: int, db: Session = Depends(get_db)):
    return project_service.get_project(db, project_id).to_dict()


@router.post("/projects/{project_id}/vendors")
def add_vendor(project_id: int, data: VendorRequest, db: Session = Depends(get_db)):
    vendor = project_service.create_vendor(db, project_id, data.vendor_name)
    return JSONResponse(vendor.to_dict(), status_code=201)


@router.get("/projects/{project_id}/vendors")
def list_vendors(project_id: int, db: Session = Depends(get_db)):
    project_service.get_project(db, project_id)
    return {"vendors": [v.to_dict() for v in project_service.list_vendors(db, project_id)]}
