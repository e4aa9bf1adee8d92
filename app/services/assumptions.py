"""Project-level financial assumptions (discount rates, adoption, growth, risk...)."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models.financial import ASSUMPTION_CATEGORIES, FinancialAssumption
from app.services.projects import get_project

logger = get_logger(__name__)

UPDATABLE_FIELDS = {
    "assumption_name", "assumption_category", "assumption_value",
    "assumption_unit", "impact_description", "applies_to",
}


def _validate_category(category: Optional[str]) -> str:
    if category not in ASSUMPTION_CATEGORIES:
        raise ValidationError(
            f"Invalid assumption category '{category}'. Must be one of: {', '.join(ASSUMPTION_CATEGORIES)}"
        )
    return category


def _ensure_unique_name(db: Session, project_id: int, name: str, exclude_id: Optional[int] = None):
    query = db.query(FinancialAssumption).filter(
        FinancialAssumption.evaluation_project_id == project_id,
        FinancialAssumption.assumption_name == name
    )
    if exclude_id is not None:
        query = query.filter(FinancialAssumption.id != exclude_id)
    if query.first():
        raise ValidationError(f"Assumption '{name}' already exists in this project")


def create_assumption(
    db: Session,
    project_id: int,
    name: str,
    category: str,
    value: str,
    unit: Optional[str] = None,
    impact_description: Optional[str] = None,
    applies_to: str = "all",
) -> FinancialAssumption:
    get_project(db, project_id)
    if not name or not name.strip():
        raise ValidationError("Assumption name is required")
    if value is None or str(value).strip() == "":
        raise ValidationError("Assumption value is required")
    _validate_category(category)
    _ensure_unique_name(db, project_id, name.strip())

    assumption = FinancialAssumption(
        evaluation_project_id=project_id,
        assumption_name=name.strip(),
        assumption_category=category,
        assumption_value=str(value),
        assumption_unit=unit or None,
        impact_description=impact_description or None,
        applies_to=applies_to or "all",
    )
    db.add(assumption)
    db.commit()
    db.refresh(assumption)
    logger.info(f"Assumption created: {assumption.assumption_name} (ID: {assumption.id})")
    return assumption


def get_assumption(db: Session, assumption_id: int) -> FinancialAssumption:
    assumption = db.query(FinancialAssumption).filter(FinancialAssumption.id == assumption_id).first()
    if not assumption:
        raise NotFoundError(f"Assumption {assumption_id} not found")
    return assumption


def update_assumption(db: Session, assumption_id: int, fields: Dict[str, Any]) -> FinancialAssumption:
    assumption = get_assumption(db, assumption_id)

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown assumption fields: {', '.join(sorted(unknown))}")

    if "assumption_category" in fields:
        _validate_category(fields["assumption_category"])
    if "assumption_name" in fields:
        name = (fields["assumption_name"] or "").strip()
        if not name:
            raise ValidationError("Assumption name is required")
        _ensure_unique_name(db, assumption.evaluation_project_id, name, exclude_id=assumption_id)
        fields = {**fields, "assumption_name": name}

    for key, value in fields.items():
        setattr(assumption, key, str(value) if key == "assumption_value" else value)

    db.commit()
    db.refresh(assumption)
    logger.info(f"Assumption updated (ID: {assumption_id})")
    return assumption


def delete_assumption(db: Session, assumption_id: int) -> bool:
    assumption = get_assumption(db, assumption_id)
    db.delete(assumption)
    db.commit()
    logger.info(f"Assumption deleted (ID: {assumption_id})")
    return True


def get_assumptions(db: Session, project_id: int) -> List[FinancialAssumption]:
    return db.query(FinancialAssumption).filter(
        FinancialAssumption.evaluation_project_id == project_id
    ).order_by(FinancialAssumption.assumption_category, FinancialAssumption.assumption_name).all()
