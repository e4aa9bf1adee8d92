"""
Cost ledger for vendor financial analysis.

Itemized per-vendor, per-category cost entries spanning up to five years.
This module validates and stores entries; it performs no aggregation.

Validation rules:
- project and vendor references are required
- cost_category must be one of COST_CATEGORIES
- yearly amounts: missing or non-numeric input becomes 0, negative is rejected
"""

import math
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models.financial import COST_CATEGORIES, YEARS, CostBreakdown
from app.services.projects import get_project, get_vendor

logger = get_logger(__name__)

YEAR_FIELDS = [f"year_{i}_cost" for i in range(1, YEARS + 1)]
UPDATABLE_FIELDS = set(YEAR_FIELDS) | {
    "cost_category", "cost_description", "is_recurring", "is_estimated", "notes", "source"
}


def coerce_amount(value: Any, field: str = "amount") -> float:
    """
    Convert a yearly cost input to a float.

    None, blank strings and anything that does not parse as a number become 0.
    Negative amounts raise ValidationError.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative (got {amount})")
    return amount


def validate_category(category: Optional[str]) -> str:
    if not category:
        raise ValidationError("Cost category is required")
    if category not in COST_CATEGORIES:
        raise ValidationError(
            f"Invalid cost category '{category}'. Must be one of: {', '.join(COST_CATEGORIES)}"
        )
    return category


def _yearly_amounts(yearly_costs: Optional[Sequence[Any]]) -> List[float]:
    values = list(yearly_costs or [])
    if len(values) > YEARS:
        raise ValidationError(f"At most {YEARS} yearly cost values are supported")
    values += [0] * (YEARS - len(values))
    return [coerce_amount(v, YEAR_FIELDS[i]) for i, v in enumerate(values)]


def _find_entry(db: Session, project_id: int, vendor_id: int, category: str,
                description: Optional[str], exclude_id: Optional[int] = None) -> Optional[CostBreakdown]:
    """Look up an entry by its (project, vendor, category, description) key; no description matches no description."""
    query = db.query(CostBreakdown).filter(
        CostBreakdown.evaluation_project_id == project_id,
        CostBreakdown.vendor_id == vendor_id,
        CostBreakdown.cost_category == category,
    )
    if description is None:
        query = query.filter(CostBreakdown.cost_description.is_(None))
    else:
        query = query.filter(CostBreakdown.cost_description == description)
    if exclude_id is not None:
        query = query.filter(CostBreakdown.id != exclude_id)
    return query.first()


def _ensure_unique_entry(db: Session, project_id: int, vendor_id: int, category: str,
                         description: Optional[str], exclude_id: Optional[int] = None):
    if _find_entry(db, project_id, vendor_id, category, description, exclude_id):
        label = f"'{description}'" if description else "without description"
        raise ValidationError(
            f"A {category} cost entry {label} already exists for vendor {vendor_id}"
        )


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error {action}: {e}")
        db.rollback()
        raise


def create_cost_entry(
    db: Session,
    project_id: int,
    vendor_id: int,
    category: str,
    yearly_costs: Optional[Sequence[Any]] = None,
    description: Optional[str] = None,
    is_recurring: bool = False,
    is_estimated: bool = True,
    notes: Optional[str] = None,
    source: Optional[str] = None,
) -> CostBreakdown:
    """
    Create an itemized cost entry for a vendor.

    Args:
        yearly_costs: Up to five yearly amounts, year 1 first; missing years are 0

    Returns:
        The stored CostBreakdown
    """
    if project_id is None:
        raise ValidationError("Evaluation project is required")
    if vendor_id is None:
        raise ValidationError("Vendor is required")
    get_project(db, project_id)
    get_vendor(db, project_id, vendor_id)
    validate_category(category)
    amounts = _yearly_amounts(yearly_costs)
    description = description or None
    _ensure_unique_entry(db, project_id, vendor_id, category, description)

    entry = CostBreakdown(
        evaluation_project_id=project_id,
        vendor_id=vendor_id,
        cost_category=category,
        cost_description=description,
        is_recurring=bool(is_recurring),
        is_estimated=is_estimated is not False,
        notes=notes or None,
        source=source or None,
        **dict(zip(YEAR_FIELDS, amounts)),
    )
    db.add(entry)
    _commit(db, "creating cost entry")
    db.refresh(entry)

    logger.info(
        f"Cost entry created: {category} (ID: {entry.id}) for vendor {vendor_id}, "
        f"total {sum(amounts):,.2f}"
    )
    return entry


def get_cost_entry(db: Session, entry_id: int) -> CostBreakdown:
    entry = db.query(CostBreakdown).filter(CostBreakdown.id == entry_id).first()
    if not entry:
        raise NotFoundError(f"Cost entry {entry_id} not found")
    return entry


def update_cost_entry(db: Session, entry_id: int, fields: Dict[str, Any]) -> CostBreakdown:
    """
    Apply a partial update; only the supplied fields change.

    Every field is validated before any is applied, so a rejected update
    leaves the entry untouched.
    """
    entry = get_cost_entry(db, entry_id)

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown cost entry fields: {', '.join(sorted(unknown))}")

    changes = {}
    for key, value in fields.items():
        if key == "cost_category":
            value = validate_category(value)
        elif key == "cost_description":
            value = value or None
        elif key in YEAR_FIELDS:
            value = coerce_amount(value, key)
        elif key in ("is_recurring", "is_estimated"):
            value = bool(value)
        changes[key] = value

    if "cost_category" in changes or "cost_description" in changes:
        _ensure_unique_entry(
            db,
            entry.evaluation_project_id,
            entry.vendor_id,
            changes.get("cost_category", entry.cost_category),
            changes.get("cost_description", entry.cost_description),
            exclude_id=entry.id,
        )

    for key, value in changes.items():
        setattr(entry, key, value)

    _commit(db, f"updating cost entry {entry_id}")
    db.refresh(entry)
    logger.info(f"Cost entry updated (ID: {entry_id}): {', '.join(sorted(fields))}")
    return entry


def delete_cost_entry(db: Session, entry_id: int) -> bool:
    entry = get_cost_entry(db, entry_id)
    db.delete(entry)
    _commit(db, f"deleting cost entry {entry_id}")
    logger.info(f"Cost entry deleted (ID: {entry_id})")
    return True


def list_cost_entries(db: Session, project_id: int, vendor_id: Optional[int] = None) -> List[CostBreakdown]:
    """Cost entries for a project, optionally one vendor, ordered by category then description."""
    query = db.query(CostBreakdown).filter(CostBreakdown.evaluation_project_id == project_id)
    if vendor_id is not None:
        query = query.filter(CostBreakdown.vendor_id == vendor_id)
    return query.order_by(
        CostBreakdown.cost_category, CostBreakdown.cost_description, CostBreakdown.id
    ).all()


def _upsert_row(db: Session, project_id: int, vendor_id: int, row: Dict[str, Any]) -> CostBreakdown:
    category = validate_category(row.get("cost_category"))
    description = row.get("cost_description") or None
    amounts = [coerce_amount(row.get(field), field) for field in YEAR_FIELDS]

    entry = _find_entry(db, project_id, vendor_id, category, description)

    if entry is None:
        entry = CostBreakdown(
            evaluation_project_id=project_id,
            vendor_id=vendor_id,
            cost_category=category,
            cost_description=description,
        )
        db.add(entry)
        # autoflush is off; make the new row visible to later matches in this batch
        db.flush()

    for field, amount in zip(YEAR_FIELDS, amounts):
        setattr(entry, field, amount)
    entry.is_recurring = bool(row.get("is_recurring", False))
    entry.is_estimated = row.get("is_estimated") is not False
    entry.notes = row.get("notes") or None
    entry.source = row.get("source") or None
    return entry


def bulk_import_costs(db: Session, project_id: int, vendor_id: int, costs: List[Dict[str, Any]]) -> List[CostBreakdown]:
    """
    Insert or overwrite many cost entries for one vendor.

    Rows are matched on (category, description); a match is overwritten,
    anything else is inserted. The batch commits once; an invalid row
    discards the whole batch.
    """
    get_project(db, project_id)
    get_vendor(db, project_id, vendor_id)

    imported = []
    try:
        for position, row in enumerate(costs, start=1):
            imported.append(_upsert_row(db, project_id, vendor_id, row))
    except ValidationError as e:
        logger.warning(f"Bulk import for vendor {vendor_id} rejected at row {position}: {e.message}")
        db.rollback()
        raise

    _commit(db, f"importing costs for vendor {vendor_id}")
    for entry in imported:
        db.refresh(entry)

    logger.info(f"Bulk import: {len(imported)} cost entries for vendor {vendor_id} in project {project_id}")
    return imported
