"""
Database engine and session factory.

Model modules are imported here so every table is registered on
Base.metadata before init_db runs.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.config import DATABASE_URL
from app.logging_config import get_logger
from app.models import Base
from app.models.evaluation import EvaluationProject, Vendor  # noqa: F401
from app.models.financial import (  # noqa: F401
    CostBreakdown, TCOSummary, SensitivityScenario, FinancialAssumption, ROICalculation
)

logger = get_logger(__name__)

# SQLite connections are shared across FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """
    Create any missing tables.

    Existing tables are left alone; schema changes go through Alembic:
        poetry run alembic upgrade head
    """
    Base.metadata.create_all(bind=engine)
    logger.debug(f"Database ready: {engine.url.render_as_string(hide_password=True)}")


init_db()


def get_db():
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
