"""
Pytest fixtures and configuration for Vendor TCO tests.

This module provides common fixtures used across all test modules,
including database setup, test client, and evaluation data builders.
"""

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db import get_db, Base
from app.models.evaluation import EvaluationProject, Vendor
from app.models.financial import CostBreakdown
from app.services import tco as tco_service


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with overridden database dependency.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def add_cost(db_session: Session, project: EvaluationProject, vendor: Vendor,
             category: str, costs, description=None) -> CostBreakdown:
    """Insert a cost entry directly, bypassing the ledger service."""
    padded = list(costs) + [0] * (5 - len(costs))
    entry = CostBreakdown(
        evaluation_project_id=project.id,
        vendor_id=vendor.id,
        cost_category=category,
        cost_description=description,
        **{f"year_{i}_cost": value for i, value in enumerate(padded, start=1)}
    )
    db_session.add(entry)
    db_session.commit()
    db_session.refresh(entry)
    return entry


@pytest.fixture
def make_cost(db_session: Session):
    """
    Factory for cost entries: make_cost(project, vendor, category, [year_1, year_2, ...]).
    """
    def _make(project, vendor, category, costs, description=None):
        return add_cost(db_session, project, vendor, category, costs, description)
    return _make


@pytest.fixture
def test_project(db_session: Session) -> EvaluationProject:
    """
    Create an evaluation project.
    """
    project = EvaluationProject(name="CRM Replacement")
    db_session.add(project)
    db_session.commit()
    db_session.refresh(project)
    return project


@pytest.fixture
def vendor_a(db_session: Session, test_project: EvaluationProject) -> Vendor:
    vendor = Vendor(evaluation_project_id=test_project.id, vendor_name="Acme Systems")
    db_session.add(vendor)
    db_session.commit()
    db_session.refresh(vendor)
    return vendor


@pytest.fixture
def vendor_b(db_session: Session, test_project: EvaluationProject, vendor_a: Vendor) -> Vendor:
    vendor = Vendor(evaluation_project_id=test_project.id, vendor_name="Bolt Software")
    db_session.add(vendor)
    db_session.commit()
    db_session.refresh(vendor)
    return vendor


@pytest.fixture
def vendor_costs(
    db_session: Session,
    test_project: EvaluationProject,
    vendor_a: Vendor,
    vendor_b: Vendor
) -> dict:
    """
    Cost ledger for two vendors.

    Acme:  implementation [10000, 0, 0], license [0, 5000, 5000] -> 20000 over 3 years
    Bolt:  implementation [5000, 0, 0],  license [0, 9000, 9000] -> 23000 over 3 years
    """
    return {
        "a_impl": add_cost(db_session, test_project, vendor_a, "implementation", [10000, 0, 0], "Setup"),
        "a_license": add_cost(db_session, test_project, vendor_a, "license", [0, 5000, 5000], "Seats"),
        "b_impl": add_cost(db_session, test_project, vendor_b, "implementation", [5000, 0, 0], "Setup"),
        "b_license": add_cost(db_session, test_project, vendor_b, "license", [0, 9000, 9000], "Seats"),
    }


@pytest.fixture
def baseline_tco(db_session: Session, test_project: EvaluationProject, vendor_costs: dict) -> list:
    """
    Calculate 3-year TCO for every vendor in the test project.
    """
    return tco_service.calculate_all_tco(db_session, test_project.id, years=3)
