"""Pytest fixtures for testing"""

import pytest
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from recovery_engine.api.main import create_app
from recovery_engine.infrastructure.database.models import Base
from recovery_engine.infrastructure.database.session import get_db
from recovery_engine.domain.models import Case, CaseStatus, Partner


# Test database
TEST_DATABASE_URL = "sqlite:///./test_recovery.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def other_db(db: Session) -> Generator[Session, None, None]:
    """Second session on the same database, standing in for a concurrent request"""
    other = TestingSessionLocal()
    try:
        yield other
    finally:
        other.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def partners() -> List[Partner]:
    """Agency directory: dca-003 has the best rate, dca-004 the largest capacity"""
    return [
        Partner("dca-001", "SwiftRecover Global", 0.82, 145, 200, ["NA", "EU"]),
        Partner("dca-002", "Apex Collections", 0.76, 89, 150, ["APAC"]),
        Partner("dca-003", "Internal Ops", 0.91, 30, 100, ["GLOBAL"]),
        Partner("dca-004", "Stratton Recovery", 0.65, 210, 500, ["NA"]),
        Partner("dca-005", "Prestige Worldwide", 0.88, 45, 80, ["EU"]),
    ]


@pytest.fixture
def make_case() -> Callable[..., Case]:
    """Factory for NEW cases with sensible defaults"""

    def _make(case_id: str = "CASE-1", amount: float = 10_000, days_overdue: int = 30, **overrides) -> Case:
        case = Case(
            case_id=case_id,
            customer_name="Acme Logistics",
            amount=amount,
            currency="USD",
            days_overdue=days_overdue,
            status=CaseStatus.NEW,
            created_at=FIXED_NOW,
        )
        return replace(case, **overrides)

    return _make
