"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from recovery_engine.infrastructure.database.repositories import CaseRepository, PartnerRepository
from recovery_engine.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_case_repository(db: Session = Depends(get_db)) -> CaseRepository:
    return CaseRepository(db)


def get_partner_repository(db: Session = Depends(get_db)) -> PartnerRepository:
    return PartnerRepository(db)
