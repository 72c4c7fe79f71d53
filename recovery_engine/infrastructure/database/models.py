"""SQLAlchemy ORM models for cases and partners"""

from sqlalchemy import Column, String, Float, DateTime, Integer, Text, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CaseRecord(Base):
    """Recovery case with its analysis, audit trail and interactions"""

    __tablename__ = "recovery_case"

    case_id = Column(String(64), primary_key=True)
    customer_name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False, default=0.0)
    currency = Column(String(8), nullable=False)
    days_overdue = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, index=True)
    assigned_partner_id = Column(String(64), nullable=True, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    analysis = Column(JSON, nullable=True)
    audit_log = Column(JSON, nullable=False, default=list)
    interactions = Column(JSON, nullable=False, default=list)
    # Bumped on every write; stale updates fail with StaleDataError
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class PartnerRecord(Base):
    """Collection agency in the partner directory"""

    __tablename__ = "partner"

    # Surrogate key keeps directory order stable for tie-breaks
    id = Column(Integer, primary_key=True, autoincrement=True)
    partner_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    recovery_rate = Column(Float, nullable=False)
    active_cases = Column(Integer, nullable=False, default=0)
    capacity = Column(Integer, nullable=False, default=0)
    regions = Column(JSON, nullable=False, default=list)
