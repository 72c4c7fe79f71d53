"""Domain models - pure Python dataclasses representing recovery cases and partners"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from recovery_engine.domain.exceptions import InvalidInputError


class CaseStatus(str, Enum):
    """Lifecycle status of a recovery case"""

    NEW = "NEW"
    AI_PROCESSED = "AI_PROCESSED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    UNRECOVERABLE = "UNRECOVERABLE"


# Statuses the batch allocator is allowed to pick up
BATCH_ELIGIBLE_STATUSES = frozenset({CaseStatus.NEW, CaseStatus.AI_PROCESSED})

TERMINAL_STATUSES = frozenset({CaseStatus.RESOLVED, CaseStatus.CLOSED, CaseStatus.UNRECOVERABLE})


class SlaBreachRisk(str, Enum):
    """Coarse likelihood of missing the service-level target"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"  # never produced by the scorer
    HIGH = "HIGH"


class InteractionType(str, Enum):
    CALL = "CALL"
    EMAIL = "EMAIL"
    LETTER = "LETTER"
    SMS = "SMS"


class AuditAction(str, Enum):
    CREATED = "CREATED"
    AI_SCORING = "AI_SCORING"
    ALLOCATED_MANUAL = "ALLOCATED_MANUAL"
    ALLOCATED_AUTO = "ALLOCATED_AUTO"
    ALLOCATED_BATCH = "ALLOCATED_BATCH"
    STATUS_UPDATE = "STATUS_UPDATE"
    INTERACTION_LOG = "INTERACTION_LOG"


class Actor(str, Enum):
    """Who performed an audited action"""

    SYSTEM = "SYSTEM"
    AI_ENGINE = "AI_ENGINE"
    ADMIN = "ADMIN"
    DCA_USER = "DCA_USER"
    AUTO_ALLOCATOR = "AUTO_ALLOCATOR"
    AI_OPTIMIZER = "AI_OPTIMIZER"


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of one state-changing action on a case"""

    timestamp: datetime
    action: AuditAction
    actor: Actor
    details: str


@dataclass(frozen=True)
class Interaction:
    """Contact attempt logged by a collection agent"""

    interaction_id: str
    occurred_at: datetime
    interaction_type: InteractionType
    notes: str
    outcome: Optional[str] = None


@dataclass(frozen=True)
class Analysis:
    """Scorer output for one case at one point in time"""

    recovery_probability: int  # 0-100
    priority_score: int  # 0-100
    sla_breach_risk: SlaBreachRisk
    recommended_partner_id: Optional[str]
    rationale: str


@dataclass
class Partner:
    """Debt collection agency that cases can be assigned to"""

    partner_id: str
    name: str
    recovery_rate: float  # 0.0 - 1.0
    active_cases: int
    capacity: int
    regions: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0.0 <= self.recovery_rate <= 1.0:
            raise InvalidInputError(
                f"Partner {self.partner_id} recovery rate must be within [0, 1], got {self.recovery_rate}"
            )
        if self.active_cases < 0 or self.capacity < 0:
            raise InvalidInputError(f"Partner {self.partner_id} case counts must be non-negative")


@dataclass
class Case:
    """Unit of overdue debt under recovery.

    Operations never mutate a Case in place; they return a copy built with
    dataclasses.replace. Interactions and audit_log are tuples and only grow.
    """

    case_id: str
    customer_name: str
    amount: float
    currency: str
    days_overdue: int
    status: CaseStatus
    created_at: datetime
    assigned_partner_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    interactions: Tuple[Interaction, ...] = ()
    audit_log: Tuple[AuditEntry, ...] = ()
    analysis: Optional[Analysis] = None


@dataclass
class BatchAllocation:
    """Result of a batch allocation run"""

    cases: List[Case]
    assignments: Dict[str, str]  # case_id -> partner_id
