from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationKind(str, Enum):
    """Every classification a single validation stage can produce."""
    POOL_OK = "pool_ok"
    MOVED = "moved"
    MOVE_FAILED = "move_failed"
    INVALID_ACCOUNT = "invalid_account"
    TAG_OK = "tag_ok"
    MISSING_TAG = "missing_tag"
    INCORRECT_OWNER_TAG = "incorrect_owner_tag"
    ERROR = "error"   # unclassified infrastructure fault


# Kinds that mean the account violates placement/ownership policy
VIOLATIONS = frozenset({
    ValidationKind.MOVE_FAILED,
    ValidationKind.MISSING_TAG,
    ValidationKind.INCORRECT_OWNER_TAG,
})


@dataclass
class ValidationOutcome:
    """
    The classified result of one stage of a validation run.
    Lives only for the duration of a reconciliation.
    """
    kind: ValidationKind
    message: str = ""
    # Context for logs and reports (old/new OU, tag values, flag states...)
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_violation(self) -> bool:
        return self.kind in VIOLATIONS


@dataclass(frozen=True)
class ReconcileResult:
    """
    What we tell the controller framework: stop here, or come back later.
    """
    requeue: bool = False
    requeue_after: Optional[float] = None  # seconds

    @classmethod
    def do_not_requeue(cls) -> "ReconcileResult":
        return cls()

    @classmethod
    def after(cls, seconds: float) -> "ReconcileResult":
        return cls(requeue=True, requeue_after=float(seconds))


@dataclass
class ValidationReport:
    """Everything a reconciliation produced, in the order it was produced."""
    account_ref: str
    aws_account_id: str = ""
    outcomes: List[ValidationOutcome] = field(default_factory=list)
    result: ReconcileResult = field(default_factory=ReconcileResult)

    @property
    def final(self) -> Optional[ValidationOutcome]:
        return self.outcomes[-1] if self.outcomes else None

    def kinds(self) -> List[ValidationKind]:
        return [o.kind for o in self.outcomes]
