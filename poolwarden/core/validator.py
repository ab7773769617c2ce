import logging
from typing import Optional

from poolwarden.core.mover import AccountMoveError, move_account
from poolwarden.core.pool import is_in_pool_ou
from poolwarden.core.settings import ValidationSettings
from poolwarden.core.tags import validate_owner_tag
from poolwarden.adapters.aws_orgs import OrganizationsError
from poolwarden.models.account import Account
from poolwarden.models.outcome import (
    ReconcileResult,
    ValidationKind,
    ValidationOutcome,
    ValidationReport,
)

logger = logging.getLogger(__name__)

# Backoff before retrying an account whose move failed
MOVE_WAIT_SECONDS = 5 * 60


def requeue_policy(outcome: Optional[ValidationOutcome]) -> ReconcileResult:
    """
    Maps the terminal outcome of a run to what the controller should do next.
    Only a failed move is worth retrying; tag problems are reported, not fixed,
    and a successful run waits for the next trigger.
    """
    if outcome is not None and outcome.kind == ValidationKind.MOVE_FAILED:
        return ReconcileResult.after(MOVE_WAIT_SECONDS)
    return ReconcileResult.do_not_requeue()


class AccountValidator:
    """
    Runs the placement and ownership checks for one account:
    Start -> OU check -> (move) -> tag check -> done.
    Every stage yields a ValidationOutcome; a stage that fails stops the run.
    """
    def __init__(self, tree, tags=None):
        # The Organizations adapter serves both roles unless told otherwise
        self.tree = tree
        self.tags = tags or tree

    def check_scope(self, account: Account) -> Optional[ValidationOutcome]:
        """Returns an INVALID_ACCOUNT outcome for accounts we must not touch."""
        if account.is_byoc():
            return ValidationOutcome(
                kind=ValidationKind.INVALID_ACCOUNT,
                message="Account is a BYOC account",
                details={"account": str(account.ref)},
            )
        if account.is_owned_by_account_pool():
            return ValidationOutcome(
                kind=ValidationKind.INVALID_ACCOUNT,
                message="Account is in an account pool",
                details={"account": str(account.ref), "account_pool": account.account_pool},
            )
        return None

    def validate_ou(self, account: Account, settings: ValidationSettings) -> ValidationOutcome:
        """
        Makes sure the account sits directly under the pool OU, moving it if allowed.
        """
        out_of_scope = self.check_scope(account)
        if out_of_scope:
            logger.info(f"Will not validate {account.ref}: {out_of_scope.message}", extra=out_of_scope.details)
            return out_of_scope

        pool_ou = settings.pool_ou_id
        fields = {"account": str(account.ref), "aws_account_id": account.aws_account_id, "pool_ou": pool_ou}

        if is_in_pool_ou(account, self.tree, pool_ou):
            logger.info(f"Account {account.ref} is already in the pool OU", extra=fields)
            return ValidationOutcome(kind=ValidationKind.POOL_OK, message="Account is in the pool OU", details=fields)

        logger.info(f"Account {account.ref} is not in the pool OU - it will be moved", extra=fields)
        try:
            result = move_account(self.tree, account.aws_account_id, pool_ou, settings.gates.move_enabled)
        except (OrganizationsError, AccountMoveError) as e:
            logger.error(f"Could not move account {account.ref}: {e}", extra=fields)
            return ValidationOutcome(
                kind=ValidationKind.MOVE_FAILED,
                message=str(e),
                details={**fields, "move_enabled": settings.gates.move_enabled},
            )

        return ValidationOutcome(
            kind=ValidationKind.MOVED,
            message="Account moved to the pool OU" if result.moved else "Account move skipped (dry run)",
            details={
                **fields,
                "old_ou": result.source_ou_id,
                "new_ou": result.target_ou_id,
                "dry_run": not result.moved,
            },
        )

    def validate_tags(self, account: Account, settings: ValidationSettings) -> ValidationOutcome:
        try:
            outcome = validate_owner_tag(
                self.tags,
                account.aws_account_id,
                settings.shard_name,
                fix_enabled=settings.gates.tag_enabled,
            )
        except OrganizationsError as e:
            logger.error(f"Could not read tags for {account.ref}: {e}")
            return ValidationOutcome(
                kind=ValidationKind.ERROR,
                message=f"Infrastructure Error: {e}",
                details={"account": str(account.ref), "aws_account_id": account.aws_account_id},
            )

        if outcome.is_violation:
            logger.warning(f"{account.ref}: {outcome.message}", extra=outcome.details)
        else:
            logger.info(f"{account.ref}: {outcome.message}", extra=outcome.details)
        return outcome

    def validate(self, account: Account, settings: ValidationSettings) -> ValidationReport:
        """
        Main decision loop. Stops at the first outcome that ends the run
        and attaches the matching requeue decision.
        """
        report = ValidationReport(account_ref=str(account.ref), aws_account_id=account.aws_account_id)

        ou_outcome = self.validate_ou(account, settings)
        report.outcomes.append(ou_outcome)

        if ou_outcome.kind in (ValidationKind.POOL_OK, ValidationKind.MOVED):
            report.outcomes.append(self.validate_tags(account, settings))

        report.result = requeue_policy(report.final)
        return report
