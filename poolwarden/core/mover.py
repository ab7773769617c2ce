import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class AccountMoveError(Exception):
    """Raised when the account's current placement cannot be determined."""
    pass


@dataclass(frozen=True)
class MoveResult:
    source_ou_id: str
    target_ou_id: str
    moved: bool  # False for a dry run


def move_account(tree, aws_account_id: str, target_ou_id: str, enabled: bool) -> MoveResult:
    """
    Re-parents an account under target_ou_id.

    With enabled=False nothing is changed: the intended move is only logged.
    Errors from the tree service are raised as-is.
    """
    parents = tree.list_parents(aws_account_id)
    if len(parents) != 1:
        raise AccountMoveError(f"Expected exactly 1 parent for {aws_account_id}, found {len(parents)}: {parents}")
    old_ou = parents[0]

    log_fields = {"aws_account_id": aws_account_id, "old_ou": old_ou, "new_ou": target_ou_id}

    if not enabled:
        logger.info(
            f"Not moving {aws_account_id} from {old_ou} to {target_ou_id} (dry run)",
            extra=log_fields,
        )
        return MoveResult(source_ou_id=old_ou, target_ou_id=target_ou_id, moved=False)

    logger.info(f"Moving {aws_account_id} from {old_ou} to {target_ou_id}", extra=log_fields)
    tree.move_account(aws_account_id, old_ou, target_ou_id)
    return MoveResult(source_ou_id=old_ou, target_ou_id=target_ou_id, moved=True)
