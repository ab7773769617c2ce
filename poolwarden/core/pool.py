import logging

from poolwarden.core.ancestry import walk_ancestors
from poolwarden.models.account import Account

logger = logging.getLogger(__name__)


def is_in_pool_ou(account: Account, tree, pool_ou_id: str) -> bool:
    """
    True only when the pool OU is the account's immediate parent.
    Deeper nesting under the pool OU does not count.
    Lookup failures are logged and reported as "not in pool", never raised.
    """
    if not account.aws_account_id:
        return False

    try:
        path = walk_ancestors(tree, account.aws_account_id, lambda ou_id: ou_id == pool_ou_id)
    except Exception as e:
        logger.warning(
            f"Could not resolve OU ancestry for {account.aws_account_id}: {e}",
            extra={"aws_account_id": account.aws_account_id, "pool_ou": pool_ou_id},
        )
        return False

    # A one-entry path can also mean the account sits directly under the root
    return len(path) == 1 and path[0] == pool_ou_id
