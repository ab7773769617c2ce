import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

# Organizations allows five OU levels below the root, so a real path is at most six hops
MAX_ANCESTRY_DEPTH = 10


class AncestryError(Exception):
    """
    Raised when the organization tree cannot be trusted for this node.
    We prefer to stop the walk than to make decisions on inconsistent data.
    """
    pass


class MultipleParentsError(AncestryError):
    pass


class AncestryDepthExceededError(AncestryError):
    pass


def walk_ancestors(tree, node_id: str, stop: Callable[[str], bool],
                   max_depth: int = MAX_ANCESTRY_DEPTH) -> List[str]:
    """
    Walks parent links upwards from node_id until stop(parent) is true or
    the top of the tree is reached.

    Args:
        tree: Anything with list_parents(node_id) -> List[str]
        node_id: Account or OU id to start from (not included in the result)
        stop: Predicate checked on every parent found
        max_depth: Number of hops after which the tree is considered malformed

    Returns:
        The visited ancestors, nearest first. The last entry satisfies stop(),
        unless the root was reached first.

    Raises:
        MultipleParentsError: a lookup returned more than one parent
        AncestryDepthExceededError: no terminal condition within max_depth hops
    """
    path: List[str] = []
    current_id = node_id

    for _ in range(max_depth):
        parents = tree.list_parents(current_id)

        if not parents:
            # Reached the root without a match: the target is in another subtree
            logger.info(f"Exhausted search above {node_id} - target likely in a separate subtree. path={path}")
            return path

        if len(parents) > 1:
            logger.info(f"More than 1 parent returned for {current_id} - unexpected. parents={parents}")
            raise MultipleParentsError(f"More than 1 parent found for Id {current_id}: {parents}")

        parent_id = parents[0]
        path.append(parent_id)
        if stop(parent_id):
            return path
        current_id = parent_id

    raise AncestryDepthExceededError(
        f"Gave up after {max_depth} hops above {node_id} - organization tree looks cyclic. path={path}"
    )
