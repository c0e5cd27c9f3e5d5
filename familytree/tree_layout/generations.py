"""Generation (row) assignment by breadth-first traversal from the roots."""
from __future__ import annotations
import logging
from collections import deque
from typing import Deque, Dict, List, Mapping, Sequence

from .models import Member

logger = logging.getLogger(__name__)


def find_roots(members: Sequence[Member], parents_map: Mapping[str, List[str]]) -> List[str]:
    """
    Members with no parent among the members, in input order.
    A parent id that is not a member (deleted, or never added) does not count.
    """
    known = {m.id for m in members}
    return [m.id for m in members if not any(p in known for p in parents_map.get(m.id, ()))]


def assign_generations(
    members: Sequence[Member],
    parents_map: Mapping[str, List[str]],
    children_map: Mapping[str, List[str]],
) -> Dict[str, int]:
    """
    Map every member id to a non-negative generation, 0 being the top row.

    The first generation written for a member wins: a child reachable from
    several parents keeps the depth of whichever parent the queue reaches
    first. Queue order follows member input order for the roots and
    relationship order for the children, so the result is reproducible.

    When every member has a parent (a cycle), the first member is used as
    the only root. Members the traversal never reaches end up in generation 0.
    """
    member_ids = [m.id for m in members]
    known = set(member_ids)

    roots = find_roots(members, parents_map)
    if not roots and member_ids:
        logger.debug("No parentless member found, rooting layout at %s", member_ids[0])
        roots = [member_ids[0]]

    generations: Dict[str, int] = {}
    queue: Deque[str] = deque()
    for root in roots:
        generations[root] = 0
        queue.append(root)

    while queue:
        node = queue.popleft()
        for child in children_map.get(node, []):
            # dangling ids never get a row
            if child in generations or child not in known:
                continue
            generations[child] = generations[node] + 1
            queue.append(child)

    for mid in member_ids:
        generations.setdefault(mid, 0)
    return generations
