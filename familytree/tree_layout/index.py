from __future__ import annotations
from typing import Dict, Iterable, List, Set, Tuple

from .models import Relationship, RelType


def build_relationship_index(
    relationships: Iterable[Relationship],
) -> Tuple[Dict[str, List[str]], Dict[str, List[str]]]:
    """
    Returns (children_map, parents_map) built from PARENT_CHILD edges only.
    - Lists keep first-seen relationship order.
    - Spouse edges, self-loops and repeated parent/child pairs are skipped.
    """
    children_map: Dict[str, List[str]] = {}
    parents_map: Dict[str, List[str]] = {}
    seen: Set[Tuple[str, str]] = set()

    for rel in relationships:
        if rel.type is not RelType.PARENT_CHILD:
            continue
        parent, child = rel.source_id, rel.target_id
        if parent == child:
            continue
        if (parent, child) in seen:
            continue
        seen.add((parent, child))

        children_map.setdefault(parent, []).append(child)
        parents_map.setdefault(child, []).append(parent)

    return children_map, parents_map
