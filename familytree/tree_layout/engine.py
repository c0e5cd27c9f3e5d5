from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

from .edges import classify_edges
from .generations import assign_generations
from .index import build_relationship_index
from .models import Layout, LayoutConfig, Member, Relationship
from .rows import plan_rows


def unique_members(members: Iterable[Member]) -> List[Member]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    out: List[Member] = []
    for m in members:
        if m.id in seen:
            continue
        seen.add(m.id)
        out.append(m)
    return out


def compute_layout(
    members: Sequence[Member],
    relationships: Sequence[Relationship],
    config: Optional[LayoutConfig] = None,
) -> Layout:
    """
    Generational layout for a member/relationship snapshot.
    Pure function: the same input always yields the same Layout.
    Cycles, dangling endpoints and self-loops never raise.
    """
    config = config or LayoutConfig()
    members = unique_members(members)
    relationships = list(relationships)

    children_map, parents_map = build_relationship_index(relationships)
    generations = assign_generations(members, parents_map, children_map)
    positions = plan_rows(members, generations, config)
    edges = classify_edges(relationships)

    return Layout(positions=positions, generations=generations, edges=edges)
