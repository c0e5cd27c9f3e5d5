from __future__ import annotations
from typing import Dict, List, Mapping, Sequence

from .models import LayoutConfig, Member, Position


def group_rows(members: Sequence[Member], generations: Mapping[str, int]) -> Dict[int, List[str]]:
    rows: Dict[int, List[str]] = {}
    for m in members:
        rows.setdefault(generations[m.id], []).append(m.id)
    return rows


def row_width(count: int, config: LayoutConfig) -> float:
    if count <= 0:
        return 0.0
    return count * config.node_width + (count - 1) * config.horizontal_gap


def plan_rows(
    members: Sequence[Member],
    generations: Mapping[str, int],
    config: LayoutConfig,
) -> Dict[str, Position]:
    """
    Lay each generation out as a horizontal row centered on x = 0.
    - Members keep input order left to right.
    - y grows by one band (node height + vertical gap) per generation.
    - Positions are node centers.
    """
    slot = config.node_width + config.horizontal_gap
    band = config.node_height + config.vertical_gap

    pos: Dict[str, Position] = {}
    for gen, ids in group_rows(members, generations).items():
        left = -row_width(len(ids), config) / 2.0
        y = gen * band
        for i, mid in enumerate(ids):
            x = left + i * slot + config.node_width / 2.0
            pos[mid] = Position(x=x, y=y)
    return pos
