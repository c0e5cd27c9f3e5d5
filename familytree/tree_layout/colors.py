from __future__ import annotations
from typing import Dict, List, Sequence

from .models import Member

ROOT_COLOR = "#87CEFA"
DECEASED_COLOR = "#D4D4D8"


def build_sibling_colors(
    members: Sequence[Member],
    children_map: Dict[str, List[str]],
    parents_map: Dict[str, List[str]],
) -> List[str]:
    """Siblings share their first parent's color; deceased members are greyed out."""
    sibling_palette = [
        "#FFA07A", "#98FB98", "#87CEFA", "#DDA0DD", "#F4A460",
        "#66CDAA", "#FFB6C1", "#E6E6FA", "#20B2AA"
    ]

    parent_list = list(children_map.keys())
    parent_color_map = {p: sibling_palette[i % len(sibling_palette)] for i, p in enumerate(parent_list)}

    node_colors: List[str] = []
    for m in members:
        if m.death_date:
            node_colors.append(DECEASED_COLOR)
        elif parents_map.get(m.id):
            node_colors.append(parent_color_map.get(parents_map[m.id][0], ROOT_COLOR))
        else:
            node_colors.append(ROOT_COLOR)
    return node_colors
