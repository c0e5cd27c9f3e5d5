from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

from .models import EdgeDescriptor, EdgeKind, Relationship, RelType

# kind, edge_type, label
EDGE_TREATMENTS: Dict[RelType, Tuple[EdgeKind, str, Optional[str]]] = {
    RelType.PARENT_CHILD: (EdgeKind.HIERARCHY, "smoothstep", None),
    RelType.SPOUSE: (EdgeKind.PARTNERSHIP, "straight", "spouse"),
}


def classify_edge(rel: Relationship) -> EdgeDescriptor:
    kind, edge_type, label = EDGE_TREATMENTS[rel.type]
    return EdgeDescriptor(
        id=rel.id,
        source=rel.source_id,
        target=rel.target_id,
        kind=kind,
        edge_type=edge_type,
        label=label,
    )


def classify_edges(relationships: Iterable[Relationship]) -> List[EdgeDescriptor]:
    """One descriptor per relationship, including ones with unresolved endpoints."""
    return [classify_edge(r) for r in relationships]
