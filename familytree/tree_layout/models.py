from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


class RelType(enum.Enum):
    PARENT_CHILD = "PARENT_CHILD"
    SPOUSE = "SPOUSE"


class EdgeKind(enum.Enum):
    HIERARCHY = "hierarchy"
    PARTNERSHIP = "partnership"


@dataclass(frozen=True)
class Member:
    id: str
    first_name: str
    last_name: str
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None


@dataclass(frozen=True)
class Relationship:
    """Directed edge. For PARENT_CHILD the source is the parent."""
    id: str
    source_id: str
    target_id: str
    type: RelType


@dataclass(frozen=True)
class Position:
    """Center of a node box."""
    x: float
    y: float


@dataclass(frozen=True)
class EdgeDescriptor:
    id: str
    source: str
    target: str
    kind: EdgeKind
    edge_type: str
    label: Optional[str] = None


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = 160.0
    node_height: float = 120.0
    horizontal_gap: float = 40.0
    vertical_gap: float = 40.0


@dataclass
class Layout:
    positions: Dict[str, Position] = field(default_factory=dict)
    generations: Dict[str, int] = field(default_factory=dict)
    edges: List[EdgeDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "positions": {mid: {"x": p.x, "y": p.y} for mid, p in self.positions.items()},
            "generations": dict(self.generations),
            "edges": [
                {
                    "id": e.id,
                    "source": e.source,
                    "target": e.target,
                    "kind": e.kind.value,
                    "edge_type": e.edge_type,
                    "label": e.label,
                }
                for e in self.edges
            ],
        }


def member_from_record(record: Mapping[str, Any]) -> Member:
    """Build a Member from a stored row dict. Empty optional values become None."""
    first = (record.get("first_name") or "").strip()
    last = (record.get("last_name") or "").strip()
    if not first or not last:
        raise ValueError(f"Member {record.get('id')!r} needs a first and last name")
    return Member(
        id=str(record["id"]),
        first_name=first,
        last_name=last,
        birth_date=record.get("birth_date") or None,
        death_date=record.get("death_date") or None,
        photo_url=record.get("photo_url") or None,
        bio=record.get("bio") or None,
    )


def relationship_from_record(record: Mapping[str, Any]) -> Relationship:
    """Build a Relationship from a stored row dict.

    Raises ValueError for a type outside RelType, so nothing downstream has
    to handle unknown kinds.
    """
    return Relationship(
        id=str(record["id"]),
        source_id=str(record["member_id"]),
        target_id=str(record["related_member_id"]),
        type=RelType(record["type"]),
    )


def snapshot_from_records(
    snapshot: Mapping[str, Any],
) -> Tuple[List[Member], List[Relationship]]:
    """Convert a {members, relationships} snapshot of row dicts into records."""
    members = [member_from_record(m) for m in snapshot.get("members", [])]
    relationships = [relationship_from_record(r) for r in snapshot.get("relationships", [])]
    return members, relationships
